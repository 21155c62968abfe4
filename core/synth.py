# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Operation synthesizer.

Turns the product tables into compiled per-algebra operations. Only the
non-zero table cells produce terms, so a product costs time proportional to
the number of non-vanishing blade pairs rather than ``dim^2``.

For every binary operation a Python function is generated whose body lists
one expression per output component, e.g. for the complex numbers::

    def mul(a, b):
        return _stack([
            a[..., 0]*b[..., 0] - a[..., 1]*b[..., 1],
            a[..., 0]*b[..., 1] + a[..., 1]*b[..., 0],
        ], a, b)

The same term selection feeds a second emitter that builds :class:`Sym`
expressions for symbolic algebras, and either emitter can read components
by index (storage of this algebra) or by name (any object implementing
``component(name)``, which lets elements of different algebras mix).
"""

import functools
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import torch

from core.coefficients import CoefficientKind, Sym
from log import get_logger, timed

logger = get_logger(__name__)

# Numeric algebras above this many generators use the term-list kernel
CODEGEN_LIMIT = 6
BINARY_OPERATIONS = ("add", "sub", "mul", "dot", "wedge", "vee")

Term = Tuple[int, int, int]

_REVERSE = (1, 1, -1, -1)
_INVOLUTE = (1, -1, 1, -1)
_CONJUGATE = (1, -1, -1, 1)


class Access(str, Enum):
    """How generated code reads operand components."""

    INDEXED = "indexed"
    NAMED = "named"


def product_terms(index: np.ndarray, sign: np.ndarray, remap: Sequence[int] = None) -> List[List[Term]]:
    """Sparse term lists of a product table.

    Args:
        index: Result component of every blade pair [dim, dim].
        sign: Sign of every blade pair; 0 drops the pair.
        remap: Optional permutation applied to the operands and the result
            (the regressive product runs the outer table through the dual
            remap).

    Returns:
        For every output component, the ``(left, right, sign)`` triples
        contributing to it.
    """
    dim = index.shape[0]
    rows = [[] for _ in range(dim)]
    left, right = np.nonzero(sign)
    for i, j in zip(left.tolist(), right.tolist()):
        k, s = int(index[i, j]), int(sign[i, j])
        if remap is None:
            rows[k].append((i, j, s))
        else:
            rows[remap[k]].append((remap[i], remap[j], s))
    return rows


def _stack(parts, *operands) -> torch.Tensor:
    """Assemble component expressions into storage ``[..., dim]``.

    Components that are structurally zero arrive as Python numbers; they are
    broadcast to the common batch shape and dtype of the tensor components
    (and of the operands, so an all-zero result keeps its batch shape).
    """
    tensors = [p for p in parts if isinstance(p, torch.Tensor)]
    refs = tensors + [o[..., 0] for o in operands if isinstance(o, torch.Tensor)]
    if not refs:
        return torch.tensor([float(p) for p in parts])
    shape = torch.broadcast_shapes(*(t.shape for t in refs))
    dtype = functools.reduce(torch.promote_types, (t.dtype for t in refs))
    device = refs[0].device
    columns = [
        p.to(dtype).expand(shape) if isinstance(p, torch.Tensor)
        else torch.full(shape, float(p), dtype=dtype, device=device)
        for p in parts
    ]
    return torch.stack(columns, dim=-1)


class _Emitter:
    """Renders operand references and component expressions as source."""

    def __init__(self, names: Sequence[str], kind: CoefficientKind, access: Access):
        self.names = names
        self.kind = kind
        self.access = access

    def ref(self, operand: str, i: int) -> str:
        if self.access == Access.NAMED:
            return f'{operand}.component("{self.names[i]}")'
        if self.kind == CoefficientKind.NUMERIC:
            return f"{operand}[..., {i}]"
        return f"{operand}[{i}]"

    def products(self, terms: List[Term]) -> str:
        if self.kind == CoefficientKind.SYMBOLIC:
            if not terms:
                return "_sym.ZERO"
            pairs = ", ".join(
                f"({s}, _sym.mul({self.ref('a', i)}, {self.ref('b', j)}))" for i, j, s in terms
            )
            return f"_sym.total([{pairs}])"
        if not terms:
            return "0"
        text = ""
        for n, (i, j, s) in enumerate(terms):
            product = f"{self.ref('a', i)}*{self.ref('b', j)}"
            if s < 0:
                text += f" - {product}" if n else f"-{product}"
            else:
                text += f" + {product}" if n else product
        return text

    def elementwise(self, i: int, sign: int) -> str:
        if self.kind == CoefficientKind.SYMBOLIC:
            return f"_sym.total([(1, {self.ref('a', i)}), ({sign}, {self.ref('b', i)})])"
        return f"{self.ref('a', i)} {'+' if sign > 0 else '-'} {self.ref('b', i)}"

    def function(self, name: str, components: List[str]) -> str:
        body = "".join(f"        {c},\n" for c in components)
        if self.kind == CoefficientKind.SYMBOLIC:
            return f"def {name}(a, b):\n    return [\n{body}    ]\n"
        tail = "], a, b)" if self.access == Access.INDEXED else "])"
        return f"def {name}(a, b):\n    return _stack([\n{body}    {tail}\n"


class _TermKernel:
    """Product over a flattened term list with ``index_add``.

    Used for large numeric algebras where generated source would be huge.
    """

    def __init__(self, rows: List[List[Term]], dim: int):
        flat = [(i, j, s, k) for k, row in enumerate(rows) for i, j, s in row]
        self.dim = dim
        if flat:
            left, right, sign, target = zip(*flat)
        else:
            left = right = sign = target = ()
        self.left = torch.tensor(left, dtype=torch.long)
        self.right = torch.tensor(right, dtype=torch.long)
        self.sign = torch.tensor(sign, dtype=torch.float32)
        self.target = torch.tensor(target, dtype=torch.long)

    def __call__(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        a, b = torch.broadcast_tensors(a, b)
        dtype = torch.promote_types(a.dtype, b.dtype)
        device = a.device
        if self.left.device != device:
            self.left, self.right = self.left.to(device), self.right.to(device)
            self.sign, self.target = self.sign.to(device), self.target.to(device)
        terms = a[..., self.left].to(dtype) * b[..., self.right].to(dtype) * self.sign.to(dtype)
        out = torch.zeros(*a.shape[:-1], self.dim, dtype=dtype, device=device)
        return out.index_add_(out.dim() - 1, self.target, terms)


class OperationSet:
    """Compiled operations of one algebra.

    The binary operations are generated when the set is built and kept for
    its lifetime; sign maps are built on first use. The generated source of
    every compiled operation is available in :attr:`sources`.

    Attributes:
        tables (CayleyTables): Product tables the operations are built from.
        kind (CoefficientKind): Coefficient representation.
        access (Access): Operand component access.
        sources (dict): Operation name -> generated source.
    """

    def __init__(self, tables, kind: CoefficientKind = CoefficientKind.NUMERIC,
                 access: Access = Access.INDEXED):
        self.tables = tables
        self.kind = CoefficientKind(kind)
        self.access = Access(access)
        self.names = tables.basis.names
        self.dim = tables.dim
        self.grades = tables.basis.grades
        self.sources: Dict[str, str] = {}
        self._emitter = _Emitter(self.names, self.kind, self.access)
        self._use_kernel = (self.kind == CoefficientKind.NUMERIC
                            and tables.basis.n > CODEGEN_LIMIT)
        for name in BINARY_OPERATIONS:
            getattr(self, name)

    # Term selection

    @functools.cached_property
    def gp_terms(self) -> List[List[Term]]:
        return product_terms(self.tables.gp_index, self.tables.gp_sign)

    @functools.cached_property
    def dot_terms(self) -> List[List[Term]]:
        return product_terms(self.tables.gp_index, self.tables.dot_sign)

    @functools.cached_property
    def op_terms(self) -> List[List[Term]]:
        return product_terms(self.tables.op_index, self.tables.op_sign)

    @functools.cached_property
    def vee_terms(self) -> List[List[Term]]:
        return product_terms(self.tables.op_index, self.tables.op_sign,
                             remap=self.tables.dual_index.tolist())

    # Compilation

    def _compile(self, name: str, source: str) -> Callable:
        namespace = {"_stack": _stack, "_sym": Sym}
        with timed(logger, f"Compiled {name} ({self.kind.value}, {self.access.value})"):
            exec(compile(source, f"<cayley:{name}>", "exec"), namespace)
        self.sources[name] = source
        return namespace[name]

    def _product(self, name: str, rows: List[List[Term]]) -> Callable:
        if self._use_kernel:
            kernel = _TermKernel(rows, self.dim)
            self.sources[name] = f"# {name}: index_add kernel over {len(kernel.left)} terms\n"
            if self.access == Access.NAMED:
                return lambda a, b: kernel(self.gather(a), self.gather(b))
            return kernel
        components = [self._emitter.products(terms) for terms in rows]
        return self._compile(name, self._emitter.function(name, components))

    def _elementwise(self, name: str, sign: int) -> Callable:
        if self.kind == CoefficientKind.NUMERIC and self.access == Access.INDEXED:
            self.sources[name] = f"def {name}(a, b):\n    return a {'+' if sign > 0 else '-'} b\n"
            return (lambda a, b: a + b) if sign > 0 else (lambda a, b: a - b)
        components = [self._emitter.elementwise(i, sign) for i in range(self.dim)]
        return self._compile(name, self._emitter.function(name, components))

    @functools.cached_property
    def add(self) -> Callable:
        return self._elementwise("add", 1)

    @functools.cached_property
    def sub(self) -> Callable:
        return self._elementwise("sub", -1)

    @functools.cached_property
    def mul(self) -> Callable:
        return self._product("mul", self.gp_terms)

    @functools.cached_property
    def dot(self) -> Callable:
        return self._product("dot", self.dot_terms)

    @functools.cached_property
    def wedge(self) -> Callable:
        return self._product("wedge", self.op_terms)

    @functools.cached_property
    def vee(self) -> Callable:
        return self._product("vee", self.vee_terms)

    # Unary sign maps

    def gather(self, x):
        """Storage of this algebra read from ``x`` by component name.

        Storage (tensor or list) passes through unchanged; any other object
        must provide ``component(name)``.
        """
        if isinstance(x, (torch.Tensor, list)):
            return x
        values = [x.component(name) for name in self.names]
        if self.kind == CoefficientKind.SYMBOLIC:
            return [Sym.of(v) for v in values]
        return _stack(values)

    def _sign_map(self, signs: Sequence[int], index: Sequence[int] = None) -> Callable:
        signs = [int(s) for s in signs]
        index = list(range(self.dim)) if index is None else [int(i) for i in index]
        if self.kind == CoefficientKind.SYMBOLIC:
            def apply(a):
                a = self.gather(a)
                return [Sym.of(a[k]).signed(s) for k, s in zip(index, signs)]
            return apply

        sign_tensor = torch.tensor(signs, dtype=torch.float32)
        index_tensor = torch.tensor(index, dtype=torch.long)
        identity = index == list(range(self.dim))

        def apply(a):
            a = self.gather(a)
            s = sign_tensor.to(device=a.device, dtype=a.dtype if a.is_floating_point() else torch.float32)
            if identity:
                return a * s
            return a[..., index_tensor.to(a.device)] * s
        return apply

    def _grade_signs(self, pattern: Sequence[int]) -> List[int]:
        return [pattern[g % 4] for g in self.grades]

    @functools.cached_property
    def reverse(self) -> Callable:
        return self._sign_map(self._grade_signs(_REVERSE))

    @functools.cached_property
    def involute(self) -> Callable:
        return self._sign_map(self._grade_signs(_INVOLUTE))

    @functools.cached_property
    def conjugate(self) -> Callable:
        return self._sign_map(self._grade_signs(_CONJUGATE))

    @functools.cached_property
    def negative(self) -> Callable:
        return self._sign_map([-1] * self.dim)

    @functools.cached_property
    def dual_remap(self) -> Callable:
        """``res[i] = a[dual_index[i]] * dual_sign[i]``."""
        return self._sign_map(self.tables.dual_sign, self.tables.dual_index)

    @functools.cached_property
    def undual_remap(self) -> Callable:
        """Inverse of :attr:`dual_remap`."""
        inverse = np.argsort(self.tables.dual_index)
        return self._sign_map(self.tables.dual_sign[inverse], inverse)

    def grade_map(self, *grades: int) -> Callable:
        """Negate every component whose grade is listed."""
        return self._sign_map([-1 if g in grades else 1 for g in self.grades])
