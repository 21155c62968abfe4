# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

import math

import torch

from core.basis import SCALAR_NAME
from core.coefficients import CoefficientKind, Sym
from core.config import load_config, normalize_signature
from core.device import resolve_device, resolve_dtype
from core.errors import SingularElementError, UnsupportedOperationError
from core.multivector import Multivector, NamedComponents
from core.synth import Access, OperationSet
from core.tables import build_tables
from log import get_logger

logger = get_logger(__name__)


class CliffordAlgebra:
    """Generated Clifford algebra ``Cl(p, q, r)``.

    Building an algebra enumerates its basis, derives the product tables and
    prepares the compiled operations; all three are immutable afterwards and
    shared by every algebra with the same normalised signature.

    Elements are plain coefficient storage: a ``torch.Tensor`` ``[..., dim]``
    for numeric algebras, a list of :class:`Sym` for symbolic ones. Every
    operation takes storage (or scalars, or :class:`Multivector`) and returns
    storage; :meth:`wrap` gives the operator-overloading wrapper.

    Attributes:
        signature (Signature): Normalised signature.
        tables (CayleyTables): Product tables.
        ops (OperationSet): Compiled operations.
        basis (list): Ordered basis names.
        metric (list): Square of every basis blade.
        grades (list): Grade of every basis blade.
        grade_start (list): First index of every grade, plus ``dim``.
        index (Mapping): Blade name -> component index (``'s'`` is the scalar).
        n (int): Total dimensions (p + q + r).
        dim (int): Total basis elements (2^n).
        kind (CoefficientKind): Coefficient representation.
        mix (bool): Whether operands are read by component name.
        dtype (torch.dtype): Numeric storage dtype.
        device (str): Numeric storage device.
    """
    _CACHED_TABLES = {}
    _CACHED_OPS = {}

    def __init__(self, p: int = None, q: int = None, r: int = None, config=None, **options):
        """Initialize the algebra and cache its tables.

        Args:
            p (int, optional): Positive dimensions (+1).
            q (int, optional): Negative dimensions (-1).
            r (int, optional): Degenerate dimensions (0).
            config (optional): Mapping or ``DictConfig`` of algebra options.
            **options: ``metric``, ``basis``, ``Cayley``, ``grades``,
                ``coefficients`` (``'numeric'`` / ``'symbolic'``), ``mix``,
                ``dtype``, ``device``.

        Raises:
            ConfigurationError: On invalid or conflicting options.
        """
        cfg = load_config(config, p=p, q=q, r=r, **options)
        signature = normalize_signature(cfg)

        self.config = cfg
        self.signature = signature
        self.kind = CoefficientKind.parse(cfg.coefficients)
        self.mix = bool(cfg.mix)
        self.access = Access.NAMED if self.mix else Access.INDEXED
        self.dtype = resolve_dtype(cfg.dtype)
        self.device = resolve_device(cfg.device)

        # Cache tables and operations to avoid recomputation
        key = signature.cache_key
        if key not in CliffordAlgebra._CACHED_TABLES:
            CliffordAlgebra._CACHED_TABLES[key] = build_tables(signature)
        else:
            logger.debug(f"Reusing cached tables for {signature}")
        self.tables = CliffordAlgebra._CACHED_TABLES[key]

        ops_key = (key, self.kind, self.access)
        if ops_key not in CliffordAlgebra._CACHED_OPS:
            CliffordAlgebra._CACHED_OPS[ops_key] = OperationSet(self.tables, self.kind, self.access)
        self.ops = CliffordAlgebra._CACHED_OPS[ops_key]

        basis = self.tables.basis
        self.basis = list(basis.names)
        self.metric = [int(m) for m in self.tables.metric]
        self.grades = list(basis.grades)
        self.grade_start = list(basis.grade_start)
        self.index = basis.index
        self.n = basis.n
        self.dim = basis.dim
        self.dual_remap = ([int(i) for i in self.tables.dual_index],
                           [int(s) for s in self.tables.dual_sign])

    def __repr__(self) -> str:
        return f"CliffordAlgebra({self.signature}, dim={self.dim}, kind={self.kind.value})"

    @property
    def p(self) -> int:
        return self.signature.p

    @property
    def q(self) -> int:
        return self.signature.q

    @property
    def r(self) -> int:
        return self.signature.r

    @property
    def num_grades(self) -> int:
        """Counts the number of grades (n + 1)."""
        return self.n + 1

    @property
    def symbolic(self) -> bool:
        return self.kind == CoefficientKind.SYMBOLIC

    def describe(self) -> str:
        """Log and return the basis, metric and Cayley table."""
        text = self.tables.describe()
        logger.info(f"{self.signature}\n{text}")
        return text

    # Storage

    def zeros(self, *batch_shape: int):
        """Zero element, optionally batched (numeric only)."""
        if self.symbolic:
            return [Sym.ZERO] * self.dim
        return torch.zeros(*batch_shape, self.dim, dtype=self.dtype, device=self.device)

    def _from_components(self, components: dict):
        res = self.zeros()
        for i, value in components.items():
            res[i] = Sym.of(value) if self.symbolic else value
        return res

    def storage(self, x):
        """Coerce ``x`` into coefficient storage of this algebra.

        Accepts storage, :class:`Multivector`, scalars (numbers, 0-d
        tensors, and for symbolic algebras ``str`` / :class:`Sym`) and
        sequences of ``dim`` coefficients.
        """
        if isinstance(x, Multivector):
            if x.algebra is self or (x.algebra.basis == self.basis and x.algebra.kind == self.kind):
                return x.data
            if self.mix:
                return self.ops.gather(x)
            raise TypeError(
                f"Element of {x.algebra.signature} cannot be used in {self.signature}; "
                f"build the algebra with mix=True to combine them"
            )
        if self.symbolic:
            if isinstance(x, (list, tuple)):
                from core.validation import check_multivector
                check_multivector(list(x), self)
                return [Sym.of(c) for c in x]
            return self.scalar(x)
        if isinstance(x, torch.Tensor):
            if x.ndim == 0:
                return self.scalar(x)
            from core.validation import check_multivector
            check_multivector(x, self)
            return x
        if isinstance(x, (int, float)):
            return self.scalar(x)
        if isinstance(x, (list, tuple)):
            return self.storage(torch.tensor(x, dtype=self.dtype, device=self.device))
        raise TypeError(f"Cannot use {type(x).__name__} as an element of {self.signature}")

    def _operand(self, x):
        if self.access == Access.NAMED:
            if isinstance(x, NamedComponents) and not isinstance(x, torch.Tensor):
                return x
            return self.wrap(self.storage(x))
        return self.storage(x)

    def wrap(self, data) -> Multivector:
        """Operator-overloading wrapper around storage."""
        return Multivector(self, self.storage(data))

    # Factories

    def scalar(self, value):
        """Element with only a scalar part; tensors give a batch of scalars."""
        if self.symbolic:
            return self._from_components({0: value})
        value = torch.as_tensor(value, dtype=self.dtype, device=self.device)
        res = torch.zeros(*value.shape, self.dim, dtype=self.dtype, device=self.device)
        res[..., 0] = value
        return res

    def n_vector(self, grade: int, *coefficients):
        """Element of a single grade from its coefficients in basis order."""
        start, end = self.grade_start[grade], self.grade_start[grade + 1]
        if len(coefficients) > end - start:
            raise ValueError(f"Grade {grade} has {end - start} components, got {len(coefficients)}")
        return self._from_components({start + i: c for i, c in enumerate(coefficients)})

    def vector(self, *coefficients):
        return self.n_vector(1, *coefficients)

    def bivector(self, *coefficients):
        return self.n_vector(2, *coefficients)

    def trivector(self, *coefficients):
        return self.n_vector(3, *coefficients)

    def coeff(self, *pairs):
        """Element from alternating ``index, value`` arguments.

        ``coeff(1, 2.0, 3, -1.0)`` sets component 1 to 2 and 3 to -1.
        """
        if len(pairs) % 2:
            raise ValueError("coeff() expects index, value pairs")
        components = {}
        for i, value in zip(pairs[::2], pairs[1::2]):
            i = self.index[i] if isinstance(i, str) else int(i)
            components[i] = value
        return self._from_components(components)

    def element(self, *coefficients):
        """Element from its leading coefficients; the rest are zero."""
        if len(coefficients) > self.dim:
            raise ValueError(f"{self.signature} has {self.dim} components, got {len(coefficients)}")
        return self._from_components(dict(enumerate(coefficients)))

    def blade(self, name: str, value=1):
        """Multiple of a single basis blade, addressed by name."""
        return self._from_components({self.index[name]: value})

    def pseudoscalar(self):
        return self._from_components({self.dim - 1: 1})

    def embed_vector(self, vectors: torch.Tensor) -> torch.Tensor:
        """Injects vectors into the Grade-1 subspace.

        Args:
            vectors (torch.Tensor): Raw vectors [..., n].

        Returns:
            torch.Tensor: Multivector coefficients [..., dim].
        """
        batch_shape = vectors.shape[:-1]
        mv = torch.zeros(*batch_shape, self.dim, device=vectors.device, dtype=vectors.dtype)
        start = self.grade_start[1]
        mv[..., start:start + self.n] = vectors
        return mv

    # Products

    def add(self, A, B):
        return self.ops.add(self._operand(A), self._operand(B))

    def sub(self, A, B):
        return self.ops.sub(self._operand(A), self._operand(B))

    def mul(self, A, B):
        """Computes the Geometric Product AB."""
        return self.ops.mul(self._operand(A), self._operand(B))

    geometric_product = mul

    def dot(self, A, B):
        """Left contraction: grade(result) = grade(B) - grade(A)."""
        return self.ops.dot(self._operand(A), self._operand(B))

    def wedge(self, A, B):
        """Outer product; metric-independent and grade-raising."""
        return self.ops.wedge(self._operand(A), self._operand(B))

    def vee(self, A, B):
        """Regressive product through the dual remap (degenerate-safe)."""
        return self.ops.vee(self._operand(A), self._operand(B))

    def div(self, A, B):
        """Right division A B^-1."""
        return self.mul(A, self.inverse(B))

    def ldiv(self, A, B):
        """Left division B^-1 A."""
        return self.mul(self.inverse(B), A)

    def sandwich(self, R, X):
        """R X bar(R); with a rotor R this transforms X."""
        R = self.storage(R)
        return self.mul(self.mul(R, X), self.conjugate(R))

    def scale(self, A, factor):
        A = self.storage(A)
        if self.symbolic:
            return [Sym.of(c).scale(factor) for c in A]
        return A * factor

    def pow(self, A, exponent):
        """Integer power by repeated squaring; negative powers invert first."""
        if isinstance(exponent, float) and exponent.is_integer():
            exponent = int(exponent)
        if not isinstance(exponent, int):
            raise UnsupportedOperationError(
                f"Only integer powers of multivectors are supported, got {exponent!r}"
            )
        base = self.storage(A)
        if exponent < 0:
            base, exponent = self.inverse(base), -exponent
        result = self.scalar(1)
        while exponent:
            if exponent & 1:
                result = self.mul(result, base)
            exponent >>= 1
            if exponent:
                base = self.mul(base, base)
        return result

    # Involutions and duality

    def reverse(self, A):
        return self.ops.reverse(self._operand(A))

    def involute(self, A):
        return self.ops.involute(self._operand(A))

    def conjugate(self, A):
        return self.ops.conjugate(self._operand(A))

    def negative(self, A):
        return self.ops.negative(self._operand(A))

    def grade_map(self, A, *grades: int):
        """Negate the listed grades of A."""
        return self.ops.grade_map(*grades)(self._operand(A))

    def dual(self, A):
        """Dual of A.

        Degenerate metrics use the dual remap; otherwise A is multiplied by
        the pseudoscalar from the left.
        """
        if self.signature.r:
            return self.ops.dual_remap(self._operand(A))
        return self.mul(self.pseudoscalar(), A)

    def undual(self, A):
        """Inverse of :meth:`dual`."""
        if self.signature.r:
            return self.ops.undual_remap(self._operand(A))
        return self.mul(self.inverse(self.pseudoscalar()), A)

    def grade_projection(self, mv, grade: int):
        """Isolates a specific grade.

        Args:
            mv: Multivector storage.
            grade (int): Target grade.

        Returns:
            Projected multivector.
        """
        mv = self.storage(mv)
        if self.symbolic:
            return [c if g == grade else Sym.ZERO for c, g in zip(mv, self.grades)]
        mask = torch.tensor([g == grade for g in self.grades], device=mv.device)
        result = torch.zeros_like(mv)
        result[..., mask] = mv[..., mask]
        return result

    def even(self, mv):
        """Even-grade part."""
        mv = self.storage(mv)
        if self.symbolic:
            return [c if g % 2 == 0 else Sym.ZERO for c, g in zip(mv, self.grades)]
        mask = torch.tensor([g % 2 == 0 for g in self.grades], device=mv.device)
        result = torch.zeros_like(mv)
        result[..., mask] = mv[..., mask]
        return result

    # Inverse

    def _grade0(self, mv):
        return mv[0] if self.symbolic else mv[..., 0]

    def _over_scalar(self, numerator, denominator, A, degree: int):
        """numerator / denominator, where denominator is a degree-``degree``
        polynomial in the coefficients of ``A``."""
        if self.symbolic:
            denominator = Sym.of(denominator)
            if denominator.is_zero:
                raise SingularElementError("Element is not invertible: normaliser is 0")
            return [Sym.div(c, denominator) for c in numerator]
        # Rounding error of the normaliser grows with |A|^degree
        eps = torch.finfo(A.dtype).eps if A.is_floating_point() else 0.0
        tolerance = eps * self.dim * A.pow(2).sum(dim=-1) ** (degree / 2)
        if bool((denominator.abs() <= tolerance).any()):
            raise SingularElementError("Element is not invertible: normaliser is 0")
        return numerator / denominator.unsqueeze(-1)

    def inverse(self, A):
        """Multiplicative inverse.

        Closed forms built from reversion, involution, conjugation and grade
        negation up to 5 dimensions; above that numeric algebras solve the
        left-multiplication system. A numeric normaliser within rounding
        error of 0 counts as singular.

        Raises:
            SingularElementError: If the element has no inverse.
            UnsupportedOperationError: Symbolic algebras above 5 dimensions.
        """
        A = self.storage(A)
        mul = self.mul
        n = self.n
        if n == 0:
            return self._over_scalar(self.scalar(1), self._grade0(A), A, 1)
        if n == 1:
            num = self.involute(A)
            return self._over_scalar(num, self._grade0(mul(A, num)), A, 2)
        if n == 2:
            num = self.conjugate(A)
            return self._over_scalar(num, self._grade0(mul(A, num)), A, 2)
        if n == 3:
            rev, inv, conj = self.reverse(A), self.involute(A), self.conjugate(A)
            num = mul(mul(rev, inv), conj)
            return self._over_scalar(num, self._grade0(mul(mul(mul(A, conj), inv), rev)), A, 4)
        if n == 4:
            conj = self.conjugate(A)
            M = self.grade_map(mul(A, conj), 3, 4)
            return self._over_scalar(mul(conj, M), self._grade0(mul(mul(A, conj), M)), A, 4)
        if n == 5:
            C = mul(mul(self.conjugate(A), self.involute(A)), self.reverse(A))
            X = mul(A, C)
            M = self.grade_map(X, 1, 4)
            return self._over_scalar(mul(C, M), self._grade0(mul(X, M)), A, 8)
        if self.symbolic:
            raise UnsupportedOperationError(
                f"Symbolic inverse is only available up to 5 dimensions, {self.signature} has {n}"
            )
        return self._inverse_solve(A)

    def _inverse_solve(self, A: torch.Tensor) -> torch.Tensor:
        """Solve L(A) x = 1 where L(A) is left multiplication by A."""
        dtype = A.dtype if A.dtype in (torch.float32, torch.float64) else torch.float64
        A = A.to(dtype)
        eye = torch.eye(self.dim, dtype=dtype, device=A.device)
        # Column j of L(A) is A e_j
        L = self.mul(A.unsqueeze(-2), eye).transpose(-1, -2)
        one = torch.zeros(*A.shape[:-1], self.dim, dtype=dtype, device=A.device)
        one[..., 0] = 1
        x, info = torch.linalg.solve_ex(L, one)
        if bool((info != 0).any()):
            raise SingularElementError("Element is not invertible: left multiplication is singular")
        return x

    # Exponential

    def exp(self, mv, order: int = 12):
        """Exponential of a multivector.

        The scalar part factors out. For the remainder B:

            - B^2 < 0 (elliptic): exp(B) = cos(theta) + sin(theta)/theta . B
            - B^2 > 0 (hyperbolic): exp(B) = cosh(theta) + sinh(theta)/theta . B
            - B^2 ~= 0 (parabolic): exp(B) = 1 + B

        whenever B^2 is a scalar (always true for bivectors up to 3
        dimensions). Otherwise a Taylor series with scaling and squaring is
        used.

        Args:
            mv: Input multivector.
            order (int, optional): Taylor order for the fallback.

        Returns:
            torch.Tensor: exp(mv).
        """
        if self.symbolic:
            raise UnsupportedOperationError("exp needs numeric coefficients")
        mv = self.storage(mv)
        if not mv.is_floating_point():
            mv = mv.to(self.dtype)
        s0 = mv[..., 0:1]
        B = mv.clone()
        B[..., 0] = 0

        B_sq = self.mul(B, B)
        alpha = B_sq[..., 0:1]
        residue = B_sq[..., 1:].abs().sum(dim=-1, keepdim=True) if self.dim > 1 else torch.zeros_like(alpha)
        is_simple = residue <= 1e-6 * (alpha.abs() + 1.0)

        if bool(is_simple.all()):
            result = self._exp_closed(B, alpha)
        elif not bool(is_simple.any()):
            result = self._exp_taylor(B, order)
        else:
            result = torch.where(is_simple, self._exp_closed(B, alpha), self._exp_taylor(B, order))
        return result * torch.exp(s0)

    def _exp_closed(self, B: torch.Tensor, alpha: torch.Tensor) -> torch.Tensor:
        abs_alpha = alpha.abs().clamp(min=1e-12)
        theta = torch.sqrt(abs_alpha)  # [..., 1]

        cos_theta = torch.cos(theta)
        sinc_theta = torch.where(theta > 1e-7, torch.sin(theta) / theta, 1.0 - abs_alpha / 6.0)
        cosh_theta = torch.cosh(theta)
        sinhc_theta = torch.where(theta > 1e-7, torch.sinh(theta) / theta, 1.0 + abs_alpha / 6.0)

        is_elliptic = alpha < -1e-12
        is_hyperbolic = alpha > 1e-12
        # Parabolic falls through: scalar=1, coeff=1
        scalar_part = torch.where(
            is_elliptic, cos_theta,
            torch.where(is_hyperbolic, cosh_theta, torch.ones_like(theta))
        )
        coeff_part = torch.where(
            is_elliptic, sinc_theta,
            torch.where(is_hyperbolic, sinhc_theta, torch.ones_like(theta))
        )

        result = coeff_part * B
        result[..., 0] = scalar_part.squeeze(-1)
        return result

    def _exp_taylor(self, mv: torch.Tensor, order: int = 12) -> torch.Tensor:
        """Taylor series exponential with scaling-and-squaring."""
        norm = mv.norm(dim=-1, keepdim=True)
        k = torch.ceil(torch.log2(torch.clamp(norm, min=1.0))).int()

        max_k = int(k.max().item())
        mv_scaled = mv / (2.0 ** max_k) if max_k > 0 else mv

        res = torch.zeros_like(mv)
        res[..., 0] = 1.0
        term = res.clone()
        for i in range(1, order + 1):
            term = self.mul(term, mv_scaled)
            res = res + term / math.factorial(i)

        for _ in range(max_k):
            res = self.mul(res, res)
        return res

    # Norms

    def length(self, mv):
        """sqrt(|<A bar(A)>_0|)."""
        from core.metric import induced_norm
        return induced_norm(self, self.storage(mv)).squeeze(-1)

    def vlength(self, mv):
        """Coordinate norm, blind to the metric."""
        from core.metric import euclidean_norm
        return euclidean_norm(self, mv).squeeze(-1)

    def normalized(self, mv):
        from core.metric import normalize
        return normalize(self, mv)

    # Literals

    def inline(self, source, dialect=None, **bindings):
        """Translate literal source against this algebra.

        Args:
            source: Expression string, lambda or single-``return`` function.
            dialect (str, optional): ``'default'`` or ``'math'``.
            **bindings: Names visible to the expression.

        Returns:
            TranslatedExpression: Callable evaluating the expanded expression.
        """
        from translator.inline import translate
        return translate(self, source, dialect=dialect, **bindings)

    def component_name(self, i: int) -> str:
        name = self.basis[i]
        return "s" if name == SCALAR_NAME else name


def Algebra(*args, **options):
    """Build an algebra, optionally evaluating literal source in it.

    ``Algebra(3)``, ``Algebra(2, 0, 1)``, ``Algebra({"p": 3, "r": 1})`` and
    ``Algebra(p=3, mix=True)`` return a :class:`CliffordAlgebra`. A trailing
    callable or string is translated, evaluated and its result returned::

        >>> Algebra(0, 1, lambda: 1e1*1e1).to_string()
        '-1'
    """
    args = list(args)
    body = None
    if args and (callable(args[-1]) or isinstance(args[-1], str)):
        body = args.pop()
    config = None
    if args and not isinstance(args[0], int):
        config = args.pop(0)
    if len(args) > 3:
        raise TypeError(f"Algebra() takes at most p, q, r positionally, got {len(args)} values")
    counts = dict(zip(("p", "q", "r"), args))
    for name in counts:
        if name in options:
            raise TypeError(f"Algebra() got multiple values for '{name}'")
    algebra = CliffordAlgebra(config=config, **counts, **options)
    if body is None:
        return algebra
    return algebra.inline(body)()
