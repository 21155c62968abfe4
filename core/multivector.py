# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Multivector Container Class.

Provides a high-level object-oriented wrapper around coefficient storage
to enable operator overloading (e.g., A * B for geometric product).
"""

from typing import Protocol, runtime_checkable

import torch

from core.coefficients import Binding, Sym, format_number


@runtime_checkable
class NamedComponents(Protocol):
    """Anything whose coefficients can be read by basis blade name.

    Algebras built with ``mix=True`` read their operands through this
    interface, so elements of a sub-algebra (or any object exposing the
    same blade names) can be combined with elements of the full algebra.
    """

    def component(self, name: str):
        ...


class Multivector:
    """Object-oriented wrapper for multivector storage.

    Allows natural mathematical syntax like A * B, A + B, ~A.

    Attributes:
        algebra (CliffordAlgebra): The underlying algebra.
        data: The raw coefficients, ``torch.Tensor`` [..., Dim] or a list of
            :class:`Sym` for symbolic algebras.
    """

    def __init__(self, algebra, data):
        """Initializes a Multivector.

        Args:
            algebra (CliffordAlgebra): The algebra instance.
            data: Coefficient storage.
        """
        self.algebra = algebra
        self.data = data

    @classmethod
    def from_vectors(cls, algebra, vectors: torch.Tensor):
        """Creates a Multivector from dense vectors (Grade 1).

        Args:
            algebra (CliffordAlgebra): The algebra instance.
            vectors (torch.Tensor): Vectors [Batch, n].
        """
        return cls(algebra, algebra.embed_vector(vectors))

    def _wrap(self, data) -> "Multivector":
        return Multivector(self.algebra, data)

    # Component access

    def _index(self, key) -> int:
        if isinstance(key, str):
            try:
                return self.algebra.index[key]
            except KeyError:
                raise KeyError(f"{key!r} is not a basis blade of {self.algebra.signature}") from None
        return int(key)

    def __getitem__(self, key):
        i = self._index(key)
        if isinstance(self.data, list):
            return self.data[i]
        return self.data[..., i]

    def __setitem__(self, key, value):
        i = self._index(key)
        if isinstance(self.data, list):
            self.data[i] = Sym.of(value)
        else:
            self.data[..., i] = value

    def component(self, name: str):
        """Coefficient of the named blade; 0 for blades this algebra lacks."""
        i = self.algebra.index.get(name)
        if i is None:
            return 0
        return self.data[i] if isinstance(self.data, list) else self.data[..., i]

    @property
    def scalar(self):
        """Grade-0 coefficient (a Python number for unbatched numeric data)."""
        value = self[0]
        if isinstance(value, torch.Tensor) and value.ndim == 0:
            return value.item()
        return value

    def tolist(self) -> list:
        if isinstance(self.data, list):
            return list(self.data)
        return self.data.tolist()

    # Arithmetic

    def _coerce(self, other):
        if isinstance(other, (Multivector, int, float, Sym, str, torch.Tensor)):
            return other
        return None

    def __add__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.add(self, other))

    def __radd__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.add(other, self))

    def __sub__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.sub(self, other))

    def __rsub__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.sub(other, self))

    def __mul__(self, other):
        """Geometric Product (A * B)."""
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.mul(self, other))

    def __rmul__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.mul(other, self))

    def __truediv__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.div(self, other))

    def __rtruediv__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.div(other, self))

    def __xor__(self, other):
        """Outer product (A ^ B)."""
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.wedge(self, other))

    def __rxor__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.wedge(other, self))

    def __and__(self, other):
        """Regressive product (A & B)."""
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.vee(self, other))

    def __lshift__(self, other):
        """Left contraction (A << B)."""
        if self._coerce(other) is None:
            return NotImplemented
        return self._wrap(self.algebra.dot(self, other))

    def __pow__(self, exponent):
        return self._wrap(self.algebra.pow(self, exponent))

    def __neg__(self):
        return self._wrap(self.algebra.negative(self))

    def __invert__(self):
        """Reversion (~A)."""
        return self._wrap(self.algebra.reverse(self))

    def __eq__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        other = self.algebra.storage(other)
        if isinstance(self.data, list):
            return all(Sym.of(a) == Sym.of(b) for a, b in zip(self.data, other))
        return bool(torch.equal(*torch.broadcast_tensors(self.data, other.to(self.data.dtype))))

    __hash__ = None

    # Derived elements

    def grade(self, k: int) -> "Multivector":
        """Projects to grade k."""
        return self._wrap(self.algebra.grade_projection(self.data, k))

    @property
    def reverse(self) -> "Multivector":
        return self._wrap(self.algebra.reverse(self))

    @property
    def involute(self) -> "Multivector":
        return self._wrap(self.algebra.involute(self))

    @property
    def conjugate(self) -> "Multivector":
        return self._wrap(self.algebra.conjugate(self))

    @property
    def dual(self) -> "Multivector":
        return self._wrap(self.algebra.dual(self))

    @property
    def inverse(self) -> "Multivector":
        return self._wrap(self.algebra.inverse(self))

    @property
    def normalized(self) -> "Multivector":
        return self._wrap(self.algebra.normalized(self))

    def length(self):
        """Metric-induced norm (sqrt(|<A bar(A)>_0|))."""
        value = self.algebra.length(self)
        return value.item() if value.ndim == 0 else value

    def vlength(self):
        value = self.algebra.vlength(self)
        return value.item() if value.ndim == 0 else value

    def norm(self):
        return self.length()

    def exp(self) -> "Multivector":
        """Exponential function."""
        return self._wrap(self.algebra.exp(self.data))

    # Text

    def to_string(self) -> str:
        """Compact text form such as ``-5+14e1`` (unbatched elements only)."""
        if not isinstance(self.data, list) and self.data.ndim != 1:
            raise ValueError(f"to_string needs a single element, got shape {tuple(self.data.shape)}")
        pieces = []
        for i, value in enumerate(self.tolist()):
            name = "" if i == 0 else self.algebra.basis[i]
            if isinstance(value, Sym):
                if value.is_zero:
                    continue
                sign = "-" if value.negative else ""
                if not name:
                    pieces.append(str(value))
                elif value.is_unit:
                    pieces.append(sign + name)
                elif value.binding == Binding.SUM:
                    pieces.append(f"{sign}({value.text})*{name}")
                else:
                    pieces.append(f"{sign}{value.text}*{name}")
                continue
            value = round(float(value), 10)
            if value == 0:
                continue
            if name and abs(value) == 1:
                text = ("-" if value < 0 else "") + name
            else:
                text = format_number(value) + name
            pieces.append(text)
        if not pieces:
            return "0"
        out = pieces[0]
        for piece in pieces[1:]:
            out += piece if piece.startswith("-") else "+" + piece
        return out

    def __str__(self) -> str:
        if isinstance(self.data, list) or self.data.ndim == 1:
            return self.to_string()
        return f"Multivector(shape={tuple(self.data.shape)}, algebra={self.algebra.signature})"

    def __repr__(self):
        return f"Multivector({self}, algebra={self.algebra.signature})"
