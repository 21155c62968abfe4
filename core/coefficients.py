# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Coefficient kinds.

An algebra stores its coefficients either as numbers (a ``torch.Tensor``
whose last dimension indexes the basis) or as symbolic expressions (a
``list`` of :class:`Sym`). Symbolic coefficients are text fragments that are
combined, parenthesised and sign-folded but never evaluated::

    >>> Sym.total([(1, Sym.mul("a", "c")), (-1, Sym.mul("b", "x+y"))])
    Sym('a*c-b*(x+y)')
"""

from enum import Enum, IntEnum

import torch

from core.errors import ConfigurationError


class CoefficientKind(str, Enum):
    """Closed set of coefficient representations."""

    NUMERIC = "numeric"
    SYMBOLIC = "symbolic"

    @classmethod
    def parse(cls, value) -> "CoefficientKind":
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Unknown coefficient kind '{value}'. Available: {[k.value for k in cls]}"
            ) from None


class Binding(IntEnum):
    """How tightly a symbolic fragment holds together."""

    SUM = 1
    PRODUCT = 2
    ATOM = 3


def format_number(value) -> str:
    """Shortest stable text for a coefficient (``2.0 -> '2'``)."""
    value = round(float(value), 10)
    if value == int(value):
        return str(int(value))
    return repr(value)


def _binding_of(text: str) -> Binding:
    depth = 0
    binding = Binding.ATOM
    previous = ""
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif depth == 0:
            if ch in "+-" and previous and previous not in "*/(+-^,":
                return Binding.SUM
            if ch in "*/":
                binding = Binding.PRODUCT
        if not ch.isspace():
            previous = ch
    return binding


class Sym:
    """Symbolic coefficient.

    Attributes:
        text (str): Expression text without its leading sign.
        binding (Binding): Precedence class of ``text``.
        negative (bool): Whether the fragment is negated.
    """

    __slots__ = ("text", "binding", "negative")

    MUL = "*"
    DIV = "/"
    ADD = "+"
    SUB = "-"

    ZERO = None
    ONE = None

    def __init__(self, text: str, binding: Binding = Binding.ATOM, negative: bool = False):
        self.text = text
        self.binding = binding
        self.negative = negative

    @classmethod
    def of(cls, value) -> "Sym":
        """Coerce a string, number or 0-d tensor into a :class:`Sym`."""
        if isinstance(value, Sym):
            return value
        if isinstance(value, torch.Tensor):
            value = value.item()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(format_number(abs(value)), Binding.ATOM, value < 0)
        if isinstance(value, str):
            text = value.strip() or "0"
            negative = False
            if text.startswith("-") and _binding_of(text[1:]) != Binding.SUM:
                negative, text = True, text[1:].strip()
            return cls(text, _binding_of(text), negative)
        raise TypeError(f"Cannot use {type(value).__name__} as a symbolic coefficient")

    @property
    def is_zero(self) -> bool:
        return self.text == "0"

    @property
    def is_unit(self) -> bool:
        return self.text == "1"

    def signed(self, sign: int) -> "Sym":
        if sign >= 0 or self.is_zero:
            return self
        return Sym(self.text, self.binding, not self.negative)

    def _wrapped(self, binding: Binding) -> str:
        if self.binding < binding:
            return f"({self.text})"
        return self.text

    @classmethod
    def mul(cls, a, b) -> "Sym":
        a, b = cls.of(a), cls.of(b)
        if a.is_zero or b.is_zero:
            return cls.ZERO
        negative = a.negative != b.negative
        if a.is_unit:
            return Sym(b.text, b.binding, negative)
        if b.is_unit:
            return Sym(a.text, a.binding, negative)
        text = a._wrapped(Binding.PRODUCT) + cls.MUL + b._wrapped(Binding.PRODUCT)
        return Sym(text, Binding.PRODUCT, negative)

    @classmethod
    def div(cls, a, b) -> "Sym":
        a, b = cls.of(a), cls.of(b)
        if b.is_zero:
            raise ZeroDivisionError("symbolic division by zero")
        if a.is_zero:
            return cls.ZERO
        negative = a.negative != b.negative
        if b.is_unit:
            return Sym(a.text, a.binding, negative)
        text = a._wrapped(Binding.PRODUCT) + cls.DIV + b._wrapped(Binding.ATOM)
        return Sym(text, Binding.PRODUCT, negative)

    @classmethod
    def total(cls, terms) -> "Sym":
        """Sum of ``(sign, value)`` pairs, dropping zeros."""
        parts = [cls.of(v).signed(s) for s, v in terms if s]
        parts = [p for p in parts if not p.is_zero]
        if not parts:
            return cls.ZERO
        if len(parts) == 1:
            return parts[0]
        pieces = []
        for i, part in enumerate(parts):
            body = f"({part.text})" if part.negative and part.binding == Binding.SUM else part.text
            if part.negative:
                pieces.append(cls.SUB + body)
            else:
                pieces.append(body if i == 0 else cls.ADD + body)
        return Sym("".join(pieces), Binding.SUM)

    def scale(self, factor) -> "Sym":
        if factor == 1:
            return self
        if factor == -1:
            return self.signed(-1)
        return Sym.mul(factor, self)

    # Operator sugar so translated expressions can mix Sym with numbers

    def __neg__(self):
        return self.signed(-1)

    def __add__(self, other):
        return Sym.total([(1, self), (1, other)])

    def __radd__(self, other):
        return Sym.total([(1, other), (1, self)])

    def __sub__(self, other):
        return Sym.total([(1, self), (-1, other)])

    def __rsub__(self, other):
        return Sym.total([(1, other), (-1, self)])

    def __mul__(self, other):
        return Sym.mul(self, other)

    def __rmul__(self, other):
        return Sym.mul(other, self)

    def __truediv__(self, other):
        return Sym.div(self, other)

    def __rtruediv__(self, other):
        return Sym.div(other, self)

    def __str__(self) -> str:
        if not self.negative:
            return self.text
        if self.binding == Binding.SUM:
            return f"-({self.text})"
        return f"-{self.text}"

    def __repr__(self) -> str:
        return f"Sym({str(self)!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, (Sym, str, int, float)) and not isinstance(other, bool):
            return str(self) == str(Sym.of(other))
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


Sym.ZERO = Sym("0")
Sym.ONE = Sym("1")
