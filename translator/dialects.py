# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Operator dialects.

A dialect is pure data: precedence levels of operator descriptors, the
postfix properties it understands and identifier renames. Level 0 binds
tightest. Supporting another notation only needs another :class:`Dialect`
in :data:`DIALECTS`.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from core.errors import ConfigurationError


class Fixity(Enum):
    PREFIX = "prefix"
    INFIX = "infix"


@dataclass(frozen=True)
class OperatorSpec:
    """One operator: its symbol, the operation it becomes and how it binds."""

    symbol: str
    name: str
    fixity: Fixity = Fixity.INFIX
    right_assoc: bool = False


def _frozen_map(**items) -> Mapping[str, str]:
    return MappingProxyType(dict(items))


@dataclass(frozen=True)
class Dialect:
    """Precedence table plus properties and renames.

    Attributes:
        name (str): Registry name.
        levels (tuple): Tuples of :class:`OperatorSpec`, tightest first.
        properties (Mapping): ``.Name`` postfix property -> operation.
        renames (Mapping): Identifier -> replacement source.
    """

    name: str
    levels: Tuple[Tuple[OperatorSpec, ...], ...]
    properties: Mapping[str, str] = field(default_factory=dict)
    renames: Mapping[str, str] = field(default_factory=dict)

    def binding_power(self, level: int) -> int:
        return (len(self.levels) - level) * 10

    def _lookup(self, symbol: str, fixity: Fixity) -> Tuple[Optional[OperatorSpec], int]:
        for level, specs in enumerate(self.levels):
            for spec in specs:
                if spec.symbol == symbol and spec.fixity == fixity:
                    return spec, self.binding_power(level)
        return None, 0

    def prefix(self, symbol: str) -> Tuple[Optional[OperatorSpec], int]:
        return self._lookup(symbol, Fixity.PREFIX)

    def infix(self, symbol: str) -> Tuple[Optional[OperatorSpec], int]:
        return self._lookup(symbol, Fixity.INFIX)

    @property
    def symbols(self) -> frozenset:
        return frozenset(spec.symbol for specs in self.levels for spec in specs)


def _prefix(symbol, name):
    return OperatorSpec(symbol, name, Fixity.PREFIX)


_COMPARISONS = (
    OperatorSpec("<", "lt"), OperatorSpec(">", "gt"),
    OperatorSpec("<=", "lte"), OperatorSpec(">=", "gte"),
)

_PROPERTIES = _frozen_map(Normalized="Normalize", Length="Length")

# Python-source notation, used for lambdas, functions and (by default) strings.
# Unlike Python, prefix operators bind tighter than '**': -a**2 is (-a)**2.
DEFAULT = Dialect(
    name="default",
    levels=(
        (_prefix("~", "Conjugate"), _prefix("!", "Dual"), _prefix("-", "Sub")),
        (OperatorSpec("**", "Pow", right_assoc=True),),
        (OperatorSpec(">>>", "sw"), OperatorSpec("^", "Wedge"),
         OperatorSpec("&", "Vee"), OperatorSpec("<<", "Dot")),
        (OperatorSpec("*", "Mul"), OperatorSpec("/", "Div")),
        (OperatorSpec("-", "Sub"), OperatorSpec("+", "Add")),
        _COMPARISONS,
    ),
    properties=_PROPERTIES,
)

# Math notation: ^ is the power, ^^ the wedge, * the inner product
MATH = Dialect(
    name="math",
    levels=(
        (_prefix("ddot", "Reverse"), _prefix("tilde", "Involute"),
         _prefix("hat", "Conjugate"), _prefix("bar", "Dual"), _prefix("-", "Sub")),
        (OperatorSpec("^", "Pow", right_assoc=True),),
        (OperatorSpec("^^", "Wedge"), OperatorSpec("*", "Dot")),
        (OperatorSpec("**", "Mul"), OperatorSpec("/", "Div")),
        (OperatorSpec("-", "Sub"), OperatorSpec("+", "Add")),
        _COMPARISONS,
    ),
    properties=_PROPERTIES,
    renames=_frozen_map(pi="math.pi", sin="math.sin", cos="math.cos", sqrt="math.sqrt"),
)

DIALECTS = {d.name: d for d in (DEFAULT, MATH)}


def get_dialect(dialect=None) -> Dialect:
    """Look up a dialect by name; ``None`` is :data:`DEFAULT`."""
    if dialect is None:
        return DEFAULT
    if isinstance(dialect, Dialect):
        return dialect
    try:
        return DIALECTS[dialect.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown dialect '{dialect}'. Available: {list(DIALECTS)}"
        ) from None
