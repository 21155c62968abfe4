# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Basis enumeration.

Blades are ordered subsets of generator axes. The canonical basis of an
``n``-dimensional algebra lists all ``2^n`` subsets sorted by grade, then by
the ascending index tuple::

    n = 3  ->  1, e1, e2, e3, e12, e13, e23, e123

Axis labels are single characters so names never become ambiguous: digits
first, then lower-case letters (``e9``, ``ea``, ``eb`` ...). Algebras with a
null generator number their axes from 0 (``e0`` is the degenerate one in
PGA), all others from 1.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from core.errors import ConfigurationError

AXIS_LABELS = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_DIMENSIONS = 12

SCALAR_NAME = "1"


def blade_name(axes: Sequence[int]) -> str:
    """Display name of a blade given its axis labels (``(1, 2) -> 'e12'``)."""
    if not axes:
        return SCALAR_NAME
    return "e" + "".join(AXIS_LABELS[a] for a in axes)


def parse_blade_name(name: str) -> Tuple[int, ...]:
    """Axis labels of a blade name, in written order.

    ``'1' -> ()``, ``'e12' -> (1, 2)``, ``'e31' -> (3, 1)``.

    Raises:
        ConfigurationError: If the name is not ``'1'`` or ``'e'`` + labels.
    """
    if name == SCALAR_NAME:
        return ()
    if len(name) < 2 or name[0] != "e" or any(c not in AXIS_LABELS for c in name[1:]):
        raise ConfigurationError(f"Cannot parse basis blade name '{name}'")
    axes = tuple(AXIS_LABELS.index(c) for c in name[1:])
    if len(set(axes)) != len(axes):
        raise ConfigurationError(f"Basis blade '{name}' repeats an axis")
    return axes


def enumerate_basis(tot: int, low: int = 1) -> list:
    """Canonical basis names for ``tot`` generators labelled from ``low``.

    Args:
        tot: Total number of generators (p + q + r).
        low: Label of the first generator (0 or 1).

    Returns:
        ``2^tot`` names, sorted by grade then by index tuple.

    Raises:
        ConfigurationError: If ``tot`` is negative or above
            :data:`MAX_DIMENSIONS`.
    """
    if tot < 0:
        raise ConfigurationError(f"Dimension count must be non-negative, got {tot}")
    if tot > MAX_DIMENSIONS:
        raise ConfigurationError(
            f"p + q + r must be <= {MAX_DIMENSIONS}, got {tot}"
        )
    if low + tot > len(AXIS_LABELS):
        raise ConfigurationError(f"Not enough axis labels for {tot} generators from {low}")

    # Bit i of the subset index marks axis i
    subsets = [tuple(i for i in range(tot) if (bits >> i) & 1) for bits in range(1 << tot)]
    subsets.sort(key=lambda axes: (len(axes), axes))
    return [blade_name(tuple(a + low for a in axes)) for axes in subsets]


@dataclass(frozen=True)
class Basis:
    """Ordered basis of an algebra.

    Attributes:
        names (tuple): Blade display names, in component order.
        axes (tuple): Axis labels per blade (``None`` for names that are not
            ``e``-style, which only an explicit Cayley table allows).
        grades (tuple): Grade per blade.
        low (int): Label of the first generator.
        n (int): Number of generators.
    """

    names: Tuple[str, ...]
    axes: Tuple[Optional[Tuple[int, ...]], ...]
    grades: Tuple[int, ...]
    low: int
    n: int
    index: Mapping[str, int] = field(init=False, repr=False, compare=False)
    grade_start: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {name: i for i, name in enumerate(self.names)}
        index.setdefault("s", 0)
        object.__setattr__(self, "index", MappingProxyType(index))

        # First component of every grade, then a final sentinel
        starts = []
        for k in range(max(self.grades) + 1):
            starts.append(self.grades.index(k) if k in self.grades else len(self.names))
        starts.append(len(self.names))
        object.__setattr__(self, "grade_start", tuple(starts))

    @property
    def dim(self) -> int:
        """Number of basis blades (2^n)."""
        return len(self.names)

    @property
    def canonical(self) -> bool:
        """True when the names are exactly the enumerated default basis."""
        return list(self.names) == enumerate_basis(self.n, self.low)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    @classmethod
    def from_signature(cls, signature) -> "Basis":
        """Build the basis described by a normalised :class:`Signature`."""
        n, low = signature.n, signature.low
        names = signature.basis or tuple(enumerate_basis(n, low))

        if len(names) != 2 ** n:
            raise ConfigurationError(
                f"Basis has {len(names)} blades, expected 2^{n} = {2 ** n}"
            )
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Basis names are not unique: {list(names)}")

        axes = []
        for name in names:
            try:
                blade_axes = parse_blade_name(name)
            except ConfigurationError:
                # Free-form names only make sense with an explicit table
                if signature.cayley is None:
                    raise
                blade_axes = None
            if blade_axes is not None and any(not low <= a < low + n for a in blade_axes):
                raise ConfigurationError(
                    f"Blade '{name}' uses an axis outside {blade_name([low])}..{blade_name([low + n - 1])}"
                )
            axes.append(blade_axes)

        if signature.grades is not None:
            grades = tuple(signature.grades)
        else:
            grades = tuple(len(a) if a is not None else len(name) - 1
                           for a, name in zip(axes, names))
        return cls(names=tuple(names), axes=tuple(axes), grades=grades, low=low, n=n)
