# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Blade simplification.

Reduces the juxtaposition of two blades to a signed canonical blade,
implementing ``e_i e_i = metric(i)`` and ``e_i e_j = -e_j e_i``.
"""

from typing import Callable, Optional, Sequence, Tuple

from core.errors import ConfigurationError


def simplify(axes: Sequence[int], metric_of: Callable[[int], int]) -> Tuple[int, Tuple[int, ...]]:
    """Reduce a product of generators to ``(sign, sorted_axes)``.

    Alternates two passes until neither changes anything:

    1. contract adjacent equal axes, multiplying the sign by the axis metric
       (a null axis zeroes the whole product);
    2. swap the first out-of-order adjacent pair, flipping the sign.

    Args:
        axes: Axis labels of the concatenated blades, e.g. ``(1, 2, 1)``.
        metric_of: Square of each axis label: +1, -1 or 0.

    Returns:
        ``(sign, axes)`` with sign in {-1, 0, 1}; ``(0, ())`` for zero.
    """
    sign = 1
    current = list(axes)
    changed = True
    while changed:
        changed = False
        reduced = []
        i = 0
        while i < len(current):
            if i + 1 < len(current) and current[i] == current[i + 1]:
                square = metric_of(current[i])
                if square == 0:
                    return 0, ()
                sign *= square
                i += 2
                changed = True
            else:
                reduced.append(current[i])
                i += 1
        for i in range(len(reduced) - 1):
            if reduced[i] > reduced[i + 1]:
                reduced[i], reduced[i + 1] = reduced[i + 1], reduced[i]
                sign = -sign
                changed = True
                break
        current = reduced
    return sign, tuple(current)


class BladeResolver:
    """Maps simplified blades back onto the members of a basis.

    Custom bases may list a blade in non-canonical order (``e31`` instead of
    ``e13``); the resolver remembers the sign relating each member to its
    sorted form so products land on the right component with the right sign.

    Attributes:
        basis (Basis): The basis being resolved against.
        metric_of (Callable): Axis label -> square.
    """

    def __init__(self, basis, metric_of: Callable[[int], int]):
        self.basis = basis
        self.metric_of = metric_of
        self._aliases = {}
        for i, axes in enumerate(basis.axes):
            if axes is None:
                continue
            # Sorting a blade's own axes never contracts, so the metric is irrelevant
            sign, canonical = simplify(axes, lambda _: 1)
            self._aliases[canonical] = (i, sign)

    def resolve(self, sign: int, axes: Tuple[int, ...]) -> Tuple[int, Optional[int]]:
        """Locate a signed canonical blade in the basis.

        Returns:
            ``(sign, index)``; ``(0, None)`` for the zero element.

        Raises:
            ConfigurationError: If the blade is not a member of the basis.
        """
        if sign == 0:
            return 0, None
        try:
            index, alias_sign = self._aliases[axes]
        except KeyError:
            raise ConfigurationError(
                f"Product blade {axes} is not part of the basis {list(self.basis.names)}"
            ) from None
        return sign * alias_sign, index

    def product(self, i: int, j: int, metric_of: Optional[Callable[[int], int]] = None):
        """Signed product of basis blades ``i`` and ``j``.

        Args:
            i: Left blade index.
            j: Right blade index.
            metric_of: Optional metric override (the outer product uses an
                all-positive one).

        Returns:
            ``(sign, index)`` or ``(0, None)``.
        """
        metric_of = metric_of or self.metric_of
        sign, axes = simplify(self.basis.axes[i] + self.basis.axes[j], metric_of)
        return self.resolve(sign, axes)
