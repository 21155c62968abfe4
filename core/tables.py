# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Multiplication tables.

For every ordered pair of basis blades ``(A, B)`` the tables store the
component index and sign of ``A B``:

- geometric product: full metric;
- outer product: all-positive metric, kept only where
  ``grade(AB) = grade(A) + grade(B)``;
- left contraction: geometric entries kept only where
  ``grade(AB) = grade(B) - grade(A)``.

A zero sign marks a vanishing product. The dual remap pairs every blade with
its complement without multiplying by the pseudoscalar, so it stays valid
for degenerate metrics.
"""

from dataclasses import dataclass

import numpy as np

from core.basis import Basis
from core.blade import BladeResolver
from core.errors import ConfigurationError
from log import get_logger, timed

logger = get_logger(__name__)


@dataclass(frozen=True)
class CayleyTables:
    """Immutable product tables of one algebra.

    Attributes:
        signature (Signature): Normalised signature the tables were built for.
        basis (Basis): Ordered basis.
        gp_index, gp_sign (np.ndarray): Geometric product [dim, dim].
        op_index, op_sign (np.ndarray): Outer product [dim, dim].
        dot_sign (np.ndarray): Left contraction signs (indices as ``gp_index``).
        metric (np.ndarray): Square of every basis blade (diagonal of the
            geometric table; 0 where the square is not a scalar).
        dual_index, dual_sign (np.ndarray): Dual remap [dim].
    """

    signature: object
    basis: Basis
    gp_index: np.ndarray
    gp_sign: np.ndarray
    op_index: np.ndarray
    op_sign: np.ndarray
    dot_sign: np.ndarray
    metric: np.ndarray
    dual_index: np.ndarray
    dual_sign: np.ndarray

    @property
    def dim(self) -> int:
        return self.basis.dim

    def entry(self, i: int, j: int, outer: bool = False) -> str:
        """Cayley entry of blades ``i`` and ``j`` as text (``'-e12'``, ``'0'``)."""
        index, sign = (self.op_index, self.op_sign) if outer else (self.gp_index, self.gp_sign)
        s = int(sign[i, j])
        if s == 0:
            return "0"
        return ("-" if s < 0 else "") + self.basis.names[int(index[i, j])]

    def describe(self) -> str:
        """Render basis, metric and Cayley table as text."""
        width = max(len(name) for name in self.basis.names) + 2
        rows = [
            "".join(self.entry(i, j).rjust(width) for j in range(self.dim))
            for i in range(self.dim)
        ]
        return "\n".join([
            "Basis",
            ",".join(self.basis.names),
            "Metric",
            ",".join(str(m) for m in self.signature.axis_metric),
            "Cayley",
            *rows,
        ])


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def _popcount(x: np.ndarray, bits: int) -> np.ndarray:
    count = np.zeros_like(x)
    for i in range(bits):
        count += (x >> i) & 1
    return count


def _bitmask_products(basis: Basis, axis_metric):
    """Vectorised product table for bases whose blades list sorted axes.

    Each blade is a bitmask over the generators. The product index is the
    XOR of the masks; the sign is the parity of the swaps needed to sort the
    concatenation times the metric of the shared generators.
    """
    n, dim = basis.n, basis.dim
    masks = np.array([sum(1 << (a - basis.low) for a in axes) for axes in basis.axes],
                     dtype=np.int64)
    index_of_mask = np.empty(dim, dtype=np.int64)
    index_of_mask[masks] = np.arange(dim)

    A = masks[:, None]
    B = masks[None, :]

    # Count, for every set bit of A, the set bits of B strictly below it
    swaps = np.zeros((dim, dim), dtype=np.int64)
    for i in range(n):
        a_i = (A >> i) & 1
        swaps = swaps + a_i * _popcount(B & ((1 << i) - 1), n)
    sign = np.where(swaps % 2 == 0, 1, -1)

    shared = A & B
    neg_mask = sum(1 << i for i, m in enumerate(axis_metric) if m == -1)
    null_mask = sum(1 << i for i, m in enumerate(axis_metric) if m == 0)
    sign = np.where(_popcount(shared & neg_mask, n) % 2 == 0, sign, -sign)
    sign = np.where((shared & null_mask) != 0, 0, sign)

    return index_of_mask[A ^ B], sign.astype(np.int8)


def _pairwise_products(basis: Basis, metric_of):
    """Product table through the blade simplifier (custom blade names)."""
    resolver = BladeResolver(basis, metric_of)
    dim = basis.dim
    index = np.zeros((dim, dim), dtype=np.int64)
    sign = np.zeros((dim, dim), dtype=np.int8)
    for i in range(dim):
        for j in range(dim):
            s, k = resolver.product(i, j)
            if s:
                index[i, j], sign[i, j] = k, s
    return index, sign


def _parse_cayley(cayley, basis: Basis):
    """Explicit table of strings such as ``[['1', 'e1'], ['e1', '-1']]``."""
    dim = basis.dim
    index = np.zeros((dim, dim), dtype=np.int64)
    sign = np.zeros((dim, dim), dtype=np.int8)
    for i, row in enumerate(cayley):
        for j, entry in enumerate(row):
            entry = entry.strip()
            if entry in ("0", ""):
                continue
            s = -1 if entry.startswith("-") else 1
            name = entry.lstrip("+-")
            if name not in basis.names:
                raise ConfigurationError(
                    f"Cayley entry '{entry}' at ({i}, {j}) is not a basis blade"
                )
            index[i, j], sign[i, j] = basis.names.index(name), s
    return index, sign


def _dual_remap(basis: Basis, op_index: np.ndarray, op_sign: np.ndarray):
    """Complement pairing and its orientation signs.

    Blades are sorted by grade, then by their sorted axis tuple, descending;
    inverting that permutation pairs each blade with the one at the mirrored
    position. The sign is negative when the complement times the blade gives
    the pseudoscalar with reversed orientation.
    """
    dim = basis.dim

    def sort_key(i):
        axes = basis.axes[i]
        if axes is None:
            return (basis.grades[i], 1, (), basis.names[i])
        return (basis.grades[i], 0, tuple(sorted(axes)), "")

    order = sorted(range(dim), key=sort_key, reverse=True)
    position = np.argsort(np.array(order))
    dual_index = np.array([order[dim - 1 - position[i]] for i in range(dim)], dtype=np.int64)

    dual_sign = np.ones(dim, dtype=np.int8)
    for i in range(dim):
        partner = dual_index[i]
        if partner == 0 or i == 0:
            continue
        if op_sign[partner, i] < 0:
            dual_sign[i] = -1
    return dual_index, dual_sign


def build_tables(signature) -> CayleyTables:
    """Build every product table for a normalised signature.

    Args:
        signature (Signature): Output of :func:`core.config.normalize_signature`.

    Returns:
        CayleyTables: Read-only tables.

    Raises:
        ConfigurationError: If the basis is malformed or not closed under
            multiplication.
    """
    with timed(logger, f"Built Cayley tables for {signature}"):
        basis = Basis.from_signature(signature)
        grades = np.array(basis.grades, dtype=np.int64)

        if signature.cayley is not None:
            gp_index, gp_sign = _parse_cayley(signature.cayley, basis)
            op_index, op_sign = gp_index.copy(), gp_sign.copy()
        elif all(a is not None and tuple(sorted(a)) == a for a in basis.axes):
            gp_index, gp_sign = _bitmask_products(basis, signature.axis_metric)
            op_index, op_sign = _bitmask_products(basis, (1,) * basis.n)
        else:
            gp_index, gp_sign = _pairwise_products(basis, signature.metric_of)
            op_index, op_sign = _pairwise_products(basis, lambda _: 1)

        grade_sum = grades[:, None] + grades[None, :]
        op_sign = np.where(grades[op_index] == grade_sum, op_sign, 0).astype(np.int8)

        grade_diff = grades[None, :] - grades[:, None]
        dot_sign = np.where(grades[gp_index] == grade_diff, gp_sign, 0).astype(np.int8)

        diagonal = np.arange(basis.dim)
        metric = np.where(gp_index[diagonal, diagonal] == 0, gp_sign[diagonal, diagonal], 0)

        dual_index, dual_sign = _dual_remap(basis, op_index, op_sign)

        tables = CayleyTables(
            signature=signature,
            basis=basis,
            gp_index=_frozen(gp_index),
            gp_sign=_frozen(gp_sign),
            op_index=_frozen(op_index),
            op_sign=_frozen(op_sign),
            dot_sign=_frozen(dot_sign),
            metric=_frozen(metric.astype(np.int8)),
            dual_index=_frozen(dual_index),
            dual_sign=_frozen(dual_sign),
        )
    return tables
