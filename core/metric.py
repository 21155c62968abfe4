# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Metric definitions for Clifford algebras.

Provides norms and the scalar product that respect the metric signature,
plus the coordinate (Euclidean) norm used for normalising null elements.
All functions take numeric storage ``[..., dim]``.
"""

import torch

from core.errors import UnsupportedOperationError


def _require_numeric(algebra, what: str) -> None:
    if algebra.symbolic:
        raise UnsupportedOperationError(f"{what} needs numeric coefficients")


def inner_product(algebra, A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """Compute the scalar product via projection onto grade 0.

    Computes <A B>_0.

    Args:
        algebra (CliffordAlgebra): The algebra instance.
        A (torch.Tensor): First multivector [..., Dim].
        B (torch.Tensor): Second multivector [..., Dim].

    Returns:
        torch.Tensor: Scalar part [..., 1].
    """
    _require_numeric(algebra, "inner_product")
    return algebra.mul(A, B)[..., 0:1]


def induced_norm(algebra, A: torch.Tensor) -> torch.Tensor:
    """Compute the induced norm respecting the metric signature.

    Computes ||A|| = sqrt(|<A bar(A)>_0|) with the Clifford conjugate, which
    is the ``Length`` of the literal dialect.

    Returns:
        torch.Tensor: Norm [..., 1].
    """
    sq_norm = inner_product(algebra, A, algebra.conjugate(A))
    # Mixed signatures give negative squares
    return torch.sqrt(torch.abs(sq_norm))


def euclidean_norm(algebra, A: torch.Tensor) -> torch.Tensor:
    """Coordinate norm sqrt(sum_i a_i^2), blind to the metric.

    Returns:
        torch.Tensor: Norm [..., 1].
    """
    _require_numeric(algebra, "euclidean_norm")
    A = algebra.storage(A)
    return A.pow(2).sum(dim=-1, keepdim=True).sqrt()


def normalize(algebra, A: torch.Tensor) -> torch.Tensor:
    """Scale ``A`` to unit induced norm; elements of norm 0 pass through."""
    A = algebra.storage(A)
    norm = induced_norm(algebra, A)
    safe = torch.where(norm == 0, torch.ones_like(norm), norm)
    return A / safe
