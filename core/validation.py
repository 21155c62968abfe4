# Cayley: Clifford Algebra Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0

"""Lightweight input validation for coefficient storage.

All checks use ``assert`` so they are free under ``python -O``.
Set ``VALIDATE = False`` to disable even without the -O flag.
"""

import torch

VALIDATE = True


def check_multivector(x, algebra, name: str = "x") -> None:
    """Assert *x* looks like coefficient storage for *algebra*.

    Numeric storage needs ``x.ndim >= 1`` and ``x.shape[-1] == algebra.dim``;
    symbolic storage is a list of ``algebra.dim`` coefficients.
    """
    if not VALIDATE:
        return
    if isinstance(x, list):
        assert len(x) == algebra.dim, (
            f"{name}: expected {algebra.dim} symbolic coefficients, got {len(x)}"
        )
        return
    assert isinstance(x, torch.Tensor), (
        f"{name}: expected a tensor or list, got {type(x).__name__}"
    )
    assert x.ndim >= 1, (
        f"{name}: expected ndim >= 1, got shape {tuple(x.shape)}"
    )
    assert x.shape[-1] == algebra.dim, (
        f"{name}: last dim should be {algebra.dim} (algebra dim), "
        f"got {x.shape[-1]} (shape {tuple(x.shape)})"
    )
