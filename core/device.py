# Cayley: Clifford Algebra Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0

"""Device and dtype resolution for numeric coefficient storage."""

from __future__ import annotations

import torch

from core.errors import ConfigurationError

_DTYPES = {
    "float16": torch.float16,
    "bfloat16": torch.bfloat16,
    "float32": torch.float32,
    "float64": torch.float64,
}


def resolve_device(device: str = "auto") -> str:
    """Resolve ``'auto'`` to the best available accelerator.

    Priority: cuda > mps > cpu.
    """
    if device != "auto":
        return device
    if torch.cuda.is_available():
        return "cuda"
    if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return "mps"
    return "cpu"


def resolve_dtype(name: str) -> torch.dtype:
    """Map a config dtype name (``float32`` ...) to a :class:`torch.dtype`."""
    try:
        return _DTYPES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown dtype '{name}'. Available: {sorted(_DTYPES)}"
        ) from None
