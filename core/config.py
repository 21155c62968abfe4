# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Algebra configuration.

User options arrive as positional ``(p, q, r)``, keyword arguments, a plain
mapping or an omegaconf ``DictConfig``. They are validated against the
:class:`AlgebraConfig` schema and normalised into a frozen
:class:`Signature`, which doubles as the table cache key.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

from core.basis import AXIS_LABELS, MAX_DIMENSIONS
from core.errors import ConfigurationError


@dataclass
class AlgebraConfig:
    """Schema of the recognised algebra options."""
    # Signature: counts, or an explicit per-axis metric
    p: Optional[int] = None
    q: Optional[int] = None
    r: Optional[int] = None
    metric: Optional[List[int]] = None

    # Explicit basis names / product table / grades
    basis: Optional[List[str]] = None
    cayley: Optional[Any] = None
    grades: Optional[List[int]] = None

    # Generated operations
    coefficients: str = "numeric"
    mix: bool = False

    # Numeric storage
    dtype: str = "float32"
    device: str = "cpu"


# Option spellings accepted for compatibility with the reference API
_ALIASES = {
    "Cayley": "cayley",
    "coefficientKind": "coefficients",
    "coefficient_kind": "coefficients",
}

PRESETS = {
    "complex": {"q": 1},
    "dual": {"r": 1},
    "hyperbolic": {"p": 1},
    "vga2d": {"p": 2},
    "vga3d": {"p": 3},
    "pga2d": {"p": 2, "r": 1},
    "pga3d": {"p": 3, "r": 1},
    "cga2d": {"p": 3, "q": 1},
    "cga3d": {"p": 4, "q": 1},
    "sta": {"p": 1, "q": 3},
    "quaternion": {"q": 2},
}


def preset(name: str) -> DictConfig:
    """Return a named signature preset as an :class:`AlgebraConfig`."""
    try:
        overrides = PRESETS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown preset: {name}. Available: {list(PRESETS.keys())}"
        ) from None
    return load_config(overrides)


def _as_dict(options) -> dict:
    if options is None:
        return {}
    if isinstance(options, DictConfig):
        options = OmegaConf.to_container(options, resolve=True)
    if not isinstance(options, dict):
        raise ConfigurationError(f"Algebra options must be a mapping, got {type(options).__name__}")
    result = {}
    for key, value in options.items():
        if key == "symbolic":
            if value:
                result["coefficients"] = "symbolic"
            continue
        result[_ALIASES.get(key, key)] = value
    return result


def load_config(options=None, **overrides) -> DictConfig:
    """Validate options against :class:`AlgebraConfig`.

    Args:
        options: Mapping or ``DictConfig`` of options (may be ``None``).
        **overrides: Further options; ``None`` values are ignored.

    Returns:
        A typed ``DictConfig``.

    Raises:
        ConfigurationError: On unknown keys or mistyped values.
    """
    merged = _as_dict(options)
    merged.update(_as_dict({k: v for k, v in overrides.items() if v is not None}))
    try:
        return OmegaConf.merge(OmegaConf.structured(AlgebraConfig), merged)
    except OmegaConfBaseException as e:
        raise ConfigurationError(f"Invalid algebra configuration: {e}") from e


@dataclass(frozen=True)
class Signature:
    """Fully normalised description of an algebra's structure.

    Attributes:
        axis_metric (tuple): Square (+1, -1, 0) of every generator, in axis order.
        low (int): Label of the first generator.
        basis (tuple, optional): Explicit basis names.
        cayley (tuple, optional): Explicit product table (strings).
        grades (tuple, optional): Explicit grade per basis blade.
    """

    axis_metric: Tuple[int, ...]
    low: int = 1
    basis: Optional[Tuple[str, ...]] = None
    cayley: Optional[Tuple[Tuple[str, ...], ...]] = None
    grades: Optional[Tuple[int, ...]] = None

    @property
    def n(self) -> int:
        return len(self.axis_metric)

    @property
    def p(self) -> int:
        return self.axis_metric.count(1)

    @property
    def q(self) -> int:
        return self.axis_metric.count(-1)

    @property
    def r(self) -> int:
        return self.axis_metric.count(0)

    def metric_of(self, label: int) -> int:
        """Square of the generator with the given axis label."""
        return self.axis_metric[label - self.low]

    @property
    def cache_key(self) -> tuple:
        return (self.axis_metric, self.low, self.basis, self.cayley, self.grades)

    def __str__(self) -> str:
        return f"Cl({self.p},{self.q},{self.r})"


def _lowest_label(names) -> Optional[int]:
    labels = [AXIS_LABELS.index(c) for name in names if name.startswith("e")
              for c in name[1:] if c in AXIS_LABELS]
    return min(labels) if labels else None


def normalize_signature(cfg: DictConfig) -> Signature:
    """Resolve a validated config into a :class:`Signature`.

    Raises:
        ConfigurationError: Negative counts, metric values outside
            {-1, 0, 1}, conflicting p/q/r/metric/basis/Cayley combinations
            or more than :data:`MAX_DIMENSIONS` generators.
    """
    p, q, r = cfg.p, cfg.q, cfg.r
    for label, value in (("p", p), ("q", q), ("r", r)):
        if value is not None and value < 0:
            raise ConfigurationError(f"{label} must be non-negative, got {value}")
    counts_given = any(v is not None for v in (p, q, r))

    if cfg.metric is not None:
        metric = tuple(cfg.metric)
        if any(m not in (-1, 0, 1) for m in metric):
            raise ConfigurationError(f"Metric entries must be +1, -1 or 0, got {list(metric)}")
        implied = {"p": metric.count(1), "q": metric.count(-1), "r": metric.count(0)}
        for label, value in (("p", p), ("q", q), ("r", r)):
            if value is not None and value != implied[label]:
                raise ConfigurationError(
                    f"{label}={value} conflicts with metric {list(metric)} ({label}={implied[label]})"
                )
        axis_metric = metric
    else:
        # Null generators first so they get the lowest labels (e0 in PGA)
        axis_metric = (0,) * (r or 0) + (1,) * (p or 0) + (-1,) * (q or 0)
    explicit_signature = counts_given or cfg.metric is not None

    basis = tuple(cfg.basis) if cfg.basis is not None else None
    cayley = None
    if cfg.cayley is not None:
        try:
            cayley = tuple(tuple(str(entry) for entry in row) for row in cfg.cayley)
        except TypeError:
            raise ConfigurationError("Cayley table must be a list of rows") from None

    size = len(basis) if basis is not None else (len(cayley) if cayley is not None else None)
    if size is not None:
        if size == 0 or size & (size - 1):
            raise ConfigurationError(f"Basis size must be a power of two, got {size}")
        tot = size.bit_length() - 1
        if not explicit_signature:
            axis_metric = (1,) * tot
        elif len(axis_metric) != tot:
            raise ConfigurationError(
                f"Signature has {len(axis_metric)} generators but basis size {size} implies {tot}"
            )
    if cayley is not None:
        expected = size
        if len(cayley) != expected or any(len(row) != expected for row in cayley):
            raise ConfigurationError(f"Cayley table must be {expected}x{expected}")

    if len(axis_metric) > MAX_DIMENSIONS:
        raise ConfigurationError(
            f"p + q + r must be <= {MAX_DIMENSIONS}, got {len(axis_metric)}"
        )

    low = 0 if 0 in axis_metric else 1
    if basis is not None:
        lowest = _lowest_label(basis)
        if lowest is not None:
            low = min(lowest, 1)

    grades = tuple(cfg.grades) if cfg.grades is not None else None
    if grades is not None and len(grades) != 2 ** len(axis_metric):
        raise ConfigurationError(f"Expected {2 ** len(axis_metric)} grades, got {len(grades)}")

    return Signature(axis_metric=tuple(axis_metric), low=low, basis=basis,
                     cayley=cayley, grades=grades)
