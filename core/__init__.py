# Cayley: Clifford Algebra Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0

"""Core algebra generator.

Provides basis enumeration, product tables, compiled operations, the
Clifford algebra itself, the multivector wrapper and metric functions.
"""

from .errors import (
    CayleyError,
    ConfigurationError,
    SingularElementError,
    UnsupportedOperationError,
    TranslationSyntaxError,
)
from .config import AlgebraConfig, Signature, PRESETS, load_config, normalize_signature, preset
from .basis import Basis, enumerate_basis, blade_name, parse_blade_name
from .blade import BladeResolver, simplify
from .tables import CayleyTables, build_tables
from .coefficients import CoefficientKind, Sym
from .synth import Access, OperationSet
from .algebra import CliffordAlgebra, Algebra
from .multivector import Multivector, NamedComponents
from .device import resolve_device, resolve_dtype
from .validation import check_multivector

from .metric import (
    inner_product,
    induced_norm,
    euclidean_norm,
    normalize,
)

__all__ = [
    # errors
    "CayleyError",
    "ConfigurationError",
    "SingularElementError",
    "UnsupportedOperationError",
    "TranslationSyntaxError",
    # configuration
    "AlgebraConfig",
    "Signature",
    "PRESETS",
    "load_config",
    "normalize_signature",
    "preset",
    # basis / tables
    "Basis",
    "enumerate_basis",
    "blade_name",
    "parse_blade_name",
    "BladeResolver",
    "simplify",
    "CayleyTables",
    "build_tables",
    # operations
    "CoefficientKind",
    "Sym",
    "Access",
    "OperationSet",
    # algebra
    "CliffordAlgebra",
    "Algebra",
    "Multivector",
    "NamedComponents",
    # device / validation
    "resolve_device",
    "resolve_dtype",
    "check_multivector",
    # metric
    "inner_product",
    "induced_norm",
    "euclidean_norm",
    "normalize",
]
