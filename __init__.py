"""Cayley: Clifford algebra generator and literal translator."""

__version__ = "0.1.0"

from core.algebra import CliffordAlgebra, Algebra
from core.multivector import Multivector
from translator.inline import translate

__all__ = [
    "__version__",
    "CliffordAlgebra",
    "Algebra",
    "Multivector",
    "translate",
]
