# Cayley: Clifford Algebra Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0

"""Literal translator.

Tokenizes expression source, resolves algebra literals (``2e12``), parses
it with a dialect's precedence table and rewrites every operator into a
call of the algebra's operator namespace.
"""

from .tokens import Token, TokenKind, tokenize, literal_coefficient
from .dialects import DEFAULT, MATH, DIALECTS, Dialect, OperatorSpec, get_dialect
from .parser import Parser, parse, expand
from .inline import TranslatedExpression, translate

__all__ = [
    "Token",
    "TokenKind",
    "tokenize",
    "literal_coefficient",
    "DEFAULT",
    "MATH",
    "DIALECTS",
    "Dialect",
    "OperatorSpec",
    "get_dialect",
    "Parser",
    "parse",
    "expand",
    "TranslatedExpression",
    "translate",
]
