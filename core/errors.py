# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Error taxonomy.

Construction and translation fail eagerly with one of these; no partial
table, operation set or expression is ever returned.
"""


class CayleyError(Exception):
    """Base class for every error raised by the algebra engine."""


class ConfigurationError(CayleyError, ValueError):
    """Invalid or unsupported signature / basis / metric combination."""


class SingularElementError(CayleyError, ArithmeticError):
    """Inverse or division requested on an element with a zero normaliser."""


class UnsupportedOperationError(CayleyError, NotImplementedError):
    """Operation not available for the algebra's coefficient kind or size."""


class TranslationSyntaxError(CayleyError, SyntaxError):
    """Malformed literal source.

    Carries the 0-based character ``position`` of the offending token in
    addition to the usual ``lineno`` / ``offset`` / ``text`` of
    :class:`SyntaxError`.
    """

    def __init__(self, message: str, source: str = "", position: int = 0):
        position = max(0, min(position, len(source)))
        line_start = source.rfind("\n", 0, position) + 1
        line_end = source.find("\n", position)
        if line_end < 0:
            line_end = len(source)
        lineno = source.count("\n", 0, position) + 1
        offset = position - line_start + 1
        super().__init__(f"{message} (at position {position})",
                         ("<inline>", lineno, offset, source[line_start:line_end]))
        self.position = position
        self.source = source
