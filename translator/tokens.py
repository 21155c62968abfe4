# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Tokenizer for literal source.

The scanner is a lark basic lexer built from :data:`_TERMINALS`. Terminal
priorities follow the table order, so at every position the first kind
that matches wins and the whole input is covered by tokens with their
positions. Algebra literals are tried before plain numbers::

    2e12   -> ALGEBRA_LITERAL  (2 * e12)
    3i     -> ALGEBRA_LITERAL  (3 * e1)
    e_2    -> ALGEBRA_LITERAL  (1 * e2)
    1e-5   -> NUMBER           (scientific notation needs a sign or 'E')
"""

import functools
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from core.basis import parse_blade_name
from core.blade import BladeResolver, simplify
from core.errors import ConfigurationError, TranslationSyntaxError


class TokenKind(Enum):
    """Token categories, in match priority."""

    WHITESPACE = "whitespace"
    STRING = "string"
    ALGEBRA_LITERAL = "algebra_literal"
    NUMBER = "number"
    PUNCTUATOR = "punctuator"
    IDENTIFIER = "identifier"
    END = "end"


class Token(NamedTuple):
    kind: TokenKind
    text: str
    position: int
    # (basis index, magnitude) once an algebra literal is resolved
    value: Optional[Tuple[int, float]] = None


_PUNCTUATORS = sorted([
    "...", ">>>", "**=", "//=", "<<=", ">>=",
    "==", "!=", "<=", ">=", "**", "//", "<<", ">>", "^^", "->", ":=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "@=",
    "{", "}", "(", ")", "[", "]", ";", ".", ",", "<", ">", "+", "-", "*",
    "%", "|", "&", "^", "!", "~", "?", ":", "=", "/", "@",
], key=len, reverse=True)

_STRING = "|".join([
    r'"""[\s\S]*?"""',
    r"'''[\s\S]*?'''",
    r'"(?!"")(?:[^"\\\n]|\\.)*"',
    r"'(?!'')(?:[^'\\\n]|\\.)*'",
])

# Terminal name -> lark pattern, highest priority first. OPEN_STRING and
# OPEN_COMMENT only match what the complete forms above them rejected.
_TERMINALS = (
    ("WHITESPACE", r"/\s+|#[^\n]*|\/\*[\s\S]*?\*\//"),
    ("STRING", f"/{_STRING}/"),
    ("OPEN_STRING", r'/"""|' + r"'''|" + r'"|' + r"'/"),
    ("ALGEBRA_LITERAL",
     r"/(?:\d+\.?\d*|\.\d+)(?:(?:e_?|i)\d+|(?:e_?|i)(?![+\-]?\d))(?![A-Za-z0-9_])"
     r"|e_\d+(?![A-Za-z0-9_])/"),
    ("NUMBER", r"/0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+\-]?\d+)?(?![A-Za-z0-9_])/"),
    ("OPEN_COMMENT", r"/\/\*/"),
    ("PUNCTUATOR", " | ".join(f'"{p}"' for p in _PUNCTUATORS)),
    ("IDENTIFIER", r"/[^\W\d]\w*/"),
)

_ERRORS = {
    "OPEN_STRING": "Unterminated string literal",
    "OPEN_COMMENT": "Unterminated comment",
}


def _grammar() -> str:
    lines = ["start: (" + " | ".join(n for n, _ in _TERMINALS if n != "WHITESPACE") + ")*"]
    for rank, (name, pattern) in enumerate(_TERMINALS):
        lines.append(f"{name}.{len(_TERMINALS) - rank}: {pattern}")
    lines.append("%ignore WHITESPACE")
    return "\n".join(lines) + "\n"


@functools.lru_cache(maxsize=None)
def _lexer() -> Lark:
    return Lark(_grammar(), parser="lalr", lexer="basic")


_LITERAL_PARTS = Lark(
    r"""
    start: MAGNITUDE? ("e" "_"? | "i") BLADE?
    MAGNITUDE: /\d+\.?\d*|\.\d+/
    BLADE: /\d+/
    """,
    parser="lalr",
)

CLOSERS = {")": "(", "]": "[", "}": "{"}
OPENERS = {v: k for k, v in CLOSERS.items()}


def tokenize(source: str) -> List[Token]:
    """Split ``source`` into tokens, ending with an END token.

    Whitespace and comments are kept as WHITESPACE tokens so positions
    cover the input.

    Raises:
        TranslationSyntaxError: Unterminated strings or comments and
            characters no token kind accepts.
    """
    tokens = []
    try:
        for tok in _lexer().lex(source, dont_ignore=True):
            if tok.type in _ERRORS:
                raise TranslationSyntaxError(_ERRORS[tok.type], source, tok.start_pos)
            tokens.append(Token(TokenKind[tok.type], str(tok), tok.start_pos))
    except UnexpectedCharacters as e:
        ch = source[e.pos_in_stream]
        raise TranslationSyntaxError(f"Unexpected character {ch!r}", source, e.pos_in_stream) from None
    tokens.append(Token(TokenKind.END, "", len(source)))
    return tokens


def literal_coefficient(text: str, basis) -> Tuple[int, float]:
    """Resolve an algebra literal to ``(basis index, magnitude)``.

    ``'2e12'`` is twice ``e12``; without blade digits (``'3i'``) the literal
    refers to basis index 1. A blade written out of order (``'1e21'``)
    resolves to its canonical member with the permutation sign folded into
    the magnitude.

    Raises:
        ConfigurationError: If the blade is not part of ``basis``.
    """
    parts = {tok.type: str(tok) for tok in _LITERAL_PARTS.parse(text).children}
    magnitude = float(parts["MAGNITUDE"]) if "MAGNITUDE" in parts else 1.0
    digits = parts.get("BLADE")
    if not digits:
        if basis.dim < 2:
            raise ConfigurationError(f"Literal '{text}' needs at least one basis vector")
        return 1, magnitude
    name = "e" + digits
    if name in basis.index:
        return basis.index[name], magnitude
    axes = parse_blade_name(name)
    sign, canonical = simplify(axes, lambda _: 1)
    sign, index = BladeResolver(basis, lambda _: 1).resolve(sign, canonical)
    return index, sign * magnitude


def rewrite_literals(tokens: List[Token], basis, source: str = "") -> List[Token]:
    """Attach the resolved ``(index, magnitude)`` to every algebra literal.

    Raises:
        TranslationSyntaxError: For literals naming a blade the basis lacks.
    """
    out = []
    for token in tokens:
        if token.kind == TokenKind.ALGEBRA_LITERAL:
            if basis is None:
                raise TranslationSyntaxError(
                    f"Algebra literal '{token.text}' needs an algebra", source, token.position
                )
            try:
                token = token._replace(value=literal_coefficient(token.text, basis))
            except ConfigurationError as e:
                raise TranslationSyntaxError(str(e), source, token.position) from e
        out.append(token)
    return out


def significant(tokens: List[Token]) -> List[Token]:
    """Tokens without whitespace and comments."""
    return [t for t in tokens if t.kind != TokenKind.WHITESPACE]
