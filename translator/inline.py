# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Translation of strings, lambdas and one-line functions.

A callable's source is recovered with :mod:`inspect`, its expression body
is cut out of the surrounding statement, translated, and compiled. The
resulting :class:`TranslatedExpression` evaluates the expanded source with
the operator namespace of the algebra first, then call-time arguments,
then the callable's closure and globals (or the bindings given with a
string).
"""

import builtins
import functools
import inspect
import textwrap
from collections import ChainMap
from typing import Tuple

from core.errors import TranslationSyntaxError
from core.operators import Operators
from log import get_logger
from translator.dialects import DIALECTS, get_dialect
from translator.parser import expand
from translator.tokens import CLOSERS, OPENERS, TokenKind, significant, tokenize

logger = get_logger(__name__)


def _cut_expression(source: str, tokens, start: int) -> Tuple[str, int]:
    """Source of the expression beginning at token ``start`` and its end.

    The expression ends at a depth-0 comma, semicolon or line break, at a
    closer without a matching opener, or at the end of input.
    """
    depth = 0
    begin = tokens[start].position
    end = len(source)
    for token in tokens[start:]:
        text = token.text
        if token.kind == TokenKind.END:
            end = token.position
            break
        if token.kind == TokenKind.WHITESPACE:
            if depth == 0 and "\n" in text:
                end = token.position
                break
            continue
        if text in OPENERS:
            depth += 1
        elif text in CLOSERS:
            if depth == 0:
                end = token.position
                break
            depth -= 1
        elif depth == 0 and text in (",", ";"):
            end = token.position
            break
    return source[begin:end].strip(), end


def _fingerprint(code) -> tuple:
    """Constants and referenced names of a code object.

    Free variables of a closure are globals when the same text is compiled
    on its own, so both count as names.
    """
    consts = tuple(c for c in code.co_consts if not inspect.iscode(c))
    return consts, frozenset(code.co_names) | frozenset(code.co_freevars)


def _compiles_to(params: Tuple[str, ...], body: str, code) -> bool:
    try:
        module = compile(f"lambda {', '.join(params)}: ({body})", "<cayley:lambda>", "eval")
    except SyntaxError:
        return False
    candidate = next(c for c in module.co_consts if inspect.iscode(c))
    return _fingerprint(candidate) == _fingerprint(code)


def _lambda_body(source: str, params: Tuple[str, ...], code=None) -> str:
    """Body of the lambda in ``source`` taking ``params``.

    When several lambdas of the line take the same parameters, the one
    whose compiled form matches ``code`` is chosen.
    """
    bodies = []
    for body in _lambda_candidates(source, params):
        if body not in bodies:
            bodies.append(body)
    if len(bodies) > 1 and code is not None:
        bodies = [b for b in bodies if _compiles_to(params, b, code)]
    if len(bodies) == 1:
        return bodies[0]
    if not bodies:
        raise TranslationSyntaxError("Could not locate the lambda in its source", source, 0)
    raise TranslationSyntaxError("Ambiguous lambda: several lambdas on the line match", source, 0)


def _lambda_candidates(source: str, params: Tuple[str, ...]):
    tokens = tokenize(source)
    for i, token in enumerate(tokens):
        if token.kind != TokenKind.IDENTIFIER or token.text != "lambda":
            continue
        names = []
        expect_name = True
        j = i + 1
        while j < len(tokens) and tokens[j].text != ":" and tokens[j].kind != TokenKind.END:
            t = tokens[j]
            if t.kind == TokenKind.IDENTIFIER and expect_name:
                names.append(t.text)
                expect_name = False
            elif t.text == ",":
                expect_name = True
            j += 1
        if tuple(names) == params and j < len(tokens) and tokens[j].text == ":":
            yield _cut_expression(source, tokens, j + 1)[0]


def _function_body(source: str) -> str:
    tokens = tokenize(source)
    code = significant(tokens)
    # Colon closing the signature: the first depth-0 ':' after 'def'
    start = next((k for k, t in enumerate(code) if t.text == "def"), None)
    if start is None:
        raise TranslationSyntaxError("Expected a lambda or function definition", source, 0)
    depth, colon = 0, None
    for k in range(start, len(code)):
        text = code[k].text
        if text in OPENERS:
            depth += 1
        elif text in CLOSERS:
            depth -= 1
        elif text == ":" and depth == 0:
            colon = k
            break
    body = code[colon + 1:] if colon is not None else []
    # An optional docstring may precede the return
    if body and body[0].kind == TokenKind.STRING:
        body = body[1:]
    if not body or body[0].text != "return":
        position = body[0].position if body else len(source)
        raise TranslationSyntaxError("Only single-return functions can be translated", source, position)
    expression, end = _cut_expression(source, tokens, tokens.index(body[0]) + 1)
    rest = [t for t in body if t.position >= end and t.kind != TokenKind.END]
    if rest:
        raise TranslationSyntaxError("Only single-return functions can be translated", source, rest[0].position)
    return expression


def capture(func) -> Tuple[Tuple[str, ...], str, ChainMap]:
    """Parameters, expression body and scope of a lambda or function.

    Raises:
        TranslationSyntaxError: If the source cannot be recovered or is not a
            single expression.
    """
    try:
        source = textwrap.dedent(inspect.getsource(func))
    except (OSError, TypeError) as e:
        raise TranslationSyntaxError(f"Source of {func!r} is not available: {e}") from e
    params = tuple(inspect.signature(func).parameters)
    if func.__name__ == "<lambda>":
        body = _lambda_body(source, params, func.__code__)
    else:
        body = _function_body(source)
    closure = inspect.getclosurevars(func)
    scope = ChainMap(dict(closure.nonlocals), func.__globals__)
    return params, body, scope


@functools.lru_cache(maxsize=256)
def _expand_cached(source: str, dialect_name: str, basis) -> str:
    return expand(source, DIALECTS[dialect_name], basis)


class TranslatedExpression:
    """Callable produced by a translation.

    Attributes:
        algebra (CliffordAlgebra): Algebra the literals belong to.
        source (str): Original expression text.
        expanded (str): Rewritten source with every operator as a call.
        params (tuple): Positional parameter names.
        scope (Mapping): Names visible to the expression.
    """

    def __init__(self, algebra, source: str, expanded: str, params=(), scope=None):
        self.algebra = algebra
        self.source = source
        self.expanded = expanded
        self.params = tuple(params)
        self.scope = scope if scope is not None else {}
        self._operators = Operators(algebra).namespace()
        try:
            self._code = compile(expanded, "<cayley:inline>", "eval")
        except SyntaxError as e:
            raise TranslationSyntaxError(f"Invalid expression: {e.msg}", source, 0) from e

    def __call__(self, *args, **kwargs):
        if len(args) > len(self.params):
            raise TypeError(
                f"Expression takes {len(self.params)} positional arguments but {len(args)} were given"
            )
        local = dict(zip(self.params, args))
        local.update(kwargs)
        names = ChainMap(self._operators, local, self.scope)
        return eval(self._code, {"__builtins__": builtins}, names)

    def __repr__(self) -> str:
        return f"TranslatedExpression({self.expanded!r})"


def translate(algebra, source, dialect=None, **bindings) -> TranslatedExpression:
    """Translate literal source for ``algebra``.

    Args:
        algebra (CliffordAlgebra): Algebra resolving literals and operators.
        source: Expression string, lambda or single-``return`` function.
        dialect: Dialect name or object; the default notation if omitted.
        **bindings: Names visible to the expression (take precedence over
            captured globals).

    Returns:
        TranslatedExpression: Ready-to-call expression.

    Raises:
        TranslationSyntaxError: On malformed source.
    """
    if isinstance(source, str):
        params, body, scope = (), source.strip(), ChainMap({})
    elif callable(source):
        params, body, scope = capture(source)
    else:
        raise TypeError(f"Cannot translate {type(source).__name__}")

    dialect = get_dialect(dialect)
    basis = algebra.tables.basis
    if DIALECTS.get(dialect.name) is dialect:
        expanded = _expand_cached(body, dialect.name, basis)
    else:
        expanded = expand(body, dialect, basis)
    logger.debug(f"Translated {body!r} -> {expanded}")
    return TranslatedExpression(algebra, body, expanded, params, scope.new_child(bindings))
