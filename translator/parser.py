# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Precedence-climbing (Pratt) parser for literal expressions.

The parser runs over the token stream of the lark lexer in
:mod:`translator.tokens`; the operator table stays data in the dialect.

Operators come from a :class:`Dialect`; an infix operator at level ``k``
of an ``L``-level table has binding power ``(L - k) * 10``. Prefix
operators apply to the following unary expression, so they bind tighter
than every infix operator. Calls, subscripts, attributes and dialect
properties (``x.Length``) bind tightest of all.

The resulting tree renders to plain Python source in which every operator
has become a call::

    >>> expand("a+b*c")
    'Add(a, Mul(b, c))'
"""

from dataclasses import dataclass
from typing import List, Tuple

from core.errors import TranslationSyntaxError
from translator.dialects import Dialect, get_dialect
from translator.tokens import CLOSERS, OPENERS, Token, TokenKind, rewrite_literals, significant, tokenize


class Node:
    """Expression tree node."""

    def render(self) -> str:
        raise NotImplementedError


@dataclass
class Atom(Node):
    """Identifier, number or string, rendered verbatim."""

    text: str

    def render(self) -> str:
        return self.text


@dataclass
class Literal(Node):
    """Resolved algebra literal."""

    index: int
    magnitude: float

    def render(self) -> str:
        m = self.magnitude
        m = int(m) if float(m).is_integer() else m
        return f"Coeff({self.index}, {m!r})"


@dataclass
class Apply(Node):
    """Operator turned into a call of a named operation."""

    name: str
    args: Tuple[Node, ...]

    def render(self) -> str:
        return f"{self.name}({', '.join(a.render() for a in self.args)})"


@dataclass
class Keyword(Node):
    name: str
    value: Node

    def render(self) -> str:
        return f"{self.name}={self.value.render()}"


@dataclass
class Sequence(Node):
    """Bracketed, comma separated items: tuple / parenthesised group or list."""

    opener: str
    items: Tuple[Node, ...]
    trailing_comma: bool = False

    def render(self) -> str:
        inner = ", ".join(i.render() for i in self.items)
        if self.opener == "(":
            if len(self.items) == 1 and not self.trailing_comma:
                return self.items[0].render()
            if len(self.items) == 1:
                inner += ","
        return f"{self.opener}{inner}{OPENERS[self.opener]}"


@dataclass
class Call(Node):
    target: Node
    args: Tuple[Node, ...]

    def render(self) -> str:
        return f"{self.target.render()}({', '.join(a.render() for a in self.args)})"


@dataclass
class Subscript(Node):
    target: Node
    args: Tuple[Node, ...]

    def render(self) -> str:
        return f"{self.target.render()}[{', '.join(a.render() for a in self.args)}]"


@dataclass
class Attribute(Node):
    target: Node
    name: str

    def render(self) -> str:
        return f"{self.target.render()}.{self.name}"


class Parser:
    """Parses one expression from a token list.

    Args:
        tokens: Output of :func:`tokenize` (whitespace is skipped).
        dialect: Operator table.
        source: Source text, for error positions.
    """

    def __init__(self, tokens: List[Token], dialect: Dialect, source: str = ""):
        self.tokens = significant(tokens)
        if not self.tokens or self.tokens[-1].kind != TokenKind.END:
            end = self.tokens[-1].position + len(self.tokens[-1].text) if self.tokens else 0
            self.tokens.append(Token(TokenKind.END, "", end))
        self.dialect = dialect
        self.source = source
        self.pos = 0

    def error(self, message: str, token: Token) -> TranslationSyntaxError:
        return TranslationSyntaxError(message, self.source, token.position)

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != TokenKind.END:
            self.pos += 1
        return token

    def _is_operator(self, token: Token) -> bool:
        return token.kind in (TokenKind.PUNCTUATOR, TokenKind.IDENTIFIER)

    def parse(self) -> Node:
        """Parse the whole token list as a single expression."""
        node = self.expression()
        token = self.peek()
        if token.kind != TokenKind.END:
            if token.text in CLOSERS:
                raise self.error(f"Unmatched '{token.text}'", token)
            raise self.error(f"Unexpected token '{token.text}'", token)
        return node

    def expression(self, rbp: int = 0) -> Node:
        left = self.unary()
        while True:
            token = self.peek()
            if not self._is_operator(token):
                break
            spec, lbp = self.dialect.infix(token.text)
            if spec is None or lbp <= rbp:
                break
            self.advance()
            self._expect_operand(token)
            right = self.expression(lbp - 1 if spec.right_assoc else lbp)
            left = Apply(spec.name, (left, right))
        return left

    def _expect_operand(self, operator: Token) -> None:
        token = self.peek()
        if token.kind == TokenKind.END or token.text in CLOSERS or token.text == ",":
            raise self.error(f"Operator '{operator.text}' is missing an operand", operator)

    def unary(self) -> Node:
        token = self.peek()
        if self._is_operator(token):
            spec, _ = self.dialect.prefix(token.text)
            if spec is not None:
                self.advance()
                self._expect_operand(token)
                return Apply(spec.name, (self.unary(),))
        return self.postfix(self.primary())

    def primary(self) -> Node:
        token = self.advance()
        kind = token.kind
        if kind == TokenKind.ALGEBRA_LITERAL:
            if token.value is None:
                raise self.error(f"Unresolved algebra literal '{token.text}'", token)
            return Literal(*token.value)
        if kind in (TokenKind.NUMBER, TokenKind.STRING):
            return Atom(token.text)
        if kind == TokenKind.IDENTIFIER:
            return Atom(self.dialect.renames.get(token.text, token.text))
        if token.text in ("(", "["):
            items, trailing = self.arguments(token)
            return Sequence(token.text, items, trailing)
        if kind == TokenKind.END:
            raise self.error("Unexpected end of input", token)
        if token.text in CLOSERS:
            raise self.error(f"Unmatched '{token.text}'", token)
        if token.text in self.dialect.symbols:
            raise self.error(f"Operator '{token.text}' is missing an operand", token)
        raise self.error(f"Unexpected token '{token.text}'", token)

    def arguments(self, opener: Token) -> Tuple[Tuple[Node, ...], bool]:
        """Comma separated items up to the closer matching ``opener``."""
        closer = OPENERS[opener.text]
        items = []
        trailing = False
        while True:
            token = self.peek()
            if token.kind == TokenKind.END:
                raise self.error(f"Unmatched '{opener.text}'", opener)
            if token.text == closer:
                self.advance()
                return tuple(items), trailing
            if token.text in CLOSERS:
                raise self.error(f"Unmatched '{token.text}'", token)
            items.append(self.item())
            trailing = False
            token = self.peek()
            if token.text == ",":
                self.advance()
                trailing = True
            elif token.text != closer and token.kind != TokenKind.END:
                if token.text in CLOSERS:
                    raise self.error(f"Unmatched '{token.text}'", token)
                raise self.error(f"Unexpected token '{token.text}'", token)

    def item(self) -> Node:
        """Argument, allowing ``name=value`` keywords."""
        token = self.peek()
        following = self.tokens[self.pos + 1] if self.pos + 1 < len(self.tokens) else None
        if token.kind == TokenKind.IDENTIFIER and following is not None and following.text == "=":
            self.advance()
            self.advance()
            return Keyword(token.text, self.expression())
        return self.expression()

    def postfix(self, node: Node) -> Node:
        while True:
            token = self.peek()
            if token.text == "(" and token.kind == TokenKind.PUNCTUATOR:
                self.advance()
                args, _ = self.arguments(token)
                node = Call(node, args)
            elif token.text == "[" and token.kind == TokenKind.PUNCTUATOR:
                self.advance()
                args, _ = self.arguments(token)
                node = Subscript(node, args)
            elif token.text == "." and token.kind == TokenKind.PUNCTUATOR:
                self.advance()
                name = self.advance()
                if name.kind != TokenKind.IDENTIFIER:
                    raise self.error("Expected an attribute name after '.'", name)
                prop = self.dialect.properties.get(name.text)
                node = Apply(prop, (node,)) if prop else Attribute(node, name.text)
            else:
                return node


def parse(source: str, dialect=None, basis=None) -> Node:
    """Tokenize, resolve literals and parse ``source``."""
    dialect = get_dialect(dialect)
    tokens = rewrite_literals(tokenize(source), basis, source)
    return Parser(tokens, dialect, source).parse()


def expand(source: str, dialect=None, basis=None) -> str:
    """Expanded call-tree source of a literal expression.

    Args:
        source: Expression text.
        dialect: Dialect name or :class:`Dialect` (default notation if
            omitted).
        basis (Basis, optional): Basis used to resolve algebra literals.

    Raises:
        TranslationSyntaxError: On malformed input.
    """
    return parse(source, dialect, basis).render()
