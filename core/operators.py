# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

"""Operator namespace targeted by translated expressions.

Translation rewrites ``a + b*c`` into ``Add(a, Mul(b, c))``; this module
provides those names for one algebra. The operators are deliberately
permissive:

- zero-argument callables are evaluated first;
- lists are mapped elementwise (``Mul`` of two flat lists is their dot
  product, of two nested lists a matrix product);
- ``Add`` of strings concatenates;
- plain numbers use Python arithmetic;
- anything else is lifted into the algebra and the generated operation is
  called.
"""

import math

import torch

from core.coefficients import Sym
from core.multivector import Multivector

OPERATOR_NAMES = (
    "Add", "Sub", "Mul", "Dot", "Wedge", "Vee", "Div", "LDiv", "Pow", "sw",
    "Dual", "Involute", "Reverse", "Conjugate", "Normalize", "Length",
    "lt", "gt", "lte", "gte", "exp", "Coeff", "Element", "Scalar",
    "Vector", "Bivector", "Trivector",
)


def _resolve(x):
    if callable(x) and not isinstance(x, (Multivector, type)):
        return x()
    return x


def _is_element(x) -> bool:
    return isinstance(x, (Multivector, Sym, torch.Tensor))


class Operators:
    """Dispatching operators bound to one algebra.

    Attributes:
        algebra (CliffordAlgebra): Target algebra.
    """

    def __init__(self, algebra):
        self.algebra = algebra

    def namespace(self) -> dict:
        """Name -> callable mapping used when evaluating translations."""
        names = {name: getattr(self, name) for name in OPERATOR_NAMES}
        names["math"] = math
        return names

    def _el(self, x) -> Multivector:
        if isinstance(x, Multivector) and x.algebra is self.algebra:
            return x
        return self.algebra.wrap(x)

    def _wrap(self, data) -> Multivector:
        return Multivector(self.algebra, data)

    # Factories

    def Coeff(self, *pairs):
        return self._wrap(self.algebra.coeff(*pairs))

    def Element(self, *coefficients):
        return self._wrap(self.algebra.element(*coefficients))

    def Scalar(self, value):
        return self._wrap(self.algebra.scalar(value))

    def Vector(self, *coefficients):
        return self._wrap(self.algebra.vector(*coefficients))

    def Bivector(self, *coefficients):
        return self._wrap(self.algebra.bivector(*coefficients))

    def Trivector(self, *coefficients):
        return self._wrap(self.algebra.trivector(*coefficients))

    # Binary operators

    def Add(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if isinstance(a, list) != isinstance(b, list):
            return [self.Add(x, b) for x in a] if isinstance(a, list) else [self.Add(a, x) for x in b]
        if isinstance(a, list) and len(a) == len(b):
            return [self.Add(x, y) for x, y in zip(a, b)]
        if isinstance(a, str) or isinstance(b, str):
            return str(a) + str(b)
        if not (_is_element(a) or _is_element(b)):
            return a + b
        return self._wrap(self.algebra.add(self._el(a), self._el(b)))

    def Sub(self, a, *rest):
        """Subtraction; with one argument, negation."""
        a = _resolve(a)
        if not rest:
            return self.Mul(a, -1)
        b = _resolve(rest[0])
        if isinstance(a, list) != isinstance(b, list):
            return [self.Sub(x, b) for x in a] if isinstance(a, list) else [self.Sub(a, x) for x in b]
        if isinstance(a, list) and len(a) == len(b):
            return [self.Sub(x, y) for x, y in zip(a, b)]
        if not (_is_element(a) or _is_element(b)):
            return a - b
        return self._wrap(self.algebra.sub(self._el(a), self._el(b)))

    def _zero(self):
        return self.Scalar(0) if self.algebra.n else 0

    def Mul(self, a, b):
        """Geometric product; dot / matrix product on lists."""
        a, b = _resolve(a), _resolve(b)
        if isinstance(a, list) and isinstance(b, list):
            a_nested = bool(a) and isinstance(a[0], list)
            b_nested = bool(b) and isinstance(b[0], list)
            if not a_nested and not b_nested:
                total = self._zero()
                for x, y in zip(a, b):
                    total = self.Add(total, self.Mul(x, y))
                return total
            if not b_nested:
                return [self.Mul(row, b) for row in a]
            product = []
            for row in a:
                out = []
                for j in range(len(b[0])):
                    total = self._zero()
                    for k, x in enumerate(row):
                        total = self.Add(total, self.Mul(x, b[k][j]))
                    out.append(total)
                product.append(out)
            if len(product) == 1 and len(product[0]) == 1:
                return product[0][0]
            return product
        if isinstance(a, list) != isinstance(b, list):
            return [self.Mul(x, b) for x in a] if isinstance(a, list) else [self.Mul(a, x) for x in b]
        if not (_is_element(a) or _is_element(b)):
            return a * b
        return self._wrap(self.algebra.mul(self._el(a), self._el(b)))

    def Dot(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if not (_is_element(a) or _is_element(b)):
            return a * b
        return self._wrap(self.algebra.dot(self._el(a), self._el(b)))

    def Wedge(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if not (_is_element(a) or _is_element(b)):
            return a * b
        return self._wrap(self.algebra.wedge(self._el(a), self._el(b)))

    def Vee(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if not (_is_element(a) or _is_element(b)):
            return a * b
        return self._wrap(self.algebra.vee(self._el(a), self._el(b)))

    def Div(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if not (_is_element(a) or _is_element(b)):
            return a / b
        return self._wrap(self.algebra.div(self._el(a), self._el(b)))

    def LDiv(self, a, b):
        """Left division b^-1 a."""
        a, b = _resolve(a), _resolve(b)
        if not (_is_element(a) or _is_element(b)):
            return a / b
        return self._wrap(self.algebra.ldiv(self._el(a), self._el(b)))

    def Pow(self, a, b):
        a, b = _resolve(a), _resolve(b)
        if isinstance(b, (int, float)) and b == 2:
            return self.Mul(a, a)
        if not (_is_element(a) or _is_element(b)):
            return a ** b
        if a is math.e or (isinstance(a, float) and a == math.e):
            return self.exp(b)
        if isinstance(b, (int, float)) and b == -1:
            return self._wrap(self.algebra.inverse(self._el(a)))
        return self._wrap(self.algebra.pow(self._el(a), b))

    def sw(self, a, b):
        """Sandwich product a b bar(a)."""
        a, b = _resolve(a), _resolve(b)
        if isinstance(b, list):
            return [self.sw(a, x) for x in b]
        return self._wrap(self.algebra.sandwich(self._el(a), self._el(b)))

    # Unary operators

    def Dual(self, a):
        return self._wrap(self.algebra.dual(self._el(_resolve(a))))

    def Involute(self, a):
        return self._wrap(self.algebra.involute(self._el(_resolve(a))))

    def Reverse(self, a):
        return self._wrap(self.algebra.reverse(self._el(_resolve(a))))

    def Conjugate(self, a):
        """Clifford conjugate; conjugate transpose of a nested list."""
        a = _resolve(a)
        if isinstance(a, list):
            return [[self.Conjugate(row[c]) for row in a] for c in range(len(a[0]))]
        return self._wrap(self.algebra.conjugate(self._el(a)))

    def Normalize(self, a):
        return self._wrap(self.algebra.normalized(self._el(_resolve(a))))

    def Length(self, a):
        return self._el(_resolve(a)).length()

    def exp(self, a):
        a = _resolve(a)
        if _is_element(a):
            return self._wrap(self.algebra.exp(self._el(a)))
        return math.exp(a)

    # Comparisons always compare lengths

    def _measure(self, x):
        x = _resolve(x)
        return x.length() if isinstance(x, Multivector) else x

    def lt(self, a, b):
        return self._measure(a) < self._measure(b)

    def gt(self, a, b):
        return self._measure(a) > self._measure(b)

    def lte(self, a, b):
        return self._measure(a) <= self._measure(b)

    def gte(self, a, b):
        return self._measure(a) >= self._measure(b)
