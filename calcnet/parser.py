"""Recursive-descent evaluator for arithmetic expressions.

Grammar::

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := '(' expression ')' | number
    number     := [0-9.]+

Only the space character is treated as whitespace.
"""

from __future__ import annotations

import math
import re

_NUMBER_CHARS = frozenset("0123456789.")
_NUMBER_PREFIX = re.compile(r"[0-9]+\.?[0-9]*|\.[0-9]+")


class ParseError(ValueError):
    """Raised when an expression cannot be evaluated."""


def _to_float(token: str) -> float:
    """Convert the leading decimal number of *token*, ignoring the rest."""
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        raise ParseError("invalid number")
    value = float(match.group())
    if math.isinf(value):
        raise ParseError("number out of range")
    return value


def _ieee_divide(lhs: float, rhs: float) -> float:
    """Divide following IEEE 754 rules for a zero divisor."""
    if rhs != 0:
        return lhs / rhs
    if lhs == 0 or math.isnan(lhs):
        return math.nan
    return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)


class ExprParser:
    """Evaluates one expression.

    In strict mode a missing number, a missing ')', division by zero and
    trailing characters raise :class:`ParseError`.  In lenient mode the
    parser stops at the first unknown character, skips whatever stands
    where ')' is expected, and divides by zero as IEEE floats do.
    """

    def __init__(self, text: str, strict: bool = True) -> None:
        self._text = text
        self._strict = strict
        self._pos = 0

    def parse(self) -> float:
        """Evaluate the whole text and return its value."""
        self._pos = 0
        value = self._expression()
        if self._strict:
            self._skip_spaces()
            if self._pos != len(self._text):
                raise ParseError("Unexpected chars at end")
        return value

    def _peek(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _skip_spaces(self) -> None:
        while self._peek() == " ":
            self._pos += 1

    def _number(self) -> float:
        self._skip_spaces()
        start = self._pos
        while self._peek() in _NUMBER_CHARS and self._peek():
            self._pos += 1
        token = self._text[start:self._pos]
        if not token:
            raise ParseError("Number expected")
        return _to_float(token)

    def _factor(self) -> float:
        self._skip_spaces()
        if self._peek() == "(":
            self._pos += 1
            value = self._expression()
            self._skip_spaces()
            if self._strict and self._peek() != ")":
                raise ParseError("')' expected")
            self._pos += 1
            return value
        return self._number()

    def _term(self) -> float:
        lhs = self._factor()
        while True:
            self._skip_spaces()
            op = self._peek()
            if op not in ("*", "/") or not op:
                return lhs
            self._pos += 1
            rhs = self._factor()
            if op == "*":
                lhs *= rhs
            elif rhs == 0 and self._strict:
                raise ParseError("Division by zero")
            else:
                lhs = _ieee_divide(lhs, rhs)

    def _expression(self) -> float:
        lhs = self._term()
        while True:
            self._skip_spaces()
            op = self._peek()
            if op not in ("+", "-") or not op:
                return lhs
            self._pos += 1
            rhs = self._term()
            lhs = lhs + rhs if op == "+" else lhs - rhs


def evaluate(text: str, strict: bool = True) -> float:
    """Evaluate *text* and return its value."""
    return ExprParser(text, strict).parse()