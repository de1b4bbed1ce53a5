"""
Tagged runtime values.

Scripts only ever see text, so every value renders to a canonical string:
numbers keep the spelling they were written with (``007`` stays ``007``),
computed numbers drop a trailing ``.0``, and booleans render as
``true``/``false``. The numeric-else-string fallbacks of the language live
in ``binary``.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from neurodsl.dsl.ast import BinaryOperator

ARITHMETIC_ERROR = "❌ Arithmetic does not work on strings"
MODULO_ERROR = "❌ Modulo does not work on strings"

RESERVED_LITERALS = ("None", "true", "false")

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class Text:
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class Number:
    value: float
    text: str = ""

    def render(self) -> str:
        return self.text or format_number(self.value)


@dataclass(frozen=True)
class Boolean:
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"


Value = Union[Text, Number, Boolean]


def parse_number(text: str) -> Optional[float]:
    """Parse ``text`` as a float, or return None when it is not numeric.

    Surrounding whitespace and ``_`` digit separators are rejected, which
    keeps ``" 4"`` textual until the caller trims it.
    """
    if not text or "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_integer(text: str) -> Optional[int]:
    if _INTEGER_RE.match(text):
        return int(text)
    return None


def format_number(value: float) -> str:
    """Render a float the way scripts print numbers: ``6`` not ``6.0``, ``NaN`` for NaN."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text


def coerce(text: str) -> Value:
    """Tag ``text`` with the most specific value type it spells."""
    if text in ("true", "false"):
        return Boolean(text == "true")
    number = parse_number(text)
    if number is not None:
        return Number(number, text)
    return Text(text)


def texts_equal(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def compare(a: str, b: str) -> int:
    """Three-way compare: numeric when both sides are numbers, else case-insensitive."""
    a, b = a.strip(), b.strip()
    x, y = parse_number(a), parse_number(b)
    if x is not None and y is not None:
        if x < y:
            return -1
        if x > y:
            return 1
        # NaN compares equal to everything
        return 0
    a, b = a.lower(), b.lower()
    return (a > b) - (a < b)


def _truncated_mod(a: int, b: int) -> int:
    # Result takes the sign of the dividend.
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def binary(op: BinaryOperator, left: Value, right: Value) -> Value:
    """Apply ``op`` to two evaluated operands."""
    l_raw, r_raw = left.render(), right.render()
    l, r = l_raw.strip(), r_raw.strip()
    x, y = parse_number(l), parse_number(r)
    numeric = x is not None and y is not None

    if op is BinaryOperator.ADD:
        if numeric:
            return Number(x + y)
        return Text(l_raw + r_raw)
    if op in (BinaryOperator.SUB, BinaryOperator.MUL, BinaryOperator.DIV):
        if not numeric:
            return Text(ARITHMETIC_ERROR)
        if op is BinaryOperator.SUB:
            return Number(x - y)
        if op is BinaryOperator.MUL:
            return Number(x * y)
        return Number(x / y if y != 0 else math.nan)
    if op is BinaryOperator.MOD:
        a, b = parse_integer(l), parse_integer(r)
        if a is None or b is None:
            return Text(MODULO_ERROR)
        if b == 0:
            return Number(math.nan)
        return Number(float(_truncated_mod(a, b)), str(_truncated_mod(a, b)))
    if op is BinaryOperator.EQ:
        return Boolean(texts_equal(l, r))
    if op is BinaryOperator.NE:
        return Boolean(not texts_equal(l, r))

    order = compare(l, r)
    if op is BinaryOperator.GT:
        return Boolean(order > 0)
    if op is BinaryOperator.LT:
        return Boolean(order < 0)
    if op is BinaryOperator.GE:
        return Boolean(order >= 0)
    return Boolean(order <= 0)
