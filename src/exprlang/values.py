"""
Runtime value model.

Every expression evaluates to one of three domains: Number (``float``),
Boolean (``bool``) or String (``str``). ``bool`` is a subclass of ``int`` in
Python, so classification always checks for booleans first.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from exprlang.errors import ExpressionTypeError

Value = float | bool | str


class ValueKind(StrEnum):
    """Result domains an expression can evaluate to."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


def kind_of(value: Any) -> ValueKind | None:
    """Classify a Python object, or return None if it is not a Value."""
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    return None


def coerce_value(value: Any, what: str = "value") -> Value:
    """Normalise a host value into a Value (ints become floats).

    Raises:
        ExpressionTypeError: If the object is not a number, boolean or string.
    """
    kind = kind_of(value)
    if kind is None:
        raise ExpressionTypeError(
            f"{what} must be a number, boolean or string, got {type(value).__name__}"
        )
    if kind == ValueKind.NUMBER:
        return float(value)
    return value


def is_number(value: Value) -> bool:
    return kind_of(value) == ValueKind.NUMBER


def is_boolean(value: Value) -> bool:
    return kind_of(value) == ValueKind.BOOLEAN


def is_string(value: Value) -> bool:
    return kind_of(value) == ValueKind.STRING


def type_name(value: Any) -> str:
    """Human-readable domain name used in error messages."""
    kind = kind_of(value)
    return kind.value if kind is not None else type(value).__name__


def render(value: Value) -> str:
    """Textual form of a value, used for string concatenation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def values_equal(left: Value, right: Value) -> bool:
    """Structural equality: values of different kinds are never equal."""
    if kind_of(left) != kind_of(right):
        return False
    return left == right


# IEEE-754 double arithmetic. Python raises where doubles yield inf/nan.


def divide(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def remainder(left: float, right: float) -> float:
    """Truncated remainder: the result takes the sign of the dividend."""
    if right == 0.0 or math.isinf(left):
        return math.nan
    return math.fmod(left, right)


def _is_odd_integer(x: float) -> bool:
    return x.is_integer() and x % 2 == 1


def power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except ValueError:
        if base == 0.0 and exponent < 0:
            # pow(-0.0, -odd) is -inf
            return math.copysign(math.inf, base) if _is_odd_integer(exponent) else math.inf
        return math.nan
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
