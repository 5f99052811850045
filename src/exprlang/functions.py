"""
Function and constant registry.

A :class:`Registry` is built once from a list of :class:`Function` and
:class:`Constant` descriptors and is read-only afterwards, so one instance can
be shared by any number of lexers and evaluators.

Built-in functions:
- Math: abs, acos, asin, atan, cos, cosh, sin, sinh, tan, tanh, ceil, floor,
  round, ln, sqrt, exp, log(x, base)
- Aggregate: min, max, avg, sum (two or more numbers)
- String: length, concat, contains, substring, upper, lower, trim
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from exprlang.errors import FunctionError, RegistryError
from exprlang.values import (
    Value,
    coerce_value,
    is_number,
    is_string,
    kind_of,
    render,
    type_name,
)

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class Function(BaseModel):
    """
    A named function callable from expressions.

    The implementation receives the evaluated arguments in call order and
    raises :class:`FunctionError` on a wrong argument count or type.
    """

    name: str = Field(description="Name used at call sites")
    min_args: int = Field(ge=0, description="Fewest arguments accepted")
    max_args: int | None = Field(default=None, description="Most arguments accepted (None = unbounded)")
    implementation: Callable[[list[Value]], Value]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_arity(self) -> Function:
        if self.max_args is not None and self.max_args < self.min_args:
            raise ValueError(f"{self.name}: max_args is smaller than min_args")
        return self

    def accepts(self, count: int) -> bool:
        """Whether a call site with ``count`` arguments is valid."""
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    @property
    def arity(self) -> str:
        """Arity range as text: ``1``, ``2..3`` or ``2 or more``."""
        if self.max_args is None:
            return f"{self.min_args} or more"
        if self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args}..{self.max_args}"

    def __call__(self, args: list[Value]) -> Value:
        return self.implementation(args)

    def __str__(self) -> str:
        return f"{self.name}/{self.arity}"


class Constant(BaseModel):
    """A named value substituted into the token stream at lex time."""

    name: str
    value: bool | float | str

    model_config = ConfigDict(frozen=True)

    @field_validator("value", mode="before")
    @classmethod
    def normalise_value(cls, v: object) -> Value:
        if kind_of(v) is None:
            raise ValueError(f"Constant value must be a number, boolean or string, got {v!r}")
        return coerce_value(v)


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _require_count(name: str, args: list[Value], low: int, high: int | None = None) -> None:
    if len(args) < low or (high is not None and len(args) > high):
        if high == low:
            expected = str(low)
        elif high is None:
            expected = f"at least {low}"
        else:
            expected = f"{low} to {high}"
        raise FunctionError(f"{name} requires {expected} argument(s), got {len(args)}")


def _number_arg(name: str, args: list[Value], index: int, label: str = "argument") -> float:
    arg = args[index]
    if not is_number(arg):
        raise FunctionError(f"{name} {label} must be a number, got {type_name(arg)}")
    return float(arg)


def _string_arg(name: str, args: list[Value], index: int, label: str = "argument") -> str:
    arg = args[index]
    if not is_string(arg):
        raise FunctionError(f"{name} {label} must be a string, got {type_name(arg)}")
    return arg


def _index_arg(name: str, args: list[Value], index: int, label: str) -> int:
    number = _number_arg(name, args, index, label)
    if not math.isfinite(number):
        raise FunctionError(f"{name} {label} must be finite")
    return int(number)


def _all_numbers(name: str, args: list[Value]) -> list[float]:
    if not all(is_number(a) for a in args):
        raise FunctionError(f"{name} function requires all arguments to be numbers")
    return [float(a) for a in args]


def _as_double(fn: Callable[[float], float], x: float) -> float:
    """Apply a math function with double semantics instead of exceptions."""
    try:
        return float(fn(x))
    except ValueError:
        return math.nan
    except OverflowError:
        return math.copysign(math.inf, x) if fn is math.sinh else math.inf


def _integral(fn: Callable[[float], int]) -> Callable[[float], float]:
    def apply(x: float) -> float:
        if not math.isfinite(x):
            return x
        return float(fn(x))

    return apply


def _ln(x: float) -> float:
    if x == 0.0:
        return -math.inf
    if x == math.inf:
        return math.inf
    return _as_double(math.log, x)


# ---------------------------------------------------------------------------
# Built-in implementations
# ---------------------------------------------------------------------------


def _one_number(name: str, fn: Callable[[float], float]) -> Function:
    def implementation(args: list[Value]) -> Value:
        _require_count(name, args, 1, 1)
        return _as_double(fn, _number_arg(name, args, 0))

    return Function(name=name, min_args=1, max_args=1, implementation=implementation)


def _log(args: list[Value]) -> Value:
    _require_count("log", args, 2, 2)
    operand = _number_arg("log", args, 0, "argument")
    base = _number_arg("log", args, 1, "base")
    ln_base = _ln(base)
    if ln_base == 0.0:
        ln_operand = _ln(operand)
        if ln_operand == 0.0 or math.isnan(ln_operand):
            return math.nan
        return math.copysign(math.inf, ln_operand)
    return _ln(operand) / ln_base


def _aggregate(name: str, fn: Callable[[list[float]], float]) -> Function:
    def implementation(args: list[Value]) -> Value:
        _require_count(name, args, 2)
        return fn(_all_numbers(name, args))

    return Function(name=name, min_args=2, max_args=None, implementation=implementation)


def _length(args: list[Value]) -> Value:
    _require_count("length", args, 1, 1)
    return float(len(_string_arg("length", args, 0)))


def _concat(args: list[Value]) -> Value:
    _require_count("concat", args, 2)
    return "".join(render(a) for a in args)


def _contains(args: list[Value]) -> Value:
    _require_count("contains", args, 2, 2)
    text = _string_arg("contains", args, 0, "first argument")
    needle = _string_arg("contains", args, 1, "second argument")
    return needle in text


def _substring(args: list[Value]) -> Value:
    _require_count("substring", args, 2, 3)
    text = _string_arg("substring", args, 0, "first argument")
    start = _index_arg("substring", args, 1, "start index")
    end = _index_arg("substring", args, 2, "end index") if len(args) == 3 else len(text)
    if not 0 <= start <= end <= len(text):
        raise FunctionError(
            f"substring range [{start}, {end}) is out of bounds for length {len(text)}"
        )
    return text[start:end]


def _string_transform(name: str, fn: Callable[[str], str]) -> Function:
    def implementation(args: list[Value]) -> Value:
        _require_count(name, args, 1, 1)
        return fn(_string_arg(name, args, 0))

    return Function(name=name, min_args=1, max_args=1, implementation=implementation)


DEFAULT_FUNCTIONS: tuple[Function, ...] = (
    _one_number("abs", abs),
    _one_number("acos", math.acos),
    _one_number("asin", math.asin),
    _one_number("atan", math.atan),
    _one_number("cos", math.cos),
    _one_number("cosh", math.cosh),
    _one_number("sin", math.sin),
    _one_number("sinh", math.sinh),
    _one_number("tan", math.tan),
    _one_number("tanh", math.tanh),
    _one_number("ceil", _integral(math.ceil)),
    _one_number("floor", _integral(math.floor)),
    # Ties go to the even neighbour
    _one_number("round", _integral(round)),
    _one_number("ln", _ln),
    _one_number("sqrt", math.sqrt),
    _one_number("exp", math.exp),
    Function(name="log", min_args=2, max_args=2, implementation=_log),
    _aggregate("min", min),
    _aggregate("max", max),
    _aggregate("avg", lambda xs: math.fsum(xs) / len(xs)),
    _aggregate("sum", math.fsum),
    Function(name="length", min_args=1, max_args=1, implementation=_length),
    Function(name="concat", min_args=2, max_args=None, implementation=_concat),
    Function(name="contains", min_args=2, max_args=2, implementation=_contains),
    Function(name="substring", min_args=2, max_args=3, implementation=_substring),
    _string_transform("upper", str.upper),
    _string_transform("lower", str.lower),
    _string_transform("trim", str.strip),
)

DEFAULT_CONSTANTS: tuple[Constant, ...] = (
    Constant(name="pi", value=math.pi),
    Constant(name="e", value=math.e),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _index_by_name(items: Iterable[Function] | Iterable[Constant], what: str) -> dict:
    table: dict = {}
    for item in items:
        if item.name in table:
            raise RegistryError(f"Duplicate {what} name: {item.name!r}")
        table[item.name] = item
    return table


class Registry:
    """Immutable name → function/constant lookup. Names are case-sensitive."""

    __slots__ = ("_functions", "_constants")

    def __init__(
        self,
        functions: Iterable[Function] = DEFAULT_FUNCTIONS,
        constants: Iterable[Constant] = DEFAULT_CONSTANTS,
    ) -> None:
        self._functions: Mapping[str, Function] = MappingProxyType(
            _index_by_name(functions, "function")
        )
        self._constants: Mapping[str, Constant] = MappingProxyType(
            _index_by_name(constants, "constant")
        )

    def function(self, name: str) -> Function | None:
        return self._functions.get(name)

    def constant(self, name: str) -> Constant | None:
        return self._constants.get(name)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def has_constant(self, name: str) -> bool:
        return name in self._constants

    @property
    def functions(self) -> Mapping[str, Function]:
        return self._functions

    @property
    def constants(self) -> Mapping[str, Constant]:
        return self._constants

    def function_names(self) -> list[str]:
        return sorted(self._functions)

    def constant_names(self) -> list[str]:
        return sorted(self._constants)

    def __repr__(self) -> str:
        return f"Registry(functions={len(self._functions)}, constants={len(self._constants)})"


DEFAULT_REGISTRY = Registry()
