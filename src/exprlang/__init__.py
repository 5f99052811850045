"""
exprlang - embeddable expression language.

Parses arithmetic, boolean and string expressions with variables, constants
and functions, and evaluates them against caller-supplied bindings.

Usage:
    from exprlang import ExpressionEngine

    engine = ExpressionEngine()
    engine.evaluate_number("2 + 3 * x", {"x": 4})  # 14.0

    ast = engine.preprocess("length(name) > 3")
    engine.evaluate_boolean(ast, {"name": "Ada"})  # False
"""

from __future__ import annotations

from functools import lru_cache

from ._version import get_version
from .config import EngineConfig
from .engine import ExpressionEngine
from .errors import (
    ArityError,
    EvaluationError,
    ExpressionError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    FunctionError,
    LexError,
    RegistryError,
    UnknownFunctionError,
    UnresolvedVariableError,
)
from .evaluator import Bindings
from .expressions import Expr
from .functions import DEFAULT_CONSTANTS, DEFAULT_FUNCTIONS, Constant, Function, Registry
from .values import Value, ValueKind

__version__ = get_version()


@lru_cache(maxsize=1)
def default_engine() -> ExpressionEngine:
    """Shared engine with the default catalogue and configuration."""
    return ExpressionEngine()


def preprocess(expression: str) -> Expr:
    return default_engine().preprocess(expression)


def evaluate_number(expression: str | Expr, bindings: Bindings | None = None) -> float:
    return default_engine().evaluate_number(expression, bindings)


def evaluate_boolean(expression: str | Expr, bindings: Bindings | None = None) -> bool:
    return default_engine().evaluate_boolean(expression, bindings)


def evaluate_string(expression: str | Expr, bindings: Bindings | None = None) -> str:
    return default_engine().evaluate_string(expression, bindings)


__all__ = [
    "__version__",
    "ArityError",
    "Bindings",
    "Constant",
    "DEFAULT_CONSTANTS",
    "DEFAULT_FUNCTIONS",
    "EngineConfig",
    "EvaluationError",
    "Expr",
    "ExpressionEngine",
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionTypeError",
    "Function",
    "FunctionError",
    "LexError",
    "Registry",
    "RegistryError",
    "UnknownFunctionError",
    "UnresolvedVariableError",
    "Value",
    "ValueKind",
    "default_engine",
    "evaluate_boolean",
    "evaluate_number",
    "evaluate_string",
    "preprocess",
]
