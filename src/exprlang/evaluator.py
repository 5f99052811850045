"""
Expression evaluator.

Evaluates expression AST nodes against a mapping of variable bindings.
Pure evaluation: the tree is never mutated and no state outlives a call.
Every operator checks the kinds of its operands explicitly; there are no
implicit coercions beyond number/string concatenation with ``+``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from exprlang.errors import EvaluationError, ExpressionTypeError, UnresolvedVariableError
from exprlang.expressions import Binary, Expr, FunctionCall, Terminal, Ternary, Unary
from exprlang.tokens import Operator
from exprlang.values import (
    Value,
    coerce_value,
    divide,
    is_boolean,
    is_number,
    is_string,
    power,
    remainder,
    render,
    type_name,
    values_equal,
)

Bindings = Mapping[str, Any]

_EMPTY: Bindings = {}


def evaluate(expr: Expr, bindings: Bindings | None = None) -> Value:
    """Evaluate an expression against variable bindings.

    Args:
        expr: Parsed expression AST.
        bindings: Variable name -> value. Ints are treated as numbers.

    Returns:
        The computed number, boolean or string.

    Raises:
        UnresolvedVariableError: If a variable is missing from ``bindings``.
        ExpressionTypeError: If an operand has the wrong kind.
        FunctionError: If a function rejects its arguments.
    """
    return _interpret(expr, bindings if bindings is not None else _EMPTY)


def evaluate_number(expr: Expr, bindings: Bindings | None = None) -> float:
    result = evaluate(expr, bindings)
    if not is_number(result):
        raise ExpressionTypeError(f"Expression must evaluate to a number, but got {type_name(result)}")
    return float(result)


def evaluate_boolean(expr: Expr, bindings: Bindings | None = None) -> bool:
    result = evaluate(expr, bindings)
    if not is_boolean(result):
        raise ExpressionTypeError(f"Expression must evaluate to a boolean, but got {type_name(result)}")
    return result


def evaluate_string(expr: Expr, bindings: Bindings | None = None) -> str:
    result = evaluate(expr, bindings)
    if not is_string(result):
        raise ExpressionTypeError(f"Expression must evaluate to a string, but got {type_name(result)}")
    return result


def _interpret(expr: Expr, bindings: Bindings) -> Value:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Terminal):
        return _interpret_terminal(expr, bindings)

    if isinstance(expr, Binary):
        return _interpret_binary(expr, bindings)

    if isinstance(expr, Unary):
        return _interpret_unary(expr, bindings)

    if isinstance(expr, Ternary):
        return _interpret_ternary(expr, bindings)

    if isinstance(expr, FunctionCall):
        return _interpret_function_call(expr, bindings)

    raise EvaluationError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_terminal(expr: Terminal, bindings: Bindings) -> Value:
    if not expr.is_variable:
        return expr.value
    name = str(expr.value)
    if name not in bindings:
        raise UnresolvedVariableError(name)
    return coerce_value(bindings[name], f"Variable '{name}'")


def _interpret_unary(expr: Unary, bindings: Bindings) -> Value:
    val = _interpret(expr.operand, bindings)
    if expr.op == Operator.NOT:
        if not is_boolean(val):
            raise ExpressionTypeError(f"A boolean is expected after '!', got {type_name(val)}")
        return not val
    if expr.op in (Operator.UNARY_PLUS, Operator.UNARY_MINUS):
        if not is_number(val):
            sign = expr.op.value[-1]
            raise ExpressionTypeError(f"A number is expected after unary '{sign}', got {type_name(val)}")
        return val if expr.op == Operator.UNARY_PLUS else -val
    raise EvaluationError(f"{expr.op.value} was incorrectly parsed as a unary operator")


_NUMBER_OPS: dict[Operator, Callable[[float, float], float]] = {
    Operator.MINUS: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: divide,
    Operator.MOD: remainder,
    Operator.POW: power,
}

_COMPARISON_OPS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.LT: lambda a, b: a < b,
    Operator.LE: lambda a, b: a <= b,
    Operator.GT: lambda a, b: a > b,
    Operator.GE: lambda a, b: a >= b,
}

_LOGICAL_OPS: dict[Operator, Callable[[bool, bool], bool]] = {
    Operator.AND: lambda a, b: a and b,
    Operator.OR: lambda a, b: a or b,
}


def _interpret_binary(expr: Binary, bindings: Bindings) -> Value:
    """Evaluate a binary expression, left operand first."""
    left = _interpret(expr.left, bindings)
    right = _interpret(expr.right, bindings)
    op = expr.op

    if op == Operator.EQ:
        return values_equal(left, right)
    if op == Operator.NE:
        return not values_equal(left, right)

    if op == Operator.PLUS:
        return _plus(left, right)

    if op in _NUMBER_OPS:
        if not (is_number(left) and is_number(right)):
            raise _operand_error(op, "number", left, right)
        return _NUMBER_OPS[op](left, right)

    if op in _COMPARISON_OPS:
        comparable = (is_number(left) and is_number(right)) or (is_string(left) and is_string(right))
        if not comparable:
            raise _operand_error(op, "comparable", left, right)
        return _COMPARISON_OPS[op](left, right)

    if op in _LOGICAL_OPS:
        if not (is_boolean(left) and is_boolean(right)):
            raise _operand_error(op, "boolean", left, right)
        return _LOGICAL_OPS[op](left, right)

    raise EvaluationError(f"{op.value} was incorrectly parsed as a binary operator")


def _plus(left: Value, right: Value) -> Value:
    """Numeric sum, or concatenation when either side is a string."""
    if is_number(left) and is_number(right):
        return left + right
    if is_string(left) or is_string(right):
        return render(left) + render(right)
    raise ExpressionTypeError(f"Cannot add {type_name(left)} and {type_name(right)}")


def _operand_error(op: Operator, expected: str, left: Value, right: Value) -> ExpressionTypeError:
    return ExpressionTypeError(
        f"{op.value} operator requires {expected} operands, "
        f"but got {type_name(left)} and {type_name(right)}"
    )


def _interpret_ternary(expr: Ternary, bindings: Bindings) -> Value:
    """Evaluate the condition, then only the branch it selects."""
    condition = _interpret(expr.condition, bindings)
    if not is_boolean(condition):
        raise ExpressionTypeError(
            "Ternary <condition> ? <expression1> : <expression2> must be called "
            f"with a boolean value as a condition, got {type_name(condition)}"
        )
    if condition:
        return _interpret(expr.then_expr, bindings)
    return _interpret(expr.else_expr, bindings)


def _interpret_function_call(expr: FunctionCall, bindings: Bindings) -> Value:
    args = [_interpret(arg, bindings) for arg in expr.args]
    return coerce_value(expr.function(args), f"Result of {expr.name}()")
