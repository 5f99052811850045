"""Tests for building expression trees from postfix tokens."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from exprlang.builder import build
from exprlang.converter import to_postfix
from exprlang.errors import ExpressionSyntaxError
from exprlang.expressions import (
    Binary,
    FunctionCall,
    Terminal,
    Ternary,
    Unary,
    variables,
)
from exprlang.lexer import tokenize
from exprlang.tokens import Operator, Token, TokenKind


def _parse(source: str):
    return build(to_postfix(tokenize(source)))


class TestNodes:
    """Each postfix token kind produces the matching node."""

    def test_terminal_number(self) -> None:
        expr = _parse("42")
        assert isinstance(expr, Terminal)
        assert expr.kind == TokenKind.NUMBER
        assert expr.value == 42.0

    def test_terminal_variable(self) -> None:
        expr = _parse("amount")
        assert isinstance(expr, Terminal)
        assert expr.is_variable
        assert expr.value == "amount"

    def test_terminal_string(self) -> None:
        expr = _parse("'hi'")
        assert isinstance(expr, Terminal)
        assert expr.kind == TokenKind.STRING

    def test_binary_operand_order(self) -> None:
        expr = _parse("a - b")
        assert isinstance(expr, Binary)
        assert expr.op == Operator.MINUS
        assert expr.left == Terminal(kind=TokenKind.VARIABLE, value="a")
        assert expr.right == Terminal(kind=TokenKind.VARIABLE, value="b")

    def test_precedence_shape(self) -> None:
        # a + b * c should be a + (b * c)
        expr = _parse("a + b * c")
        assert isinstance(expr, Binary)
        assert expr.op == Operator.PLUS
        assert isinstance(expr.right, Binary)
        assert expr.right.op == Operator.MUL

    def test_unary(self) -> None:
        expr = _parse("!flag")
        assert isinstance(expr, Unary)
        assert expr.op == Operator.NOT

    def test_double_negation(self) -> None:
        expr = _parse("!!flag")
        assert isinstance(expr, Unary)
        assert isinstance(expr.operand, Unary)

    def test_ternary(self) -> None:
        expr = _parse("c ? t : e")
        assert isinstance(expr, Ternary)
        assert expr.condition.value == "c"
        assert expr.then_expr.value == "t"
        assert expr.else_expr.value == "e"

    def test_function_call_argument_order(self) -> None:
        expr = _parse("substring(s, 1, 4)")
        assert isinstance(expr, FunctionCall)
        assert expr.name == "substring"
        assert [str(a) for a in expr.args] == ["s", "1.0", "4.0"]

    def test_function_call_nested_expression_argument(self) -> None:
        expr = _parse("max(a + 1, b)")
        assert isinstance(expr, FunctionCall)
        assert isinstance(expr.args[0], Binary)


class TestRendering:
    """Nodes render as fully parenthesised text."""

    def test_binary(self) -> None:
        assert str(_parse("(2 + 3) * 4")) == "((2.0 + 3.0) * 4.0)"

    def test_unary(self) -> None:
        assert str(_parse("-x")) == "(-x)"

    def test_ternary(self) -> None:
        assert str(_parse("a ? 'y' : false")) == "(a ? 'y' : false)"

    def test_call(self) -> None:
        assert str(_parse("max(1, x)")) == "max(1.0, x)"


class TestMalformed:
    """Stack discipline violations are syntax errors."""

    def test_empty(self) -> None:
        with pytest.raises(ExpressionSyntaxError, match="Empty expression"):
            _parse("")

    def test_two_values(self) -> None:
        postfix = [Token(TokenKind.NUMBER, 1.0), Token(TokenKind.NUMBER, 2.0, 2)]
        with pytest.raises(ExpressionSyntaxError, match="2 values"):
            build(postfix)

    def test_missing_operand(self) -> None:
        postfix = [Token(TokenKind.NUMBER, 1.0), Token(TokenKind.OPERATOR, Operator.PLUS, 1)]
        with pytest.raises(ExpressionSyntaxError, match="expects 2 operand"):
            build(postfix)

    def test_operator_without_left_operand(self) -> None:
        with pytest.raises(ExpressionSyntaxError):
            _parse("* 2")

    def test_bracket_in_postfix(self) -> None:
        with pytest.raises(ExpressionSyntaxError, match="Unexpected"):
            build([Token(TokenKind.LEFT_BRACKET, "(")])

    def test_unpaired_marker_in_postfix(self) -> None:
        postfix = [Token(TokenKind.BOOLEAN, True), Token(TokenKind.OPERATOR, Operator.TERNARY_IF)]
        with pytest.raises(ExpressionSyntaxError, match="Unpaired ternary marker"):
            build(postfix)


class TestImmutability:
    """Trees are frozen and carry no lexer state."""

    def test_frozen(self) -> None:
        expr = _parse("a + 1")
        with pytest.raises(ValidationError):
            expr.op = Operator.MINUS  # type: ignore[misc]

    def test_equal_structure(self) -> None:
        assert _parse("a * (b + 1)") == _parse("a*(b+1)")

    def test_variables(self) -> None:
        assert variables(_parse("x * 2 + max(y, pi) > z ? 1 : w")) == {"x", "y", "z", "w"}
