"""Tests for the expression lexer.

Covers:
- Operand, operator and bracket tokens
- Unary/binary sign disambiguation
- Function call sites: registry lookup and argument counting
- Constants and keywords
- Malformed input
"""

from __future__ import annotations

import math

import pytest

from exprlang.config import EngineConfig
from exprlang.errors import ArityError, LexError, UnknownFunctionError
from exprlang.functions import Constant, Function, Registry
from exprlang.lexer import Lexer, tokenize
from exprlang.tokens import Operator, TokenKind


def _kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(source)]


def _operators(source: str) -> list[Operator]:
    return [t.value for t in tokenize(source) if t.kind == TokenKind.OPERATOR]


class TestOperands:
    """Literals, variables and keywords."""

    def test_integer_is_float(self) -> None:
        tokens = tokenize("42")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == 42.0
        assert isinstance(tokens[0].value, float)

    def test_decimal(self) -> None:
        assert tokenize("3.14")[0].value == 3.14

    def test_malformed_number(self) -> None:
        with pytest.raises(LexError, match="Error parsing number"):
            tokenize("1.2.3")

    def test_string_single_quotes(self) -> None:
        tokens = tokenize("'world'")
        assert tokens[0].kind == TokenKind.STRING
        assert tokens[0].value == "world"

    def test_string_double_quotes(self) -> None:
        assert tokenize('"hello"')[0].value == "hello"

    def test_string_escape(self) -> None:
        assert tokenize("'it\\'s'")[0].value == "it's"

    def test_unterminated_string(self) -> None:
        with pytest.raises(LexError, match="Unterminated"):
            tokenize("'hello")

    def test_booleans(self) -> None:
        tokens = tokenize("true false")
        assert [t.kind for t in tokens] == [TokenKind.BOOLEAN, TokenKind.BOOLEAN]
        assert [t.value for t in tokens] == [True, False]

    def test_keyword_prefix_is_variable(self) -> None:
        tokens = tokenize("trueish")
        assert tokens[0].kind == TokenKind.VARIABLE
        assert tokens[0].value == "trueish"

    def test_variable(self) -> None:
        tokens = tokenize("my_field2")
        assert tokens[0].kind == TokenKind.VARIABLE
        assert tokens[0].value == "my_field2"

    def test_constant_resolved_at_lex_time(self) -> None:
        tokens = tokenize("pi")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == math.pi

    def test_string_constant(self) -> None:
        registry = Registry(constants=[Constant(name="greeting", value="hi")])
        tokens = tokenize("greeting", registry=registry)
        assert tokens[0].kind == TokenKind.STRING
        assert tokens[0].value == "hi"

    def test_constants_are_case_sensitive(self) -> None:
        assert tokenize("PI")[0].kind == TokenKind.VARIABLE

    def test_positions(self) -> None:
        assert [t.pos for t in tokenize("1 + x")] == [0, 2, 4]


class TestOperators:
    """Operator matching."""

    def test_arithmetic(self) -> None:
        assert _operators("a + b - c * d / e % f ^ g") == [
            Operator.PLUS,
            Operator.MINUS,
            Operator.MUL,
            Operator.DIV,
            Operator.MOD,
            Operator.POW,
        ]

    def test_two_char_before_one_char(self) -> None:
        assert _operators("a <= b >= c == d != e < f > g") == [
            Operator.LE,
            Operator.GE,
            Operator.EQ,
            Operator.NE,
            Operator.LT,
            Operator.GT,
        ]

    def test_logical(self) -> None:
        assert _operators("a && b || !c") == [Operator.AND, Operator.OR, Operator.NOT]

    def test_ternary_markers(self) -> None:
        assert _operators("a ? b : c") == [Operator.TERNARY_IF, Operator.TERNARY_ELSE]

    def test_brackets(self) -> None:
        assert _kinds("(a)") == [
            TokenKind.LEFT_BRACKET,
            TokenKind.VARIABLE,
            TokenKind.RIGHT_BRACKET,
        ]

    def test_whitespace_handling(self) -> None:
        assert _kinds("  a  +  b  ") == [TokenKind.VARIABLE, TokenKind.OPERATOR, TokenKind.VARIABLE]

    def test_trailing_operator(self) -> None:
        with pytest.raises(LexError, match="requires operand after it"):
            tokenize("1 +")

    def test_trailing_operator_with_whitespace(self) -> None:
        with pytest.raises(LexError, match="requires operand after it"):
            tokenize("1 &&   ")

    def test_trailing_open_bracket(self) -> None:
        with pytest.raises(LexError, match="requires operand after it"):
            tokenize("2 * (")


class TestSignDisambiguation:
    """'+' and '-' are unary unless they follow an operand or ')'."""

    def test_leading_minus(self) -> None:
        assert _operators("-3 + 4") == [Operator.UNARY_MINUS, Operator.PLUS]

    def test_minus_after_operator(self) -> None:
        assert _operators("4 - -3") == [Operator.MINUS, Operator.UNARY_MINUS]

    def test_plus_after_bracket(self) -> None:
        assert _operators("(1) + 2") == [Operator.PLUS]

    def test_minus_after_variable(self) -> None:
        assert _operators("x - 1") == [Operator.MINUS]

    def test_minus_after_open_bracket(self) -> None:
        assert _operators("(-x)") == [Operator.UNARY_MINUS]

    def test_plus_after_string(self) -> None:
        assert _operators("'a' + 'b'") == [Operator.PLUS]

    def test_unary_plus(self) -> None:
        assert _operators("+2") == [Operator.UNARY_PLUS]


class TestFunctionCalls:
    """Call sites resolve the function and count arguments."""

    def test_call_site(self) -> None:
        tokens = tokenize("max(1, 2, 3)")
        assert tokens[0].kind == TokenKind.FUNCTION_CALL
        assert tokens[0].value.name == "max"
        assert tokens[0].arity == 3

    def test_nested_calls_count_own_arguments(self) -> None:
        tokens = tokenize("max(1, min(2, 3), 4)")
        calls = [t for t in tokens if t.kind == TokenKind.FUNCTION_CALL]
        assert [(t.value.name, t.arity) for t in calls] == [("max", 3), ("min", 2)]

    def test_separator_inside_string_ignored(self) -> None:
        tokens = tokenize("concat('a,b', 'c)')")
        assert tokens[0].arity == 2

    def test_delimiter_tokens(self) -> None:
        assert TokenKind.DELIMITER in _kinds("max(1, 2)")

    def test_empty_call_has_no_arguments(self) -> None:
        registry = Registry(
            functions=[Function(name="answer", min_args=0, max_args=0, implementation=lambda args: 42.0)]
        )
        tokens = tokenize("answer()", registry=registry)
        assert tokens[0].arity == 0

    def test_unknown_function(self) -> None:
        with pytest.raises(UnknownFunctionError, match="foo") as exc_info:
            tokenize("1 + foo(2)")
        assert exc_info.value.pos == 4

    def test_too_few_arguments(self) -> None:
        with pytest.raises(ArityError, match="log"):
            tokenize("log(8)")

    def test_too_many_arguments(self) -> None:
        with pytest.raises(ArityError) as exc_info:
            tokenize("log(8, 2, 1)")
        assert exc_info.value.count == 3

    def test_arity_range(self) -> None:
        assert tokenize("substring('abc', 1)")[0].arity == 2
        assert tokenize("substring('abc', 1, 2)")[0].arity == 3

    def test_name_without_bracket_is_variable(self) -> None:
        assert tokenize("max")[0].kind == TokenKind.VARIABLE


class TestConfiguration:
    """Configurable separators and strictness."""

    def test_decimal_comma(self) -> None:
        config = EngineConfig(decimal_separator=",", argument_separator=";")
        tokens = tokenize("max(1,5; 2)", config=config)
        assert tokens[0].arity == 2
        assert tokens[2].value == 1.5

    def test_unexpected_character_strict(self) -> None:
        with pytest.raises(LexError, match="Unexpected character") as exc_info:
            tokenize("1 @ 2")
        assert exc_info.value.pos == 2

    def test_unexpected_character_lenient(self) -> None:
        lexer = Lexer(EngineConfig(strict=False))
        tokens = lexer.tokenize("1 + 2#")
        assert [t.kind for t in tokens] == [
            TokenKind.NUMBER,
            TokenKind.OPERATOR,
            TokenKind.NUMBER,
        ]

    def test_non_ascii_letter_rejected(self) -> None:
        with pytest.raises(LexError, match="Unexpected character"):
            tokenize("é + 1")
