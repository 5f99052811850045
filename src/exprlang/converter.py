"""
Infix to postfix conversion (shunting-yard).

The operator stack is local to each :func:`to_postfix` call; nothing
survives between calls, so conversion is safe to run concurrently and a
failed call cannot leak state into the next one.
"""

from __future__ import annotations

import logging

from exprlang.errors import ExpressionSyntaxError
from exprlang.tokens import UNARY_OPERATORS, Operator, Token, TokenKind, render_tokens

logger = logging.getLogger(__name__)


def check_brackets(tokens: list[Token]) -> None:
    """Fail if bracket nesting ever goes negative or does not end balanced."""
    depth = 0
    for token in tokens:
        if token.kind == TokenKind.LEFT_BRACKET:
            depth += 1
        elif token.kind == TokenKind.RIGHT_BRACKET:
            depth -= 1
        if depth < 0:
            raise ExpressionSyntaxError("mismatched parenthesis", token.pos)
    if depth != 0:
        raise ExpressionSyntaxError("mismatched parenthesis")


def check_sequence(tokens: list[Token]) -> None:
    """Fail unless operands and operators alternate.

    Every binary operator needs an operand on both sides and every argument
    slot of a call must hold an expression.
    """
    expect_operand = True
    prev: Token | None = None
    before: Token | None = None

    for token in tokens:
        kind = token.kind
        if expect_operand:
            if token.is_operand:
                expect_operand = False
            elif kind in (TokenKind.LEFT_BRACKET, TokenKind.FUNCTION_CALL):
                pass
            elif kind == TokenKind.OPERATOR and token.operator in UNARY_OPERATORS:
                pass
            elif kind == TokenKind.DELIMITER:
                raise ExpressionSyntaxError("Empty function argument", token.pos)
            elif kind == TokenKind.RIGHT_BRACKET:
                if prev is not None and prev.kind == TokenKind.DELIMITER:
                    raise ExpressionSyntaxError("Empty function argument", token.pos)
                if prev is None or prev.kind != TokenKind.LEFT_BRACKET:
                    raise ExpressionSyntaxError(f"Missing operand after '{prev}'", token.pos)
                if before is None or before.kind != TokenKind.FUNCTION_CALL:
                    raise ExpressionSyntaxError("Empty parentheses", token.pos)
                # f() takes no arguments
                expect_operand = False
            else:
                raise ExpressionSyntaxError(f"'{token}' is missing its left operand", token.pos)
        elif kind == TokenKind.OPERATOR and token.operator not in UNARY_OPERATORS:
            expect_operand = True
        elif kind == TokenKind.DELIMITER:
            expect_operand = True
        elif kind != TokenKind.RIGHT_BRACKET:
            raise ExpressionSyntaxError(f"Missing operator before '{token}'", token.pos)
        before, prev = prev, token

    if prev is not None and expect_operand:
        raise ExpressionSyntaxError(f"Missing operand after '{prev}'", prev.pos)


def to_postfix(tokens: list[Token]) -> list[Token]:
    """Convert an infix token sequence to postfix order.

    ``?`` and ``:`` never reach the output: on ``:`` the pending ``?`` is
    replaced on the stack by one combined ternary operator.

    Raises:
        ExpressionSyntaxError: On unbalanced brackets, misplaced operators,
            empty arguments or unpaired ternary markers.
    """
    check_brackets(tokens)
    check_sequence(tokens)

    output: list[Token] = []
    stack: list[Token] = []

    for token in tokens:
        kind = token.kind
        if token.is_operand:
            output.append(token)
        elif kind == TokenKind.LEFT_BRACKET:
            stack.append(token)
        elif kind == TokenKind.RIGHT_BRACKET:
            _close_bracket(token, stack, output)
        elif kind == TokenKind.OPERATOR:
            if token.operator == Operator.TERNARY_ELSE:
                _pair_ternary(token, stack, output)
            else:
                _push_operator(token, stack, output)
        elif kind == TokenKind.FUNCTION_CALL:
            stack.append(token)
        elif kind == TokenKind.DELIMITER:
            _end_argument(token, stack, output)

    while stack:
        top = stack.pop()
        if top.kind != TokenKind.OPERATOR:
            raise ExpressionSyntaxError(f"Unexpected {top} left on operator stack", top.pos)
        if top.operator == Operator.TERNARY_IF:
            raise ExpressionSyntaxError("'?' without matching ':'", top.pos)
        output.append(top)

    logger.debug("Postfix: %s", render_tokens(output))
    return output


def _push_operator(token: Token, stack: list[Token], output: list[Token]) -> None:
    incoming = token.operator
    while stack and stack[-1].kind != TokenKind.LEFT_BRACKET:
        top = stack[-1]
        if top.kind != TokenKind.OPERATOR:
            raise ExpressionSyntaxError(f"Operator {incoming.value!r} follows {top}", token.pos)
        if top.operator.precedence > incoming.precedence or (
            top.operator.precedence == incoming.precedence and incoming.is_left_associative
        ):
            output.append(stack.pop())
        else:
            break
    stack.append(token)


def _close_bracket(token: Token, stack: list[Token], output: list[Token]) -> None:
    while stack and stack[-1].kind != TokenKind.LEFT_BRACKET:
        top = stack.pop()
        if top.kind == TokenKind.OPERATOR and top.operator == Operator.TERNARY_IF:
            raise ExpressionSyntaxError("'?' without matching ':'", top.pos)
        output.append(top)
    if not stack:
        raise ExpressionSyntaxError("mismatched parenthesis", token.pos)
    stack.pop()
    if stack and stack[-1].kind == TokenKind.FUNCTION_CALL:
        output.append(stack.pop())


def _end_argument(token: Token, stack: list[Token], output: list[Token]) -> None:
    """Flush the finished argument's operators; the delimiter itself is dropped."""
    while stack and stack[-1].kind == TokenKind.OPERATOR:
        top = stack.pop()
        if top.operator == Operator.TERNARY_IF:
            raise ExpressionSyntaxError("'?' without matching ':'", top.pos)
        output.append(top)
    if (
        len(stack) < 2
        or stack[-1].kind != TokenKind.LEFT_BRACKET
        or stack[-2].kind != TokenKind.FUNCTION_CALL
    ):
        raise ExpressionSyntaxError("Argument separator outside a function call", token.pos)


def _pair_ternary(token: Token, stack: list[Token], output: list[Token]) -> None:
    while stack and stack[-1].kind == TokenKind.OPERATOR:
        if stack[-1].operator == Operator.TERNARY_IF:
            question = stack.pop()
            stack.append(Token(TokenKind.OPERATOR, Operator.TERNARY, question.pos))
            return
        output.append(stack.pop())
    raise ExpressionSyntaxError("':' without matching '?'", token.pos)
