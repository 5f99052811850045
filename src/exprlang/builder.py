"""
Postfix to AST.

Single pass over a postfix token sequence with a node stack.
"""

from __future__ import annotations

from exprlang.errors import ExpressionSyntaxError
from exprlang.expressions import Binary, Expr, FunctionCall, Terminal, Ternary, Unary
from exprlang.tokens import Operator, Token, TokenKind


def build(postfix: list[Token]) -> Expr:
    """Build an expression tree from postfix tokens.

    Raises:
        ExpressionSyntaxError: If an operator lacks operands or the sequence
            does not reduce to exactly one expression.
    """
    stack: list[Expr] = []

    for token in postfix:
        if token.is_operand:
            stack.append(Terminal(kind=token.kind, value=token.value))
        elif token.kind == TokenKind.OPERATOR:
            stack.append(_build_operator(token, stack))
        elif token.kind == TokenKind.FUNCTION_CALL:
            args = _pop(stack, token.arity, token)
            stack.append(FunctionCall(function=token.value, args=tuple(args)))
        else:
            raise ExpressionSyntaxError(f"Unexpected {token} in postfix sequence", token.pos)

    if not stack:
        raise ExpressionSyntaxError("Empty expression")
    if len(stack) > 1:
        raise ExpressionSyntaxError(f"Malformed expression: {len(stack)} values without an operator")
    return stack[0]


def _build_operator(token: Token, stack: list[Expr]) -> Expr:
    op = token.operator
    if op in (Operator.TERNARY_IF, Operator.TERNARY_ELSE):
        raise ExpressionSyntaxError(f"Unpaired ternary marker {op.value!r}", token.pos)

    operands = _pop(stack, op.arity, token)
    if op.arity == 1:
        return Unary(op=op, operand=operands[0])
    if op.arity == 3:
        condition, then_expr, else_expr = operands
        return Ternary(condition=condition, then_expr=then_expr, else_expr=else_expr)
    left, right = operands
    return Binary(op=op, left=left, right=right)


def _pop(stack: list[Expr], count: int, token: Token) -> list[Expr]:
    """Pop ``count`` nodes, returned in source order."""
    if len(stack) < count:
        raise ExpressionSyntaxError(
            f"'{token}' expects {count} operand(s), found {len(stack)}", token.pos
        )
    if count == 0:
        return []
    operands = stack[-count:]
    del stack[-count:]
    return operands
