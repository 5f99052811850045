"""
Expression AST.

Nodes are frozen pydantic models: built once by :mod:`exprlang.builder`,
never mutated, and safe to evaluate concurrently against different bindings.

Node types:
- Terminal: number, boolean, string literal or variable reference
- Unary: unary+, unary-, !
- Binary: arithmetic, comparison, logical
- Ternary: condition ? then : else
- FunctionCall: name(arg1, arg2, ...)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from exprlang.functions import Function
from exprlang.tokens import Operator, TokenKind
from exprlang.values import render


class Terminal(BaseModel):
    """A literal operand or a variable reference resolved at evaluation time."""

    kind: TokenKind = Field(description="NUMBER, BOOLEAN, STRING or VARIABLE")
    value: bool | float | str = Field(description="Literal value or variable name")

    model_config = ConfigDict(frozen=True)

    @property
    def is_variable(self) -> bool:
        return self.kind == TokenKind.VARIABLE

    def __str__(self) -> str:
        if self.kind == TokenKind.STRING:
            return repr(self.value)
        if self.kind == TokenKind.VARIABLE:
            return str(self.value)
        return render(self.value)


class Unary(BaseModel):
    """Unary operation: op operand."""

    op: Operator
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        symbol = "!" if self.op == Operator.NOT else self.op.value[-1]
        return f"({symbol}{self.operand})"


class Binary(BaseModel):
    """Binary operation: left op right."""

    op: Operator
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class Ternary(BaseModel):
    """Conditional: condition ? then_expr : else_expr."""

    condition: Expr
    then_expr: Expr
    else_expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.condition} ? {self.then_expr} : {self.else_expr})"


class FunctionCall(BaseModel):
    """Call of a registry function with arguments in call order."""

    function: Function
    args: tuple[Expr, ...] = Field(default=(), description="Arguments")

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return self.function.name

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.name}({args_str})"


Expr = Terminal | Unary | Binary | Ternary | FunctionCall

Unary.model_rebuild()
Binary.model_rebuild()
Ternary.model_rebuild()
FunctionCall.model_rebuild()


def variables(expr: Expr) -> set[str]:
    """Names of all variables referenced anywhere in the tree."""
    if isinstance(expr, Terminal):
        return {str(expr.value)} if expr.is_variable else set()
    if isinstance(expr, Unary):
        return variables(expr.operand)
    if isinstance(expr, Binary):
        return variables(expr.left) | variables(expr.right)
    if isinstance(expr, Ternary):
        return variables(expr.condition) | variables(expr.then_expr) | variables(expr.else_expr)
    names: set[str] = set()
    for arg in expr.args:
        names |= variables(arg)
    return names
