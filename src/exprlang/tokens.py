"""
Token model shared by the lexer, converter, and AST builder.
"""

from __future__ import annotations

from enum import StrEnum, auto
from typing import Any


class TokenKind(StrEnum):
    """Token types for the expression language."""

    # Operands
    NUMBER = auto()
    BOOLEAN = auto()
    STRING = auto()
    VARIABLE = auto()

    OPERATOR = auto()

    # Punctuation
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()
    DELIMITER = auto()

    FUNCTION_CALL = auto()


OPERAND_KINDS = frozenset(
    {TokenKind.NUMBER, TokenKind.BOOLEAN, TokenKind.STRING, TokenKind.VARIABLE}
)


class Associativity(StrEnum):
    LEFT = auto()
    RIGHT = auto()


class Operator(StrEnum):
    """Operators with their source spelling."""

    # Ternary
    TERNARY_IF = "?"
    TERNARY_ELSE = ":"
    TERNARY = "?:"
    # Logical
    OR = "||"
    AND = "&&"
    # Equality
    EQ = "=="
    NE = "!="
    # Relational
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    # Arithmetic
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "^"
    # Unary
    UNARY_PLUS = "unary+"
    UNARY_MINUS = "unary-"
    NOT = "!"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self][0]

    @property
    def associativity(self) -> Associativity:
        return _PRECEDENCE[self][1]

    @property
    def is_left_associative(self) -> bool:
        return self.associativity == Associativity.LEFT

    @property
    def arity(self) -> int:
        """Number of operands this operator consumes in postfix form."""
        if self in UNARY_OPERATORS:
            return 1
        if self == Operator.TERNARY:
            return 3
        return 2


_PRECEDENCE: dict[Operator, tuple[int, Associativity]] = {
    Operator.TERNARY_IF: (1, Associativity.RIGHT),
    Operator.TERNARY_ELSE: (1, Associativity.RIGHT),
    Operator.TERNARY: (1, Associativity.RIGHT),
    Operator.OR: (2, Associativity.LEFT),
    Operator.AND: (3, Associativity.LEFT),
    Operator.EQ: (4, Associativity.LEFT),
    Operator.NE: (4, Associativity.LEFT),
    Operator.LT: (5, Associativity.LEFT),
    Operator.LE: (5, Associativity.LEFT),
    Operator.GT: (5, Associativity.LEFT),
    Operator.GE: (5, Associativity.LEFT),
    Operator.PLUS: (6, Associativity.LEFT),
    Operator.MINUS: (6, Associativity.LEFT),
    Operator.MUL: (7, Associativity.LEFT),
    Operator.DIV: (7, Associativity.LEFT),
    Operator.MOD: (7, Associativity.LEFT),
    Operator.POW: (8, Associativity.RIGHT),
    Operator.UNARY_PLUS: (9, Associativity.RIGHT),
    Operator.UNARY_MINUS: (9, Associativity.RIGHT),
    Operator.NOT: (9, Associativity.RIGHT),
}

UNARY_OPERATORS = frozenset({Operator.UNARY_PLUS, Operator.UNARY_MINUS, Operator.NOT})

# Operators matched on two characters before their one-character prefixes
TWO_CHAR_OPERATORS: dict[str, Operator] = {
    "&&": Operator.AND,
    "||": Operator.OR,
    "<=": Operator.LE,
    ">=": Operator.GE,
    "==": Operator.EQ,
    "!=": Operator.NE,
}

ONE_CHAR_OPERATORS: dict[str, Operator] = {
    "%": Operator.MOD,
    "*": Operator.MUL,
    "/": Operator.DIV,
    "^": Operator.POW,
    "<": Operator.LT,
    ">": Operator.GT,
    "!": Operator.NOT,
    "?": Operator.TERNARY_IF,
    ":": Operator.TERNARY_ELSE,
}

# Characters a separator may not be configured to
RESERVED_CHARS = frozenset("+-*/%^<>=!&|?:()'\"_")


class Token:
    """A single token from the expression lexer.

    ``value`` depends on ``kind``: the literal for operands, the variable name
    for variables, an :class:`Operator` for operators, and the resolved
    function for call sites. ``arity`` is only set for call sites.
    """

    __slots__ = ("kind", "value", "pos", "arity")

    def __init__(self, kind: TokenKind, value: Any = None, pos: int = 0, arity: int = 0) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos
        self.arity = arity

    @property
    def is_operand(self) -> bool:
        return self.kind in OPERAND_KINDS

    @property
    def operator(self) -> Operator:
        if self.kind != TokenKind.OPERATOR:
            raise TypeError(f"{self!r} is not an operator token")
        return self.value

    def __str__(self) -> str:
        if self.kind == TokenKind.OPERATOR:
            return self.value.value
        if self.kind == TokenKind.FUNCTION_CALL:
            return f"{self.value.name}/{self.arity}"
        if self.kind == TokenKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind == TokenKind.STRING:
            return repr(self.value)
        if self.kind == TokenKind.LEFT_BRACKET:
            return "("
        if self.kind == TokenKind.RIGHT_BRACKET:
            return ")"
        if self.kind == TokenKind.DELIMITER:
            return ","
        return str(self.value)

    def __repr__(self) -> str:
        return f"Token({self.kind}, {str(self)!r}, pos={self.pos})"


def render_tokens(tokens: list[Token]) -> str:
    """Space-separated rendering, e.g. ``2 3 4 * +`` for postfix output."""
    return " ".join(str(t) for t in tokens)
