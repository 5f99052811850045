"""
Error types for exprlang lexing, parsing, and evaluation.
"""

from __future__ import annotations


class ExpressionError(Exception):
    """Base exception for all exprlang errors."""

    def __init__(self, message: str, pos: int | None = None) -> None:
        self.message = message
        self.pos = pos
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with the source position if available."""
        if self.pos is not None:
            return f"{self.message} (at position {self.pos})"
        return self.message


class LexError(ExpressionError):
    """
    Raised when expression text cannot be split into tokens.

    Examples:
    - Operator with nothing after it
    - Unparsable number literal
    - Unterminated string literal
    - Unexpected character (strict mode)
    """


class UnknownFunctionError(LexError):
    """Raised when a call site names a function missing from the registry."""

    def __init__(self, name: str, pos: int | None = None) -> None:
        self.name = name
        super().__init__(f"Unknown function: {name}()", pos)


class ArityError(LexError):
    """Raised when a call site passes an argument count outside the function's range."""

    def __init__(self, name: str, count: int, arity: str, pos: int | None = None) -> None:
        self.name = name
        self.count = count
        super().__init__(
            f"Function {name}() called with {count} argument(s), expects {arity}",
            pos,
        )


class ExpressionSyntaxError(ExpressionError):
    """
    Raised when a token stream does not form a valid expression.

    Examples:
    - Mismatched parenthesis
    - ':' without a matching '?'
    - Operator missing operands
    """


class EvaluationError(ExpressionError):
    """Base class for failures while walking an expression tree."""


class UnresolvedVariableError(EvaluationError):
    """Raised when a variable is absent from the bindings."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Could not resolve variable '{name}'")


class ExpressionTypeError(EvaluationError):
    """Raised when an operand or result has the wrong value kind."""


class FunctionError(EvaluationError):
    """Raised by a function implementation on bad arguments."""


class RegistryError(ExpressionError):
    """Raised when a function/constant registry is misconfigured."""
