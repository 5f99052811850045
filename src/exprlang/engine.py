"""
Expression engine facade.

Composes lexer, converter, builder and evaluator behind typed entry points.
An engine holds only immutable configuration and a read-only registry, so a
single instance may be shared across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from exprlang import evaluator
from exprlang.builder import build
from exprlang.config import EngineConfig
from exprlang.converter import to_postfix
from exprlang.evaluator import Bindings
from exprlang.expressions import Expr
from exprlang.functions import DEFAULT_CONSTANTS, DEFAULT_FUNCTIONS, Constant, Function, Registry
from exprlang.lexer import Lexer
from exprlang.tokens import Token
from exprlang.values import Value

logger = logging.getLogger(__name__)


class ExpressionEngine:
    """Parses and evaluates expressions.

    Usage:
        engine = ExpressionEngine()
        engine.evaluate_number("2 + 3 * x", {"x": 4})  # 14.0

        ast = engine.preprocess("price * qty > limit")
        engine.evaluate_boolean(ast, {"price": 2, "qty": 3, "limit": 5})
    """

    def __init__(
        self,
        functions: Iterable[Function] | None = None,
        constants: Iterable[Constant] | None = None,
        decimal_separator: str = ".",
        argument_separator: str = ",",
        strict: bool = True,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig(
            decimal_separator=decimal_separator,
            argument_separator=argument_separator,
            strict=strict,
        )
        self.registry = Registry(
            functions=DEFAULT_FUNCTIONS if functions is None else functions,
            constants=DEFAULT_CONSTANTS if constants is None else constants,
        )
        self._lexer = Lexer(self.config, self.registry)

    def tokenize(self, expression: str) -> list[Token]:
        return self._lexer.tokenize(expression)

    def to_postfix(self, expression: str) -> list[Token]:
        return to_postfix(self.tokenize(expression))

    def preprocess(self, expression: str) -> Expr:
        """Parse ``expression`` once into a reusable, immutable AST.

        Raises:
            LexError: If tokenization fails.
            ExpressionSyntaxError: If the tokens do not form an expression.
        """
        expr = build(self.to_postfix(expression))
        logger.debug("Preprocessed %r as %s", expression, expr)
        return expr

    def _as_expr(self, expression: str | Expr) -> Expr:
        if isinstance(expression, str):
            return self.preprocess(expression)
        return expression

    def evaluate(self, expression: str | Expr, bindings: Bindings | None = None) -> Value:
        """Evaluate to whichever value kind the expression produces."""
        return evaluator.evaluate(self._as_expr(expression), bindings)

    def evaluate_number(self, expression: str | Expr, bindings: Bindings | None = None) -> float:
        return evaluator.evaluate_number(self._as_expr(expression), bindings)

    def evaluate_boolean(self, expression: str | Expr, bindings: Bindings | None = None) -> bool:
        return evaluator.evaluate_boolean(self._as_expr(expression), bindings)

    def evaluate_string(self, expression: str | Expr, bindings: Bindings | None = None) -> str:
        return evaluator.evaluate_string(self._as_expr(expression), bindings)
