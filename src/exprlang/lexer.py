"""
Lexer for the expression language.

Converts an expression string into a sequence of typed tokens. Function
names and constants are resolved against a :class:`Registry` here, so the
token stream already carries resolved function references, call-site
argument counts, and constant values.
"""

from __future__ import annotations

import logging
import re

from exprlang.config import EngineConfig
from exprlang.errors import ArityError, LexError, UnknownFunctionError
from exprlang.functions import DEFAULT_REGISTRY, Registry
from exprlang.tokens import (
    ONE_CHAR_OPERATORS,
    TWO_CHAR_OPERATORS,
    Operator,
    Token,
    TokenKind,
)
from exprlang.values import ValueKind, kind_of

logger = logging.getLogger(__name__)

# Identifier: letter or underscore followed by alphanumerics/underscores
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DIGITS = frozenset("0123456789")
_WHITESPACE = frozenset(" \t\n\r")
_QUOTES = frozenset("'\"")

_KEYWORDS: dict[str, bool] = {"true": True, "false": False}

_CONSTANT_KINDS: dict[ValueKind, TokenKind] = {
    ValueKind.NUMBER: TokenKind.NUMBER,
    ValueKind.BOOLEAN: TokenKind.BOOLEAN,
    ValueKind.STRING: TokenKind.STRING,
}


class Lexer:
    """Splits expression text into tokens.

    Holds only read-only configuration; every :meth:`tokenize` call keeps its
    state in locals, so one instance can be shared between threads.
    """

    def __init__(self, config: EngineConfig | None = None, registry: Registry | None = None) -> None:
        self.config = config or EngineConfig()
        self.registry = registry or DEFAULT_REGISTRY
        sep = re.escape(self.config.decimal_separator)
        self._number_re = re.compile(rf"[0-9][0-9{sep}]*")

    def tokenize(self, source: str) -> list[Token]:
        """Tokenize an expression string into a list of tokens."""
        tokens: list[Token] = []
        i = 0
        n = len(source)

        while i < n:
            c = source[i]

            if c in _WHITESPACE:
                i += 1
                continue

            # String literals
            if c in _QUOTES:
                i, tok = _read_string(source, i)
                tokens.append(tok)
                continue

            # Two-character operators
            two = source[i : i + 2]
            if two in TWO_CHAR_OPERATORS:
                _require_operand_after(source, i, 2)
                tokens.append(Token(TokenKind.OPERATOR, TWO_CHAR_OPERATORS[two], i))
                i += 2
                continue

            if c in _DIGITS:
                i = self._read_number(source, i, tokens)
                continue

            if c.isascii() and (c.isalpha() or c == "_"):
                i = self._read_identifier(source, i, tokens)
                continue

            if c == self.config.argument_separator:
                tokens.append(Token(TokenKind.DELIMITER, c, i))
                i += 1
                continue

            if c in "+-":
                _require_operand_after(source, i, 1)
                tokens.append(Token(TokenKind.OPERATOR, _plus_or_minus(c, tokens), i))
                i += 1
                continue

            if c in ONE_CHAR_OPERATORS:
                _require_operand_after(source, i, 1)
                tokens.append(Token(TokenKind.OPERATOR, ONE_CHAR_OPERATORS[c], i))
                i += 1
                continue

            if c == "(":
                _require_operand_after(source, i, 1)
                tokens.append(Token(TokenKind.LEFT_BRACKET, c, i))
                i += 1
                continue

            if c == ")":
                tokens.append(Token(TokenKind.RIGHT_BRACKET, c, i))
                i += 1
                continue

            if self.config.strict:
                raise LexError(f"Unexpected character: {c!r}", i)
            logger.debug("Skipping unrecognised character %r at position %d", c, i)
            i += 1

        logger.debug("Tokenized %r into %d tokens", source, len(tokens))
        return tokens

    def _read_number(self, source: str, start: int, tokens: list[Token]) -> int:
        m = self._number_re.match(source, start)
        assert m is not None
        text = m.group(0)
        normalised = text.replace(self.config.decimal_separator, ".")
        try:
            number = float(normalised)
        except ValueError:
            raise LexError(f"Error parsing number '{text}'", start) from None
        tokens.append(Token(TokenKind.NUMBER, number, start))
        return m.end()

    def _read_identifier(self, source: str, start: int, tokens: list[Token]) -> int:
        m = _IDENT_RE.match(source, start)
        assert m is not None
        name = m.group(0)
        end = m.end()

        if end < len(source) and source[end] == "(":
            function = self.registry.function(name)
            if function is None:
                raise UnknownFunctionError(name, start)
            count = _count_arguments(source, end, self.config.argument_separator)
            if not function.accepts(count):
                raise ArityError(name, count, function.arity, start)
            tokens.append(Token(TokenKind.FUNCTION_CALL, function, start, arity=count))
            return end

        if name in _KEYWORDS:
            tokens.append(Token(TokenKind.BOOLEAN, _KEYWORDS[name], start))
            return end

        constant = self.registry.constant(name)
        if constant is not None:
            kind = _CONSTANT_KINDS[kind_of(constant.value)]
            tokens.append(Token(kind, constant.value, start))
            return end

        tokens.append(Token(TokenKind.VARIABLE, name, start))
        return end


def _plus_or_minus(c: str, tokens: list[Token]) -> Operator:
    """A sign is unary unless it follows an operand or a closing bracket."""
    unary = not tokens or not (tokens[-1].is_operand or tokens[-1].kind == TokenKind.RIGHT_BRACKET)
    if c == "+":
        return Operator.UNARY_PLUS if unary else Operator.PLUS
    return Operator.UNARY_MINUS if unary else Operator.MINUS


def _require_operand_after(source: str, pos: int, width: int) -> None:
    if not source[pos + width :].strip():
        symbol = source[pos : pos + width]
        raise LexError(f"Malformed expression. '{symbol}' requires operand after it", pos)


def _count_arguments(source: str, open_pos: int, separator: str) -> int:
    """Count the arguments of the call whose '(' is at ``open_pos``.

    Separators count only at the call's own nesting depth; quoted text is
    skipped. ``f()`` has zero arguments.
    """
    depth = 0
    separators = 0
    empty = True
    i = open_pos
    n = len(source)

    while i < n:
        c = source[i]
        if c in _QUOTES:
            i = _skip_string(source, i)
            empty = False
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                break
        elif c == separator and depth == 1:
            separators += 1
        if i != open_pos and c not in _WHITESPACE:
            empty = False
        i += 1

    return 0 if empty else separators + 1


def _skip_string(source: str, start: int) -> int:
    """Index just past the string literal at ``start`` (or end of input)."""
    quote = source[start]
    i = start + 1
    while i < len(source):
        if source[i] == "\\":
            i += 2
            continue
        if source[i] == quote:
            return i + 1
        i += 1
    return len(source)


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted string literal."""
    quote = source[start]
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "\\":
            if i + 1 < n:
                chars.append(source[i + 1])
                i += 2
                continue
            raise LexError("Unterminated escape sequence", i)
        if c == quote:
            return i + 1, Token(TokenKind.STRING, "".join(chars), start)
        chars.append(c)
        i += 1

    raise LexError("Unterminated string literal", start)


def tokenize(
    source: str,
    config: EngineConfig | None = None,
    registry: Registry | None = None,
) -> list[Token]:
    """Tokenize ``source`` with the given (or default) configuration and registry.

    Raises:
        LexError: If the text cannot be tokenized.
    """
    return Lexer(config, registry).tokenize(source)
