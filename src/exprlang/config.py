"""
Engine configuration.

Construction-time settings for the lexer: the decimal separator used in
number literals, the separator between function arguments, and whether
unrecognised characters are rejected or skipped.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from exprlang.tokens import RESERVED_CHARS

_TRUTHY = {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    """Configuration for an expression engine."""

    decimal_separator: str = Field(default=".", description="Decimal point in number literals")
    argument_separator: str = Field(default=",", description="Separator between function arguments")
    strict: bool = Field(
        default=True,
        description="Reject unrecognised characters instead of skipping them",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("decimal_separator", "argument_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Separators must be a single character that cannot start another token."""
        if len(v) != 1:
            raise ValueError(f"Separator must be a single character, got {v!r}")
        if v.isalnum() or v.isspace() or v in RESERVED_CHARS:
            raise ValueError(f"Separator {v!r} clashes with expression syntax")
        return v

    @model_validator(mode="after")
    def validate_distinct_separators(self) -> EngineConfig:
        if self.decimal_separator == self.argument_separator:
            raise ValueError("Decimal and argument separators must differ")
        return self

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load configuration from environment variables."""
        return cls(
            decimal_separator=os.environ.get("EXPRLANG_DECIMAL_SEPARATOR", "."),
            argument_separator=os.environ.get("EXPRLANG_ARGUMENT_SEPARATOR", ","),
            strict=os.environ.get("EXPRLANG_STRICT", "1").strip().lower() in _TRUTHY,
        )
