"""Shared pytest fixtures for exprlang tests."""

import pytest

from exprlang import ExpressionEngine
from exprlang.functions import DEFAULT_REGISTRY, Registry


@pytest.fixture
def engine() -> ExpressionEngine:
    """Return an engine with the default catalogue and configuration."""
    return ExpressionEngine()


@pytest.fixture
def registry() -> Registry:
    """Return the default function/constant registry."""
    return DEFAULT_REGISTRY
