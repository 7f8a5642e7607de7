"""Shared pytest fixtures for floe-patterns tests.

This module provides the structlog test configuration plus small stub
patterns with fully predictable output.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any

import pytest
import structlog
from pydantic import Field

from floe_patterns.base import Context, Pattern, PatternConfig


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests. Without this, structlog may use
    different processors depending on test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class ConstantConfig(PatternConfig):
    """Configuration for ConstantPattern."""

    value: Any = Field(default=1.0, description="Value returned by every call")


class ConstantPattern(Pattern):
    """Pattern that always returns its configured value."""

    name = "Constant"
    description = "Returns a fixed value"
    config_model = ConstantConfig

    def generate(self, context: Context | None = None) -> Any:
        return self.settings.value


class CountingPattern(Pattern):
    """Pattern returning 1, 2, 3, ... (rewound by reset)."""

    name = "Counting"
    description = "Returns successive integers"

    def _configure(self) -> None:
        self.calls = 0

    def generate(self, context: Context | None = None) -> int:
        self.calls += 1
        return self.calls

    def reset(self) -> None:
        super().reset()
        self.calls = 0


@pytest.fixture
def constant() -> type[ConstantPattern]:
    """Return the ConstantPattern class for building stubs."""
    return ConstantPattern


@pytest.fixture
def counting() -> type[CountingPattern]:
    """Return the CountingPattern class."""
    return CountingPattern


@pytest.fixture
def base_time() -> datetime:
    """Return a fixed, timezone-aware reference moment (a Monday)."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)
