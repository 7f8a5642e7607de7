"""Structured logging and OpenTelemetry spans for floe-patterns.

This module provides:
- Structured logging setup via structlog, for applications embedding the package
- OpenTelemetry span helpers for batch generation (samples, series)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer

logger = structlog.get_logger(__name__)

_tracer: Tracer | None = None

# Tracer name for OpenTelemetry
TRACER_NAME = "floe.patterns"


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for floe-patterns.

    Without a configured SDK this is the no-op tracer.

    Returns:
        OpenTelemetry Tracer instance.
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for floe-patterns.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = False,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "sample", "generate_series").
        kind: Span kind.
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end at debug level.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with span("sample", attributes={"pattern.name": "Normal Distribution"}):
        ...     values = [pattern.generate() for _ in range(1000)]
    """
    tracer = get_tracer()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **attrs)
            raise


@contextmanager
def pattern_operation(
    operation: str,
    *,
    pattern: str,
    count: int | None = None,
) -> Iterator[Span]:
    """Create a span for a batch pattern operation with standard attributes.

    Args:
        operation: Operation name (e.g., "sample", "generate_series").
        pattern: Pattern display name.
        count: Requested number of values, when known up front.

    Yields:
        OpenTelemetry Span instance.
    """
    attrs: dict[str, Any] = {"pattern.operation": operation, "pattern.name": pattern}
    if count is not None:
        attrs["pattern.count"] = count

    with span(f"pattern.{operation}", attributes=attrs) as s:
        yield s
