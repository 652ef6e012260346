"""Logging and tracing for sectionlint.

- configure_logging: structlog setup (level filter, ISO timestamps, trace
  context, JSON or console rendering to stderr)
- add_trace_context: structlog processor injecting the active span's IDs
- get_tracer: thread-safe cached OpenTelemetry tracer

Only the OpenTelemetry API is required. With no SDK installed every span is
a no-op, so instrumentation costs nothing unless an application configures a
tracer provider.

Example:
    >>> from sectionlint.observability import configure_logging, get_tracer
    >>> configure_logging("DEBUG", json_output=False)
    >>> with get_tracer().start_as_current_span("sectionlint.analyze_file") as span:
    ...     span.set_attribute("sectionlint.file", "tests/test_orders.py")
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import INVALID_SPAN_ID, INVALID_TRACE_ID

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

EventDict = MutableMapping[str, Any]

TRACER_NAME = "sectionlint"

_tracers: dict[str, Tracer] = {}
_tracer_init_failed: bool = False
_lock = threading.Lock()


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add trace context to a structlog event dictionary.

    Args:
        logger: The logger instance (unused, required by structlog processor API).
        method_name: The log method name (unused).
        event_dict: The event dictionary to enrich.

    Returns:
        The event dictionary with trace_id and span_id added if a span is active.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.trace_id != INVALID_TRACE_ID and ctx.span_id != INVALID_SPAN_ID:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(log_level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structlog for the CLI.

    Logs go to stderr so that reports written to stdout stay machine
    readable.

    Args:
        log_level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON lines instead of the console format.

    Raises:
        ValueError: If the log level name is unknown.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level}"
        raise ValueError(msg)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_trace_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """Get or create a thread-safe tracer instance.

    Falls back to a NoOpTracer if OpenTelemetry initialization fails.

    Args:
        name: Instrumentation scope name.

    Returns:
        OpenTelemetry Tracer for the given name.
    """
    global _tracer_init_failed

    if name in _tracers:
        return _tracers[name]
    if _tracer_init_failed:
        return trace.NoOpTracer()

    with _lock:
        if name in _tracers:
            return _tracers[name]
        if _tracer_init_failed:
            return trace.NoOpTracer()
        try:
            tracer = trace.get_tracer(name)
        except Exception:
            _tracer_init_failed = True
            return trace.NoOpTracer()
        _tracers[name] = tracer
        return tracer


def reset_tracer() -> None:
    """Clear cached tracers (test isolation)."""
    global _tracer_init_failed
    with _lock:
        _tracers.clear()
        _tracer_init_failed = False


__all__ = [
    "TRACER_NAME",
    "add_trace_context",
    "configure_logging",
    "get_tracer",
    "reset_tracer",
]
