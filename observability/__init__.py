"""
SCRIPTORIUM - Observability Package

Structured logging (structlog) with OpenTelemetry trace context.

Usage:
    from observability import setup_logging, get_logger, get_tracer

    setup_logging()
    logger = get_logger(__name__)
    tracer = get_tracer(__name__)
"""
from opentelemetry import trace

from .logging import (
    setup_logging,
    get_logger,
    LoggingConfig,
    LogContext,
    bind_context,
    clear_context,
    shutdown_logging,
    CommentaryLogger,
    ProviderLogger,
)


def get_tracer(name: str) -> trace.Tracer:
    """Get an OpenTelemetry tracer; a no-op tracer unless an SDK provider is installed."""
    return trace.get_tracer(name)


__all__ = [
    "setup_logging",
    "get_logger",
    "get_tracer",
    "LoggingConfig",
    "LogContext",
    "bind_context",
    "clear_context",
    "shutdown_logging",
    "CommentaryLogger",
    "ProviderLogger",
]
