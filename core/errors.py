"""
SCRIPTORIUM - Unified Error Handling

Provides the error hierarchy and handling utilities used across the
resolver, commentary, timeline and provider layers.

Features:
- Hierarchical exception classes with context preservation
- Error severity levels for prioritized handling
- Structured error context for debugging
- OpenTelemetry span recording
"""

from __future__ import annotations

import asyncio
import functools
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
    ParamSpec,
)

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")
P = ParamSpec("P")


class ErrorSeverity(Enum):
    """Error severity levels for prioritized handling."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Structured context for error debugging and tracing."""

    operation: str
    component: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    verse_ref: Optional[str] = None
    provider: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "timestamp": self.timestamp.isoformat(),
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "verse_ref": self.verse_ref,
            "provider": self.provider,
            "metadata": self.metadata,
            "stack_trace": self.stack_trace,
        }

    @classmethod
    def from_current_span(
        cls,
        operation: str,
        component: str,
        **kwargs: Any
    ) -> "ErrorContext":
        """Create context from current OpenTelemetry span."""
        span = trace.get_current_span()
        trace_id = None
        span_id = None

        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                trace_id = format(ctx.trace_id, "032x")
                span_id = format(ctx.span_id, "016x")

        return cls(
            operation=operation,
            component=component,
            trace_id=trace_id,
            span_id=span_id,
            stack_trace=traceback.format_exc(),
            **kwargs
        )


class ScriptoriumError(Exception):
    """
    Base exception for all SCRIPTORIUM-specific errors.

    Provides:
    - Structured error context
    - Severity level
    - Chained exception support
    - OpenTelemetry span recording
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "SCRIPTORIUM_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)
            span.set_attribute("error.recoverable", self.recoverable)
            if self.context:
                span.set_attribute("error.component", self.context.component)
                span.set_attribute("error.operation", self.context.operation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f" (component: {self.context.component})")
        if self.cause:
            parts.append(f" [caused by: {self.cause}]")
        return "".join(parts)

    def with_context(self, **kwargs: Any) -> "ScriptoriumError":
        """Add additional context to the error."""
        if self.context:
            self.context.metadata.update(kwargs)
        else:
            self.context = ErrorContext(
                operation="unknown",
                component="unknown",
                metadata=kwargs
            )
        return self


class ScriptoriumConfigError(ScriptoriumError):
    """Configuration-related errors."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key


class ProviderConfigError(ScriptoriumConfigError):
    """A completion provider cannot be constructed (missing key, unknown name)."""

    error_code = "PROVIDER_CONFIG_ERROR"


class ProviderError(ScriptoriumError):
    """A completion provider call failed."""

    error_code = "PROVIDER_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.provider = provider
        self.model = model


class ProviderResponseError(ProviderError):
    """The provider answered but the response could not be parsed."""

    error_code = "PROVIDER_RESPONSE_ERROR"

    def __init__(
        self,
        message: str,
        raw_response: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.raw_response = raw_response


class GenerationError(ScriptoriumError):
    """Commentary or cross-reference generation failed as a whole."""

    error_code = "GENERATION_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        verse_ref: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.verse_ref = verse_ref


class CommentaryBusyError(ScriptoriumError):
    """Another commentary is already being generated in this session."""

    error_code = "COMMENTARY_BUSY"
    default_severity = ErrorSeverity.INFO

    def __init__(
        self,
        message: str,
        verse_ref: Optional[str] = None,
        in_flight: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.verse_ref = verse_ref
        self.in_flight = in_flight


class ScriptoriumValidationError(ScriptoriumError):
    """Data validation errors."""

    error_code = "VALIDATION_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.actual_value = actual_value


class ScriptoriumTimeoutError(ScriptoriumError):
    """Timeout-related errors."""

    error_code = "TIMEOUT_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        timeout_seconds: Optional[float] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.timeout_seconds = timeout_seconds


# Error mapping for automatic classification
ERROR_TYPE_MAP: Dict[Type[BaseException], Type[ScriptoriumError]] = {
    asyncio.TimeoutError: ScriptoriumTimeoutError,
    TimeoutError: ScriptoriumTimeoutError,
    ConnectionError: ProviderError,
    ValueError: ScriptoriumValidationError,
}


def classify_error(error: BaseException) -> ScriptoriumError:
    """Classify a generic exception into the appropriate ScriptoriumError type."""
    if isinstance(error, ScriptoriumError):
        return error
    for error_type, mapped_type in ERROR_TYPE_MAP.items():
        if isinstance(error, error_type):
            return mapped_type(
                message=str(error),
                cause=error,
            )
    return ScriptoriumError(
        message=str(error),
        cause=error,
    )


def error_handler(
    *error_types: Type[Exception],
    reraise_as: Type[ScriptoriumError] = ScriptoriumError,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
) -> Callable[[Callable[P, T]], Callable[P, Union[T, Any]]]:
    """
    Decorator converting foreign exceptions into a ScriptoriumError subtype.

    ScriptoriumErrors raised inside the wrapped function pass through untouched.

    Usage:
        @error_handler(httpx.HTTPError, reraise_as=ProviderError)
        async def call_vendor():
            ...
    """
    if not error_types:
        error_types = (Exception,)

    def decorator(func: Callable[P, T]) -> Callable[P, Union[T, Any]]:
        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> Union[T, Any]:
            try:
                return func(*args, **kwargs)
            except ScriptoriumError:
                raise
            except error_types as e:
                raise reraise_as(
                    message=str(e),
                    cause=e,
                    severity=severity,
                ) from e

        @functools.wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Union[T, Any]:
            try:
                return await func(*args, **kwargs)
            except ScriptoriumError:
                raise
            except error_types as e:
                raise reraise_as(
                    message=str(e),
                    cause=e,
                    severity=severity,
                ) from e

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
