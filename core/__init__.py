"""
SCRIPTORIUM - Core Module

Foundational pieces shared by every other package. Currently the unified
error hierarchy; it imports nothing else from the project.

Usage:
    from core import ScriptoriumError, GenerationError, classify_error
"""

from core.errors import (
    ScriptoriumError,
    ScriptoriumConfigError,
    ScriptoriumValidationError,
    ScriptoriumTimeoutError,
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
    GenerationError,
    CommentaryBusyError,
    ErrorContext,
    ErrorSeverity,
    classify_error,
    error_handler,
)

__all__ = [
    "ScriptoriumError",
    "ScriptoriumConfigError",
    "ScriptoriumValidationError",
    "ScriptoriumTimeoutError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderResponseError",
    "GenerationError",
    "CommentaryBusyError",
    "ErrorContext",
    "ErrorSeverity",
    "classify_error",
    "error_handler",
]
