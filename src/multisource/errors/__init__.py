"""Error handling for multisource."""

from multisource.errors.classify import (
    classify_exception,
    classify_http_status_error,
)
from multisource.errors.types import (
    AggregatorError,
    ErrorCategory,
    ErrorSeverity,
    SourceTimeoutError,
    SourceValidationError,
    UnknownStrategyError,
    error_message,
)

__all__ = [
    # Core types
    "ErrorCategory",
    "ErrorSeverity",
    "AggregatorError",
    "SourceTimeoutError",
    "SourceValidationError",
    "UnknownStrategyError",
    "error_message",
    # Classification functions
    "classify_exception",
    "classify_http_status_error",
]
