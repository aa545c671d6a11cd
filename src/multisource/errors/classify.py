"""Exception classification for structured error handling."""

from __future__ import annotations

import asyncio
import json

import httpx
import msgspec

from multisource.errors.types import (
    AggregatorError,
    ErrorCategory,
    ErrorSeverity,
    SourceTimeoutError,
    SourceValidationError,
    error_message,
)


def classify_http_status_error(error: httpx.HTTPStatusError) -> AggregatorError:
    """Classify HTTP status errors into structured errors."""

    status = error.response.status_code

    try:
        body = error.response.json()
        detail = body.get("error", body.get("message", str(status)))
    except (ValueError, AttributeError):
        detail = error.response.text[:200] if error.response.text else str(status)

    if status == 429 or status >= 500:
        severity = ErrorSeverity.TRANSIENT
    else:
        severity = ErrorSeverity.RECOVERABLE

    return AggregatorError(
        message=f"HTTP {status}: {detail}",
        category=ErrorCategory.NETWORK,
        severity=severity,
        details={"status_code": status, "response": detail},
    )


def classify_exception(
    e: BaseException,
    source_id: str | None = None,
) -> AggregatorError:
    """Classify any exception into a structured error."""

    if isinstance(e, SourceTimeoutError):
        return AggregatorError(
            message=error_message(e),
            category=ErrorCategory.TIMEOUT,
            severity=ErrorSeverity.TRANSIENT,
            source=source_id,
            remediation="Increase the source timeout or check the provider.",
        )

    if isinstance(e, SourceValidationError):
        return AggregatorError(
            message=error_message(e),
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.RECOVERABLE,
            source=source_id,
        )

    if isinstance(e, httpx.TimeoutException):
        return AggregatorError(
            message="Request timed out",
            category=ErrorCategory.TIMEOUT,
            severity=ErrorSeverity.TRANSIENT,
            source=source_id,
            remediation="Check your network connection and try again.",
        )

    if isinstance(e, httpx.HTTPStatusError):
        error = classify_http_status_error(e)
        return msgspec.structs.replace(error, source=source_id)

    if isinstance(e, (httpx.NetworkError, httpx.ProtocolError)):
        return AggregatorError(
            message="Failed to connect to server",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
            source=source_id,
            remediation="Check your internet connection. The provider may be down.",
        )

    if isinstance(e, (json.JSONDecodeError, msgspec.DecodeError)):
        return AggregatorError(
            message="Failed to parse response",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.RECOVERABLE,
            source=source_id,
            details={"error": str(e)},
        )

    if isinstance(e, asyncio.TimeoutError):
        return AggregatorError(
            message="Operation timed out",
            category=ErrorCategory.TIMEOUT,
            severity=ErrorSeverity.TRANSIENT,
            source=source_id,
        )

    if isinstance(e, Exception):
        return AggregatorError(
            message=error_message(e),
            category=ErrorCategory.FETCH,
            severity=ErrorSeverity.RECOVERABLE,
            source=source_id,
            details={"type": type(e).__name__},
        )

    return AggregatorError(
        message=error_message(e),
        category=ErrorCategory.UNKNOWN,
        severity=ErrorSeverity.FATAL,
        source=source_id,
        details={"type": type(e).__name__},
    )
