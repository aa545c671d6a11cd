"""Error types and classifications."""

from __future__ import annotations

import asyncio
from datetime import datetime
from enum import StrEnum

import msgspec


class ErrorCategory(StrEnum):
    """Why a source attempt failed."""

    TIMEOUT = "timeout"
    VALIDATION = "validation"
    FETCH = "fetch"
    NETWORK = "network"
    PARSE = "parse"
    FALLBACK = "fallback"
    UNKNOWN = "unknown"


class ErrorSeverity(StrEnum):
    """Error severity levels."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    TRANSIENT = "transient"


class SourceTimeoutError(asyncio.TimeoutError):
    """A source did not answer within its own timeout."""

    def __init__(self, message: str = "Timeout") -> None:
        super().__init__(message)


class SourceValidationError(ValueError):
    """A source answered but its value was rejected by the validator."""

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)


class UnknownStrategyError(ValueError):
    """Raised when an aggregation is requested with an unknown strategy name."""

    def __init__(self, strategy: str) -> None:
        super().__init__(f"Unknown aggregation strategy: {strategy}")
        self.strategy = strategy


class AggregatorError(msgspec.Struct, frozen=True):
    """Structured error with category and remediation."""

    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    source: str | None = None
    remediation: str | None = None
    details: dict | None = None
    timestamp: datetime = msgspec.field(
        default_factory=lambda: datetime.now().astimezone()
    )


def error_message(exc: BaseException) -> str:
    """Message recorded in a source trace for an exception."""
    message = str(exc)
    return message if message else type(exc).__name__
