"""JSON output utilities for multisource."""

from __future__ import annotations

import json
import sys
from datetime import datetime

import msgspec

from multisource.errors.types import AggregatorError
from multisource.models import AggregationResult

__all__ = [
    "ErrorResponse",
    "ErrorData",
    "output_json",
    "output_json_pretty",
    "output_json_error",
    "from_aggregator_error",
    "result_to_dict",
]


class ErrorData(msgspec.Struct, frozen=True, omit_defaults=True):
    """Error data with category, severity, and remediation."""

    message: str
    category: str
    severity: str
    source: str | None = None
    remediation: str | None = None
    details: dict | None = None
    timestamp: str = msgspec.field(
        default_factory=lambda: datetime.now().astimezone().isoformat()
    )


class ErrorResponse(msgspec.Struct, frozen=True):
    """Structured error response for JSON output."""

    error: ErrorData


def output_json(data: object) -> None:
    """Output data as compact JSON to stdout."""
    sys.stdout.buffer.write(msgspec.json.encode(data))
    sys.stdout.buffer.write(b"\n")


def output_json_pretty(data: object, indent: int = 2) -> None:
    """Output data as pretty-printed JSON to stdout.

    Args:
        data: Any msgspec-serializable object
        indent: Number of spaces for indentation
    """
    python_obj = msgspec.to_builtins(data, enc_hook=str)
    sys.stdout.write(json.dumps(python_obj, indent=indent))
    sys.stdout.write("\n")


def output_json_error(
    message: str,
    category: str = "unknown",
    severity: str = "recoverable",
    source: str | None = None,
    remediation: str | None = None,
    details: dict | None = None,
) -> None:
    """Output an error in standardized JSON format."""
    output_json_pretty(
        ErrorResponse(
            error=ErrorData(
                message=message,
                category=category,
                severity=severity,
                source=source,
                remediation=remediation,
                details=details,
            )
        )
    )


def from_aggregator_error(error: AggregatorError) -> ErrorResponse:
    """Create an ErrorResponse from an AggregatorError."""
    return ErrorResponse(
        error=ErrorData(
            message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            source=error.source,
            remediation=error.remediation,
            details=error.details,
            timestamp=error.timestamp.isoformat(),
        )
    )


def result_to_dict(result: AggregationResult, include_data: bool = True) -> dict:
    """Convert an aggregation result to JSON-ready builtins.

    Per-source data is dropped unless ``include_data`` is set, since it
    usually repeats the resolved value.
    """
    data = msgspec.to_builtins(result, enc_hook=str)
    if not include_data:
        for source in data["sources"]:
            source.pop("data", None)
    return data
