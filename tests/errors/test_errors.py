"""Tests for error types and classification."""

import asyncio
import json
from unittest.mock import MagicMock

import httpx
import msgspec
import pytest

from multisource.errors import (
    AggregatorError,
    ErrorCategory,
    ErrorSeverity,
    SourceTimeoutError,
    SourceValidationError,
    UnknownStrategyError,
    classify_exception,
    classify_http_status_error,
    error_message,
)


def make_status_error(status: int, body: bytes = b"") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.example.com/rates")
    response = httpx.Response(status, content=body, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestErrorTypes:
    """Tests for exception types."""

    def test_timeout_message(self):
        error = SourceTimeoutError()
        assert str(error) == "Timeout"
        assert isinstance(error, asyncio.TimeoutError)

    def test_validation_message(self):
        error = SourceValidationError()
        assert str(error) == "Validation failed"
        assert isinstance(error, ValueError)

    def test_unknown_strategy(self):
        error = UnknownStrategyError("loudest")
        assert error.strategy == "loudest"
        assert "loudest" in str(error)
        assert isinstance(error, ValueError)

    def test_error_message_falls_back_to_class_name(self):
        assert error_message(KeyError()) == "KeyError"
        assert error_message(OSError("disk")) == "disk"

    def test_aggregator_error_defaults(self):
        error = AggregatorError(
            message="x",
            category=ErrorCategory.FETCH,
            severity=ErrorSeverity.RECOVERABLE,
        )
        assert error.source is None
        assert error.timestamp.tzinfo is not None


class TestClassifyException:
    """Tests for classify_exception."""

    def test_source_timeout(self):
        error = classify_exception(SourceTimeoutError(), "primary")
        assert error.category == ErrorCategory.TIMEOUT
        assert error.severity == ErrorSeverity.TRANSIENT
        assert error.source == "primary"
        assert error.message == "Timeout"

    def test_validation(self):
        error = classify_exception(SourceValidationError())
        assert error.category == ErrorCategory.VALIDATION

    def test_httpx_timeout(self):
        error = classify_exception(httpx.ReadTimeout("slow"))
        assert error.category == ErrorCategory.TIMEOUT

    def test_httpx_connect_error(self):
        error = classify_exception(httpx.ConnectError("refused"), "mirror")
        assert error.category == ErrorCategory.NETWORK
        assert error.source == "mirror"
        assert error.remediation is not None

    def test_http_status_error_keeps_source(self):
        error = classify_exception(make_status_error(503), "mirror")
        assert error.category == ErrorCategory.NETWORK
        assert error.severity == ErrorSeverity.TRANSIENT
        assert error.source == "mirror"
        assert error.details["status_code"] == 503

    def test_json_decode_error(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{")
        error = classify_exception(exc_info.value)
        assert error.category == ErrorCategory.PARSE

    def test_msgspec_decode_error(self):
        with pytest.raises(msgspec.DecodeError) as exc_info:
            msgspec.json.decode(b"{")
        error = classify_exception(exc_info.value)
        assert error.category == ErrorCategory.PARSE

    def test_plain_timeout_error(self):
        error = classify_exception(asyncio.TimeoutError())
        assert error.category == ErrorCategory.TIMEOUT

    def test_generic_exception(self):
        error = classify_exception(RuntimeError("boom"))
        assert error.category == ErrorCategory.FETCH
        assert error.message == "boom"
        assert error.details == {"type": "RuntimeError"}

    def test_base_exception(self):
        error = classify_exception(KeyboardInterrupt())
        assert error.category == ErrorCategory.UNKNOWN
        assert error.severity == ErrorSeverity.FATAL


class TestClassifyHttpStatusError:
    """Tests for classify_http_status_error."""

    def test_json_error_body(self):
        error = classify_http_status_error(
            make_status_error(404, b'{"error": "no such rate"}')
        )
        assert error.message == "HTTP 404: no such rate"
        assert error.severity == ErrorSeverity.RECOVERABLE

    def test_text_body(self):
        error = classify_http_status_error(make_status_error(500, b"Internal failure"))
        assert error.message == "HTTP 500: Internal failure"
        assert error.severity == ErrorSeverity.TRANSIENT

    def test_empty_body(self):
        error = classify_http_status_error(make_status_error(429))
        assert error.message == "HTTP 429: 429"
        assert error.severity == ErrorSeverity.TRANSIENT

    def test_non_dict_json_body(self):
        response = MagicMock(spec=httpx.Response)
        response.status_code = 400
        response.json.return_value = ["a", "list"]
        response.text = '["a", "list"]'
        error = classify_http_status_error(
            httpx.HTTPStatusError("bad", request=MagicMock(), response=response)
        )
        assert error.message == 'HTTP 400: ["a", "list"]'
