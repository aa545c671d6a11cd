"""Per-source fetch pipeline: timeout, retry, transform and validation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from multisource.core.retry import RetryConfig
from multisource.core.retry import with_retry
from multisource.errors.classify import classify_exception
from multisource.errors.types import ErrorCategory
from multisource.errors.types import SourceTimeoutError
from multisource.errors.types import SourceValidationError
from multisource.errors.types import error_message
from multisource.models import DataSource
from multisource.models import SourceOutcome

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data"


async def fetch_once(source: DataSource, params: Any) -> Any:
    """Run a single attempt against a source.

    The fetch is raced against ``source.timeout``; on expiry the fetch
    coroutine is cancelled and SourceTimeoutError is raised. The transform,
    if any, is applied to the raw value.

    ``wait_for`` only returns once the cancelled fetch has unwound, so a
    fetch that suppresses ``CancelledError`` or blocks the event loop delays
    the timeout past ``source.timeout``.
    """
    try:
        raw = await asyncio.wait_for(source.fetch(params), timeout=source.timeout)
    except asyncio.TimeoutError:
        raise SourceTimeoutError() from None

    if source.transform is not None:
        return source.transform(raw)
    return raw


def validate_data(source: DataSource, data: Any) -> bool:
    """Validate data using the source validator.

    A missing validator accepts everything. A validator that raises is
    treated as a rejection.
    """
    if source.validate is None:
        return True

    try:
        return bool(source.validate(data))
    except Exception:
        logger.warning("Validation error for source %s", source.id, exc_info=True)
        return False


async def fetch_source(
    source: DataSource,
    params: Any,
    retry_config: RetryConfig | None = None,
) -> SourceOutcome:
    """Fetch, retry and validate one source, never raising for its failures.

    Args:
        source: Source to query
        params: Params passed unchanged to ``source.fetch``
        retry_config: Backoff settings between attempts

    Returns:
        SourceOutcome describing the whole retry cycle
    """
    attempts = 0

    async def attempt() -> Any:
        nonlocal attempts
        attempts += 1
        return await fetch_once(source, params)

    def log_failure(attempt_index: int, exc: Exception) -> None:
        logger.debug(
            "Source %s attempt %d/%d failed: %s",
            source.id,
            attempt_index + 1,
            source.retries + 1,
            error_message(exc),
        )

    start_time = time.monotonic()
    try:
        data = await with_retry(attempt, source.retries, retry_config, log_failure)
    except Exception as e:
        duration_ms = (time.monotonic() - start_time) * 1000
        classified = classify_exception(e, source.id)
        return SourceOutcome(
            id=source.id,
            success=False,
            duration_ms=duration_ms,
            error=error_message(e),
            category=classified.category,
            attempts=attempts,
        )

    duration_ms = (time.monotonic() - start_time) * 1000

    # None means "no value"; it must never win over a later source
    if data is None:
        return SourceOutcome(
            id=source.id,
            success=False,
            duration_ms=duration_ms,
            error=NO_DATA_MESSAGE,
            category=ErrorCategory.VALIDATION,
            attempts=attempts,
        )

    if not validate_data(source, data):
        return SourceOutcome(
            id=source.id,
            success=False,
            duration_ms=duration_ms,
            error=str(SourceValidationError()),
            category=ErrorCategory.VALIDATION,
            attempts=attempts,
        )

    return SourceOutcome(
        id=source.id,
        success=True,
        duration_ms=duration_ms,
        data=data,
        attempts=attempts,
    )
