"""Retry logic with exponential backoff for multisource."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    The defaults give delays of 1s, 2s, 4s, 8s, then 10s for every
    later attempt.
    """

    base_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = False


def calculate_retry_delay(
    attempt: int,
    config: RetryConfig,
) -> float:
    """Calculate delay before next retry using exponential backoff.

    Args:
        attempt: Which attempt we just completed (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = config.base_delay * (config.exponential_base**attempt)

    if config.jitter:
        # Add up to 25% random jitter
        delay *= 1.0 + (random.random() * 0.25)

    return min(delay, config.max_delay)


async def with_retry(
    factory: Callable[[], Awaitable[Any]],
    retries: int,
    config: RetryConfig | None = None,
    on_failure: Callable[[int, Exception], None] | None = None,
) -> Any:
    """Execute a coroutine factory with retry logic.

    Any Exception triggers another attempt; cancellation propagates
    immediately.

    Args:
        factory: Callable returning a fresh awaitable for each attempt
        retries: Additional attempts after the first
        config: Retry configuration (uses defaults if None)
        on_failure: Called with (attempt, exception) after each failed attempt

    Returns:
        Result of the first successful attempt

    Raises:
        The last exception if all attempts are exhausted
    """
    if config is None:
        config = RetryConfig()

    attempts = max(retries, 0) + 1
    attempt = 0

    while True:
        try:
            return await factory()
        except Exception as e:
            if on_failure is not None:
                on_failure(attempt, e)

            # Don't wait after the last attempt
            if attempt + 1 >= attempts:
                raise

            delay = calculate_retry_delay(attempt, config)
            logger.debug(
                "Attempt %d failed (%s), retrying in %.2fs", attempt + 1, e, delay
            )
            await asyncio.sleep(delay)
            attempt += 1
