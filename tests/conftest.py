"""Pytest configuration and shared fixtures for multisource tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import AsyncMock

import pytest

from multisource import aggregator as aggregator_module
from multisource.aggregator import DataAggregator
from multisource.config import settings as settings_module
from multisource.core import http as http_module
from multisource.core.retry import RetryConfig
from multisource.models import AggregationConfig
from multisource.models import DataSource


def _make_fetch(
    value: Any = None,
    error: BaseException | None = None,
    delay: float = 0.0,
) -> AsyncMock:
    """Async fetch mock that sleeps, then raises or returns."""

    async def fetch(params):
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        return value

    return AsyncMock(side_effect=fetch)


def _make_source(
    source_id: str,
    value: Any = None,
    *,
    priority: int = 0,
    error: BaseException | None = None,
    delay: float = 0.0,
    timeout: float = 1.0,
    retries: int = 0,
    validate: Callable[[Any], bool] | None = None,
    transform: Callable[[Any], Any] | None = None,
    fallback: Callable[[], Any] | None = None,
    fetch: Any = None,
) -> DataSource:
    """Data source backed by a mock fetch (exposed as ``source.fetch``)."""
    return DataSource(
        id=source_id,
        name=source_id.title(),
        fetch=fetch or _make_fetch(value=value, error=error, delay=delay),
        priority=priority,
        timeout=timeout,
        retries=retries,
        validate=validate,
        transform=transform,
        fallback=fallback,
    )


@pytest.fixture
def make_fetch() -> Callable[..., AsyncMock]:
    """Factory for mock fetch functions."""
    return _make_fetch


@pytest.fixture
def make_source() -> Callable[..., DataSource]:
    """Factory for mock-backed data sources."""
    return _make_source


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Backoff short enough for tests."""
    return RetryConfig(base_delay=0.001, max_delay=0.01)


@pytest.fixture
def aggregator(fast_retry: RetryConfig) -> DataAggregator:
    """Fresh aggregator with quick retries and the default config."""
    return DataAggregator(config=AggregationConfig(), retry=fast_retry)


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Drop process-wide state between tests."""
    yield
    aggregator_module._default_aggregator = None
    settings_module._config = None
    http_module._client = None


@pytest.fixture
def temp_config_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("MULTISOURCE_CONFIG_DIR", str(config_dir))
    for var in (
        "MULTISOURCE_STRATEGY",
        "MULTISOURCE_CACHE_TIMEOUT",
        "MULTISOURCE_MAX_CONCURRENT",
    ):
        monkeypatch.delenv(var, raising=False)
    yield config_dir


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample configuration dictionary."""
    return {
        "aggregation": {
            "strategy": "best-quality",
            "timeout": 10,
            "max_concurrent": 2,
            "cache_timeout": 60,
            "enable_fallback": False,
        },
        "retry": {
            "base_delay": 0.5,
            "max_delay": 4.0,
        },
        "sources": {
            "primary": {
                "url": "https://primary.example.com/rates",
                "priority": 10,
                "retries": 2,
            },
            "mirror": {
                "url": "https://mirror.example.com/rates",
                "priority": 5,
                "timeout": 2.5,
                "json_path": "data.rates",
                "headers": {"Authorization": "Bearer token"},
            },
            "legacy": {
                "url": "https://legacy.example.com/rates",
                "enabled": False,
            },
        },
    }
