"""HTTP-backed data sources with a shared connection pool."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

import httpx
import msgspec

from multisource.config.settings import get_config
from multisource.models import DEFAULT_SOURCE_TIMEOUT
from multisource.models import DataSource

# Global HTTP client
_client: httpx.AsyncClient | None = None


def get_timeout_config() -> httpx.Timeout:
    """Transport timeout from settings; each source still applies its own."""
    config = get_config()
    return httpx.Timeout(config.aggregation.timeout, connect=10.0)


@asynccontextmanager
async def get_http_client():
    """Get or create the shared HTTP client.

    Usage:
        async with get_http_client() as client:
            response = await client.get(...)
    """
    global _client

    if _client is None:
        limits = httpx.Limits(
            max_connections=20,
            max_keepalive_connections=5,
        )
        _client = httpx.AsyncClient(
            timeout=get_timeout_config(),
            limits=limits,
            follow_redirects=True,
        )

    yield _client


async def cleanup() -> None:
    """Close the HTTP client.

    Should be called on application shutdown.
    """
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def extract_path(data: Any, path: str) -> Any:
    """Select a nested value with a dotted path such as ``data.items.0``.

    Raises:
        KeyError: If a segment does not exist
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                raise KeyError(f"Missing key {segment!r} in path {path!r}")
            current = current[segment]
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            try:
                current = current[int(segment)]
            except IndexError:
                raise KeyError(f"Index {segment} out of range in path {path!r}") from None
        else:
            raise KeyError(f"Cannot resolve {segment!r} in path {path!r}")
    return current


def http_source(
    source_id: str,
    url: str,
    *,
    name: str | None = None,
    priority: int = 0,
    timeout: float = DEFAULT_SOURCE_TIMEOUT,
    retries: int = 0,
    headers: Mapping[str, str] | None = None,
    json_path: str | None = None,
    validate: Callable[[Any], bool] | None = None,
) -> DataSource[Any, Mapping[str, Any]]:
    """Build a data source that GETs a JSON document.

    Aggregation params are sent as query parameters. Non-2xx responses
    raise, so they count as failed attempts and are retried.
    """
    request_headers = dict(headers or {})

    async def fetch(params: Mapping[str, Any]) -> Any:
        async with get_http_client() as client:
            response = await client.get(
                url,
                params=dict(params) if params else None,
                headers=request_headers,
            )
            response.raise_for_status()
            return msgspec.json.decode(response.content)

    return DataSource(
        id=source_id,
        name=name or source_id,
        fetch=fetch,
        priority=priority,
        timeout=timeout,
        retries=retries,
        validate=validate,
        transform=partial(extract_path, path=json_path) if json_path else None,
    )
