"""Multi-source data aggregator.

Fetches a value from several independent, unreliable sources, resolves it
with a configurable strategy, de-duplicates identical in-flight requests and
caches results with TTL expiry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import msgspec

from multisource.core.cache import ResultCache
from multisource.core.merge import Mergeable
from multisource.core.retry import RetryConfig
from multisource.models import CACHE_LABEL
from multisource.models import AggregationConfig
from multisource.models import AggregationResult
from multisource.models import CacheStats
from multisource.models import DataSource
from multisource.models import SourceOutcome
from multisource.strategies import ResolutionStrategy
from multisource.strategies import StrategyContext
from multisource.strategies import get_strategy

logger = logging.getLogger(__name__)


def pending_key(cache_key: str, params: Any) -> str:
    """Key identifying an in-flight request: cache key plus canonical params.

    Mapping keys are sorted so equal params always produce the same key.
    Values msgspec cannot encode are serialized with ``str``.
    """
    encoded = msgspec.json.encode(params, enc_hook=str, order="sorted")
    return f"{cache_key}-{encoded.decode()}"


class DataAggregator:
    """Aggregates values from several data sources.

    Each instance owns its cache and its table of in-flight requests. Build
    one per composing application, or use ``get_default_aggregator`` for a
    process-wide instance.

    There is no timeout around a whole aggregation: every source is bounded
    only by its own timeout and retries. A first-success aggregation over a
    source with ``retries=5`` and ``timeout=10`` can take well over a minute.
    """

    def __init__(
        self,
        config: AggregationConfig | None = None,
        retry: RetryConfig | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.default_config = config or AggregationConfig()
        self.retry_config = retry or RetryConfig()
        self._cache = cache or ResultCache()
        self._pending: dict[str, asyncio.Task[AggregationResult]] = {}

    @property
    def pending_count(self) -> int:
        """Number of aggregations currently in flight."""
        return len(self._pending)

    async def aggregate(
        self,
        cache_key: str,
        sources: Sequence[DataSource],
        params: Any = None,
        config: AggregationConfig | None = None,
        *,
        merge: Mergeable | None = None,
        **overrides: Any,
    ) -> AggregationResult:
        """Aggregate data from multiple sources.

        Args:
            cache_key: Identity of the cached value, independent of params
            sources: Sources to query; sorted by descending priority
            params: Passed unchanged to every source's fetch
            config: Replaces the aggregator's default config for this call
            merge: Merge function for the merge strategy
            **overrides: Individual AggregationConfig fields to override

        Returns:
            AggregationResult; ``data`` is None when every source and every
            fallback failed. Source failures are never raised.

        Raises:
            UnknownStrategyError: If the configured strategy does not exist
        """
        final_config = (config or self.default_config).override(**overrides)
        strategy = get_strategy(final_config.strategy)
        if params is None:
            params = {}

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s", cache_key)
            return AggregationResult(
                data=cached.data,
                sources=[
                    SourceOutcome(id=source_id, success=True, duration_ms=0.0)
                    for source_id in cached.sources
                ],
                strategy=CACHE_LABEL,
                timestamp=cached.created_at,
                from_cache=True,
            )

        key = pending_key(cache_key, params)
        task = self._pending.get(key)
        if task is not None:
            logger.debug("Joining in-flight request %s", key)
        else:
            context = StrategyContext(
                params=params,
                config=final_config,
                retry=self.retry_config,
                merge=merge,
            )
            task = asyncio.create_task(
                self._execute(cache_key, list(sources), strategy, context)
            )
            self._pending[key] = task
            task.add_done_callback(lambda done: self._release(key, done))

        # Shielded so one cancelled caller does not cancel the shared work
        return await asyncio.shield(task)

    async def _execute(
        self,
        cache_key: str,
        sources: list[DataSource],
        strategy: ResolutionStrategy,
        context: StrategyContext,
    ) -> AggregationResult:
        ordered = sorted(sources, key=lambda s: s.priority, reverse=True)
        logger.debug(
            "Aggregating %s from %d sources with %s",
            cache_key,
            len(ordered),
            strategy.name,
        )
        result = await strategy.resolve(ordered, context)

        cache_timeout = context.config.cache_timeout
        if result.data is not None and cache_timeout > 0:
            self._cache.set(
                cache_key, result.data, cache_timeout, result.successful_sources()
            )
        elif result.data is None:
            logger.debug("All sources failed for %s", cache_key)

        return result

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    def clear_cache(self, key: str | None = None) -> None:
        """Evict one cache entry, or the whole cache when key is None."""
        self._cache.clear(key)

    def get_cache_stats(self) -> CacheStats:
        """Cache size and per-entry sources and age, oldest first."""
        return self._cache.stats()


# Process-wide instance
_default_aggregator: DataAggregator | None = None


def get_default_aggregator() -> DataAggregator:
    """Get the process-wide aggregator, built from the loaded configuration."""
    global _default_aggregator
    if _default_aggregator is None:
        from multisource.config.settings import get_config

        config = get_config()
        _default_aggregator = DataAggregator(
            config=config.aggregation,
            retry=config.retry.to_retry_config(),
        )
    return _default_aggregator


def reset_default_aggregator() -> None:
    """Drop the process-wide aggregator along with its cache."""
    global _default_aggregator
    _default_aggregator = None
