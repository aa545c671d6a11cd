"""Data models for multisource.

Defines the data source contract consumed by the aggregator and the
structures it produces: per-source outcomes, aggregation results and
cache entries.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
from enum import StrEnum
from typing import Any, Generic, TypeVar

import msgspec

from multisource.errors.types import ErrorCategory, UnknownStrategyError

T = TypeVar("T")
P = TypeVar("P")

DEFAULT_SOURCE_TIMEOUT = 5.0
DEFAULT_MAX_CONCURRENT = 3
DEFAULT_CACHE_TIMEOUT = 5 * 60.0


class Strategy(StrEnum):
    """How the final value is resolved from several sources."""

    FIRST_SUCCESS = "first-success"
    FASTEST = "fastest"
    MERGE = "merge"
    BEST_QUALITY = "best-quality"

    @classmethod
    def parse(cls, value: str | Strategy) -> Strategy:
        """Coerce a strategy name, raising UnknownStrategyError if invalid."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownStrategyError(str(value)) from None


# Labels reported in AggregationResult.strategy besides the Strategy values
CACHE_LABEL = "cache"
FALLBACK_LABEL = "fallback"


@dataclass(frozen=True)
class DataSource(Generic[T, P]):
    """A named, independently-owned provider of values of type T.

    ``fetch`` receives the call's params unchanged. A timed-out attempt is
    cancelled, and the timeout is only reported once the fetch has finished
    unwinding. Fetch coroutines must let ``CancelledError`` propagate and
    must not block the event loop, or a timeout takes longer than
    ``timeout``. A fetch (or transform) returning None counts as a failure.

    ``fallback`` must be synchronous and side-effect-free. It is only
    consulted by the first-success strategy once every source has failed.
    """

    id: str
    name: str
    fetch: Callable[[P], Awaitable[Any]]
    priority: int = 0
    timeout: float = DEFAULT_SOURCE_TIMEOUT  # seconds, per attempt
    retries: int = 0  # additional attempts after the first
    validate: Callable[[T], bool] | None = None
    transform: Callable[[Any], T] | None = None
    fallback: Callable[[], T | None] | None = None


class AggregationConfig(msgspec.Struct, frozen=True, omit_defaults=True):
    """Per-call behavioral parameters for an aggregation."""

    strategy: Strategy = Strategy.FIRST_SUCCESS
    # Carried for configuration parity; no timeout wraps a whole aggregation.
    timeout: float = DEFAULT_SOURCE_TIMEOUT
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    cache_timeout: float = DEFAULT_CACHE_TIMEOUT  # seconds, 0 disables caching
    enable_fallback: bool = True

    def override(self, **changes: Any) -> AggregationConfig:
        """Return a copy with the given fields replaced.

        ``None`` values are ignored so callers can forward optional
        arguments directly. Unknown field names raise TypeError.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        if "strategy" in changes:
            changes["strategy"] = Strategy.parse(changes["strategy"])
        if not changes:
            return self
        return msgspec.structs.replace(self, **changes)


class SourceOutcome(msgspec.Struct):
    """Record of one source's part in an aggregation."""

    id: str
    success: bool
    duration_ms: float = 0.0
    error: str | None = None
    category: ErrorCategory | None = None
    data: Any = None
    attempts: int = 0


class AggregationResult(msgspec.Struct, Generic[T]):
    """Outcome of one aggregate call.

    ``data`` is None only when every source and every fallback failed.
    """

    data: T | None
    sources: list[SourceOutcome]
    strategy: str
    timestamp: datetime = msgspec.field(default_factory=datetime.now)
    from_cache: bool = False

    def succeeded(self) -> bool:
        """Check if a value was resolved."""
        return self.data is not None

    def successful_sources(self) -> list[str]:
        """Get ids of sources that succeeded."""
        return [s.id for s in self.sources if s.success]

    def failed_sources(self) -> list[str]:
        """Get ids of sources that failed."""
        return [s.id for s in self.sources if not s.success]

    def all_failed(self) -> bool:
        """Check if no source produced a value."""
        return not any(s.success for s in self.sources)


class CacheEntry(msgspec.Struct, Generic[T]):
    """A cached aggregation value."""

    data: T
    created_at: datetime
    expires_at: datetime
    sources: list[str] = []

    @classmethod
    def create(
        cls,
        data: T,
        ttl: float,
        sources: list[str],
        now: datetime | None = None,
    ) -> CacheEntry[T]:
        now = now or datetime.now()
        return cls(
            data=data,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
            sources=list(sources),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """An entry is visible only while now < expires_at."""
        return (now or datetime.now()) >= self.expires_at

    def age_ms(self, now: datetime | None = None) -> float:
        return ((now or datetime.now()) - self.created_at).total_seconds() * 1000


class CacheStatsEntry(msgspec.Struct, frozen=True):
    """Diagnostic view of one cache entry."""

    key: str
    sources: list[str]
    age_ms: float


class CacheStats(msgspec.Struct, frozen=True):
    """Diagnostic view of an aggregator's cache."""

    size: int
    entries: list[CacheStatsEntry] = []
