"""Resolution strategy base classes."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from multisource.core.fetch import fetch_source
from multisource.core.merge import Mergeable
from multisource.core.retry import RetryConfig
from multisource.models import AggregationConfig
from multisource.models import AggregationResult
from multisource.models import DataSource
from multisource.models import SourceOutcome


@dataclass(frozen=True)
class StrategyContext:
    """Everything a strategy needs besides the sources themselves."""

    params: Any
    config: AggregationConfig
    retry: RetryConfig | None = None
    merge: Mergeable | None = None


class ResolutionStrategy(ABC):
    """Base class for resolution strategies.

    Strategies receive sources already sorted by descending priority and
    must never raise for a source's failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy identifier (e.g., 'first-success', 'merge')."""
        ...

    @abstractmethod
    async def resolve(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> AggregationResult:
        """Query the sources and resolve a single value."""
        ...

    async def fetch(self, source: DataSource, context: StrategyContext) -> SourceOutcome:
        return await fetch_source(source, context.params, context.retry)

    async def fetch_concurrently(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> list[tuple[int, SourceOutcome]]:
        """Launch every source at once and collect outcomes as they settle.

        Returns (index into ``sources``, outcome) pairs in completion order.
        Losing sources are never cancelled; every launched source is awaited.
        """

        async def run(index: int, source: DataSource) -> tuple[int, SourceOutcome]:
            return index, await self.fetch(source, context)

        tasks = [asyncio.create_task(run(i, s)) for i, s in enumerate(sources)]
        settled: list[tuple[int, SourceOutcome]] = []
        try:
            for next_done in asyncio.as_completed(tasks):
                settled.append(await next_done)
        except BaseException:
            # Only reachable when the aggregation itself is cancelled
            for task in tasks:
                task.cancel()
            raise
        return settled

    def result(
        self,
        data: Any,
        outcomes: list[SourceOutcome],
        label: str | None = None,
    ) -> AggregationResult:
        return AggregationResult(
            data=data,
            sources=outcomes,
            strategy=label or self.name,
            timestamp=datetime.now(),
            from_cache=False,
        )
