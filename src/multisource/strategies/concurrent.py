"""Strategies that query several sources at once."""

from __future__ import annotations

from multisource.core.merge import default_merge
from multisource.models import AggregationResult
from multisource.models import DataSource
from multisource.models import Strategy
from multisource.strategies.base import ResolutionStrategy
from multisource.strategies.base import StrategyContext


class FastestStrategy(ResolutionStrategy):
    """Race the top ``max_concurrent`` sources; the first valid value wins.

    The winner is picked by completion order, but the result is only
    returned once every launched source has settled so that the trace is
    complete. Sources beyond ``max_concurrent`` are not queried.
    """

    name = Strategy.FASTEST.value

    async def resolve(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> AggregationResult:
        launched = sources[: max(context.config.max_concurrent, 1)]
        settled = await self.fetch_concurrently(launched, context)
        outcomes = [outcome for _, outcome in settled]

        winner = next((o for o in outcomes if o.success), None)
        return self.result(winner.data if winner else None, outcomes)


class MergeStrategy(ResolutionStrategy):
    """Query every source and merge all valid values.

    Values are merged in the order their sources settled. ``max_concurrent``
    does not apply.
    """

    name = Strategy.MERGE.value

    async def resolve(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> AggregationResult:
        settled = await self.fetch_concurrently(sources, context)
        outcomes = [outcome for _, outcome in settled]

        values = [o.data for o in outcomes if o.success]
        if not values:
            return self.result(None, outcomes)

        merge = context.merge or default_merge
        return self.result(merge(values), outcomes)


class BestQualityStrategy(ResolutionStrategy):
    """Query every source and keep the value from the highest priority.

    Completion order does not matter. Equal priorities go to the source
    listed first.
    """

    name = Strategy.BEST_QUALITY.value

    async def resolve(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> AggregationResult:
        settled = await self.fetch_concurrently(sources, context)
        outcomes = [outcome for _, outcome in settled]

        successful = [(index, o) for index, o in settled if o.success]
        if not successful:
            return self.result(None, outcomes)

        _, best = min(
            successful,
            key=lambda item: (-sources[item[0]].priority, item[0]),
        )
        return self.result(best.data, outcomes)
