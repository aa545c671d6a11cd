"""First-success strategy: sequential by priority, with fallbacks."""

from __future__ import annotations

import logging
from typing import Any

from multisource.models import FALLBACK_LABEL
from multisource.models import AggregationResult
from multisource.models import DataSource
from multisource.models import SourceOutcome
from multisource.models import Strategy
from multisource.strategies.base import ResolutionStrategy
from multisource.strategies.base import StrategyContext

logger = logging.getLogger(__name__)


def run_fallbacks(sources: list[DataSource]) -> Any:
    """Call fallbacks in order and return the first non-None value.

    A fallback that raises is logged and skipped.
    """
    for source in sources:
        if source.fallback is None:
            continue
        try:
            data = source.fallback()
        except Exception:
            logger.warning("Fallback failed for source %s", source.id, exc_info=True)
            continue
        if data is not None:
            logger.debug("Using fallback from source %s", source.id)
            return data
    return None


class FirstSuccessStrategy(ResolutionStrategy):
    """Try sources one at a time until one succeeds and validates.

    A source is never started before the previous one has finished its
    whole retry cycle. With slow sources and many retries this can take
    (timeout + backoff) * attempts per source; there is no overall limit.
    """

    name = Strategy.FIRST_SUCCESS.value

    async def resolve(
        self,
        sources: list[DataSource],
        context: StrategyContext,
    ) -> AggregationResult:
        outcomes: list[SourceOutcome] = []

        for source in sources:
            outcome = await self.fetch(source, context)
            outcomes.append(outcome)
            if outcome.success:
                return self.result(outcome.data, outcomes)

        # All sources failed, try fallbacks
        if context.config.enable_fallback:
            data = run_fallbacks(sources)
            if data is not None:
                return self.result(data, outcomes, FALLBACK_LABEL)

        return self.result(None, outcomes)
