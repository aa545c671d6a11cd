"""Resolution strategies for multisource."""

from __future__ import annotations

from multisource.models import Strategy
from multisource.strategies.base import ResolutionStrategy
from multisource.strategies.base import StrategyContext
from multisource.strategies.concurrent import BestQualityStrategy
from multisource.strategies.concurrent import FastestStrategy
from multisource.strategies.concurrent import MergeStrategy
from multisource.strategies.first_success import FirstSuccessStrategy
from multisource.strategies.first_success import run_fallbacks

STRATEGIES: dict[Strategy, ResolutionStrategy] = {
    Strategy.FIRST_SUCCESS: FirstSuccessStrategy(),
    Strategy.FASTEST: FastestStrategy(),
    Strategy.MERGE: MergeStrategy(),
    Strategy.BEST_QUALITY: BestQualityStrategy(),
}


def get_strategy(name: str | Strategy) -> ResolutionStrategy:
    """Get the strategy registered under a name.

    Raises:
        UnknownStrategyError: If the name is not a known strategy
    """
    return STRATEGIES[Strategy.parse(name)]


__all__ = [
    "ResolutionStrategy",
    "StrategyContext",
    "FirstSuccessStrategy",
    "FastestStrategy",
    "MergeStrategy",
    "BestQualityStrategy",
    "STRATEGIES",
    "get_strategy",
    "run_fallbacks",
]
