"""multisource: Aggregate data from several unreliable sources."""

from __future__ import annotations

__version__ = "0.1.0"

from multisource.aggregator import DataAggregator
from multisource.aggregator import get_default_aggregator
from multisource.aggregator import reset_default_aggregator
from multisource.core.merge import Mergeable
from multisource.core.merge import default_merge
from multisource.core.retry import RetryConfig
from multisource.models import AggregationConfig
from multisource.models import AggregationResult
from multisource.models import CacheEntry
from multisource.models import CacheStats
from multisource.models import DataSource
from multisource.models import SourceOutcome
from multisource.models import Strategy

__all__ = [
    "__version__",
    "DataAggregator",
    "get_default_aggregator",
    "reset_default_aggregator",
    "DataSource",
    "AggregationConfig",
    "AggregationResult",
    "SourceOutcome",
    "CacheEntry",
    "CacheStats",
    "Strategy",
    "RetryConfig",
    "Mergeable",
    "default_merge",
]


def main() -> None:
    """Entry point for the multisource CLI."""
    from multisource.cli.app import run_app

    run_app()
