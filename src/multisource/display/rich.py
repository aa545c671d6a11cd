"""Rich-based rendering utilities for multisource."""

from __future__ import annotations

from typing import Any

import msgspec
from rich.console import Group
from rich.json import JSON
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text

from multisource.models import AggregationResult
from multisource.models import CacheStats
from multisource.models import SourceOutcome


def format_duration(duration_ms: float) -> str:
    """Format a duration for display."""
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    return f"{duration_ms / 1000:.2f}s"


def format_status(outcome: SourceOutcome) -> Text:
    if outcome.success:
        return Text("✓ ok", style="green")
    label = outcome.category.value if outcome.category else "failed"
    return Text(f"✗ {label}", style="red")


def render_sources_table(outcomes: list[SourceOutcome]) -> Table:
    """Render the per-source trace of an aggregation."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Error", style="dim")

    for outcome in outcomes:
        table.add_row(
            outcome.id,
            format_status(outcome),
            str(outcome.attempts),
            format_duration(outcome.duration_ms),
            outcome.error or "",
        )

    return table


def render_value(data: Any) -> JSON | Pretty:
    """Render a resolved value, as JSON when it can be encoded."""
    try:
        return JSON(msgspec.json.encode(data).decode())
    except (TypeError, msgspec.EncodeError):
        return Pretty(data)


def render_result(result: AggregationResult, verbose: bool = False) -> Panel:
    """Render an aggregation result as a panel.

    Args:
        result: Result to render
        verbose: Include the per-source trace

    Returns:
        Rich Panel with value and optional trace
    """
    if result.data is None:
        body = Text("No source returned data", style="bold red")
        border = "red"
    else:
        body = render_value(result.data)
        border = "yellow" if result.failed_sources() else "green"

    title = f"strategy: {result.strategy}"
    if result.from_cache:
        title += " (cached)"

    # Failures are always worth showing
    if verbose or result.data is None or result.failed_sources():
        body = Group(body, Text(""), render_sources_table(result.sources))

    return Panel(body, title=title, border_style=border, expand=False)


def render_cache_stats(stats: CacheStats) -> Table:
    """Render cache statistics, oldest entry first."""
    table = Table(title=f"Cache entries: {stats.size}", box=None, pad_edge=False)
    table.add_column("Key")
    table.add_column("Sources")
    table.add_column("Age", justify="right")

    for entry in stats.entries:
        table.add_row(
            entry.key,
            ", ".join(entry.sources) or "-",
            format_duration(entry.age_ms),
        )

    return table
