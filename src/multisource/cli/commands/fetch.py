"""Fetch command: aggregate HTTP JSON sources from the command line."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console

from multisource.aggregator import get_default_aggregator
from multisource.cli.app import ExitCode
from multisource.cli.app import app
from multisource.config.settings import Config
from multisource.config.settings import get_config
from multisource.core.http import cleanup
from multisource.core.http import http_source
from multisource.display.json import output_json_error
from multisource.display.json import output_json_pretty
from multisource.display.json import result_to_dict
from multisource.display.rich import render_result
from multisource.models import AggregationResult
from multisource.models import DataSource
from multisource.models import Strategy


class SourceSelectionError(Exception):
    """Raised when the requested sources cannot be built."""


def url_source_id(position: int, url: str) -> str:
    """Identifier for an ad-hoc URL source, e.g. ``1:api.example.com``."""
    host = httpx.URL(url).host or "source"
    return f"{position}:{host}"


def build_sources(
    config: Config,
    urls: list[str],
    source_ids: list[str],
    retries: int | None = None,
    timeout: float | None = None,
    json_path: str | None = None,
) -> list[DataSource]:
    """Build data sources from ad-hoc URLs and configured source ids.

    URLs get descending priorities by position, above every configured
    source. With neither URLs nor ids, every enabled configured source
    is used.

    Raises:
        SourceSelectionError: For unknown ids or when nothing is selected
    """
    sources: list[DataSource] = []

    if not urls and not source_ids:
        source_ids = list(config.enabled_sources())

    for source_id in source_ids:
        source_config = config.get_source_config(source_id)
        if source_config is None:
            raise SourceSelectionError(f"Unknown source: {source_id}")
        sources.append(
            http_source(
                source_id,
                source_config.url,
                name=source_config.name,
                priority=source_config.priority,
                timeout=timeout if timeout is not None else source_config.timeout,
                retries=retries if retries is not None else source_config.retries,
                headers=source_config.headers,
                json_path=json_path or source_config.json_path,
            )
        )

    top_priority = max((s.priority for s in sources), default=0)
    for position, url in enumerate(urls, start=1):
        sources.append(
            http_source(
                url_source_id(position, url),
                url,
                name=url,
                priority=top_priority + len(urls) - position + 1,
                timeout=timeout if timeout is not None else config.aggregation.timeout,
                retries=retries or 0,
                json_path=json_path,
            )
        )

    if not sources:
        raise SourceSelectionError(
            "No sources given. Pass URLs or configure [sources] in config.toml."
        )

    return sources


def exit_code_for(result: AggregationResult) -> ExitCode:
    """Exit code summarizing how an aggregation went."""
    if result.data is None:
        return ExitCode.NETWORK_ERROR
    if result.failed_sources():
        return ExitCode.PARTIAL_FAILURE
    return ExitCode.SUCCESS


@app.command("fetch")
async def fetch_command(
    ctx: typer.Context,
    urls: list[str] = typer.Argument(None, help="JSON endpoints, highest priority first"),
    source: list[str] = typer.Option(
        None, "--source", "-s", help="Configured source id (repeatable)"
    ),
    strategy: Strategy | None = typer.Option(
        None, "--strategy", help="Resolution strategy"
    ),
    max_concurrent: int | None = typer.Option(
        None, "--max-concurrent", "-c", help="Sources raced by the fastest strategy"
    ),
    retries: int | None = typer.Option(
        None, "--retries", "-r", help="Additional attempts per source"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", help="Per-attempt timeout in seconds"
    ),
    path: str | None = typer.Option(
        None, "--path", "-p", help="Dotted path selecting part of each response"
    ),
    no_fallback: bool = typer.Option(
        False, "--no-fallback", help="Disable fallback values"
    ),
) -> None:
    """Fetch a value from several JSON endpoints and resolve it."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    verbose = ctx.meta.get("verbose", False)

    config = get_config()
    try:
        sources = build_sources(
            config,
            urls or [],
            source or [],
            retries=retries,
            timeout=timeout,
            json_path=path,
        )
    except SourceSelectionError as e:
        if json_mode:
            output_json_error(str(e), category="configuration", severity="fatal")
        else:
            console.print(str(e), style="red", markup=False)
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    cache_key = "fetch:" + ",".join(sorted(s.id for s in sources))
    aggregator = get_default_aggregator()
    try:
        result = await aggregator.aggregate(
            cache_key,
            sources,
            strategy=strategy,
            max_concurrent=max_concurrent,
            enable_fallback=False if no_fallback else None,
        )
    finally:
        await cleanup()

    if json_mode:
        output_json_pretty(result_to_dict(result, include_data=verbose))
    else:
        console.print(render_result(result, verbose=verbose))

    code = exit_code_for(result)
    if code != ExitCode.SUCCESS:
        raise typer.Exit(code)
