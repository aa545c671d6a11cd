"""List configured data sources."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from multisource.cli.app import app
from multisource.config.paths import config_file
from multisource.config.settings import get_config


@app.command("sources")
def sources_command(ctx: typer.Context) -> None:
    """Show data sources configured in config.toml, highest priority first."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    quiet = ctx.meta.get("quiet", False)

    config = get_config()
    ordered = sorted(
        config.sources.items(), key=lambda item: item[1].priority, reverse=True
    )

    if json_mode:
        from multisource.display.json import output_json_pretty

        output_json_pretty(
            {
                source_id: {
                    "name": cfg.name or source_id,
                    "url": cfg.url,
                    "priority": cfg.priority,
                    "timeout": cfg.timeout,
                    "retries": cfg.retries,
                    "json_path": cfg.json_path,
                    "enabled": cfg.enabled,
                }
                for source_id, cfg in ordered
            }
        )
        return

    if not ordered:
        console.print(f"[yellow]No sources configured in {config_file()}[/yellow]")
        return

    if quiet:
        for source_id, _ in ordered:
            console.print(source_id)
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Source")
    table.add_column("Priority", justify="right")
    table.add_column("Timeout", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("URL")

    for source_id, cfg in ordered:
        style = None if cfg.enabled else "dim"
        table.add_row(
            source_id,
            str(cfg.priority),
            f"{cfg.timeout:g}s",
            str(cfg.retries),
            cfg.url,
            style=style,
        )

    console.print(table)
