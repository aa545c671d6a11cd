"""Config management commands for multisource."""

from __future__ import annotations

import msgspec
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from multisource.cli.atyper import ATyper
from multisource.config.paths import config_dir
from multisource.config.paths import config_file
from multisource.config.settings import get_config

config_app = ATyper(help="Manage configuration settings.")


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Display current settings."""
    console = Console()

    config = get_config()
    config_path = config_file()
    json_mode = ctx.meta.get("json", False)
    verbose = ctx.meta.get("verbose", False)
    quiet = ctx.meta.get("quiet", False)

    if json_mode:
        from multisource.display.json import output_json_pretty

        aggregation = config.aggregation
        output_json_pretty(
            {
                "aggregation": {
                    "strategy": aggregation.strategy.value,
                    "timeout": aggregation.timeout,
                    "max_concurrent": aggregation.max_concurrent,
                    "cache_timeout": aggregation.cache_timeout,
                    "enable_fallback": aggregation.enable_fallback,
                },
                "retry": {
                    "base_delay": config.retry.base_delay,
                    "max_delay": config.retry.max_delay,
                    "jitter": config.retry.jitter,
                },
                "sources": sorted(config.sources),
                "path": str(config_path),
            }
        )
        return

    if quiet:
        console.print(str(config_path), soft_wrap=True)
        return

    toml_data = msgspec.toml.encode(config)
    console.print(
        Panel(Syntax(toml_data.decode(), "toml"), title=f"Config: {config_path}")
    )

    if verbose:
        if config_path.exists():
            console.print(f"[dim]File size: {config_path.stat().st_size} bytes[/dim]")
        else:
            console.print(
                "[dim]Using default configuration (file not created yet)[/dim]"
            )


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Show the configuration file location."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    verbose = ctx.meta.get("verbose", False)

    if json_mode:
        from multisource.display.json import output_json_pretty

        output_json_pretty(
            {"config_dir": str(config_dir()), "config_file": str(config_file())}
        )
        return

    console.print(str(config_file()), soft_wrap=True)
    if verbose:
        console.print(f"[dim]Exists: {config_file().exists()}[/dim]")


@config_app.command("reset")
def config_reset_command(
    ctx: typer.Context,
    confirm: bool = typer.Option(
        False,
        "--confirm",
        "-y",
        help="Skip confirmation prompt",
    ),
) -> None:
    """Reset configuration to defaults."""
    console = Console()
    json_mode = ctx.meta.get("json", False)

    if not confirm:
        # In JSON mode, auto-confirm to avoid hanging
        if json_mode:
            confirm = True
        else:
            confirm = typer.confirm(
                "This will reset your configuration to defaults. Continue?",
                default=False,
            )

    if not confirm:
        console.print("Reset cancelled")
        raise typer.Exit()

    cfg_path = config_file()
    result = {"reset": cfg_path.exists(), "path": str(cfg_path)}
    if cfg_path.exists():
        cfg_path.unlink()

    from multisource.config.settings import reload_config

    reload_config()

    if json_mode:
        from multisource.display.json import output_json_pretty

        output_json_pretty(result)
        return

    if result["reset"]:
        console.print("[green]✓[/green] Configuration reset to defaults")
        console.print(f"\nDeleted: {cfg_path}")
    else:
        console.print("[yellow]No custom configuration to reset[/yellow]")
