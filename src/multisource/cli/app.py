"""Main CLI application for multisource."""

from __future__ import annotations

import logging
from enum import IntEnum

import typer
from rich.console import Console
from rich.logging import RichHandler

from multisource.cli.atyper import ATyper

app = ATyper(
    name="multisource",
    help="Aggregate JSON data from several unreliable sources",
    add_completion=True,
    no_args_is_help=False,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for multisource."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    NETWORK_ERROR = 3
    CONFIG_ERROR = 4
    PARTIAL_FAILURE = 5


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send library logs to stderr through rich.

    WARNING by default, DEBUG when verbose, ERROR when quiet.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger("multisource")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        )


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", "-j", help="Enable JSON output mode"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show per-source traces and debug logs"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Enable quiet mode"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Multisource - aggregate data from several unreliable sources."""
    if version:
        from multisource import __version__

        typer.echo(f"multisource {__version__}")
        raise typer.Exit()

    # quiet takes precedence
    if verbose and quiet:
        verbose = False

    ctx.meta["json"] = json
    ctx.meta["verbose"] = verbose
    ctx.meta["quiet"] = quiet

    configure_logging(verbose=verbose, quiet=quiet)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def run_app() -> None:
    """Run the CLI app."""
    app()


# Command modules register themselves on import; they must come after app
from multisource.cli.commands import config as config_cmd  # noqa: E402
from multisource.cli.commands import fetch  # noqa: E402,F401
from multisource.cli.commands import sources  # noqa: E402,F401

app.add_typer(config_cmd.config_app, name="config")
