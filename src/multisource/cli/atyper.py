"""Typer subclass that accepts async command functions."""

import asyncio
import inspect
from functools import wraps
from typing import Any, Callable

import typer


def _async_command_wrapper(f: Callable) -> Callable:
    """Wrap an async function so Typer can call it synchronously."""
    if not inspect.iscoroutinefunction(f):
        return f

    @wraps(f)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        coro = f(*args, **kwargs)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        # Called from inside a running loop (tests); let the caller await it
        return coro

    return sync_wrapper


class ATyper(typer.Typer):
    """Typer with async command support."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("no_args_is_help", False)
        super().__init__(*args, **kwargs)

    def command(  # type: ignore[override]
        self,
        name: str | None = None,
        **kwargs: Any,
    ) -> Callable[[Callable], Callable]:
        """Register a command, running async functions with asyncio.run."""

        def decorator(f: Callable) -> Callable:
            return typer.Typer.command(self, name, **kwargs)(_async_command_wrapper(f))

        return decorator
