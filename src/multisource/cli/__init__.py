"""CLI framework for multisource."""
from __future__ import annotations

from multisource.cli.app import ExitCode
from multisource.cli.app import app
from multisource.cli.app import run_app

__all__ = ["app", "run_app", "ExitCode"]
