"""CLI commands for multisource.

Modules register themselves with the app when imported by
``multisource.cli.app``.
"""
