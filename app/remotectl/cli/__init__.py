"""CLI package for remotectl.

This package contains the Typer application and all subcommands.
"""

from remotectl.cli.main import app

__all__ = ["app"]
