"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer

from remotectl.core.service import RemoteService
from remotectl.core.settings import Settings, SettingsError, load_settings
from remotectl.models.result import OperationResult
from remotectl.utils.formatting import print_error, print_success

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def get_settings(ctx: typer.Context) -> Settings:
    """Load settings, exiting with an error message if they are invalid.

    Args:
        ctx: Typer context carrying the global options.

    Returns:
        Loaded settings.

    Raises:
        typer.Exit: If the settings file can't be parsed.
    """
    settings_path: Path | None = (ctx.obj or {}).get("settings_path")
    try:
        return load_settings(settings_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_service(ctx: typer.Context) -> RemoteService:
    """Build a RemoteService from settings and the global ``--config`` option."""
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    return RemoteService.from_settings(get_settings(ctx), config_path)


def run_cancellable(operation: Callable[[asyncio.Event], Awaitable[T]]) -> T:
    """Run an async operation, turning Ctrl+C into its cancel event.

    The first SIGINT sets the event so the operation can stop its child
    processes and report a CANCELLED result instead of a traceback.

    Args:
        operation: Coroutine function receiving the cancel event.

    Returns:
        The operation's return value.
    """

    async def _main() -> T:
        cancel = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, cancel.set)
            installed = True
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows event loops and non-main threads
            installed = False
        try:
            return await operation(cancel)
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)

    return asyncio.run(_main())


def report_result(result: OperationResult) -> None:
    """Print an operation result, exiting with code 1 on failure.

    Raises:
        typer.Exit: If the operation failed.
    """
    if result.failed:
        print_error(result.message)
        raise typer.Exit(code=1)
    print_success(result.message)


def parse_assignments(assignments: list[str] | None) -> dict[str, str]:
    """Parse repeated ``--set key=value`` options.

    Values may contain ``=``; only the first one separates key and value.

    Raises:
        typer.BadParameter: If an assignment has no ``=`` or an empty key.
    """
    values: dict[str, str] = {}
    for assignment in assignments or []:
        key, sep, value = assignment.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Expected key=value, got '{assignment}'"
            raise typer.BadParameter(msg, param_hint="--set")
        values[key] = value
    return values
