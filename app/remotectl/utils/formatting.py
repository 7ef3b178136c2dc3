"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "#69B9A1",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "mounted": "bold #03b971",
        "unmounted": "#b2bec3",
        "secret": "italic #b2bec3",
    }
)

# Placeholder shown instead of obscured values
MASK = "********"


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def create_remote_table(title: str = "Remotes") -> Table:
    """Create a pre-configured table for displaying remotes.

    Args:
        title: Table title.

    Returns:
        Rich Table with status, name, type, mount point and auto-mount columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Remote", no_wrap=True)
    table.add_column("Type", style="info")
    table.add_column("Mount point", style="muted")
    table.add_column("Auto-mount", justify="center")
    return table


def format_mount_state(mounted: bool) -> str:
    """Format a mount state as a status icon with color markup."""
    if mounted:
        return "[mounted]●[/]"  # Filled circle
    return "[unmounted]○[/]"  # Empty circle


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
