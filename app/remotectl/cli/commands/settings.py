"""Settings commands.

Shows and initializes remotectl's own settings file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.markup import escape
from rich.syntax import Syntax

from remotectl.cli.types import get_settings
from remotectl.core.paths import ensure_config_dir, get_settings_path
from remotectl.core.settings import Settings, SettingsError, save_settings
from remotectl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize remotectl settings.",
    no_args_is_help=True,
)


def _settings_path(ctx: typer.Context) -> Path:
    return (ctx.obj or {}).get("settings_path") or get_settings_path()


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective settings."""
    settings = get_settings(ctx)
    path = _settings_path(ctx)

    source = str(path) if path.exists() else f"{path} (not created, using defaults)"
    console.print(f"[muted]Settings:[/] {escape(source)}")
    console.print(f"[muted]rclone config:[/] {escape(str(settings.config_path))}\n")
    content = tomli_w.dumps(settings.model_dump(exclude_none=True))
    console.print(Syntax(content, "toml", background_color="default"))


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with default values."""
    path = _settings_path(ctx)

    if path.exists() and not force:
        print_info(f"Settings already exist at {path}. Use --force to overwrite.")
        raise typer.Exit(code=0)

    try:
        if path == get_settings_path():
            ensure_config_dir()
        saved = save_settings(Settings(), path)
    except (SettingsError, RuntimeError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
