"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from remotectl import __version__
from remotectl.cli.commands import automount, doctor, mount, plugins, remotes, settings
from remotectl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="remotectl",
    help="Manage, mount and test rclone remotes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"remotectl version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log DEBUG and above instead of WARNING and above.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            envvar="RCLONE_CONFIG",
            help="rclone config file. Defaults to the settings value or rclone's default.",
        ),
    ] = None,
    settings_file: Annotated[
        Path | None,
        typer.Option(
            "--settings",
            envvar="REMOTECTL_SETTINGS",
            help="remotectl settings file.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """remotectl - manage rclone remotes.

    List, add, edit and delete the remotes in rclone.conf, mount them as
    local directories, test their connections, and mount them at boot.
    """
    setup_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config
    ctx.obj["settings_path"] = settings_file


# Register commands
app.command("list")(remotes.list_remotes)
app.command()(remotes.show)
app.command()(remotes.add)
app.command()(remotes.edit)
app.command()(remotes.delete)
app.command()(mount.mount)
app.command()(mount.unmount)
app.command()(mount.test)
app.command()(doctor.doctor)
app.add_typer(automount.app, name="automount")
app.add_typer(plugins.app, name="plugins")
app.add_typer(settings.app, name="settings")


if __name__ == "__main__":
    app()
