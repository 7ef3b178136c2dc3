"""Auto-mount commands.

Manages ``@reboot`` crontab entries that mount remotes at boot.
"""

import asyncio
from typing import Annotated

import typer

from remotectl.cli.types import get_service, report_result
from remotectl.utils.formatting import print_info

app = typer.Typer(
    help="Mount remotes automatically at boot.",
    no_args_is_help=True,
)

RemoteArgument = Annotated[str, typer.Argument(help="Remote name.")]


@app.command()
def enable(ctx: typer.Context, name: RemoteArgument) -> None:
    """Add a crontab entry mounting the remote at boot."""
    service = get_service(ctx)
    report_result(asyncio.run(service.enable_auto_mount(name)))


@app.command()
def disable(ctx: typer.Context, name: RemoteArgument) -> None:
    """Remove the remote's crontab entries."""
    service = get_service(ctx)
    report_result(asyncio.run(service.disable_auto_mount(name)))


@app.command()
def status(ctx: typer.Context, name: RemoteArgument) -> None:
    """Show whether the remote mounts at boot."""
    service = get_service(ctx)
    if asyncio.run(service.auto_mount_status(name)):
        print_info(f"{name}: auto-mount enabled")
    else:
        print_info(f"{name}: auto-mount disabled")
