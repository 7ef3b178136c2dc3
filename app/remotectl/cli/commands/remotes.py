"""Remote definition commands.

Provides ``list``, ``show``, ``add``, ``edit`` and ``delete`` over the
remotes in rclone.conf.
"""

import asyncio
from typing import Annotated

import typer

from remotectl.cli.display import create_properties_table, create_remotes_table, print_remotes_json
from remotectl.cli.types import OutputFormat, get_service, parse_assignments, report_result
from remotectl.core.errors import RemoteCtlError
from remotectl.plugins.fields import REMOTE_NAME_FIELD
from remotectl.utils.formatting import console, print_error, print_info


def list_remotes(
    ctx: typer.Context,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List configured remotes with their mount state.

    Examples:
        remotectl list
        remotectl list --format json
    """
    service = get_service(ctx)
    try:
        remotes = asyncio.run(service.list_remotes())
    except RemoteCtlError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        print_remotes_json(remotes)
        return

    if not remotes:
        print_info(f"No remotes configured in {service.store.path}")
        return

    console.print(create_remotes_table(remotes))
    mounted = sum(1 for r in remotes if r.mounted)
    console.print(f"\n[dim]{len(remotes)} remotes, {mounted} mounted[/dim]")


def show(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote name.")],
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Show secret values (still obscured by rclone)."),
    ] = False,
) -> None:
    """Show the stored configuration of a remote."""
    service = get_service(ctx)
    try:
        properties = service.get_remote_config(name)
    except RemoteCtlError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    plugin = service.registry.find(properties.get("type", ""))
    console.print(create_properties_table(name, properties, plugin, reveal=reveal))


def add(
    ctx: typer.Context,
    plugin: Annotated[str, typer.Argument(help="Backend plugin (e.g. drive, sftp).")],
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the new remote.")],
    assignments: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Field value as key=value. Repeatable."),
    ] = None,
) -> None:
    """Add a remote configured through a backend plugin.

    Password fields are obscured with ``rclone obscure`` before they are
    written.

    Examples:
        remotectl add sftp --name nas --set host=nas.local --set user=me
    """
    values = parse_assignments(assignments)
    values[REMOTE_NAME_FIELD] = name

    service = get_service(ctx)
    report_result(asyncio.run(service.add_remote(plugin, values)))


def edit(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote to edit.")],
    assignments: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Changed field value as key=value. Repeatable."),
    ] = None,
    plugin: Annotated[
        str | None,
        typer.Option("--plugin", "-p", help="Change the backend type."),
    ] = None,
    rename: Annotated[
        str | None,
        typer.Option("--rename", help="New name for the remote."),
    ] = None,
) -> None:
    """Edit a remote in place.

    Fields that are not set keep their stored values. An empty password
    (``--set pass=``) keeps the stored secret.
    """
    values = parse_assignments(assignments)
    if rename:
        values[REMOTE_NAME_FIELD] = rename

    service = get_service(ctx)
    report_result(asyncio.run(service.edit_remote(name, values, plugin_name=plugin)))


def delete(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote to delete.")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete a remote from rclone.conf.

    Mounted remotes stay mounted; unmount them first if needed.
    """
    service = get_service(ctx)

    if not yes:
        confirmed = typer.confirm(f"Delete remote '{name}'?", default=False)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    report_result(asyncio.run(service.delete_remote(name)))
