"""Backend plugin commands."""

from typing import Annotated

import typer
from rich.markup import escape

from remotectl.cli.display import create_fields_table, create_plugins_table
from remotectl.cli.types import get_service
from remotectl.core.errors import PluginNotFoundError
from remotectl.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Inspect backend plugins.",
    no_args_is_help=True,
)


@app.command("list")
def list_plugins(ctx: typer.Context) -> None:
    """List available backend plugins."""
    service = get_service(ctx)
    plugins = service.list_plugins()

    if not plugins:
        dirs = ", ".join(str(d) for d in service.registry.search_dirs)
        print_info(f"No plugins found. Searched: {dirs}")
        return

    console.print(create_plugins_table(plugins))


@app.command()
def show(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Plugin name.")],
) -> None:
    """Show the fields a plugin accepts."""
    service = get_service(ctx)
    try:
        plugin = service.get_plugin(name)
    except PluginNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if plugin.description:
        console.print(f"[header]{escape(plugin.label)}[/] - {escape(plugin.description)}")
    console.print(create_fields_table(plugin))
