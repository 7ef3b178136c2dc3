"""Shared Rich display functions for remotes and plugins.

Provides table builders used by the list, show and plugins commands.
"""

import json

from rich.markup import escape
from rich.table import Table

from remotectl.models.plugin import PluginDescriptor
from remotectl.models.remote import RemoteSummary
from remotectl.utils.formatting import MASK, console, create_remote_table, format_mount_state

# Keys that hold credentials for backends without a plugin descriptor
SECRET_KEYS = frozenset(
    {"pass", "password", "pass2", "password2", "token", "client_secret", "secret_access_key"}
)


def create_remotes_table(remotes: list[RemoteSummary]) -> Table:
    """Create a Rich table of remotes with their mount and auto-mount state.

    Args:
        remotes: Summaries to display, in config order.

    Returns:
        Rich Table configured for remote display.
    """
    table = create_remote_table()
    for remote in remotes:
        name_style = "mounted" if remote.mounted else "text"
        table.add_row(
            format_mount_state(remote.mounted),
            f"[{name_style}]{escape(remote.name)}[/]",
            escape(remote.type),
            escape(str(remote.mount_point)),
            "[success]yes[/]" if remote.auto_mount else "[muted]no[/]",
        )
    return table


def print_remotes_json(remotes: list[RemoteSummary]) -> None:
    """Print remotes as JSON."""
    console.print_json(json.dumps([r.to_dict() for r in remotes]))


def is_secret_key(key: str, plugin: PluginDescriptor | None) -> bool:
    """Check if a stored key holds a credential.

    Args:
        key: Property name.
        plugin: Descriptor of the remote's type, if one is installed.

    Returns:
        True if the plugin marks the field as a password, or the key is
        a well-known credential name.
    """
    if plugin is not None:
        spec = plugin.get_field(key)
        if spec is not None:
            return spec.is_secret
    return key.lower() in SECRET_KEYS


def create_properties_table(
    remote_name: str,
    properties: dict[str, str],
    plugin: PluginDescriptor | None = None,
    reveal: bool = False,
) -> Table:
    """Create a key/value table for one remote.

    Secret values are masked unless ``reveal`` is set.
    """
    table = Table(
        title=f"Remote {escape(remote_name)}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", style="info", no_wrap=True)
    table.add_column("Value")

    for key, value in properties.items():
        if not reveal and is_secret_key(key, plugin):
            table.add_row(escape(key), f"[secret]{MASK}[/]")
        else:
            table.add_row(escape(key), escape(value))
    return table


def create_plugins_table(plugins: list[PluginDescriptor]) -> Table:
    """Create a table of available backend plugins."""
    table = Table(
        title="Plugins",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Display name")
    table.add_column("Version", style="muted")
    table.add_column("Description", style="muted", overflow="ellipsis")

    for plugin in plugins:
        table.add_row(
            escape(plugin.name),
            escape(plugin.label),
            escape(plugin.version or "-"),
            escape(plugin.description or "-"),
        )
    return table


def create_fields_table(plugin: PluginDescriptor) -> Table:
    """Create a table describing a plugin's fields.

    Basic fields are listed before advanced ones; required fields are
    marked with an asterisk.
    """
    table = Table(
        title=f"{escape(plugin.label)} fields",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", no_wrap=True)
    table.add_column("Label")
    table.add_column("Type", style="info")
    table.add_column("Default", style="muted")
    table.add_column("Group", style="muted")

    for group, fields in (("basic", plugin.basic_fields), ("advanced", plugin.advanced_fields)):
        for spec in fields:
            key = escape(spec.name) + ("[warning]*[/]" if spec.required else "")
            table.add_row(
                key, escape(spec.label), spec.field_type.value, escape(spec.default or "-"), group
            )
    return table
