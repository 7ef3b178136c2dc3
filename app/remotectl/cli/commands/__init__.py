"""CLI commands for remotectl.

This package contains all subcommand implementations.
"""

from remotectl.cli.commands import automount, doctor, mount, plugins, remotes, settings

__all__ = ["automount", "doctor", "mount", "plugins", "remotes", "settings"]
