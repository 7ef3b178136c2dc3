"""Environment diagnostics.

Checks what remotectl needs to work: rclone, its config file, the mount
base directory, the unmount utilities and crontab.
"""

import asyncio

import typer
from rich.markup import escape
from rich.table import Table

from remotectl.cli.types import get_service
from remotectl.core.paths import expand_path
from remotectl.core.service import RemoteService
from remotectl.utils.formatting import console, print_success, print_warning
from remotectl.utils.shell import command_exists


def _collect_checks(service: RemoteService) -> list[tuple[str, bool, str]]:
    """Run every check and return (name, passed, detail) rows."""
    checks: list[tuple[str, bool, str]] = []

    version = asyncio.run(service.rclone_version())
    detail = version or f"'{service.commands.executable}' is not runnable"
    checks.append(("rclone", version is not None, detail))

    checks.append(("rclone config", service.store.exists(), str(service.store.path)))

    # Created on first mount, so a missing directory is fine
    mount_base = expand_path(service.settings.mount_base)
    checks.append(("mount base", mount_base.is_dir() or not mount_base.exists(), str(mount_base)))

    for args in service.profile.unmount_commands(mount_base):
        tool = args[0]
        checks.append((tool, command_exists(tool), "unmount helper"))

    if service.boot.supported:
        checks.append(("crontab", command_exists("crontab"), "auto-mount at boot"))

    return checks


def doctor(ctx: typer.Context) -> None:
    """Check the environment remotectl depends on."""
    service = get_service(ctx)
    checks = _collect_checks(service)

    table = Table(
        title=f"remotectl doctor ({service.profile.name})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Check", no_wrap=True)
    table.add_column("Detail", style="muted")

    for name, passed, detail in checks:
        icon = "[success]✓[/]" if passed else "[error]✗[/]"
        table.add_row(icon, name, escape(detail))
    console.print(table)

    failed = [name for name, passed, _ in checks if not passed]
    if failed:
        print_warning(f"{len(failed)} check(s) failed: {', '.join(failed)}")
        raise typer.Exit(code=1)
    print_success("All checks passed.")
