"""Auto-mount at boot via the user's crontab.

Each auto-mounted remote gets one ``@reboot`` line running the same
``rclone mount`` command the orchestrator uses. The crontab is an
unstructured text blob shared with the user, so entries are recognised by
substrings rather than by exact line equality: a line belongs to a remote
if it runs the configured rclone executable with ``mount``, names
``<remote>:`` and contains the remote's mount point. That keeps hand-edited
entries with different flags or quoting recognisable, at the price of an
occasional false positive.
"""

import logging
import os
import re
import shlex
from collections.abc import Iterable
from pathlib import Path

from remotectl.core.errors import RemoteCtlError, SchedulerError
from remotectl.core.paths import DEFAULT_MOUNT_BASE, get_mount_point
from remotectl.core.platform import PlatformProfile
from remotectl.core.rclone import RcloneCommands
from remotectl.utils.shell import ProcessRunner

logger = logging.getLogger(__name__)

ENTRY_MARKER = "# Added by remotectl:"


class BootPersistence:
    """Registers and deregisters ``@reboot`` mount entries in crontab.

    Every change is a full read-modify-write of the table through
    ``crontab -``, never an incremental append.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        commands: RcloneCommands,
        profile: PlatformProfile,
        *,
        mount_base: str | Path = DEFAULT_MOUNT_BASE,
        timeout: float = 10.0,
    ) -> None:
        """Initialize boot persistence.

        Args:
            runner: Executes ``crontab``.
            commands: rclone argument builders for the entry's command.
            profile: Platform policy; boot persistence needs cron.
            mount_base: Directory holding one mount point per remote.
            timeout: Bound on each crontab invocation in seconds.
        """
        self._runner = runner
        self._commands = commands
        self._profile = profile
        self._mount_base = mount_base
        self._timeout = timeout
        # shlex.join quotes paths with spaces, so a quote may close the executable
        executable = re.escape(os.path.basename(commands.executable))
        self._command_pattern = re.compile(rf"{executable}['\"]?\s+mount\s")

    @property
    def supported(self) -> bool:
        """Check if the platform has a crontab."""
        return self._profile.supports_boot_persistence

    def entry_for(self, remote_name: str) -> str:
        """Build the crontab line for a remote."""
        mount_point = get_mount_point(remote_name, self._mount_base)
        command = shlex.join(self._commands.mount(remote_name, mount_point, self._profile))
        return f"@reboot {command} {ENTRY_MARKER} {remote_name}"

    def matches(self, line: str, remote_name: str) -> bool:
        """Check if a crontab line is a mount entry for a remote.

        Args:
            line: One crontab line.
            remote_name: Remote to look for.

        Returns:
            True if the line mentions the rclone mount command, the remote
            and its mount point (expanded or ``~``-relative).
        """
        if not self._command_pattern.search(line) or f"{remote_name}:" not in line:
            return False
        mount_point = get_mount_point(remote_name, self._mount_base)
        candidates = {str(mount_point)}
        try:
            candidates.add("~/" + mount_point.relative_to(Path.home()).as_posix())
        except ValueError:
            pass
        return any(candidate in line for candidate in candidates)

    async def is_enabled(self, remote_name: str) -> bool:
        """Check if a remote has a matching crontab entry."""
        if not self.supported:
            return False
        table = await self._read_table()
        return any(self.matches(line, remote_name) for line in table.splitlines())

    async def enabled_remotes(self, remote_names: Iterable[str]) -> set[str]:
        """Check many remotes against a single crontab read.

        Args:
            remote_names: Remotes to check.

        Returns:
            Names of remotes with a matching entry.
        """
        if not self.supported:
            return set()
        lines = (await self._read_table()).splitlines()
        return {name for name in remote_names if any(self.matches(line, name) for line in lines)}

    async def enable(self, remote_name: str) -> bool:
        """Add a @reboot entry unless one already exists.

        Args:
            remote_name: Remote to auto-mount.

        Returns:
            True if an entry was added, False if one was already present.

        Raises:
            SchedulerError: If cron is unsupported or the table can't be written.
        """
        self._require_support()
        table = await self._read_table()
        lines = table.splitlines()

        if any(self.matches(line, remote_name) for line in lines):
            logger.info("Auto-mount already enabled for %s", remote_name)
            return False

        lines.append(self.entry_for(remote_name))
        await self._write_table(lines)
        logger.info("Enabled auto-mount for %s", remote_name)
        return True

    async def disable(self, remote_name: str) -> int:
        """Remove every @reboot entry for a remote.

        Args:
            remote_name: Remote to stop auto-mounting.

        Returns:
            Number of entries removed. The table is not rewritten when zero.

        Raises:
            SchedulerError: If cron is unsupported or the table can't be written.
        """
        self._require_support()
        lines = (await self._read_table()).splitlines()
        kept = [line for line in lines if not self.matches(line, remote_name)]
        removed = len(lines) - len(kept)

        if removed:
            await self._write_table(kept)
            logger.info("Disabled auto-mount for %s (%d entries)", remote_name, removed)
        return removed

    def _require_support(self) -> None:
        if not self.supported:
            msg = f"Auto-mount is not supported on {self._profile.name.capitalize()} yet"
            raise SchedulerError(msg)

    async def _read_table(self) -> str:
        """Read the crontab; any failure reads as an empty table."""
        try:
            result = await self._runner.run(["crontab", "-l"], timeout=self._timeout)
        except RemoteCtlError as e:
            logger.debug("Could not read crontab: %s", e)
            return ""
        if not result.success:
            # "no crontab for <user>" is the normal case for a fresh account
            logger.debug("crontab -l exited %d: %s", result.returncode, result.stderr.strip())
            return ""
        return result.stdout

    async def _write_table(self, lines: list[str]) -> None:
        """Replace the whole crontab."""
        content = "\n".join(lines) + "\n" if lines else ""
        try:
            result = await self._runner.run(["crontab", "-"], timeout=self._timeout, input=content)
        except RemoteCtlError as e:
            raise SchedulerError(f"Failed to update crontab: {e}") from e
        if not result.success:
            raise SchedulerError(f"Failed to update crontab: {result.error_text}")
