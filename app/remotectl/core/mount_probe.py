"""Mount state detection.

:class:`MountProbe` answers one question, "is this path an active mount
right now?", using the OS's own view rather than anything remotectl
remembers. It never raises: when the state cannot be determined the
answer is False. A false negative only costs a redundant mount attempt,
whereas a false positive would skip mounting a path that needs it.
"""

import logging
import os
import re
from pathlib import Path

from remotectl.core.errors import SpawnFailedError
from remotectl.core.paths import RCLONE_NAME
from remotectl.core.platform import PlatformProfile, get_platform_profile
from remotectl.models.remote import MountState
from remotectl.utils.shell import ProcessRunner

logger = logging.getLogger(__name__)

PROC_MOUNTS = Path("/proc/self/mounts")

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def _decode_mount_field(value: str) -> str:
    """Decode the octal escapes (``\\040`` for space) used in /proc/mounts."""
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), value)


def parse_proc_mounts(text: str) -> set[str]:
    """Extract mount point paths from /proc/mounts content.

    Args:
        text: Content in fstab format (device, mount point, type, ...).

    Returns:
        Set of decoded mount point paths.
    """
    mount_points: set[str] = set()
    for line in text.splitlines():
        fields = line.split()
        if len(fields) >= 2:
            mount_points.add(_decode_mount_field(fields[1]))
    return mount_points


def parse_mount_output(text: str) -> set[str]:
    """Extract mount point paths from BSD/macOS ``mount`` output.

    Lines look like ``remote: on /Users/me/mnt/drive (macfuse, nodev)``.

    Args:
        text: Output of the ``mount`` command.

    Returns:
        Set of mount point paths.
    """
    mount_points: set[str] = set()
    for line in text.splitlines():
        _, sep, rest = line.partition(" on ")
        if not sep:
            continue
        path, paren, _ = rest.rpartition(" (")
        mount_points.add(path if paren else rest.strip())
    return mount_points


class MountProbe:
    """Checks whether paths are currently mounted.

    Attributes:
        timeout: Bound on each external query, in seconds.
    """

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        profile: PlatformProfile | None = None,
        *,
        timeout: float = 5.0,
    ) -> None:
        """Initialize the probe.

        Args:
            runner: Process runner for mount utilities.
            profile: Platform policy. If None, detects the running platform.
            timeout: Bound on each external query, in seconds.
        """
        self._runner = runner or ProcessRunner()
        self._profile = profile or get_platform_profile()
        self.timeout = timeout

    async def is_mounted(self, path: Path) -> bool:
        """Check if a path is an active mount.

        Args:
            path: Mount point to check.

        Returns:
            True only if the OS reports the path as mounted.
        """
        # A stale FUSE mount fails stat() but still has a directory entry
        if not os.path.lexists(path):
            return False
        try:
            if self._profile.is_windows:
                return await self._check_windows(path)
            if self._profile.name == "macos":
                return await self._check_mount_table(path)
            return await self._check_linux(path)
        except Exception as e:
            logger.debug("Could not determine mount state of %s: %s", path, e)
            return False

    async def state(self, remote_name: str, path: Path) -> MountState:
        """Observe the mount state of a remote's mount point."""
        return MountState(
            remote_name=remote_name,
            mount_path=path,
            is_mounted=await self.is_mounted(path),
        )

    async def _check_linux(self, path: Path) -> bool:
        """Ask ``mountpoint``, falling back to /proc/self/mounts."""
        try:
            result = await self._runner.run(
                ["mountpoint", "-q", str(path)],
                timeout=self.timeout,
            )
        except SpawnFailedError:
            logger.debug("mountpoint not available, reading %s", PROC_MOUNTS)
            mount_points = parse_proc_mounts(PROC_MOUNTS.read_text())
            return _path_in(path, mount_points)
        return result.success

    async def _check_mount_table(self, path: Path) -> bool:
        """Look the path up in ``mount`` output."""
        result = await self._runner.run(["mount"], timeout=self.timeout)
        if not result.success:
            return False
        return _path_in(path, parse_mount_output(result.stdout))

    async def _check_windows(self, path: Path) -> bool:
        """Approximate: an rclone process naming the path, plus a readable path.

        Windows has no direct "is this a mount point" query for WinFsp
        mounts. The check races with rclone starting or stopping.
        """
        query = (
            f"Get-CimInstance Win32_Process -Filter \"Name='{RCLONE_NAME}.exe'\" "
            "| Select-Object -ExpandProperty CommandLine"
        )
        result = await self._runner.run(
            ["powershell", "-NoProfile", "-Command", query],
            timeout=self.timeout,
        )
        if not result.success:
            return False

        target = str(path).lower()
        running = any(
            " mount " in f" {line.lower()} " and target in line.lower()
            for line in result.stdout.splitlines()
        )
        return running and os.access(path, os.R_OK)


def _path_in(path: Path, mount_points: set[str]) -> bool:
    """Match a path against mount points, literally or after resolving symlinks."""
    if str(path) in mount_points:
        return True
    return os.path.realpath(path) in mount_points
