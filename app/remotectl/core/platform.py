"""Per-platform mount policy.

Mounting differs by OS in ways the orchestrator must not guess at: whether
the mount point has to exist beforehand, how long rclone needs to settle,
which extra flags it needs and how to undo a mount. Each supported OS gets
one explicit :class:`PlatformProfile`.
"""

import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

from remotectl.core.paths import RCLONE_NAME


class UnsupportedPlatformError(Exception):
    """Raised when there is no mount profile for the running OS."""


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Mount policy for one operating system.

    Attributes:
        name: Platform identifier ("linux", "macos", or "windows").
        mount_dir_must_exist: If True, create the mount point before
            mounting; if False, remove it so rclone can create it (WinFsp).
        settle_seconds: Wait between spawning rclone and re-probing.
        daemonize: Whether rclone backgrounds itself via ``--daemon``.
        supports_boot_persistence: Whether crontab auto-mount is available.
    """

    name: str
    mount_dir_must_exist: bool
    settle_seconds: float
    daemonize: bool = True
    supports_boot_persistence: bool = True

    @property
    def is_windows(self) -> bool:
        """Check if this is the Windows profile."""
        return self.name == "windows"

    def extra_mount_args(self, remote_name: str) -> list[str]:
        """Platform-specific ``rclone mount`` flags.

        Args:
            remote_name: Remote being mounted, used to name the log file.

        Returns:
            Additional command-line flags.
        """
        if self.is_windows:
            log_file = Path(tempfile.gettempdir()) / f"rclone-mount-{remote_name}.log"
            return [
                "--vfs-cache-max-age",
                "1h",
                "--vfs-cache-max-size",
                "100M",
                "--log-level",
                "INFO",
                "--log-file",
                str(log_file),
            ]
        return []

    def unmount_commands(self, mount_point: Path) -> list[list[str]]:
        """Commands to try, in order, until one succeeds.

        Args:
            mount_point: Path to unmount.

        Returns:
            List of argument lists.
        """
        path = str(mount_point)
        if self.is_windows:
            # rclone.exe processes cannot be told apart by mount point
            return [["taskkill", "/f", "/im", f"{RCLONE_NAME}.exe"]]
        if self.name == "macos":
            return [["umount", path], ["diskutil", "unmount", "force", path]]
        return [["fusermount", "-u", path], ["umount", path]]


LINUX = PlatformProfile(name="linux", mount_dir_must_exist=True, settle_seconds=1.0)
MACOS = PlatformProfile(name="macos", mount_dir_must_exist=True, settle_seconds=1.0)
WINDOWS = PlatformProfile(
    name="windows",
    mount_dir_must_exist=False,
    settle_seconds=3.0,
    daemonize=False,
    supports_boot_persistence=False,
)


def detect_platform(platform: str | None = None) -> str:
    """Map ``sys.platform`` onto a profile name.

    Args:
        platform: Value to map. If None, uses the running interpreter's.

    Returns:
        "linux", "macos", or "windows".

    Raises:
        UnsupportedPlatformError: For any other platform.
    """
    platform = platform or sys.platform
    if platform.startswith("linux") or platform.startswith("freebsd"):
        return "linux"
    if platform == "darwin":
        return "macos"
    if platform in ("win32", "cygwin"):
        return "windows"
    raise UnsupportedPlatformError(f"Platform {platform} not supported for mounting")


def get_platform_profile(platform: str | None = None) -> PlatformProfile:
    """Get the mount profile for a platform.

    Args:
        platform: ``sys.platform``-style value. If None, uses the running one.

    Returns:
        Matching PlatformProfile.

    Raises:
        UnsupportedPlatformError: If the platform is not supported.
    """
    return {"linux": LINUX, "macos": MACOS, "windows": WINDOWS}[detect_platform(platform)]


def find_rclone(configured: str = RCLONE_NAME) -> str:
    """Resolve the rclone executable to invoke.

    A configured path other than the bare name wins. On Windows an
    ``rclone.exe`` shipped next to the running executable is preferred over
    whatever is on PATH.

    Args:
        configured: Executable name or path from settings.

    Returns:
        Executable path or name.
    """
    if configured != RCLONE_NAME:
        return str(Path(configured).expanduser())
    if sys.platform == "win32":
        bundled = Path(sys.executable).parent / f"{RCLONE_NAME}.exe"
        if bundled.exists():
            return str(bundled)
    return RCLONE_NAME
