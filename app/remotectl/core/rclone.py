"""rclone command lines.

Builds the argument lists remotectl passes to rclone, so that the mount
orchestrator and the crontab entry always agree on the exact command.
"""

from dataclasses import dataclass
from pathlib import Path

from remotectl.core.platform import PlatformProfile


@dataclass(frozen=True, slots=True)
class RcloneCommands:
    """Argument builders for one rclone executable and config.

    Attributes:
        executable: rclone executable name or path.
        config_path: rclone.conf to pass via ``--config``, or None to let
            rclone use its own default.
        cache_mode: Value for ``--vfs-cache-mode``.
    """

    executable: str
    config_path: Path | None = None
    cache_mode: str = "writes"

    def _config_args(self) -> list[str]:
        if self.config_path is None:
            return []
        return ["--config", str(self.config_path)]

    def mount(
        self,
        remote_name: str,
        mount_point: Path,
        profile: PlatformProfile,
    ) -> list[str]:
        """``rclone mount <remote>: <path> --vfs-cache-mode <mode> [--daemon] ...``.

        Args:
            remote_name: Remote to mount.
            mount_point: Local directory to mount on.
            profile: Platform policy supplying daemon mode and extra flags.

        Returns:
            Argument list.
        """
        args = [
            self.executable,
            "mount",
            f"{remote_name}:",
            str(mount_point),
            "--vfs-cache-mode",
            self.cache_mode,
        ]
        if profile.daemonize:
            args.append("--daemon")
        args.extend(profile.extra_mount_args(remote_name))
        args.extend(self._config_args())
        return args

    def list_top_level(self, remote_name: str) -> list[str]:
        """``rclone lsf <remote>: --max-depth 1``, a cheap reachability check."""
        return [self.executable, "lsf", f"{remote_name}:", "--max-depth", "1", *self._config_args()]

    def obscure(self) -> list[str]:
        """``rclone obscure -``, which reads the secret from stdin."""
        return [self.executable, "obscure", "-"]

    def version(self) -> list[str]:
        """``rclone --version``."""
        return [self.executable, "--version"]
