"""Unit tests for mount state detection."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from remotectl.core.errors import SpawnFailedError, TimedOutError
from remotectl.core.mount_probe import MountProbe, parse_mount_output, parse_proc_mounts
from remotectl.core.platform import LINUX, MACOS, WINDOWS
from remotectl.utils.shell import CommandResult


class TestParsers:
    """Tests for mount table parsers."""

    def test_proc_mounts_decodes_escapes(self) -> None:
        text = (
            "sysfs /sys sysfs rw,nosuid 0 0\n"
            "drive: /home/me/mnt/my\\040drive fuse.rclone rw,nosuid,nodev 0 0\n"
        )

        assert parse_proc_mounts(text) == {"/sys", "/home/me/mnt/my drive"}

    def test_mount_output(self) -> None:
        text = (
            "/dev/disk3s1s1 on / (apfs, sealed, local, read-only, journaled)\n"
            "drive: on /Users/me/mnt/my drive (macfuse, nodev, nosuid)\n"
        )

        assert parse_mount_output(text) == {"/", "/Users/me/mnt/my drive"}


class TestIsMounted:
    """Tests for MountProbe.is_mounted."""

    @pytest.mark.asyncio
    async def test_missing_path_is_not_mounted(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        """No directory entry means no mount, without running anything."""
        probe = MountProbe(mock_runner, LINUX)

        assert await probe.is_mounted(tmp_path / "missing") is False
        mock_runner.run.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("returncode", "expected"), [(0, True), (1, False), (32, False)])
    async def test_linux_mountpoint(
        self,
        tmp_path: Path,
        mock_runner: MagicMock,
        returncode: int,
        expected: bool,
    ) -> None:
        mock_runner.run.return_value = CommandResult(stdout="", stderr="", returncode=returncode)

        assert await MountProbe(mock_runner, LINUX).is_mounted(tmp_path) is expected
        assert mock_runner.run.await_args.args[0] == ["mountpoint", "-q", str(tmp_path)]

    @pytest.mark.asyncio
    async def test_linux_falls_back_to_proc_mounts(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        """Without the mountpoint tool, /proc/self/mounts decides."""
        mounts = tmp_path / "mounts"
        mounts.write_text(f"drive: {tmp_path} fuse.rclone rw 0 0\n")
        mock_runner.run.side_effect = SpawnFailedError("Failed to start mountpoint")

        with patch("remotectl.core.mount_probe.PROC_MOUNTS", mounts):
            assert await MountProbe(mock_runner, LINUX).is_mounted(tmp_path) is True

    @pytest.mark.asyncio
    async def test_macos_mount_table(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        mock_runner.run.return_value = CommandResult(
            stdout=f"drive: on {tmp_path} (macfuse, nodev)\n", stderr="", returncode=0
        )

        assert await MountProbe(mock_runner, MACOS).is_mounted(tmp_path) is True
        assert await MountProbe(mock_runner, MACOS).is_mounted(tmp_path.parent) is False

    @pytest.mark.asyncio
    async def test_windows_process_and_access(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        """A running rclone mount naming the path plus a readable path."""
        mock_runner.run.return_value = CommandResult(
            stdout=f"rclone.exe mount drive: {tmp_path} --vfs-cache-mode writes\r\n",
            stderr="",
            returncode=0,
        )

        assert await MountProbe(mock_runner, WINDOWS).is_mounted(tmp_path) is True
        assert mock_runner.run.await_args.args[0][0] == "powershell"

    @pytest.mark.asyncio
    async def test_windows_no_process(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        assert await MountProbe(mock_runner, WINDOWS).is_mounted(tmp_path) is False

    @pytest.mark.asyncio
    async def test_errors_mean_not_mounted(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        """The probe never raises."""
        mock_runner.run.side_effect = TimedOutError(5.0, "Command 'mountpoint'")

        assert await MountProbe(mock_runner, LINUX).is_mounted(tmp_path) is False

    @pytest.mark.asyncio
    async def test_state(self, tmp_path: Path, mock_runner: MagicMock) -> None:
        state = await MountProbe(mock_runner, LINUX).state("drive", tmp_path)

        assert state.remote_name == "drive"
        assert state.mount_path == tmp_path
        assert state.is_mounted is True
