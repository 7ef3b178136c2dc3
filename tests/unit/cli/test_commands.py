"""Unit tests for mount, automount, plugins, settings and doctor commands."""

import asyncio
import tomllib
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from remotectl.cli.main import app
from remotectl.cli.types import parse_assignments, run_cancellable
from remotectl.core.errors import PluginNotFoundError
from remotectl.models.plugin import PluginDescriptor
from remotectl.models.result import ErrorKind, OperationResult
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def service() -> MagicMock:
    """RemoteService double with async operations."""
    service = MagicMock()
    service.mount = AsyncMock(return_value=OperationResult.ok("Mounted drive at /m/drive."))
    service.unmount = AsyncMock(return_value=OperationResult.ok("Unmounted drive."))
    service.test_connection = AsyncMock(
        return_value=OperationResult.ok("drive: connection OK", latency_ms=42.0)
    )
    service.enable_auto_mount = AsyncMock(return_value=OperationResult.ok("Enabled auto-mount for drive."))
    service.disable_auto_mount = AsyncMock(return_value=OperationResult.ok("Disabled auto-mount for drive."))
    service.auto_mount_status = AsyncMock(return_value=True)
    return service


class TestParseAssignments:
    """Tests for parse_assignments."""

    def test_values_keep_equals_signs(self) -> None:
        assert parse_assignments(["host=h", "pass=a=b", "user="]) == {
            "host": "h",
            "pass": "a=b",
            "user": "",
        }

    def test_none(self) -> None:
        assert parse_assignments(None) == {}

    @pytest.mark.parametrize("bad", ["host", "=value"])
    def test_rejects_malformed(self, bad: str) -> None:
        with pytest.raises(typer.BadParameter):
            parse_assignments([bad])


class TestRunCancellable:
    """Tests for run_cancellable."""

    def test_passes_unset_event(self) -> None:
        async def operation(cancel: asyncio.Event) -> bool:
            return cancel.is_set()

        assert run_cancellable(operation) is False


class TestMountCommands:
    """Tests for mount, unmount and test."""

    def test_mount(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["mount", "drive"])

        assert result.exit_code == 0
        assert "Mounted drive" in result.stdout
        kwargs = service.mount.await_args.kwargs
        assert kwargs["timeout"] is None
        assert isinstance(kwargs["cancel"], asyncio.Event)

    def test_mount_timeout_option(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            runner.invoke(app, ["mount", "drive", "--timeout", "2.5"])

        assert service.mount.await_args.kwargs["timeout"] == 2.5

    def test_mount_failure(self, service: MagicMock) -> None:
        service.mount.return_value = OperationResult.fail(ErrorKind.MOUNT_FAILED, "drive is already mounted.")

        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["mount", "drive"])

        assert result.exit_code == 1
        assert "already mounted" in result.output

    def test_zero_timeout_rejected(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["mount", "drive", "--timeout", "0"])

        assert result.exit_code == 2
        service.mount.assert_not_called()

    def test_unmount(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["unmount", "drive"])

        assert result.exit_code == 0
        service.unmount.assert_awaited_once()

    def test_connection(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["test", "drive", "-t", "5"])

        assert result.exit_code == 0
        assert "connection OK" in result.stdout
        service.test_connection.assert_awaited_once_with("drive", timeout=5.0)

    def test_quick_connection(self, service: MagicMock) -> None:
        service.check_latency = AsyncMock(return_value=OperationResult.ok("drive: connection OK"))

        with patch("remotectl.cli.commands.mount.get_service", return_value=service):
            result = runner.invoke(app, ["test", "drive", "--quick"])

        assert result.exit_code == 0
        service.check_latency.assert_awaited_once_with("drive")
        service.test_connection.assert_not_called()


class TestAutomountCommands:
    """Tests for the automount group."""

    def test_enable(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.automount.get_service", return_value=service):
            result = runner.invoke(app, ["automount", "enable", "drive"])

        assert result.exit_code == 0
        service.enable_auto_mount.assert_awaited_once_with("drive")

    def test_disable_failure(self, service: MagicMock) -> None:
        service.disable_auto_mount.return_value = OperationResult.fail(
            ErrorKind.SCHEDULER_ERROR, "Failed to disable auto-mount: crontab not found"
        )

        with patch("remotectl.cli.commands.automount.get_service", return_value=service):
            result = runner.invoke(app, ["automount", "disable", "drive"])

        assert result.exit_code == 1

    @pytest.mark.parametrize(("enabled", "expected"), [(True, "enabled"), (False, "disabled")])
    def test_status(self, service: MagicMock, enabled: bool, expected: str) -> None:
        service.auto_mount_status.return_value = enabled

        with patch("remotectl.cli.commands.automount.get_service", return_value=service):
            result = runner.invoke(app, ["automount", "status", "drive"])

        assert f"auto-mount {expected}" in result.stdout


class TestPluginCommands:
    """Tests for the plugins group."""

    def test_list(self, service: MagicMock) -> None:
        service.list_plugins.return_value = [PluginDescriptor(name="sftp", display_name="SFTP")]

        with patch("remotectl.cli.commands.plugins.get_service", return_value=service):
            result = runner.invoke(app, ["plugins", "list"])

        assert result.exit_code == 0
        assert "SFTP" in result.stdout

    def test_list_empty(self, service: MagicMock) -> None:
        service.list_plugins.return_value = []
        service.registry.search_dirs = [Path("/nowhere")]

        with patch("remotectl.cli.commands.plugins.get_service", return_value=service):
            result = runner.invoke(app, ["plugins", "list"])

        assert "No plugins found" in result.stdout

    def test_show(self, service: MagicMock) -> None:
        service.get_plugin.return_value = PluginDescriptor.model_validate(
            {"name": "sftp", "basic_fields": [{"name": "host", "required": True}]}
        )

        with patch("remotectl.cli.commands.plugins.get_service", return_value=service):
            result = runner.invoke(app, ["plugins", "show", "sftp"])

        assert result.exit_code == 0
        assert "host" in result.stdout

    def test_show_missing(self, service: MagicMock) -> None:
        service.get_plugin.side_effect = PluginNotFoundError("ftp")

        with patch("remotectl.cli.commands.plugins.get_service", return_value=service):
            result = runner.invoke(app, ["plugins", "show", "ftp"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestSettingsCommands:
    """Tests for the settings group."""

    def test_init_writes_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"

        result = runner.invoke(app, ["--settings", str(path), "settings", "init"])

        assert result.exit_code == 0
        data = tomllib.loads(path.read_text())
        assert data["cache_mode"] == "writes"
        assert "rclone_config" not in data

    def test_init_keeps_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"
        path.write_text('cache_mode = "full"\n')

        result = runner.invoke(app, ["--settings", str(path), "settings", "init"])

        assert result.exit_code == 0
        assert "already exist" in result.stdout
        assert path.read_text() == 'cache_mode = "full"\n'

    def test_init_force(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"
        path.write_text('cache_mode = "full"\n')

        runner.invoke(app, ["--settings", str(path), "settings", "init", "--force"])

        assert tomllib.loads(path.read_text())["cache_mode"] == "writes"

    def test_show(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"
        path.write_text('mount_base = "/srv/mnt"\n')

        result = runner.invoke(app, ["--settings", str(path), "settings", "show"])

        assert result.exit_code == 0
        assert "/srv/mnt" in result.stdout

    def test_invalid_settings_exit(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"
        path.write_text('cache_mode = "sometimes"\n')

        result = runner.invoke(app, ["--settings", str(path), "settings", "show"])

        assert result.exit_code == 1
        assert "Invalid settings" in result.output


class TestDoctor:
    """Tests for remotectl doctor."""

    @pytest.fixture
    def doctor_service(self, tmp_path: Path) -> MagicMock:
        service = MagicMock()
        service.rclone_version = AsyncMock(return_value="rclone v1.66.0")
        service.commands.executable = "rclone"
        service.store.exists.return_value = True
        service.store.path = tmp_path / "rclone.conf"
        service.settings.mount_base = str(tmp_path / "mnt")
        service.profile.name = "linux"
        service.profile.unmount_commands.return_value = [["fusermount", "-u", "x"], ["umount", "x"]]
        service.boot.supported = True
        return service

    def test_all_pass(self, doctor_service: MagicMock) -> None:
        with (
            patch("remotectl.cli.commands.doctor.get_service", return_value=doctor_service),
            patch("remotectl.cli.commands.doctor.command_exists", return_value=True),
        ):
            result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 0
        assert "All checks passed" in result.stdout

    def test_missing_rclone(self, doctor_service: MagicMock) -> None:
        doctor_service.rclone_version.return_value = None

        with (
            patch("remotectl.cli.commands.doctor.get_service", return_value=doctor_service),
            patch("remotectl.cli.commands.doctor.command_exists", return_value=True),
        ):
            result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 1
        assert "1 check(s) failed: rclone" in result.output

    def test_mount_base_must_be_directory(self, doctor_service: MagicMock, tmp_path: Path) -> None:
        (tmp_path / "mnt").write_text("not a directory")

        with (
            patch("remotectl.cli.commands.doctor.get_service", return_value=doctor_service),
            patch("remotectl.cli.commands.doctor.command_exists", return_value=True),
        ):
            result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 1
        assert "mount base" in result.output
