"""Unit tests for remote definition commands.

Tests for list, show, add, edit and delete with the service mocked out.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from remotectl.cli.main import app
from remotectl.core.errors import ConfigNotFoundError
from remotectl.models.remote import RemoteSummary
from remotectl.models.result import ErrorKind, OperationResult
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def service() -> MagicMock:
    """RemoteService double with two remotes."""
    service = MagicMock()
    service.store.path = Path("/home/me/.config/rclone/rclone.conf")
    service.list_remotes = AsyncMock(
        return_value=[
            RemoteSummary(name="drive", type="drive", mount_point=Path("/m/drive"), mounted=True),
            RemoteSummary(name="nas", type="sftp", mount_point=Path("/m/nas"), auto_mount=True),
        ]
    )
    service.registry.find.return_value = None
    return service


class TestMainApp:
    """Tests for global options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "remotectl version" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("list", "mount", "unmount", "automount", "plugins", "doctor"):
            assert command in result.stdout

    def test_config_option_reaches_service(self, tmp_path: Path) -> None:
        """--config overrides the rclone.conf location."""
        conf = tmp_path / "rclone.conf"
        conf.write_text("[local]\ntype = local\n")

        with patch("remotectl.cli.types.RemoteService.from_settings") as from_settings:
            from_settings.return_value.get_remote_config.return_value = {"type": "local"}
            from_settings.return_value.registry.find.return_value = None
            result = runner.invoke(
                app,
                ["--config", str(conf), "--settings", str(tmp_path / "s.toml"), "show", "local"],
            )

        assert result.exit_code == 0
        assert from_settings.call_args.args[1] == conf


class TestList:
    """Tests for remotectl list."""

    def test_table(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "drive" in result.stdout
        assert "nas" in result.stdout
        assert "2 remotes, 1 mounted" in result.stdout

    def test_json(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["list", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0] == {
            "name": "drive",
            "type": "drive",
            "mount_point": "/m/drive",
            "mounted": True,
            "auto_mount": False,
        }

    def test_empty(self, service: MagicMock) -> None:
        service.list_remotes.return_value = []

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No remotes configured" in result.stdout

    def test_missing_config(self, service: MagicMock) -> None:
        service.list_remotes.side_effect = ConfigNotFoundError("rclone config not found")

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["list"])

        assert result.exit_code == 1
        assert "rclone config not found" in result.output


class TestShow:
    """Tests for remotectl show."""

    def test_masks_secrets(self, service: MagicMock) -> None:
        service.get_remote_config.return_value = {"type": "sftp", "host": "nas.local", "pass": "c2VjcmV0"}

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["show", "nas"])

        assert result.exit_code == 0
        assert "nas.local" in result.stdout
        assert "c2VjcmV0" not in result.stdout

    def test_reveal(self, service: MagicMock) -> None:
        service.get_remote_config.return_value = {"type": "sftp", "pass": "c2VjcmV0"}

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["show", "nas", "--reveal"])

        assert "c2VjcmV0" in result.stdout


class TestAddEditDelete:
    """Tests for config mutation commands."""

    def test_add(self, service: MagicMock) -> None:
        service.add_remote = AsyncMock(return_value=OperationResult.ok("Successfully added remote 'box'"))

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(
                app, ["add", "sftp", "--name", "box", "--set", "host=h", "--set", "pass=a=b"]
            )

        assert result.exit_code == 0
        assert "Successfully added remote 'box'" in result.stdout
        service.add_remote.assert_awaited_once_with(
            "sftp", {"host": "h", "pass": "a=b", "remote_name": "box"}
        )

    def test_add_bad_assignment(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["add", "sftp", "--name", "box", "--set", "host"])

        assert result.exit_code == 2
        service.add_remote.assert_not_called()

    def test_add_failure_exit_code(self, service: MagicMock) -> None:
        service.add_remote = AsyncMock(
            return_value=OperationResult.fail(ErrorKind.VALIDATION_ERROR, "Required field 'host' is missing")
        )

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["add", "sftp", "--name", "box"])

        assert result.exit_code == 1
        assert "Required field 'host' is missing" in result.output

    def test_edit_rename(self, service: MagicMock) -> None:
        service.edit_remote = AsyncMock(return_value=OperationResult.ok("Remote 'nas' updated successfully"))

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["edit", "nas", "--rename", "backup", "--set", "user=me"])

        assert result.exit_code == 0
        service.edit_remote.assert_awaited_once_with(
            "nas", {"user": "me", "remote_name": "backup"}, plugin_name=None
        )

    def test_delete_confirmed(self, service: MagicMock) -> None:
        service.delete_remote = AsyncMock(return_value=OperationResult.ok("Deleted remote nas"))

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["delete", "nas"], input="y\n")

        assert result.exit_code == 0
        service.delete_remote.assert_awaited_once_with("nas")

    def test_delete_aborted(self, service: MagicMock) -> None:
        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["delete", "nas"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.stdout
        service.delete_remote.assert_not_called()

    def test_delete_yes_skips_prompt(self, service: MagicMock) -> None:
        service.delete_remote = AsyncMock(
            return_value=OperationResult.fail(ErrorKind.REMOTE_NOT_FOUND, "Remote 'ghost' not found in config")
        )

        with patch("remotectl.cli.commands.remotes.get_service", return_value=service):
            result = runner.invoke(app, ["delete", "ghost", "--yes"])

        assert result.exit_code == 1
        assert "not found" in result.output
