"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from remotectl.core.mount_probe import MountProbe
from remotectl.models.remote import MountState
from remotectl.utils.shell import CommandResult, DetachedProcess, ProcessRunner

SAMPLE_RCLONE_CONF = """\
[drive]
type = drive
scope = drive
token = {"access_token":"abc","expiry":"2026-01-01T00:00:00Z"}

# work storage
[s3-work]
type = s3
provider = AWS
region = eu-central-1

[nas]
type = sftp
host = nas.local
user = me
pass = b2JzY3VyZWQ
"""


@pytest.fixture
def rclone_conf(tmp_path: Path) -> Path:
    """rclone.conf with three remotes (drive, s3-work, nas)."""
    path = tmp_path / "rclone.conf"
    path.write_text(SAMPLE_RCLONE_CONF)
    return path


@pytest.fixture
def mock_runner() -> MagicMock:
    """ProcessRunner double whose commands succeed with no output."""
    runner = MagicMock(spec=ProcessRunner)
    runner.run = AsyncMock(return_value=CommandResult(stdout="", stderr="", returncode=0))

    detached = MagicMock(spec=DetachedProcess)
    detached.returncode = None
    detached.output.return_value = ""
    runner.spawn_detached = AsyncMock(return_value=detached)
    return runner


@pytest.fixture
def mock_probe() -> MagicMock:
    """MountProbe double reporting nothing as mounted."""
    probe = MagicMock(spec=MountProbe)
    probe.is_mounted = AsyncMock(return_value=False)

    async def state(remote_name: str, path: Path) -> MountState:
        return MountState(remote_name=remote_name, mount_path=path, is_mounted=await probe.is_mounted(path))

    probe.state = AsyncMock(side_effect=state)
    return probe


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    """Plugin directory with sftp and drive descriptors."""
    root = tmp_path / "plugins"
    descriptors = {
        "sftp": {
            "name": "sftp",
            "display_name": "SFTP",
            "basic_fields": [
                {"name": "host", "field_type": "text", "required": True},
                {"name": "user", "field_type": "text"},
                {"name": "port", "field_type": "number", "default": 22},
                {"name": "pass", "field_type": "password"},
            ],
        },
        "drive": {
            "name": "drive",
            "display_name": "Google Drive",
            "basic_fields": [{"name": "scope", "field_type": "text"}],
            "advanced_fields": [{"name": "client_secret", "field_type": "password"}],
        },
    }
    for name, data in descriptors.items():
        (root / name).mkdir(parents=True)
        (root / name / "config.json").write_text(json.dumps(data))
    return root
