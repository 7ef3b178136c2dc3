"""remotectl settings.

This module provides the settings model and I/O functions for the tool's
own configuration: where rclone and its config live, where remotes are
mounted, and how long each operation may take.

Settings are stored in ~/.config/remotectl/settings.toml. A missing file
means defaults.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from remotectl.core.paths import (
    DEFAULT_MOUNT_BASE,
    RCLONE_NAME,
    get_plugin_dirs,
    get_settings_path,
    resolve_rclone_config_path,
)

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Configuration for remotectl.

    Attributes:
        rclone_path: rclone executable name or path.
        rclone_config: rclone.conf location. None uses the platform default.
        mount_base: Directory holding one mount point per remote.
        cache_mode: Value passed to ``--vfs-cache-mode``.
        mount_timeout_seconds: Bound on a whole mount operation.
        unmount_timeout_seconds: Bound on a whole unmount operation.
        test_timeout_seconds: Bound on a connection test.
        latency_timeout_seconds: Bound on a quick latency probe.
        settle_seconds: Wait after spawning a mount. None uses the platform default.
        plugin_dirs: Extra plugin descriptor directories, searched first.
    """

    model_config = ConfigDict(extra="forbid")

    rclone_path: Annotated[str, Field(min_length=1, description="rclone executable")] = (
        RCLONE_NAME
    )
    rclone_config: Annotated[
        str | None,
        Field(description="rclone.conf path (None = platform default)"),
    ] = None
    mount_base: Annotated[str, Field(min_length=1, description="Mount point parent")] = (
        DEFAULT_MOUNT_BASE
    )
    cache_mode: Annotated[
        str,
        Field(pattern=r"^(off|minimal|writes|full)$", description="VFS cache mode"),
    ] = "writes"
    mount_timeout_seconds: Annotated[float, Field(gt=0, le=600)] = 10.0
    unmount_timeout_seconds: Annotated[float, Field(gt=0, le=600)] = 10.0
    test_timeout_seconds: Annotated[float, Field(gt=0, le=600)] = 10.0
    latency_timeout_seconds: Annotated[float, Field(gt=0, le=60)] = 3.0
    settle_seconds: Annotated[float | None, Field(ge=0, le=60)] = None
    plugin_dirs: list[str] = []

    @property
    def config_path(self) -> Path:
        """Resolved rclone.conf path."""
        return resolve_rclone_config_path(self.rclone_config)

    @property
    def has_custom_config(self) -> bool:
        """Check if rclone must be told where its config is."""
        return self.rclone_config is not None

    def plugin_search_dirs(self) -> list[Path]:
        """Plugin directories in search order."""
        return get_plugin_dirs(self.plugin_dirs)


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings. Defaults if the file doesn't exist.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the file can't be read or the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The Settings object to save.
        path: Path to save to. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null, so unset optionals are left out
    data = settings.model_dump(exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path
