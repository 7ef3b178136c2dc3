"""XDG-compliant path management for remotectl.

This module provides standardized paths for the tool's own settings, the
rclone configuration file it manages, mount points and plugin directories.

Defaults:
- Settings: ~/.config/remotectl/settings.toml
- rclone config: ~/.config/rclone/rclone.conf (%APPDATA%\\rclone\\rclone.conf on Windows)
- Mount points: ~/mnt/<remote>
- Plugins: <plugin_dirs>, ~/.config/remotectl/plugins, ./plugins, bundled
"""

import os
import sys
from importlib import resources
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "remotectl"

# Name of the external mount executable and its config directory
RCLONE_NAME = "rclone"

DEFAULT_MOUNT_BASE = "~/mnt"


def _get_xdg_dir(env_var: str, default_subdir: str, app_name: str = APP_NAME) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").
        app_name: Application directory name below the XDG base.

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / app_name
    return Path.home() / default_subdir / app_name


def expand_path(path: str | Path) -> Path:
    """Expand a leading ``~`` in a user-supplied path.

    Args:
        path: Path as typed by the user or stored in settings.

    Returns:
        Path with the home directory substituted.
    """
    return Path(path).expanduser()


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/remotectl/ (or XDG_CONFIG_HOME/remotectl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/remotectl/settings.toml.
    """
    return get_config_dir() / "settings.toml"


def get_default_rclone_config_path() -> Path:
    """Get the platform default location of rclone.conf.

    Returns:
        %APPDATA%\\rclone\\rclone.conf on Windows,
        ~/.config/rclone/rclone.conf (or XDG_CONFIG_HOME/rclone/) elsewhere.
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / RCLONE_NAME / f"{RCLONE_NAME}.conf"
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config", RCLONE_NAME) / f"{RCLONE_NAME}.conf"


def resolve_rclone_config_path(custom: str | Path | None = None) -> Path:
    """Resolve the rclone config path from an optional override.

    Args:
        custom: Caller-supplied path. If None, uses the platform default.

    Returns:
        Absolute path to the rclone config file.
    """
    if custom:
        return expand_path(custom)
    return get_default_rclone_config_path()


def get_mount_point(remote_name: str, mount_base: str | Path = DEFAULT_MOUNT_BASE) -> Path:
    """Get the local mount point for a remote.

    Args:
        remote_name: Name of the remote.
        mount_base: Directory holding one mount point per remote.

    Returns:
        Path to <mount_base>/<remote_name>.
    """
    return expand_path(mount_base) / remote_name


def get_bundled_plugin_dir() -> Path:
    """Get the directory of plugin descriptors shipped with remotectl.

    Returns:
        Path to the bundled data/plugins directory.
    """
    return Path(str(resources.files("remotectl.data").joinpath("plugins")))


def get_plugin_dirs(extra: list[str] | None = None) -> list[Path]:
    """Get plugin descriptor directories in search order.

    Args:
        extra: User-configured directories, searched first.

    Returns:
        List of candidate directories (not all of which need to exist).
        The bundled descriptors come last so any other directory can
        override them.
    """
    dirs = [expand_path(p) for p in extra or []]
    dirs.append(get_config_dir() / "plugins")
    dirs.append(Path.cwd() / "plugins")
    dirs.append(get_bundled_plugin_dir())
    return dirs


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create config directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create config directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
