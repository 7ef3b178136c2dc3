"""Plugin descriptor discovery.

Plugins live in ``<plugin_dir>/<plugin>/config.json``. Directories are
searched in order and the first descriptor seen for a name wins, so a
user's own plugin directory can override a bundled descriptor.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from remotectl.core.errors import PluginNotFoundError
from remotectl.models.plugin import PluginDescriptor

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAME = "config.json"


def load_descriptor(path: Path) -> PluginDescriptor:
    """Load and validate one plugin descriptor.

    Args:
        path: Path to a config.json file.

    Returns:
        Validated PluginDescriptor.

    Raises:
        OSError: If the file can't be read.
        ValueError: If the file is not valid JSON or doesn't match the schema.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return PluginDescriptor.model_validate(data)


class PluginRegistry:
    """Read-only view of the plugins available in a set of directories.

    Example:
        >>> registry = PluginRegistry([Path("plugins")])
        >>> registry.get("DRIVE").display_name
        'Google Drive'
    """

    def __init__(self, search_dirs: list[Path]) -> None:
        """Initialize the registry.

        Args:
            search_dirs: Directories to search, highest priority first.
        """
        self._search_dirs = search_dirs
        self._plugins: dict[str, PluginDescriptor] | None = None

    @property
    def search_dirs(self) -> list[Path]:
        """Directories searched for descriptors."""
        return list(self._search_dirs)

    def list_plugins(self) -> list[PluginDescriptor]:
        """List available plugins sorted by display name."""
        return sorted(self._load().values(), key=lambda p: p.label.lower())

    def find(self, name: str) -> PluginDescriptor | None:
        """Find a plugin by name, ignoring case."""
        return self._load().get(name.lower())

    def get(self, name: str) -> PluginDescriptor:
        """Get a plugin by name, ignoring case.

        Raises:
            PluginNotFoundError: If no plugin has that name.
        """
        plugin = self.find(name)
        if plugin is None:
            raise PluginNotFoundError(name)
        return plugin

    def _load(self) -> dict[str, PluginDescriptor]:
        if self._plugins is None:
            self._plugins = self._scan()
        return self._plugins

    def _scan(self) -> dict[str, PluginDescriptor]:
        plugins: dict[str, PluginDescriptor] = {}

        for directory in self._search_dirs:
            if not directory.is_dir():
                continue
            for descriptor_path in sorted(directory.glob(f"*/{DESCRIPTOR_FILENAME}")):
                try:
                    plugin = load_descriptor(descriptor_path)
                except (OSError, ValueError, ValidationError) as e:
                    logger.warning("Skipping plugin %s: %s", descriptor_path, e)
                    continue
                key = plugin.name.lower()
                if key in plugins:
                    logger.debug("Plugin %s at %s shadowed", plugin.name, descriptor_path)
                    continue
                plugins[key] = plugin

        logger.debug("Loaded %d plugins from %s", len(plugins), self._search_dirs)
        return plugins
