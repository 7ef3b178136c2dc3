"""Operations surface for remotectl.

:class:`RemoteService` wires the config store, mount probe, orchestrator,
boot persistence and plugin registry together and exposes the operations
the CLI offers. Operations return an
:class:`~remotectl.models.result.OperationResult` rather than raising, so
every outcome reaches the user as a message.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from remotectl.core.boot import BootPersistence
from remotectl.core.config_store import ConfigStore
from remotectl.core.errors import FieldValidationError, RemoteCtlError, RemoteNotFoundError
from remotectl.core.mount_probe import MountProbe
from remotectl.core.orchestrator import MountOrchestrator
from remotectl.core.platform import PlatformProfile, find_rclone, get_platform_profile
from remotectl.core.rclone import RcloneCommands
from remotectl.core.settings import Settings
from remotectl.models.remote import RemoteDefinition, RemoteSummary
from remotectl.models.result import OperationResult
from remotectl.plugins.fields import REMOTE_NAME_FIELD, resolve_fields
from remotectl.plugins.registry import PluginRegistry
from remotectl.utils.shell import ProcessRunner

if TYPE_CHECKING:
    from pathlib import Path

    from remotectl.models.plugin import PluginDescriptor

logger = logging.getLogger(__name__)

# rclone remote names: words of letters, digits, "_", "-" and ".", joined by single spaces
_REMOTE_NAME_PATTERN = re.compile(r"^[\w.-]+( [\w.-]+)*$")


def validate_remote_name(name: str) -> str:
    """Check a remote name is usable as a section header and rclone path prefix.

    Args:
        name: Proposed remote name.

    Returns:
        The name with surrounding whitespace removed.

    Raises:
        FieldValidationError: If the name is empty or contains characters
            rclone does not allow (brackets, colons, slashes, ...).
    """
    name = name.strip()
    if not name:
        raise FieldValidationError(f"{REMOTE_NAME_FIELD} is required")
    if name.startswith("-") or not _REMOTE_NAME_PATTERN.match(name):
        raise FieldValidationError(f"Invalid remote name '{name}'")
    return name


class RemoteService:
    """High-level remote management operations.

    Example:
        >>> service = RemoteService.from_settings(load_settings())
        >>> for remote in await service.list_remotes():
        ...     print(remote.name, remote.mounted)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        runner: ProcessRunner | None = None,
        profile: PlatformProfile | None = None,
        probe: MountProbe | None = None,
        registry: PluginRegistry | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Paths, timeouts and rclone location.
            runner: Process runner. If None, a new one is created.
            profile: Platform mount policy. If None, detects the running one.
            probe: Mount probe. If None, one is built from runner and profile.
            registry: Plugin registry. If None, uses the settings' plugin dirs.
        """
        self.settings = settings
        self.runner = runner or ProcessRunner()
        self.profile = profile or get_platform_profile()
        self.store = ConfigStore(settings.config_path)
        self.probe = probe or MountProbe(self.runner, self.profile)
        self.registry = registry or PluginRegistry(settings.plugin_search_dirs())
        self.commands = RcloneCommands(
            executable=find_rclone(settings.rclone_path),
            config_path=settings.config_path if settings.has_custom_config else None,
            cache_mode=settings.cache_mode,
        )
        self.orchestrator = MountOrchestrator(
            self.store,
            self.probe,
            self.runner,
            self.commands,
            self.profile,
            mount_base=settings.mount_base,
            settle_seconds=settings.settle_seconds,
            command_timeout=settings.unmount_timeout_seconds,
        )
        self.boot = BootPersistence(
            self.runner,
            self.commands,
            self.profile,
            mount_base=settings.mount_base,
        )

    @classmethod
    def from_settings(cls, settings: Settings, config_path: Path | str | None = None) -> RemoteService:
        """Create a service, optionally pointing at another rclone config.

        Args:
            settings: Loaded settings.
            config_path: rclone.conf override (e.g., from ``--config``).

        Returns:
            Configured RemoteService.
        """
        if config_path is not None:
            settings = settings.model_copy(update={"rclone_config": str(config_path)})
        return cls(settings)

    # === Queries ===

    async def list_remotes(self) -> list[RemoteSummary]:
        """List configured remotes with live mount and auto-mount state.

        Returns:
            One summary per remote, in config file order.

        Raises:
            ConfigNotFoundError: If the rclone config doesn't exist.
            ConfigReadError: If the rclone config can't be read.
        """
        remotes = self.store.list_remotes()
        lookups = (self.probe.state(r.name, self.orchestrator.mount_point(r.name)) for r in remotes)

        states, enabled = await asyncio.gather(
            asyncio.gather(*lookups),
            self.boot.enabled_remotes(r.name for r in remotes),
        )

        return [
            RemoteSummary(
                name=remote.name,
                type=remote.type,
                mount_point=state.mount_path,
                mounted=state.is_mounted,
                auto_mount=remote.name in enabled,
            )
            for remote, state in zip(remotes, states, strict=True)
        ]

    def get_remote_config(self, remote_name: str) -> dict[str, str]:
        """Get every stored key/value of a remote, including type.

        Raises:
            ConfigNotFoundError: If the rclone config doesn't exist.
            ConfigReadError: If the rclone config can't be read.
            RemoteNotFoundError: If the remote isn't configured.
        """
        return self.store.get_remote_properties(remote_name)

    def list_plugins(self) -> list[PluginDescriptor]:
        """List available backend plugins."""
        return self.registry.list_plugins()

    def get_plugin(self, name: str) -> PluginDescriptor:
        """Get a backend plugin by name, ignoring case.

        Raises:
            PluginNotFoundError: If no plugin has that name.
        """
        return self.registry.get(name)

    async def auto_mount_status(self, remote_name: str) -> bool:
        """Check if a remote is registered for auto-mount."""
        return await self.boot.is_enabled(remote_name)

    async def rclone_version(self) -> str | None:
        """Get the first line of ``rclone --version``, None if unavailable."""
        try:
            result = await self.runner.run(self.commands.version(), timeout=10.0)
        except RemoteCtlError as e:
            logger.debug("rclone not available: %s", e)
            return None
        if not result.success:
            return None
        lines = result.stdout.strip().splitlines()
        return lines[0] if lines else None

    # === Mount lifecycle ===

    async def mount(
        self,
        remote_name: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationResult:
        """Mount a remote. Timeout defaults to the configured mount timeout."""
        return await self.orchestrator.mount(
            remote_name,
            timeout=timeout or self.settings.mount_timeout_seconds,
            cancel=cancel,
        )

    async def unmount(
        self,
        remote_name: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationResult:
        """Unmount a remote. Timeout defaults to the configured unmount timeout."""
        return await self.orchestrator.unmount(
            remote_name,
            timeout=timeout or self.settings.unmount_timeout_seconds,
            cancel=cancel,
        )

    async def test_connection(self, remote_name: str, timeout: float | None = None) -> OperationResult:
        """Test a remote. Timeout defaults to the configured test timeout."""
        return await self.orchestrator.test_connection(
            remote_name,
            timeout=timeout or self.settings.test_timeout_seconds,
        )

    async def check_latency(self, remote_name: str) -> OperationResult:
        """Quick reachability probe bounded by the latency timeout."""
        return await self.test_connection(remote_name, self.settings.latency_timeout_seconds)

    # === Config mutation ===

    async def add_remote(self, plugin_name: str, field_values: dict[str, str]) -> OperationResult:
        """Add a remote from a plugin and submitted field values.

        Args:
            plugin_name: Backend plugin, written as the remote's type.
            field_values: Submitted values; ``remote_name`` names the section.

        Returns:
            OperationResult describing the outcome.
        """
        try:
            plugin = self.registry.get(plugin_name)
            name = validate_remote_name(field_values.get(REMOTE_NAME_FIELD, ""))
            if self.store.has_remote(name):
                raise FieldValidationError(f"Remote '{name}' already exists")

            definition = await self._build_definition(name, plugin, field_values, existing=None)
            self.store.append_remote(definition)
        except RemoteCtlError as e:
            logger.warning("Add remote failed: %s", e)
            return OperationResult.fail(e.kind, str(e))

        return OperationResult.ok(f"Successfully added remote '{name}'")

    async def edit_remote(
        self,
        remote_name: str,
        field_values: dict[str, str],
        plugin_name: str | None = None,
    ) -> OperationResult:
        """Change a remote's fields, type or name in one atomic write.

        Submitted values are merged over the stored ones. Empty password
        fields keep the stored secret. A different ``remote_name`` renames
        the section and moves its auto-mount entry along.

        Args:
            remote_name: Remote to edit.
            field_values: Changed values.
            plugin_name: New backend type. If None, keeps the current one.

        Returns:
            OperationResult describing the outcome.
        """
        try:
            existing = dict(self.store.get_remote_properties(remote_name))
            current_type = existing.pop("type", "")
            plugin = self.registry.get(plugin_name or current_type)

            new_name = validate_remote_name(field_values.get(REMOTE_NAME_FIELD) or remote_name)
            if new_name != remote_name and self.store.has_remote(new_name):
                raise FieldValidationError(f"Remote '{new_name}' already exists")

            merged = {**existing, **field_values}
            definition = await self._build_definition(new_name, plugin, merged, existing=existing)
            self.store.replace_remote(remote_name, definition)
        except RemoteCtlError as e:
            logger.warning("Edit of %s failed: %s", remote_name, e)
            return OperationResult.fail(e.kind, str(e))

        message = f"Remote '{remote_name}' updated successfully"
        if new_name != remote_name:
            message += await self._move_auto_mount(remote_name, new_name)
        return OperationResult.ok(message)

    async def delete_remote(self, remote_name: str) -> OperationResult:
        """Delete a remote's section from the config and its auto-mount entries.

        Removing the crontab entries is best effort: the message says so
        when they could not be removed, but the delete still succeeds.

        Returns:
            OperationResult; REMOTE_NOT_FOUND if nothing was deleted.
        """
        try:
            if not self.store.has_remote(remote_name):
                raise RemoteNotFoundError(remote_name)
            self.store.delete_remote(remote_name)
        except RemoteCtlError as e:
            logger.warning("Delete of %s failed: %s", remote_name, e)
            return OperationResult.fail(e.kind, str(e))

        message = f"Deleted remote {remote_name}"
        if not self.boot.supported:
            return OperationResult.ok(message)
        try:
            removed = await self.boot.disable(remote_name)
        except RemoteCtlError as e:
            logger.warning("Could not remove auto-mount entry for %s: %s", remote_name, e)
            return OperationResult.ok(
                f"{message}, but its auto-mount entry could not be removed: {e}"
            )
        if removed:
            message += " and disabled its auto-mount"
        return OperationResult.ok(message)

    # === Boot persistence ===

    async def enable_auto_mount(self, remote_name: str) -> OperationResult:
        """Register a remote to mount at boot."""
        try:
            added = await self.boot.enable(remote_name)
        except RemoteCtlError as e:
            return OperationResult.fail(e.kind, f"Failed to enable auto-mount: {e}")
        if not added:
            return OperationResult.ok(f"{remote_name} is already enabled for auto-mount.")
        return OperationResult.ok(f"Enabled auto-mount for {remote_name}.")

    async def disable_auto_mount(self, remote_name: str) -> OperationResult:
        """Stop mounting a remote at boot."""
        try:
            removed = await self.boot.disable(remote_name)
        except RemoteCtlError as e:
            return OperationResult.fail(e.kind, f"Failed to disable auto-mount: {e}")
        if not removed:
            return OperationResult.ok(f"{remote_name} is not enabled for auto-mount.")
        return OperationResult.ok(f"Disabled auto-mount for {remote_name}.")

    # === Helpers ===

    async def _move_auto_mount(self, old_name: str, new_name: str) -> str:
        """Point the auto-mount entry of a renamed remote at its new name.

        Returns:
            Suffix for the edit message, empty if there was no entry.
        """
        if not self.boot.supported:
            return ""
        try:
            if not await self.boot.disable(old_name):
                return ""
            await self.boot.enable(new_name)
        except RemoteCtlError as e:
            logger.warning("Could not move auto-mount entry of %s: %s", old_name, e)
            return f", but its auto-mount entry could not be moved: {e}"
        return f"; auto-mount now mounts {new_name}"

    async def _build_definition(
        self,
        name: str,
        plugin: PluginDescriptor,
        field_values: dict[str, str],
        existing: dict[str, str] | None,
    ) -> RemoteDefinition:
        """Validate values and obscure new secrets."""
        resolved = resolve_fields(plugin, field_values, existing)
        properties = dict(resolved.values)
        for key in sorted(resolved.new_secrets):
            properties[key] = await self._obscure(properties[key])
        return RemoteDefinition(name=name, type=plugin.name, properties=properties)

    async def _obscure(self, secret: str) -> str:
        """Obscure a secret with ``rclone obscure``, passing it on stdin."""
        result = await self.runner.run(self.commands.obscure(), timeout=10.0, input=secret)
        if not result.success:
            raise FieldValidationError(f"Failed to obscure password: {result.error_text}")
        return result.stdout.strip()
