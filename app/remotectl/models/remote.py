"""Remote models.

This module defines the data structures for remote definitions read from
rclone.conf and the per-remote views derived from live system state.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RemoteDefinition:
    """A named remote as stored in a bracketed config section.

    Attributes:
        name: Unique remote name, the text between the brackets.
        type: Backend identifier (e.g., "drive", "s3", "sftp").
        properties: Remaining key/value pairs in file order, excluding type.
            Values may be secrets (obscured passwords, tokens).
    """

    name: str
    type: str
    properties: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate definition data after initialization."""
        if not self.name:
            msg = "Remote name cannot be empty"
            raise ValueError(msg)
        if not self.type:
            msg = f"Remote '{self.name}' has no type"
            raise ValueError(msg)

    def to_section(self) -> str:
        """Render the definition as an INI section.

        Returns:
            Header, type line and one ``key = value`` line per property,
            each terminated by a newline.
        """
        lines = [f"[{self.name}]", f"type = {self.type}"]
        lines.extend(f"{key} = {value}" for key, value in self.properties.items() if key != "type")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True, slots=True)
class MountState:
    """Observed mount state of a remote.

    Computed on demand and never cached: rclone can mount or unmount
    outside of remotectl's control.
    """

    remote_name: str
    mount_path: Path
    is_mounted: bool


@dataclass(frozen=True, slots=True)
class RemoteSummary:
    """Row shown by ``remotectl list``.

    Attributes:
        name: Remote name.
        type: Backend identifier.
        mount_point: Local path the remote mounts to.
        mounted: Whether the mount point is currently mounted.
        auto_mount: Whether a crontab @reboot entry exists for the remote.
    """

    name: str
    type: str
    mount_point: Path
    mounted: bool = False
    auto_mount: bool = False

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "mount_point": str(self.mount_point),
            "mounted": self.mounted,
            "auto_mount": self.auto_mount,
        }
