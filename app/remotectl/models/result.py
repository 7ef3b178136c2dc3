"""Operation result models.

This module defines the structured success/failure value every
user-facing operation returns.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Category of a failed operation."""

    CONFIG_NOT_FOUND = "config_not_found"
    CONFIG_READ_ERROR = "config_read_error"
    REMOTE_NOT_FOUND = "remote_not_found"
    VALIDATION_ERROR = "validation_error"
    PLUGIN_NOT_FOUND = "plugin_not_found"
    SPAWN_FAILED = "spawn_failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    MOUNT_FAILED = "mount_failed"
    MOUNT_VERIFICATION_FAILED = "mount_verification_failed"
    UNMOUNT_FAILED = "unmount_failed"
    NOT_MOUNTED = "not_mounted"
    COMMAND_FAILED = "command_failed"
    SCHEDULER_ERROR = "scheduler_error"
    OPERATION_IN_PROGRESS = "operation_in_progress"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a mount, unmount, test or config operation.

    Attributes:
        success: Whether the operation achieved its goal.
        message: Human-readable description of the outcome.
        error: Failure category, None on success.
        latency_ms: Round-trip time for connection tests, None otherwise.
    """

    success: bool
    message: str
    error: ErrorKind | None = None
    latency_ms: float | None = None

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success

    @classmethod
    def ok(cls, message: str, latency_ms: float | None = None) -> "OperationResult":
        """Create a successful result."""
        return cls(success=True, message=message, latency_ms=latency_ms)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "OperationResult":
        """Create a failed result."""
        return cls(success=False, message=message, error=error)

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        data: dict[str, object] = {"success": self.success, "message": self.message}
        if self.error is not None:
            data["error"] = self.error.value
        if self.latency_ms is not None:
            data["latency_ms"] = round(self.latency_ms, 1)
        return data
