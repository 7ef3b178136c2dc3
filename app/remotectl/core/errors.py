"""Exception taxonomy for remotectl.

Components raise these; the orchestrator and the service catch
:class:`RemoteCtlError` once and turn it into an
:class:`~remotectl.models.result.OperationResult`.
"""

from remotectl.models.result import ErrorKind


class RemoteCtlError(Exception):
    """Base exception for all remotectl errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class ConfigNotFoundError(RemoteCtlError):
    """Raised when the rclone config file does not exist."""

    kind = ErrorKind.CONFIG_NOT_FOUND


class ConfigReadError(RemoteCtlError):
    """Raised when the rclone config file cannot be read or written."""

    kind = ErrorKind.CONFIG_READ_ERROR


class RemoteNotFoundError(RemoteCtlError):
    """Raised when no section matches a remote name."""

    kind = ErrorKind.REMOTE_NOT_FOUND

    def __init__(self, remote_name: str) -> None:
        self.remote_name = remote_name
        super().__init__(f"Remote '{remote_name}' not found in config")


class FieldValidationError(RemoteCtlError):
    """Raised when submitted remote fields fail plugin validation."""

    kind = ErrorKind.VALIDATION_ERROR


class PluginNotFoundError(RemoteCtlError):
    """Raised when no plugin descriptor matches a backend type."""

    kind = ErrorKind.PLUGIN_NOT_FOUND

    def __init__(self, plugin_name: str) -> None:
        self.plugin_name = plugin_name
        super().__init__(f"Plugin '{plugin_name}' not found")


class SpawnFailedError(RemoteCtlError):
    """Raised when an external executable cannot be started."""

    kind = ErrorKind.SPAWN_FAILED


class TimedOutError(RemoteCtlError):
    """Raised when an operation exceeds its time bound."""

    kind = ErrorKind.TIMED_OUT

    def __init__(self, timeout: float, what: str = "Operation") -> None:
        self.timeout = timeout
        super().__init__(f"{what} timed out after {format_duration(timeout)}")


class OperationCancelledError(RemoteCtlError):
    """Raised when the caller cancels an operation."""

    kind = ErrorKind.CANCELLED


class MountFailedError(RemoteCtlError):
    """Raised when a mount cannot be attempted (e.g., no mount point)."""

    kind = ErrorKind.MOUNT_FAILED


class MountVerificationError(MountFailedError):
    """Raised when rclone ran but the mount point is still not mounted."""

    kind = ErrorKind.MOUNT_VERIFICATION_FAILED


class UnmountFailedError(RemoteCtlError):
    """Raised when the mount point is still mounted after unmounting."""

    kind = ErrorKind.UNMOUNT_FAILED


class NotMountedError(RemoteCtlError):
    """Raised when unmounting a remote that is not mounted."""

    kind = ErrorKind.NOT_MOUNTED


class SchedulerError(RemoteCtlError):
    """Raised when the crontab cannot be updated."""

    kind = ErrorKind.SCHEDULER_ERROR


class OperationInProgressError(RemoteCtlError):
    """Raised when a remote already has a mount, unmount or test in flight."""

    kind = ErrorKind.OPERATION_IN_PROGRESS

    def __init__(self, remote_name: str) -> None:
        self.remote_name = remote_name
        super().__init__(f"Another operation is already in progress for '{remote_name}'")


def format_duration(seconds: float) -> str:
    """Format a timeout for user-facing messages.

    Args:
        seconds: Duration in seconds.

    Returns:
        "250 ms" for sub-second values, "10 seconds" otherwise.
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds == 1:
        return "1 second"
    return f"{seconds:g} seconds"
