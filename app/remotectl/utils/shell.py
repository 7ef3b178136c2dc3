"""Shell execution utilities.

Provides asynchronous subprocess execution with timeouts, plus detached
spawning for long-lived processes such as ``rclone mount``.
"""

import asyncio
import contextlib
import logging
import os
import shlex
import shutil
import signal
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from typing import IO, Any

from remotectl.core.errors import SpawnFailedError, TimedOutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def error_text(self) -> str:
        """Best available description of a failure."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def _detach_kwargs() -> dict[str, Any]:
    """Platform-specific arguments that put a child in its own process group."""
    if sys.platform == "win32":
        return {
            "creationflags": subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS,
        }
    return {"start_new_session": True}


def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a child process that may already have exited."""
    with contextlib.suppress(ProcessLookupError):
        process.kill()


class DetachedProcess:
    """Handle to a process started by :meth:`ProcessRunner.spawn_detached`.

    Output goes to an anonymous temporary file rather than pipes: a
    daemonizing child inherits its parent's descriptors and would keep
    pipes open long after the parent exited.

    Attributes:
        args: Command line the process was started with.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        output: IO[bytes],
        args: list[str],
    ) -> None:
        self._process = process
        self._output = output
        self.args = args

    @property
    def pid(self) -> int:
        """Process ID of the spawned child."""
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        """Exit code, or None while the process is still running."""
        return self._process.returncode

    def output(self) -> str:
        """Return everything the process has written so far."""
        if self._output.closed:
            return ""
        self._output.flush()
        self._output.seek(0)
        return self._output.read().decode(errors="replace")

    def terminate(self) -> None:
        """Ask the process group to stop.

        Best effort: a child that re-parented itself (``rclone --daemon``)
        is outside the group and keeps running.
        """
        if self.returncode is not None:
            return
        try:
            if sys.platform == "win32":
                self._process.terminate()
            else:
                os.killpg(self._process.pid, signal.SIGTERM)
        except (ProcessLookupError, PermissionError) as e:
            logger.debug("Could not terminate process %d: %s", self.pid, e)

    def close(self) -> None:
        """Release the captured-output file."""
        self._output.close()


class ProcessRunner:
    """Runs external commands without blocking the event loop.

    Example:
        >>> runner = ProcessRunner()
        >>> result = await runner.run(["rclone", "--version"], timeout=5.0)
        >>> result.success
        True
    """

    async def run(
        self,
        args: list[str],
        *,
        timeout: float | None = 60.0,
        input: str | None = None,
    ) -> CommandResult:
        """Execute a command and capture its output.

        Args:
            args: Command and arguments to execute.
            timeout: Maximum time in seconds to wait. None waits forever.
            input: Text written to the command's standard input.

        Returns:
            CommandResult with stdout, stderr, and returncode.

        Raises:
            SpawnFailedError: If the executable is missing or cannot be started.
            TimedOutError: If the command exceeds the timeout. The command
                is killed before this is raised.
        """
        logger.debug("Running: %s", shlex.join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnFailedError(f"Failed to start {args[0]}: {e}") from e

        data = input.encode() if input is not None else None
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(data), timeout)
        except TimeoutError:
            _kill(process)
            await process.wait()
            raise TimedOutError(timeout or 0.0, f"Command '{os.path.basename(args[0])}'") from None
        except asyncio.CancelledError:
            _kill(process)
            raise

        return CommandResult(
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            returncode=process.returncode if process.returncode is not None else -1,
        )

    async def spawn_detached(self, args: list[str]) -> DetachedProcess:
        """Start a long-lived command in its own session.

        The command is expected to background itself and return quickly.
        Its exit code is diagnostic only; callers verify the effect
        (e.g., a mount) separately.

        Args:
            args: Command and arguments to execute.

        Returns:
            Handle to the running process.

        Raises:
            SpawnFailedError: If the executable is missing or cannot be started.
        """
        logger.debug("Spawning detached: %s", shlex.join(args))
        output = tempfile.TemporaryFile()
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=output,
                stderr=asyncio.subprocess.STDOUT,
                **_detach_kwargs(),
            )
        except OSError as e:
            output.close()
            raise SpawnFailedError(f"Failed to start {args[0]}: {e}") from e

        logger.info("Started %s (pid %d)", os.path.basename(args[0]), process.pid)
        return DetachedProcess(process, output, args)
