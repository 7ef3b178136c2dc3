"""Mount, unmount and connection-test orchestration.

The orchestrator composes the config store, the mount probe and the
process runner. Mount state is never remembered between calls; every
operation observes it through the probe, acts, and observes it again
before reporting success.

Per remote, the observed transitions are::

    Unmounted -> Mounting -> Mounted | MountFailed | Cancelled/TimedOut
    Mounted -> Unmounting -> Unmounted | UnmountFailed
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Coroutine, Iterator
from pathlib import Path
from typing import Any

from remotectl.core.config_store import ConfigStore
from remotectl.core.errors import (
    MountFailedError,
    MountVerificationError,
    NotMountedError,
    OperationCancelledError,
    OperationInProgressError,
    RemoteCtlError,
    SpawnFailedError,
    TimedOutError,
    UnmountFailedError,
)
from remotectl.core.mount_probe import MountProbe
from remotectl.core.paths import DEFAULT_MOUNT_BASE, get_mount_point
from remotectl.core.platform import PlatformProfile
from remotectl.core.rclone import RcloneCommands
from remotectl.models.result import ErrorKind, OperationResult
from remotectl.utils.shell import DetachedProcess, ProcessRunner

logger = logging.getLogger(__name__)


class MountOrchestrator:
    """Runs mount, unmount and test operations for configured remotes.

    At most one operation per remote name may be in flight in this
    process; a second one is rejected rather than queued. Operations on
    different remotes are independent and may run concurrently.

    Timeouts and cancellation bound the *reported* outcome. When a mount
    is abandoned, the spawned rclone process group is asked to terminate,
    but a daemonized rclone has already left that group, so the mount may
    still appear later. Only a fresh probe tells the truth.

    Example:
        >>> orchestrator = MountOrchestrator(store, probe, runner, commands, LINUX)
        >>> result = await orchestrator.mount("drive", timeout=10.0)
        >>> result.success
        True
    """

    def __init__(
        self,
        store: ConfigStore,
        probe: MountProbe,
        runner: ProcessRunner,
        commands: RcloneCommands,
        profile: PlatformProfile,
        *,
        mount_base: str | Path = DEFAULT_MOUNT_BASE,
        settle_seconds: float | None = None,
        command_timeout: float = 10.0,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Source of remote definitions.
            probe: Mount state oracle.
            runner: Executes rclone and unmount utilities.
            commands: rclone argument builders.
            profile: Platform mount policy.
            mount_base: Directory holding one mount point per remote.
            settle_seconds: Wait between spawning rclone and re-probing.
                If None, uses the profile's value.
            command_timeout: Bound on each foreground unmount command.
        """
        self._store = store
        self._probe = probe
        self._runner = runner
        self._commands = commands
        self._profile = profile
        self._mount_base = mount_base
        self._settle_seconds = (
            profile.settle_seconds if settle_seconds is None else settle_seconds
        )
        self._command_timeout = command_timeout
        self._in_flight: set[str] = set()

    @property
    def in_flight(self) -> frozenset[str]:
        """Remote names with an operation currently running."""
        return frozenset(self._in_flight)

    def mount_point(self, remote_name: str) -> Path:
        """Local mount point for a remote."""
        return get_mount_point(remote_name, self._mount_base)

    async def mount(
        self,
        remote_name: str,
        *,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationResult:
        """Mount a remote on its mount point.

        Already-mounted remotes succeed immediately without spawning rclone.

        Args:
            remote_name: Configured remote to mount.
            timeout: Bound on the whole operation in seconds.
            cancel: Event the caller sets to abandon the operation.

        Returns:
            OperationResult describing the outcome.
        """
        return await self._run(
            remote_name,
            self._mount_flow(remote_name),
            timeout=timeout,
            cancel=cancel,
            what=f"Mount of {remote_name}",
        )

    async def unmount(
        self,
        remote_name: str,
        *,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationResult:
        """Unmount a remote and remove its empty mount point.

        The remote does not have to be configured any more; the mount
        point is derived from its name.

        Args:
            remote_name: Remote to unmount.
            timeout: Bound on the whole operation in seconds.
            cancel: Event the caller sets to abandon the operation.

        Returns:
            OperationResult describing the outcome. A remote that was not
            mounted yields a NOT_MOUNTED failure.
        """
        return await self._run(
            remote_name,
            self._unmount_flow(remote_name),
            timeout=timeout,
            cancel=cancel,
            what=f"Unmount of {remote_name}",
        )

    async def test_connection(self, remote_name: str, *, timeout: float) -> OperationResult:
        """Check that a remote answers a top-level listing.

        Args:
            remote_name: Configured remote to test.
            timeout: Hard bound in seconds; rclone is killed when it expires.

        Returns:
            OperationResult with ``latency_ms`` set on success.
        """
        return await self._run(
            remote_name,
            self._test_flow(remote_name, timeout),
            timeout=None,
            cancel=None,
            what=f"Connection test for {remote_name}",
        )

    # === Flows ===

    async def _mount_flow(self, remote_name: str) -> OperationResult:
        self._store.get_remote(remote_name)
        mount_point = self.mount_point(remote_name)

        if await self._probe.is_mounted(mount_point):
            logger.info("%s already mounted at %s", remote_name, mount_point)
            return OperationResult.ok(f"{remote_name} is already mounted at {mount_point}")

        self._prepare_mount_point(mount_point)
        args = self._commands.mount(remote_name, mount_point, self._profile)
        process = await self._runner.spawn_detached(args)
        try:
            await asyncio.sleep(self._settle_seconds)
            if await self._probe.is_mounted(mount_point):
                logger.info("Mounted %s at %s", remote_name, mount_point)
                return OperationResult.ok(f"Successfully mounted {remote_name} at {mount_point}")
            msg = (
                f"Mount command executed but {mount_point} is not mounted. "
                f"Error: {_diagnose(process)}"
            )
            raise MountVerificationError(msg)
        except asyncio.CancelledError:
            process.terminate()
            raise
        finally:
            process.close()

    async def _unmount_flow(self, remote_name: str) -> OperationResult:
        mount_point = self.mount_point(remote_name)

        if not await self._probe.is_mounted(mount_point):
            self._remove_mount_point(mount_point)
            raise NotMountedError(f"{remote_name} is not mounted.")

        errors: list[str] = []
        for args in self._profile.unmount_commands(mount_point):
            try:
                result = await self._runner.run(args, timeout=self._command_timeout)
            except (SpawnFailedError, TimedOutError) as e:
                errors.append(str(e))
                continue
            if result.success:
                break
            errors.append(f"{args[0]}: {result.error_text}")

        self._remove_mount_point(mount_point)

        if await self._probe.is_mounted(mount_point):
            detail = "; ".join(errors) or f"{mount_point} is still mounted"
            raise UnmountFailedError(f"Unmount failed: {detail}")

        logger.info("Unmounted %s from %s", remote_name, mount_point)
        return OperationResult.ok(f"Successfully unmounted {remote_name}")

    async def _test_flow(self, remote_name: str, timeout: float) -> OperationResult:
        self._store.get_remote(remote_name)
        args = self._commands.list_top_level(remote_name)

        started = time.monotonic()
        try:
            result = await self._runner.run(args, timeout=timeout)
        except TimedOutError as e:
            raise TimedOutError(timeout, f"Connection test for {remote_name}") from e
        latency_ms = (time.monotonic() - started) * 1000

        if not result.success:
            return OperationResult.fail(
                ErrorKind.COMMAND_FAILED,
                f"Connection test failed: {result.error_text}",
            )
        return OperationResult.ok(
            f"Connection to {remote_name} successful ({latency_ms:.0f} ms)",
            latency_ms=latency_ms,
        )

    # === Supervision ===

    async def _run(
        self,
        remote_name: str,
        flow: Coroutine[Any, Any, OperationResult],
        *,
        timeout: float | None,
        cancel: asyncio.Event | None,
        what: str,
    ) -> OperationResult:
        """Run a flow under the in-flight marker and map errors to results."""
        try:
            with self._claim(remote_name):
                return await self._supervise(flow, timeout=timeout, cancel=cancel, what=what)
        except RemoteCtlError as e:
            flow.close()
            level = logging.INFO if isinstance(e, NotMountedError) else logging.WARNING
            logger.log(level, "%s: %s", what, e)
            return OperationResult.fail(e.kind, str(e))

    @contextlib.contextmanager
    def _claim(self, remote_name: str) -> Iterator[None]:
        """Mark a remote as busy for the duration of one operation."""
        if remote_name in self._in_flight:
            raise OperationInProgressError(remote_name)
        self._in_flight.add(remote_name)
        try:
            yield
        finally:
            self._in_flight.discard(remote_name)

    async def _supervise(
        self,
        flow: Coroutine[Any, Any, OperationResult],
        *,
        timeout: float | None,
        cancel: asyncio.Event | None,
        what: str,
    ) -> OperationResult:
        """Race a flow against a timeout and a cancel event.

        Raises:
            TimedOutError: If the timeout expired first.
            OperationCancelledError: If the cancel event was set first.
        """
        task = asyncio.ensure_future(flow)
        waiters: set[asyncio.Future[Any]] = {task}
        cancel_waiter: asyncio.Future[Any] | None = None
        if cancel is not None:
            cancel_waiter = asyncio.ensure_future(cancel.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(f"{what} was cancelled")
        raise TimedOutError(timeout or 0.0, what)

    # === Mount point housekeeping ===

    def _prepare_mount_point(self, mount_point: Path) -> None:
        """Create or clear the mount point as the platform requires."""
        if self._profile.mount_dir_must_exist:
            try:
                mount_point.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MountFailedError(f"Cannot create mount point {mount_point}: {e}") from e
            return

        if mount_point.exists():
            try:
                mount_point.rmdir()
            except OSError as e:
                logger.warning("Could not remove %s before mounting: %s", mount_point, e)

    def _remove_mount_point(self, mount_point: Path) -> None:
        """Remove an empty, unmounted mount point directory."""
        if not mount_point.is_dir():
            return
        try:
            mount_point.rmdir()
        except OSError as e:
            logger.debug("Left mount point %s in place: %s", mount_point, e)


def _diagnose(process: DetachedProcess) -> str:
    """Summarize why a spawned mount may have failed."""
    output = process.output().strip()
    if output:
        return output
    if process.returncode:
        return f"rclone exited with code {process.returncode}"
    return "Unknown error"
