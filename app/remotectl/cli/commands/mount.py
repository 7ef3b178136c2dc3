"""Mount lifecycle commands.

Provides ``mount``, ``unmount`` and ``test``. Mount and unmount can be
interrupted with Ctrl+C; the spawned rclone is then asked to stop and
the command reports a cancelled operation.
"""

from typing import Annotated

import typer

from remotectl.cli.types import get_service, report_result, run_cancellable

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        "-t",
        min=0.001,
        help="Seconds before giving up. Defaults to the configured timeout.",
    ),
]


def mount(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote to mount.")],
    timeout: TimeoutOption = None,
) -> None:
    """Mount a remote under the mount base directory."""
    service = get_service(ctx)
    result = run_cancellable(lambda cancel: service.mount(name, timeout=timeout, cancel=cancel))
    report_result(result)


def unmount(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote to unmount.")],
    timeout: TimeoutOption = None,
) -> None:
    """Unmount a remote and remove its empty mount point."""
    service = get_service(ctx)
    result = run_cancellable(lambda cancel: service.unmount(name, timeout=timeout, cancel=cancel))
    report_result(result)


def test(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Remote to test.")],
    timeout: TimeoutOption = None,
    quick: Annotated[
        bool,
        typer.Option("--quick", "-q", help="Use the short latency timeout."),
    ] = False,
) -> None:
    """Check that a remote answers a directory listing."""
    service = get_service(ctx)
    if quick and timeout is None:
        result = run_cancellable(lambda _cancel: service.check_latency(name))
    else:
        result = run_cancellable(lambda _cancel: service.test_connection(name, timeout=timeout))
    report_result(result)
