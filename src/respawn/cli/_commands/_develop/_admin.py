"""Auxiliary admin front-end processes: the one-off build and watch mode."""

import subprocess
from typing import TYPE_CHECKING

from respawn.exceptions import AuxiliaryProcessError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger


def should_build(
    *,
    build: bool,
    watch_admin: bool,
    serve_admin_panel: bool,
    build_dir: Path,
) -> bool:
    """Decide whether the admin bundle must be built before starting.

    The build is skipped when disabled, when the admin runs in watch mode,
    when the application does not serve the admin, or when a build exists.
    """
    return build and not watch_admin and serve_admin_panel and not build_dir.exists()


def run_build(
    command: Sequence[str],
    *,
    cwd: Path,
    logger: FilteringBoundLogger,
) -> None:
    """Build the admin bundle, inheriting the terminal.

    Raises:
        AuxiliaryProcessError: If the command cannot run or fails.
    """
    logger.info("Building the admin panel", command=" ".join(command))
    try:
        _ = subprocess.run(list(command), cwd=cwd, check=True)  # noqa: S603
    except subprocess.CalledProcessError as e:
        msg = f"Admin build failed with exit code {e.returncode}"
        raise AuxiliaryProcessError(
            msg, command=command, exit_code=e.returncode, cause=e
        ) from e
    except OSError as e:
        msg = f"Failed to run admin build: {e}"
        raise AuxiliaryProcessError(msg, command=command, cause=e) from e


def launch_watch_admin(
    command: Sequence[str],
    browser: str,
    *,
    cwd: Path,
    logger: FilteringBoundLogger,
) -> subprocess.Popen[bytes]:
    """Start the admin front-end in watch mode without waiting for it.

    Raises:
        AuxiliaryProcessError: If the process cannot be started.
    """
    full_command = [*command, "--browser", browser]
    logger.info("Starting the admin panel in watch mode", command=" ".join(full_command))
    try:
        return subprocess.Popen(full_command, cwd=cwd)  # noqa: S603
    except OSError as e:
        msg = f"Failed to start admin watch mode: {e}"
        raise AuxiliaryProcessError(msg, command=full_command, cause=e) from e


def stop_watch_admin(process: subprocess.Popen[bytes], *, timeout: float) -> None:
    """Stop the admin watch process if it is still running."""
    if process.poll() is not None:
        return
    process.terminate()
    try:
        _ = process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        _ = process.wait()
