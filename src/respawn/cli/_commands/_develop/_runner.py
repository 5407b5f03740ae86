"""Runs a develop session: auxiliary processes first, then the supervisor."""

from typing import TYPE_CHECKING

import anyio

from respawn.exceptions import WorkerSpawnError
from respawn.supervisor import (
    ConcatenatedOutputSink,
    Supervisor,
    build_worker_command,
    create_worker_spawner,
)
from respawn.utils import first_leaf, get_admin_build_dir

from ._admin import launch_watch_admin, run_build, should_build, stop_watch_admin

if TYPE_CHECKING:
    import subprocess
    from collections.abc import Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from respawn.config import Config


async def supervise(
    command: Sequence[str],
    *,
    cwd: Path,
    shutdown_timeout: float,
    logger: FilteringBoundLogger,
) -> int:
    """Run the supervisor until the session ends and return its exit code."""
    output_sink = ConcatenatedOutputSink()
    spawn = create_worker_spawner(command, cwd=cwd, output_sink=output_sink, logger=logger)
    supervisor = Supervisor(
        spawn,
        logger=logger,
        output_sink=output_sink,
        shutdown_timeout=shutdown_timeout,
    )
    return await supervisor.run()


def run_develop(  # noqa: PLR0913
    config: Config,
    project_root: Path,
    *,
    build: bool,
    watch_admin: bool,
    polling: bool,
    browser: str,
    logger: FilteringBoundLogger,
    config_path: Path | None = None,
    verbose: bool = False,
) -> int:
    """Run a develop session.

    Returns:
        The process exit status.

    Raises:
        AuxiliaryProcessError: If the admin build or admin watch process fails
            to run. Nothing has been spawned yet when this is raised.
    """
    develop = config.develop

    build_dir = get_admin_build_dir(project_root, develop.build_dir)
    if should_build(
        build=build,
        watch_admin=watch_admin,
        serve_admin_panel=config.admin.serve_admin_panel,
        build_dir=build_dir,
    ):
        run_build(develop.build_command, cwd=project_root, logger=logger)

    admin_process: subprocess.Popen[bytes] | None = None
    if watch_admin:
        admin_process = launch_watch_admin(
            develop.watch_admin_command, browser, cwd=project_root, logger=logger
        )

    command = build_worker_command(
        project_root,
        serve_admin_panel=not watch_admin,
        polling=polling or develop.polling,
        config_path=config_path,
        verbose=verbose,
    )

    spawn_error: WorkerSpawnError | None = None
    exit_code = 1
    try:
        exit_code = anyio.run(
            lambda: supervise(
                command,
                cwd=project_root,
                shutdown_timeout=develop.shutdown_timeout,
                logger=logger,
            )
        )
    except* WorkerSpawnError as eg:
        spawn_error = first_leaf(eg)
    finally:
        if admin_process is not None:
            stop_watch_admin(admin_process, timeout=develop.shutdown_timeout)

    if spawn_error is not None:
        logger.error("Failed to start the worker", error=str(spawn_error))
        return 1
    return exit_code
