# pyright: reportUnusedCallResult=false
"""respawn develop command - runs the application with automatic restarts."""

from typing import Annotated

from cyclopts import App, Parameter

app = App(
    name="develop",
    help="Run the application and restart it when project files change",
    help_on_error=True,
)


@app.default
def develop(
    *,
    build: Annotated[
        bool,
        Parameter(help="Build the admin panel first if no build exists."),
    ] = True,
    watch_admin: Annotated[
        bool,
        Parameter(help="Run the admin panel in watch mode instead of serving a build."),
    ] = False,
    polling: Annotated[
        bool,
        Parameter(help="Poll the file system instead of using native events."),
    ] = False,
    browser: Annotated[
        str,
        Parameter(help="Browser passed to the admin watch process."),
    ] = "true",
) -> None:
    """Start the development supervisor.

    Builds the admin panel if needed, optionally starts it in watch mode,
    then runs the application in a worker process that is replaced every
    time a watched file changes.
    """
    from respawn.exceptions import AuxiliaryProcessError
    from respawn.utils import create_process_logger

    from .._context import CLIContext
    from .._shared import ExitCode, exit_with_error
    from ._runner import run_develop

    ctx = CLIContext.get_current()
    logging_config = ctx.config.logging
    logger = create_process_logger(
        "supervisor",
        level=logging_config.level.value,
        log_format=logging_config.format.value,  # type: ignore[arg-type]
        log_file=logging_config.file,
        max_bytes=logging_config.max_bytes,
        backup_count=logging_config.backup_count,
    )

    try:
        exit_code = run_develop(
            ctx.config,
            ctx.project_root,
            build=build,
            watch_admin=watch_admin,
            polling=polling,
            browser=browser,
            logger=logger,
            config_path=ctx.config_path,
            verbose=ctx.verbose,
        )
    except AuxiliaryProcessError as e:
        logger.error("Auxiliary process failed", command=" ".join(e.command))
        exit_with_error(str(e), ExitCode.FAILURE)

    raise SystemExit(exit_code)
