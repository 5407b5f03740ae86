"""The command-line interface for respawn."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from respawn.config import safe_load_config
from respawn.utils import create_cli_logger, get_project_root

from ._commands import register_commands
from ._commands._context import CLIContext

_HELP = "Keep an application server running across code edits."


def _launch(
    tokens: tuple[str, ...],
    *,
    app: App,
    verbose: bool,
    config: Path | None,
    project_root: Path | None,
) -> None:
    cli_overrides: dict[str, object] | None = None
    if verbose:
        cli_overrides = {"logging": {"level": "debug"}}

    resolved_root = get_project_root(project_root)
    config_path = config.resolve() if config is not None else None
    loaded_config, config_error = safe_load_config(
        config_path=config_path,
        project_root=resolved_root,
        cli_overrides=cli_overrides,
    )

    cli_logger = create_cli_logger(
        level=loaded_config.logging.level.value,
        log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
        log_file=loaded_config.logging.file,
        max_bytes=loaded_config.logging.max_bytes,
        backup_count=loaded_config.logging.backup_count,
    )

    ctx = CLIContext(
        config=loaded_config,
        project_root=resolved_root,
        verbose=verbose,
        config_path=config_path,
        config_error=config_error,
        logger=cli_logger,
    )
    CLIContext.set_current(ctx)

    try:
        app(tokens)
    finally:
        CLIContext.reset()


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="respawn",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[bool, Parameter(help="Enable debug logging")] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        project_root: Annotated[
            Path | None, Parameter(name="--project-root", help="Path to project root")
        ] = None,
    ) -> None:
        """Launch respawn with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Enable debug logging.
            config: Explicit path to config file.
            project_root: Path to project root directory.
        """
        _launch(
            tokens,
            app=app,
            verbose=verbose,
            config=config,
            project_root=project_root,
        )

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `respawn` CLI."""
    app = create_app()
    app.meta()


app = create_app()
