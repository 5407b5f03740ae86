"""respawn CLI commands."""
# pyright: reportUnusedCallResult=false

from typing import TYPE_CHECKING

from ._context import CLIContext
from ._develop import app as develop_app
from ._shared import ExitCode, exit_with_error, get_error_console
from ._worker import app as worker_app

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "develop_app",
    "exit_with_error",
    "get_error_console",
    "worker_app",
]


def register_commands(app: App) -> None:
    app.command(develop_app)
    app.command(worker_app)
