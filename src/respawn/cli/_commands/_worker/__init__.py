"""respawn worker command - the child process spawned by ``develop``."""

from functools import partial
from typing import Annotated

from cyclopts import App, Parameter

app = App(
    name="worker",
    help="Run one supervised worker (started by respawn develop)",
    show=False,
)


@app.default
def worker(
    *,
    serve_admin_panel: Annotated[
        bool,
        Parameter(help="Let the application serve the admin panel."),
    ] = True,
    polling: Annotated[
        bool,
        Parameter(help="Poll the file system instead of using native events."),
    ] = False,
) -> None:
    """Run the application and its file watcher under supervisor control.

    Talks to the supervisor over stdin and stdout; not meant to be run by
    hand.
    """
    import anyio

    from respawn.worker import run_worker

    from .._context import CLIContext

    ctx = CLIContext.get_current()
    exit_code = anyio.run(
        partial(
            run_worker,
            ctx.config,
            ctx.project_root,
            serve_admin_panel=serve_admin_panel,
            polling=polling,
        )
    )
    raise SystemExit(exit_code)
