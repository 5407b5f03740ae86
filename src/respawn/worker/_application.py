"""Supervised application contract and loading.

An application is anything with async ``start``/``destroy`` and a ``reload``
hook. ``develop.app`` names a factory (``module:attribute``) that receives an
ApplicationContext and returns either such an application or a plain ASGI
callable, which is served through uvicorn.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, final, runtime_checkable

import anyio
import uvicorn
from uvicorn.importer import ImportFromStringError, import_from_string

from respawn.exceptions import ApplicationLoadError, ApplicationStartError

if TYPE_CHECKING:
    from pathlib import Path

    from anyio.abc import TaskStatus
    from structlog.typing import FilteringBoundLogger

    from ._state import ReloadState

# How often startup polls uvicorn for readiness
_STARTUP_POLL_INTERVAL = 0.05


@runtime_checkable
class Application(Protocol):
    """The supervised application server."""

    async def start(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        """Serve until destroyed.

        Calls ``task_status.started()`` once ready.

        Raises:
            ApplicationStartError: If the application cannot start.
        """
        ...

    def reload(self) -> None:
        """Run the application's own reload hook."""
        ...

    async def destroy(self) -> None:
        """Shut down gracefully; returns once shutdown has completed."""
        ...


@dataclass(frozen=True, slots=True)
class ApplicationContext:
    """What an application factory is given.

    Attributes:
        project_root: The project being developed.
        serve_admin_panel: Whether the application should serve the admin UI.
        reload_state: The worker's reload flags, shared by reference.
    """

    project_root: Path
    serve_admin_panel: bool
    reload_state: ReloadState


@final
class AsgiApplication:
    """Serves an ASGI callable with uvicorn."""

    __slots__: tuple[str, ...] = (
        "_app",
        "_failure",
        "_host",
        "_logger",
        "_port",
        "_server",
        "_stopped",
    )

    def __init__(
        self,
        app: Any,  # pyright: ignore[reportExplicitAny, reportAny]
        *,
        host: str,
        port: int,
        logger: FilteringBoundLogger,
    ) -> None:
        self._app: Any = app  # pyright: ignore[reportExplicitAny]
        self._host: str = host
        self._port: int = port
        self._logger: FilteringBoundLogger = logger
        self._server: uvicorn.Server | None = None
        self._failure: BaseException | None = None
        self._stopped: anyio.Event = anyio.Event()

    @property
    def server(self) -> uvicorn.Server | None:
        """The running uvicorn server, if started."""
        return self._server

    async def start(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        config = uvicorn.Config(
            self._app,
            host=self._host,
            port=self._port,
            log_level="warning",
            lifespan="auto",
        )
        server = uvicorn.Server(config)
        self._server = server
        serving = anyio.Event()
        failed = False

        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._serve, server, serving)

                while not server.started:
                    if serving.is_set():
                        failed = True
                        break
                    await anyio.sleep(_STARTUP_POLL_INTERVAL)
                else:
                    self._logger.info(
                        "Application started", url=f"http://{self._host}:{self._port}"
                    )
                    task_status.started()
        finally:
            self._stopped.set()

        if failed:
            msg = f"Server failed to start on {self._host}:{self._port}"
            raise ApplicationStartError(msg, cause=self._failure)

    async def _serve(self, server: uvicorn.Server, done: anyio.Event) -> None:
        try:
            await server.serve()
        except SystemExit as e:
            # uvicorn exits the process when it cannot bind
            self._failure = e
        finally:
            done.set()

    def reload(self) -> None:
        self._logger.debug("Application reload requested")

    async def destroy(self) -> None:
        if self._server is None:
            return
        self._server.should_exit = True
        await self._stopped.wait()
        self._logger.info("Application stopped")


def load_application(
    target: str,
    context: ApplicationContext,
    *,
    host: str,
    port: int,
    logger: FilteringBoundLogger,
) -> Application:
    """Import and instantiate the supervised application.

    Args:
        target: ``module:attribute`` import string of the factory.
        context: Passed to the factory.
        host: Bind host used when the factory returns an ASGI callable.
        port: Bind port used when the factory returns an ASGI callable.
        logger: Logger for the ASGI adapter.

    Returns:
        The application to supervise.

    Raises:
        ApplicationLoadError: If the factory is missing, cannot be imported,
            fails, or returns something that is not an application.
    """
    if not target:
        msg = "No application configured (set develop.app in respawn.toml)"
        raise ApplicationLoadError(msg, target=target)

    try:
        factory = import_from_string(target)  # pyright: ignore[reportAny]
    except ImportFromStringError as e:
        raise ApplicationLoadError(str(e), target=target) from e

    if not callable(factory):  # pyright: ignore[reportAny]
        msg = f"Application factory {target!r} is not callable"
        raise ApplicationLoadError(msg, target=target)

    try:
        result = factory(context)  # pyright: ignore[reportAny]
    except Exception as e:
        msg = f"Application factory {target!r} failed: {e}"
        raise ApplicationLoadError(msg, target=target) from e

    if isinstance(result, Application):
        return result
    if callable(result):  # pyright: ignore[reportAny]
        return AsgiApplication(result, host=host, port=port, logger=logger)

    kind = type(result).__name__  # pyright: ignore[reportAny]
    msg = f"Application factory {target!r} returned {kind}, expected an application"
    raise ApplicationLoadError(msg, target=target)
