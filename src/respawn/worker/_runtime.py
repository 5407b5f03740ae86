"""Worker runtime: owns the application and the watcher, drives reloads.

States run STARTING -> RUNNING -> RELOADING -> KILLED. A reload is requested
by the watcher, confirmed by the supervisor with IS_KILLED, and completed by
destroying the application and answering KILL. The supervisor then replaces
this process.
"""

import sys
from typing import TYPE_CHECKING, final

import anyio

from respawn.enums import ControlMessage, WorkerState
from respawn.exceptions import ApplicationLoadError, ApplicationStartError, WorkerError
from respawn.notify import WebhookConfig, WebhookNotifier
from respawn.utils import IgnoreConfig, create_process_logger, first_leaf
from respawn.watch import FileWatcher

from ._application import ApplicationContext, load_application
from ._channel import StdioChannel
from ._state import ReloadState

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from anyio.abc import TaskGroup
    from structlog.typing import FilteringBoundLogger

    from respawn.config import Config
    from respawn.watch import ChangeEvent

    from ._application import Application
    from ._channel import ControlChannel

type ApplicationLoader = Callable[[ReloadState], Application]


@final
class WorkerRuntime:
    """Runs one application instance under supervisor control."""

    __slots__: tuple[str, ...] = (
        "_application",
        "_channel",
        "_logger",
        "_reload_state",
        "_state",
        "_watcher",
    )

    def __init__(
        self,
        channel: ControlChannel,
        *,
        logger: FilteringBoundLogger,
        reload_state: ReloadState | None = None,
    ) -> None:
        """Initialize the runtime.

        Args:
            channel: Control channel to the supervisor.
            logger: Worker logger.
            reload_state: Reload flags; a fresh record is created if None.
        """
        self._channel: ControlChannel = channel
        self._logger: FilteringBoundLogger = logger
        self._reload_state: ReloadState = reload_state or ReloadState()
        self._state: WorkerState = WorkerState.STARTING
        self._application: Application | None = None
        self._watcher: FileWatcher | None = None

    @property
    def state(self) -> WorkerState:
        """Current state of the reload state machine."""
        return self._state

    @property
    def reload_state(self) -> ReloadState:
        """The reload flags owned by this runtime."""
        return self._reload_state

    @property
    def application(self) -> Application | None:
        """The application instance, once loaded."""
        return self._application

    async def request_reload(self) -> bool:
        """Ask the supervisor for a restart.

        Does nothing unless the application is being watched and no reload
        is already in flight.

        Returns:
            True if a reload was initiated.
        """
        if not self._reload_state.can_reload:
            return False

        self._reload_state.is_reloading = True
        self._state = WorkerState.RELOADING
        await self._channel.send(ControlMessage.RELOAD)
        if self._application is not None:
            self._application.reload()
        return True

    async def on_change(self, _event: ChangeEvent) -> bool:
        """Watcher callback; every accepted change requests a reload."""
        return await self.request_reload()

    async def handle_message(self, message: ControlMessage) -> None:
        """Handle a message from the supervisor.

        IS_KILLED destroys the application, waits for it to finish and then
        answers KILL. Anything else is ignored.
        """
        if message is not ControlMessage.IS_KILLED:
            self._logger.debug("Ignored control message", message=str(message))
            return
        if self._state is WorkerState.KILLED:
            return

        self._reload_state.is_reloading = True
        self._state = WorkerState.RELOADING
        await self._shutdown()
        await self._channel.send(ControlMessage.KILL)

    async def _shutdown(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        if self._application is not None:
            await self._application.destroy()
        self._state = WorkerState.KILLED

    async def _fail(self, error: WorkerError) -> int:
        self._logger.error("Failed to start the application", error=str(error))
        await self._channel.send(ControlMessage.STOP)
        return 1

    async def _start_application(self, application: Application, tg: TaskGroup) -> None:
        try:
            await tg.start(application.start)
        except* WorkerError:
            raise
        except* Exception as eg:
            error = first_leaf(eg)
            msg = f"Application failed to start: {error}"
            raise ApplicationStartError(msg, cause=error) from error

    async def run(self, load: ApplicationLoader, *, watcher: FileWatcher | None = None) -> int:
        """Start the application and serve control messages.

        Returns once the supervisor closes the control channel.

        Args:
            load: Creates the application, given this runtime's reload state.
            watcher: File watcher to run alongside the application.

        Returns:
            Process exit status: 1 if the application could not be loaded or
            started (STOP has been sent), otherwise 0.
        """
        try:
            self._application = load(self._reload_state)
        except ApplicationLoadError as e:
            return await self._fail(e)

        self._watcher = watcher
        failure: WorkerError | None = None

        try:
            async with anyio.create_task_group() as tg:
                if watcher is not None:
                    await tg.start(watcher.run)
                await self._start_application(self._application, tg)

                self._reload_state.is_watching = True
                self._state = WorkerState.RUNNING
                self._logger.debug("Worker running")

                async for message in self._channel.messages():
                    await self.handle_message(message)

                # Supervisor is gone; do not outlive it
                if self._state is not WorkerState.KILLED:
                    self._logger.info("Control channel closed, shutting down")
                    await self._shutdown()
                tg.cancel_scope.cancel()
        except* (ApplicationStartError, ApplicationLoadError) as eg:
            failure = first_leaf(eg)

        if failure is not None:
            return await self._fail(failure)
        return 0


async def run_worker(
    config: Config,
    project_root: Path,
    *,
    serve_admin_panel: bool,
    polling: bool,
) -> int:
    """Entry point of the worker process.

    Args:
        config: Loaded configuration.
        project_root: The project being developed.
        serve_admin_panel: Whether the application serves the admin UI.
        polling: Poll the file system instead of using native events.

    Returns:
        Process exit status.
    """
    logger = create_process_logger(
        "worker",
        level=config.logging.level.value,
        log_format=config.logging.format.value,  # type: ignore[arg-type]
        log_file=config.logging.file,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )
    develop = config.develop

    channel = StdioChannel.from_stdio(logger=logger)
    runtime = WorkerRuntime(channel, logger=logger)

    notifier = WebhookNotifier(
        WebhookConfig.from_env(), logger=logger, timeout=develop.webhook_timeout
    )
    watcher = FileWatcher(
        project_root,
        on_change=runtime.on_change,
        logger=logger,
        notifier=notifier,
        ignore=IgnoreConfig(extra_patterns=config.admin.watch_ignore_files),
        polling=polling,
        poll_delay_ms=develop.poll_delay_ms,
    )

    root = str(project_root)
    if root not in sys.path:
        sys.path.insert(0, root)

    def load(reload_state: ReloadState) -> Application:
        context = ApplicationContext(
            project_root=project_root,
            serve_admin_panel=serve_admin_panel,
            reload_state=reload_state,
        )
        return load_application(
            develop.app,
            context,
            host=develop.host,
            port=develop.port,
            logger=logger,
        )

    return await runtime.run(load, watcher=watcher)
