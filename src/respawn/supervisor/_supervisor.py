"""Supervisor: owns the worker process and the restart protocol.

Exactly one worker is alive at a time. A restart is driven by the worker
(RELOAD), confirmed by the supervisor (IS_KILLED), acknowledged by the worker
(KILL) and completed by terminating it and spawning a replacement.
"""

import signal
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc

from respawn.enums import ControlMessage

from ._models import WorkerEvent, WorkerEventType
from ._output import ConcatenatedOutputSink

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from ._protocol import OutputSink, WorkerHandle, WorkerSpawner


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


@final
class Supervisor:
    """Runs one worker at a time and replaces it on request.

    The session ends with status 1 when the worker sends STOP, with the
    worker's own status when it exits unexpectedly, and with status 0 on
    SIGINT or SIGTERM.
    """

    __slots__: tuple[str, ...] = (
        "_done",
        "_exit_code",
        "_logger",
        "_output_sink",
        "_shutdown_timeout",
        "_spawn",
        "_task_group",
        "_worker",
    )

    def __init__(
        self,
        spawn: WorkerSpawner,
        *,
        logger: FilteringBoundLogger,
        output_sink: OutputSink | None = None,
        shutdown_timeout: float = 5.0,
    ) -> None:
        """Initialize the supervisor.

        Args:
            spawn: Starts a new worker process.
            logger: Supervisor logger.
            output_sink: Sink for worker output. Uses ConcatenatedOutputSink if None.
            shutdown_timeout: Seconds between SIGTERM and SIGKILL when
                terminating a worker.
        """
        self._spawn: WorkerSpawner = spawn
        self._logger: FilteringBoundLogger = logger
        self._output_sink: OutputSink = output_sink or ConcatenatedOutputSink()
        self._shutdown_timeout: float = shutdown_timeout
        self._worker: WorkerHandle | None = None
        self._task_group: anyio.abc.TaskGroup | None = None
        self._done: anyio.Event = anyio.Event()
        self._exit_code: int | None = None

    @property
    def worker(self) -> WorkerHandle | None:
        """Return the current worker, if one is alive."""
        return self._worker

    @property
    def exit_code(self) -> int | None:
        """Return the session's exit code once it has ended."""
        return self._exit_code

    async def emit_event(
        self,
        event_type: WorkerEventType,
        worker: WorkerHandle,
        *,
        message: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        """Emit a worker lifecycle event to the output sink."""
        event = WorkerEvent(
            event_type=event_type,
            timestamp=_get_timestamp(),
            pid=worker.pid,
            exit_code=exit_code,
            message=message,
        )
        try:  # noqa: SIM105
            await self._output_sink.write_event(event)
        except Exception:  # noqa: BLE001, S110
            # Output sink errors should not crash the supervisor
            pass

    def finish(self, exit_code: int) -> None:
        """End the session with exit_code. Later calls are ignored."""
        if self._exit_code is None:
            self._exit_code = exit_code
        self._done.set()

    async def _terminate(self, worker: WorkerHandle, *, message: str) -> None:
        exit_code = await worker.terminate(self._shutdown_timeout)
        await self.emit_event(
            WorkerEventType.TERMINATED, worker, exit_code=exit_code, message=message
        )

    async def fork(self) -> WorkerHandle:
        """Replace the current worker, if any, with a freshly spawned one.

        Raises:
            WorkerSpawnError: If the new worker cannot be started.
            RuntimeError: If called outside run().
        """
        if self._task_group is None:
            msg = "Supervisor is not running"
            raise RuntimeError(msg)

        if self._worker is not None:
            old, self._worker = self._worker, None
            await self._terminate(old, message="Replaced")

        worker = await self._spawn()
        self._worker = worker
        await self.emit_event(WorkerEventType.SPAWNED, worker)
        self._task_group.start_soon(self._watch_worker, worker)
        return worker

    async def handle_message(self, worker: WorkerHandle, message: ControlMessage) -> None:
        """Handle a control message sent by a worker.

        Messages from a worker that has already been replaced are ignored.
        """
        if worker is not self._worker:
            self._logger.debug(
                "Ignored message from stale worker", pid=worker.pid, message=str(message)
            )
            return

        match message:
            case ControlMessage.RELOAD:
                self._logger.info("The server is restarting")
                await self.emit_event(WorkerEventType.RESTARTING, worker)
                await worker.send(ControlMessage.IS_KILLED)
            case ControlMessage.KILL:
                _ = await self.fork()
            case ControlMessage.STOP:
                self._worker = None
                await self._terminate(worker, message="Stopped after a fatal error")
                self.finish(1)
            case _:
                self._logger.debug("Ignored control message", message=str(message))

    async def _watch_worker(self, worker: WorkerHandle) -> None:
        async for message in worker.messages():
            await self.handle_message(worker, message)

        exit_code = await worker.wait()
        if worker is not self._worker:
            return

        # Exited without being asked to
        self._worker = None
        await self.emit_event(
            WorkerEventType.EXITED, worker, exit_code=exit_code, message="Worker exited"
        )
        self._logger.error("Worker exited unexpectedly", exit_code=exit_code)
        self.finish(exit_code if exit_code > 0 else 1)

    async def _handle_signals(self) -> None:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for signum in signals:
                self._logger.info("Shutting down", signal=signal.Signals(signum).name)
                self.finish(0)
                break

    async def run(self) -> int:
        """Spawn the first worker and supervise until the session ends.

        Returns:
            The session's exit code.

        Raises:
            WorkerSpawnError: If a worker cannot be started.
        """
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            tg.start_soon(self._handle_signals)

            _ = await self.fork()
            await self._done.wait()

            tg.cancel_scope.cancel()

        # Stop the worker outside the task group to avoid races
        self._task_group = None
        if self._worker is not None:
            worker, self._worker = self._worker, None
            await self._terminate(worker, message="Supervisor shutting down")

        return self._exit_code if self._exit_code is not None else 0
