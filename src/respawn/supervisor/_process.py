"""Worker process handle built on anyio subprocesses.

The worker's stdin and stdout form the control channel. Its stderr is
inherited so application logs reach the terminal directly.
"""

import signal
import subprocess
import sys
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc
from anyio.streams.buffered import BufferedByteReceiveStream

from respawn.control import FRAME_DELIMITER, MAX_FRAME_BYTES, decode_message, encode_message
from respawn.exceptions import ProtocolError, WorkerSpawnError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from respawn.enums import ControlMessage

    from ._protocol import OutputSink, WorkerSpawner

_STREAM_CLOSED = (
    anyio.IncompleteRead,
    anyio.EndOfStream,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
)


def build_worker_command(
    project_root: Path,
    *,
    serve_admin_panel: bool,
    polling: bool,
    config_path: Path | None = None,
    verbose: bool = False,
) -> tuple[str, ...]:
    """Build the command line that starts a worker process.

    The worker runs the same interpreter with ``-m respawn worker`` so it
    sees exactly the installation the supervisor runs from. The worker starts
    in the project root, so the config path is made absolute first.
    """
    command = [sys.executable, "-m", "respawn", "--project-root", str(project_root)]
    if config_path is not None:
        command.extend(["--config", str(config_path.resolve())])
    if verbose:
        command.append("--verbose")
    command.extend(
        [
            "worker",
            "--serve-admin-panel" if serve_admin_panel else "--no-serve-admin-panel",
            "--polling" if polling else "--no-polling",
        ]
    )
    return tuple(command)


@final
class WorkerProcess:
    """A running worker process and its control channel."""

    __slots__: tuple[str, ...] = ("_logger", "_output_sink", "_process")

    def __init__(
        self,
        process: anyio.abc.Process,
        *,
        output_sink: OutputSink,
        logger: FilteringBoundLogger,
    ) -> None:
        self._process: anyio.abc.Process = process
        self._output_sink: OutputSink = output_sink
        self._logger: FilteringBoundLogger = logger

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def send(self, message: ControlMessage) -> None:
        if self._process.stdin is None:
            return
        try:
            await self._process.stdin.send(encode_message(message))
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            self._logger.debug(
                "Worker is gone, control message dropped",
                pid=self.pid,
                message=str(message),
            )

    async def _forward(self, raw: bytes) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        try:  # noqa: SIM105
            await self._output_sink.write_line(self.pid, line)
        except Exception:  # noqa: BLE001, S110
            # Output sink errors should not break the control channel
            pass

    async def messages(self) -> AsyncIterator[ControlMessage]:
        """Yield control messages; other lines are forwarded as output."""
        if self._process.stdout is None:
            return

        stream = BufferedByteReceiveStream(self._process.stdout)
        while True:
            try:
                line = await stream.receive_until(FRAME_DELIMITER, MAX_FRAME_BYTES)
            except anyio.DelimiterNotFound:
                # Overlong line, cannot be a frame
                await self._forward(await stream.receive(MAX_FRAME_BYTES))
                continue
            except _STREAM_CLOSED:
                if stream.buffer:
                    await self._forward(bytes(stream.buffer))
                return

            try:
                message = decode_message(line)
            except ProtocolError:
                await self._forward(line)
                continue

            if message is None:
                self._logger.debug("Ignored unknown control message", pid=self.pid)
                continue

            yield message

    async def wait(self) -> int:
        return await self._process.wait()

    async def terminate(self, timeout: float) -> int | None:
        try:
            if self._process.returncode is None:
                self._process.send_signal(signal.SIGTERM)

                with anyio.move_on_after(timeout):
                    _ = await self._process.wait()

                if self._process.returncode is None:
                    self._logger.warning(
                        "Worker did not exit in time, killing it",
                        pid=self.pid,
                        timeout=timeout,
                    )
                    self._process.kill()
                    _ = await self._process.wait()
        except ProcessLookupError:
            pass
        finally:
            with anyio.CancelScope(shield=True):
                await self._process.aclose()

        return self._process.returncode


def create_worker_spawner(
    command: Sequence[str],
    *,
    cwd: Path | None,
    output_sink: OutputSink,
    logger: FilteringBoundLogger,
) -> WorkerSpawner:
    """Create a callable that starts a fresh worker process each time.

    Workers are started in their own session so a terminal interrupt reaches
    only the supervisor, which then stops the worker itself.

    Raises:
        WorkerSpawnError: From the returned callable, if the process cannot
            be started.
    """

    async def spawn() -> WorkerProcess:
        try:
            process = await anyio.open_process(
                list(command),
                cwd=cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=None,
                start_new_session=True,
            )
        except OSError as e:
            msg = f"Failed to start worker: {e}"
            raise WorkerSpawnError(msg, command=command, cause=e) from e

        return WorkerProcess(process, output_sink=output_sink, logger=logger)

    return spawn
