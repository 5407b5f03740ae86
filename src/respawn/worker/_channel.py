"""Worker side of the control channel.

Frames from the supervisor arrive on stdin; frames to the supervisor leave on
the worker's original stdout. File descriptor 1 is pointed at stderr once the
channel is opened so nothing else can write into the control stream.
"""

import os
import sys
from typing import IO, TYPE_CHECKING, Protocol, final, runtime_checkable

import anyio
import anyio.to_thread

from respawn.control import MAX_FRAME_BYTES, decode_message, encode_message
from respawn.exceptions import ProtocolError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from structlog.typing import FilteringBoundLogger

    from respawn.enums import ControlMessage


@runtime_checkable
class ControlChannel(Protocol):
    """Bidirectional control message channel."""

    async def send(self, message: ControlMessage) -> None:
        """Send one message to the other end."""
        ...

    def messages(self) -> AsyncIterator[ControlMessage]:
        """Iterate over received messages until the other end goes away."""
        ...


@final
class StdioChannel:
    """Control channel over a pair of byte streams."""

    __slots__: tuple[str, ...] = ("_logger", "_reader", "_send_lock", "_writer")

    def __init__(
        self,
        reader: IO[bytes],
        writer: IO[bytes],
        *,
        logger: FilteringBoundLogger,
    ) -> None:
        """Initialize the channel.

        Args:
            reader: Stream the supervisor writes frames to.
            writer: Stream the supervisor reads frames from.
            logger: Logger for discarded frames.
        """
        self._reader: IO[bytes] = reader
        self._writer: IO[bytes] = writer
        self._logger: FilteringBoundLogger = logger
        self._send_lock: anyio.Lock = anyio.Lock()

    @classmethod
    def from_stdio(cls, *, logger: FilteringBoundLogger) -> StdioChannel:
        """Open the channel on this process's stdin and stdout.

        The original stdout is duplicated for control frames, then file
        descriptor 1 is redirected to stderr.
        """
        sys.stdout.flush()
        control_fd = os.dup(sys.stdout.fileno())
        os.dup2(sys.stderr.fileno(), sys.stdout.fileno())
        writer = os.fdopen(control_fd, "wb", buffering=0)
        return cls(sys.stdin.buffer, writer, logger=logger)

    async def send(self, message: ControlMessage) -> None:
        frame = encode_message(message)
        async with self._send_lock:
            _ = self._writer.write(frame)
            self._writer.flush()
        self._logger.debug("Sent control message", message=str(message))

    async def messages(self) -> AsyncIterator[ControlMessage]:
        while True:
            line = await anyio.to_thread.run_sync(
                self._reader.readline, MAX_FRAME_BYTES, abandon_on_cancel=True
            )
            if not line:
                return

            try:
                message = decode_message(line)
            except ProtocolError as e:
                self._logger.debug("Discarded control frame", error=str(e))
                continue

            if message is None:
                self._logger.debug("Ignored unknown control message", frame=line)
                continue

            yield message
