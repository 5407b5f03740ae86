"""Protocol definitions for the supervisor.

- OutputSink: consumes worker output lines and lifecycle events
- WorkerHandle: the supervisor's view of one worker process
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from respawn.enums import ControlMessage

    from ._models import WorkerEvent


@runtime_checkable
class OutputSink(Protocol):
    """Protocol for consuming worker output and events."""

    async def write_line(self, pid: int, line: str) -> None:
        """Write a line the worker printed on its control stream.

        Args:
            pid: Process ID of the worker.
            line: The output line (without trailing newline).
        """
        ...

    async def write_event(self, event: WorkerEvent) -> None:
        """Write a worker lifecycle event."""
        ...


@runtime_checkable
class WorkerHandle(Protocol):
    """A spawned worker process, as seen by the supervisor."""

    @property
    def pid(self) -> int:
        """Return the worker's process ID."""
        ...

    @property
    def returncode(self) -> int | None:
        """Return the exit code, or None while the worker is running."""
        ...

    async def send(self, message: ControlMessage) -> None:
        """Send a control message to the worker.

        Sending to a worker that has already gone away is not an error.
        """
        ...

    def messages(self) -> AsyncIterator[ControlMessage]:
        """Iterate over control messages until the worker's stream closes."""
        ...

    async def wait(self) -> int:
        """Wait for the worker to exit and return its exit code."""
        ...

    async def terminate(self, timeout: float) -> int | None:
        """Stop the worker: SIGTERM, then SIGKILL after timeout seconds.

        Returns:
            The exit code, if the worker exited.
        """
        ...


type WorkerSpawner = Callable[[], Awaitable[WorkerHandle]]
