"""Data models for the supervisor.

- WorkerEventType: kinds of worker lifecycle events
- WorkerEvent: immutable event records written to the output sink
"""

from dataclasses import dataclass
from enum import StrEnum


class WorkerEventType(StrEnum):
    """Types of worker lifecycle events.

    - SPAWNED: a worker process has been started
    - RESTARTING: the worker asked for a restart and is shutting down
    - TERMINATED: the supervisor stopped the worker
    - EXITED: the worker exited without being asked to
    """

    SPAWNED = "spawned"
    RESTARTING = "restarting"
    TERMINATED = "terminated"
    EXITED = "exited"


@dataclass(frozen=True, slots=True)
class WorkerEvent:
    """Immutable worker lifecycle event.

    Attributes:
        event_type: Type of lifecycle event.
        timestamp: ISO 8601 formatted timestamp.
        pid: Process ID of the worker, if known.
        exit_code: Exit code if the process terminated.
        message: Optional human-readable message.
    """

    event_type: WorkerEventType
    timestamp: str
    pid: int | None = None
    exit_code: int | None = None
    message: str | None = None
