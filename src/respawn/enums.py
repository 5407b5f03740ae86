"""Enumeration types for respawn."""

from enum import StrEnum


class ControlMessage(StrEnum):
    """Messages exchanged between the supervisor and its worker.

    Values are the literal tags written to the control channel:
    - RELOAD: worker to supervisor, a change requires a restart
    - IS_KILLED: supervisor to worker, shut yourself down now
    - KILL: worker to supervisor, shutdown complete, replace me
    - STOP: worker to supervisor, fatal, terminate the whole program
    """

    RELOAD = "reload"
    IS_KILLED = "isKilled"
    KILL = "kill"
    STOP = "stop"


class WorkerState(StrEnum):
    """Reload state machine of a worker runtime.

    STARTING -> RUNNING -> RELOADING -> KILLED. KILLED is terminal; the
    process is discarded by the supervisor afterwards.
    """

    STARTING = "starting"
    RUNNING = "running"
    RELOADING = "reloading"
    KILLED = "killed"


class ChangeKind(StrEnum):
    """Kinds of file-system change reported by the watcher."""

    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"
