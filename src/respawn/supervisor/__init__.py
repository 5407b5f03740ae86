"""Supervisor process: spawns the worker and drives restarts."""

from ._models import WorkerEvent, WorkerEventType
from ._output import ConcatenatedOutputSink
from ._process import WorkerProcess, build_worker_command, create_worker_spawner
from ._protocol import OutputSink, WorkerHandle, WorkerSpawner
from ._supervisor import Supervisor

__all__ = [
    "ConcatenatedOutputSink",
    "OutputSink",
    "Supervisor",
    "WorkerEvent",
    "WorkerEventType",
    "WorkerHandle",
    "WorkerProcess",
    "WorkerSpawner",
    "build_worker_command",
    "create_worker_spawner",
]
