"""Worker process: runs the supervised application and its file watcher."""

from ._application import (
    Application,
    ApplicationContext,
    AsgiApplication,
    load_application,
)
from ._channel import ControlChannel, StdioChannel
from ._runtime import ApplicationLoader, WorkerRuntime, run_worker
from ._state import ReloadState

__all__ = [
    "Application",
    "ApplicationContext",
    "ApplicationLoader",
    "AsgiApplication",
    "ControlChannel",
    "ReloadState",
    "StdioChannel",
    "WorkerRuntime",
    "load_application",
    "run_worker",
]
