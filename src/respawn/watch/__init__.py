"""File watching for respawn."""

from ._watcher import (
    ChangeEvent,
    ChangeNotifier,
    FileWatcher,
    create_watch_filter,
    to_change_events,
)

__all__ = [
    "ChangeEvent",
    "ChangeNotifier",
    "FileWatcher",
    "create_watch_filter",
    "to_change_events",
]
