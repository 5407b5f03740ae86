"""Project file watcher built on watchfiles.

Observes the project tree, drops every path matched by the Ignore Rule Set
and turns what is left into ChangeEvents. Each accepted event is logged,
announced to the notifier (fire-and-forget) and handed to the reload
callback.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, final, runtime_checkable

import anyio
from watchfiles import Change, awatch

from respawn.enums import ChangeKind
from respawn.utils import IgnoreConfig, create_pathspec, matches_any, relative_to_root

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from anyio.abc import TaskGroup, TaskStatus
    from pathspec import PathSpec
    from structlog.typing import FilteringBoundLogger


_CHANGE_KINDS: dict[Change, ChangeKind] = {
    Change.added: ChangeKind.CREATED,
    Change.modified: ChangeKind.CHANGED,
    Change.deleted: ChangeKind.DELETED,
}


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A single accepted file-system change.

    Attributes:
        kind: What happened to the path.
        path: The changed path, relative to the watched root.
    """

    kind: ChangeKind
    path: Path


@runtime_checkable
class ChangeNotifier(Protocol):
    """Receives a copy of every accepted change event."""

    @property
    def enabled(self) -> bool:
        """Whether notifications should be sent at all."""
        ...

    async def notify(self, event: ChangeEvent) -> None:
        """Deliver a notification for the event. Must not raise."""
        ...


def create_watch_filter(root: Path, spec: PathSpec) -> Callable[[Change, str], bool]:
    """Create a watchfiles filter that applies the Ignore Rule Set.

    Args:
        root: The watched root; paths are matched relative to it.
        spec: The compiled ignore rules.

    Returns:
        A callable returning True for paths that should produce events.
    """

    def should_watch(_change: Change, changed_path: str) -> bool:
        return not matches_any(spec, relative_to_root(root, changed_path))

    return should_watch


def to_change_events(root: Path, changes: Iterable[tuple[Change, str]]) -> list[ChangeEvent]:
    """Convert a watchfiles batch into ChangeEvents, ordered by path."""
    return [
        ChangeEvent(kind=_CHANGE_KINDS[change], path=Path(relative_to_root(root, path)))
        for change, path in sorted(changes, key=lambda item: (item[1], item[0]))
    ]


@final
class FileWatcher:
    """Watches a project root and dispatches accepted change events.

    Only changes made after the watcher starts are reported; the initial
    directory enumeration produces no events.
    """

    __slots__: tuple[str, ...] = (
        "_logger",
        "_notifier",
        "_on_change",
        "_poll_delay_ms",
        "_polling",
        "_root",
        "_spec",
        "_stop_event",
    )

    def __init__(
        self,
        root: Path,
        *,
        on_change: Callable[[ChangeEvent], Awaitable[object]],
        logger: FilteringBoundLogger,
        notifier: ChangeNotifier | None = None,
        ignore: IgnoreConfig | None = None,
        polling: bool = False,
        poll_delay_ms: int = 300,
    ) -> None:
        """Initialize the watcher.

        Args:
            root: Directory to watch recursively.
            on_change: Called with every accepted event, after the notifier
                has been started.
            logger: Logger for change lines.
            notifier: Optional notifier fired once per accepted event.
            ignore: Ignore Rule Set configuration. Defaults apply if None.
            polling: Poll the file system instead of using native events.
            poll_delay_ms: Delay between polls when polling.
        """
        self._root: Path = root
        self._on_change = on_change
        self._logger: FilteringBoundLogger = logger
        self._notifier: ChangeNotifier | None = notifier
        self._spec: PathSpec = create_pathspec(ignore)
        self._polling: bool = polling
        self._poll_delay_ms: int = poll_delay_ms
        self._stop_event: anyio.Event = anyio.Event()

    @property
    def root(self) -> Path:
        """The watched root directory."""
        return self._root

    def accepts(self, path: str | Path) -> bool:
        """Return True if a change to path would produce an event."""
        return not matches_any(self._spec, relative_to_root(self._root, path))

    async def run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        """Watch until stop() is called.

        Notifications are started in this task group so they outlive the
        reload callback but never block it.
        """
        async with anyio.create_task_group() as tg:
            task_status.started()
            async for changes in awatch(
                self._root,
                watch_filter=create_watch_filter(self._root, self._spec),
                force_polling=self._polling,
                poll_delay_ms=self._poll_delay_ms,
                stop_event=self._stop_event,
            ):
                for event in to_change_events(self._root, changes):
                    await self.dispatch(event, tg)

    async def dispatch(self, event: ChangeEvent, tg: TaskGroup) -> None:
        """Handle one accepted change event.

        Args:
            event: The change to handle.
            tg: Task group that runs the notification.
        """
        self._logger.info(f"File {event.kind}", path=str(event.path))

        if self._notifier is not None and self._notifier.enabled:
            tg.start_soon(self._notifier.notify, event)

        _ = await self._on_change(event)

    def stop(self) -> None:
        """Stop watching. Pending notifications are left to finish."""
        self._stop_event.set()
