from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import httpx
import pytest
from watchfiles import Change

from respawn.enums import ChangeKind
from respawn.notify import WebhookConfig, WebhookNotifier
from respawn.utils import IgnoreConfig, create_pathspec
from respawn.watch import (
    ChangeEvent,
    ChangeNotifier,
    FileWatcher,
    create_watch_filter,
    to_change_events,
)

if TYPE_CHECKING:
    from structlog.testing import LogCapture
    from structlog.typing import FilteringBoundLogger


@dataclass
class RecordingNotifier:
    enabled: bool = True
    events: list[ChangeEvent] = field(default_factory=list)

    async def notify(self, event: ChangeEvent) -> None:
        self.events.append(event)


class TestCreateWatchFilter:
    def test_rejects_ignored_paths(self, tmp_path: Path) -> None:
        should_watch = create_watch_filter(tmp_path, create_pathspec())

        assert not should_watch(Change.modified, str(tmp_path / ".git" / "HEAD"))
        assert not should_watch(Change.added, str(tmp_path / "node_modules" / "x" / "index.js"))
        assert not should_watch(Change.added, str(tmp_path / "data.db"))
        assert not should_watch(Change.modified, str(tmp_path / "src" / "admin" / "app.js"))

    def test_accepts_source_paths(self, tmp_path: Path) -> None:
        should_watch = create_watch_filter(tmp_path, create_pathspec())

        assert should_watch(Change.modified, str(tmp_path / "api" / "test" / "models" / "test.js"))
        assert should_watch(Change.added, str(tmp_path / "config" / "server.js"))

    def test_extra_patterns(self, tmp_path: Path) -> None:
        spec = create_pathspec(IgnoreConfig(extra_patterns=("**/*.log",)))
        should_watch = create_watch_filter(tmp_path, spec)

        assert not should_watch(Change.added, str(tmp_path / "logs" / "app.log"))
        assert should_watch(Change.added, str(tmp_path / "logs" / "app.txt"))


class TestToChangeEvents:
    def test_maps_kinds_relative_to_root(self, tmp_path: Path) -> None:
        changes = {
            (Change.added, str(tmp_path / "b.js")),
            (Change.modified, str(tmp_path / "a.js")),
            (Change.deleted, str(tmp_path / "c" / "d.js")),
        }

        events = to_change_events(tmp_path, changes)

        assert events == [
            ChangeEvent(kind=ChangeKind.CHANGED, path=Path("a.js")),
            ChangeEvent(kind=ChangeKind.CREATED, path=Path("b.js")),
            ChangeEvent(kind=ChangeKind.DELETED, path=Path("c/d.js")),
        ]

    def test_empty_batch(self, tmp_path: Path) -> None:
        assert to_change_events(tmp_path, set()) == []


class TestFileWatcher:
    def test_accepts(self, project_root: Path, logger: FilteringBoundLogger) -> None:
        async def on_change(_event: ChangeEvent) -> None:
            pass

        watcher = FileWatcher(project_root, on_change=on_change, logger=logger)

        assert watcher.root == project_root
        assert watcher.accepts(project_root / "api" / "test" / "models" / "test.js")
        assert not watcher.accepts(project_root / "public" / "uploads" / "a.png")
        assert not watcher.accepts(project_root / ".cache" / "x")

    def test_recording_notifier_satisfies_protocol(self) -> None:
        assert isinstance(RecordingNotifier(), ChangeNotifier)

    @pytest.mark.anyio
    async def test_dispatch_logs_notifies_and_calls_back(
        self,
        project_root: Path,
        logger: FilteringBoundLogger,
        log_capture: LogCapture,
    ) -> None:
        received: list[ChangeEvent] = []

        async def on_change(event: ChangeEvent) -> None:
            received.append(event)

        notifier = RecordingNotifier()
        watcher = FileWatcher(project_root, on_change=on_change, logger=logger, notifier=notifier)
        event = ChangeEvent(kind=ChangeKind.CHANGED, path=Path("api/test/models/test.js"))

        async with anyio.create_task_group() as tg:
            await watcher.dispatch(event, tg)

        assert received == [event]
        assert notifier.events == [event]
        assert log_capture.entries[0]["event"] == "File changed"
        assert log_capture.entries[0]["path"] == str(Path("api/test/models/test.js"))

    @pytest.mark.anyio
    async def test_dispatch_skips_disabled_notifier(
        self, project_root: Path, logger: FilteringBoundLogger
    ) -> None:
        received: list[ChangeEvent] = []

        async def on_change(event: ChangeEvent) -> None:
            received.append(event)

        notifier = RecordingNotifier(enabled=False)
        watcher = FileWatcher(project_root, on_change=on_change, logger=logger, notifier=notifier)
        event = ChangeEvent(kind=ChangeKind.CREATED, path=Path("a.js"))

        async with anyio.create_task_group() as tg:
            await watcher.dispatch(event, tg)

        assert received == [event]
        assert notifier.events == []

    @pytest.mark.anyio
    async def test_run_reports_changes_until_stopped(
        self, project_root: Path, logger: FilteringBoundLogger
    ) -> None:
        received: list[ChangeEvent] = []
        seen = anyio.Event()

        async def on_change(event: ChangeEvent) -> None:
            received.append(event)
            seen.set()

        watcher = FileWatcher(project_root, on_change=on_change, logger=logger)
        target = project_root / "api" / "test" / "models" / "test.js"

        with anyio.fail_after(20):
            async with anyio.create_task_group() as tg:
                await tg.start(watcher.run)
                # Keep touching until the native watcher is attached
                while not seen.is_set():
                    _ = target.write_text("module.exports = {};\n")
                    _ = (project_root / ".hidden").write_text("x")
                    with anyio.move_on_after(0.5):
                        await seen.wait()
                watcher.stop()

        paths = {event.path for event in received}
        assert Path("api/test/models/test.js") in paths
        assert Path(".hidden") not in paths

    @pytest.mark.anyio
    async def test_dispatch_does_not_wait_for_hanging_webhook(
        self, project_root: Path, logger: FilteringBoundLogger
    ) -> None:
        received: list[ChangeEvent] = []
        requests: list[httpx.Request] = []

        async def on_change(event: ChangeEvent) -> None:
            received.append(event)

        async def never_responds(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            await anyio.Event().wait()
            return httpx.Response(204)

        notifier = WebhookNotifier(
            WebhookConfig(url="https://hooks.example.com/respawn"),
            logger=logger,
            transport=httpx.MockTransport(never_responds),
        )
        watcher = FileWatcher(project_root, on_change=on_change, logger=logger, notifier=notifier)
        event = ChangeEvent(kind=ChangeKind.CHANGED, path=Path("api/test/models/test.js"))

        async with anyio.create_task_group() as tg:
            with anyio.fail_after(1):
                await watcher.dispatch(event, tg)
                assert received == [event]
                while not requests:
                    await anyio.sleep(0.01)
            tg.cancel_scope.cancel()

        assert len(requests) == 1

    @pytest.mark.anyio
    async def test_existing_files_produce_no_events(
        self, project_root: Path, logger: FilteringBoundLogger
    ) -> None:
        for index in range(50):
            _ = (project_root / "api" / f"existing_{index}.js").write_text("x")
        received: list[ChangeEvent] = []
        seen = anyio.Event()

        async def on_change(event: ChangeEvent) -> None:
            received.append(event)
            seen.set()

        watcher = FileWatcher(
            project_root, on_change=on_change, logger=logger, polling=True, poll_delay_ms=50
        )
        fresh = project_root / "api" / "fresh.js"

        with anyio.fail_after(20):
            async with anyio.create_task_group() as tg:
                await tg.start(watcher.run)
                # Several poll intervals over the pre-existing tree
                await anyio.sleep(0.5)
                while not seen.is_set():
                    _ = fresh.write_text("module.exports = {};\n")
                    with anyio.move_on_after(0.5):
                        await seen.wait()
                watcher.stop()

        assert Path("api/fresh.js") in {event.path for event in received}
        assert not [event for event in received if event.path.name.startswith("existing_")]
