import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import anyio
import pytest

from respawn.enums import ControlMessage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from respawn.supervisor import WorkerEvent

_pids = itertools.count(1000)


class FakeWorker:
    """In-memory worker handle driven by the test."""

    def __init__(self) -> None:
        self.pid: int = next(_pids)
        self.returncode: int | None = None
        self.sent: list[ControlMessage] = []
        self.terminated: bool = False
        self._exited: anyio.Event = anyio.Event()
        self._send, self._receive = anyio.create_memory_object_stream[ControlMessage](10)

    async def emit(self, message: ControlMessage) -> None:
        await self._send.send(message)

    def exit(self, code: int) -> None:
        self.returncode = code
        self._send.close()
        self._exited.set()

    async def send(self, message: ControlMessage) -> None:
        self.sent.append(message)

    async def messages(self) -> AsyncIterator[ControlMessage]:
        async with self._receive:
            async for message in self._receive:
                yield message

    async def wait(self) -> int:
        await self._exited.wait()
        assert self.returncode is not None
        return self.returncode

    async def terminate(self, timeout: float) -> int | None:
        self.terminated = True
        if self.returncode is None:
            self.exit(-15)
        return self.returncode


@dataclass
class FakeSpawner:
    workers: list[FakeWorker] = field(default_factory=list)

    async def __call__(self) -> FakeWorker:
        worker = FakeWorker()
        self.workers.append(worker)
        return worker


@dataclass
class RecordingSink:
    lines: list[tuple[int, str]] = field(default_factory=list)
    events: list[WorkerEvent] = field(default_factory=list)

    async def write_line(self, pid: int, line: str) -> None:
        self.lines.append((pid, line))

    async def write_event(self, event: WorkerEvent) -> None:
        self.events.append(event)


@pytest.fixture
def spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
