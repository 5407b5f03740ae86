"""Shared test fixtures for respawn tests."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import structlog
from rich.console import Console
from structlog.testing import LogCapture

from respawn.enums import ControlMessage


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def log_capture() -> LogCapture:
    return LogCapture()


@pytest.fixture
def logger(log_capture: LogCapture) -> structlog.typing.FilteringBoundLogger:
    """A logger whose entries are recorded in ``log_capture.entries``."""
    return structlog.wrap_logger(
        None,
        processors=[log_capture],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
    )


@pytest.fixture
def console() -> Console:
    """Create a Rich console that records output without a terminal."""
    return Console(record=True, width=120, force_terminal=False, color_system=None)


@dataclass
class FakeChannel:
    """In-memory control channel.

    Sent messages are recorded in ``sent``; ``incoming`` is replayed by
    ``messages()`` before the channel reports end-of-file.
    """

    incoming: list[ControlMessage] = field(default_factory=list)
    sent: list[ControlMessage] = field(default_factory=list)

    async def send(self, message: ControlMessage) -> None:
        self.sent.append(message)

    async def messages(self) -> AsyncIterator[ControlMessage]:
        for message in self.incoming:
            yield message


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "api" / "test" / "models").mkdir(parents=True)
    return root
