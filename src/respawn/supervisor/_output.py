"""Output sink implementations for the supervisor."""

from typing import TYPE_CHECKING, final

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ._models import WorkerEventType

if TYPE_CHECKING:
    from ._models import WorkerEvent


@final
class ConcatenatedOutputSink:
    """Output sink that prints to the terminal with formatted prefixes.

    Worker lines are printed as ``[worker:pid] line``; lifecycle events get a
    colored label per event type.
    """

    __slots__: tuple[str, ...] = ("_console", "_event_styles", "_prefix_style")

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the output sink.

        Args:
            console: Rich Console instance for output. Defaults to stderr.
        """
        self._console: Console = console or Console(stderr=True)
        self._prefix_style: Style = Style(color="blue", bold=True)
        self._event_styles: dict[WorkerEventType, Style] = {
            WorkerEventType.SPAWNED: Style(color="green", bold=True),
            WorkerEventType.RESTARTING: Style(color="cyan"),
            WorkerEventType.TERMINATED: Style(color="yellow"),
            WorkerEventType.EXITED: Style(color="red", bold=True),
        }

    async def write_line(self, pid: int, line: str) -> None:
        text = Text()
        _ = text.append(f"[worker:{pid}]", style=self._prefix_style)
        _ = text.append(" ")
        _ = text.append(line)

        self._console.print(text)

    async def write_event(self, event: WorkerEvent) -> None:
        style = self._event_styles.get(event.event_type, Style())

        text = Text()
        _ = text.append("[respawn]", style=self._prefix_style)
        _ = text.append(" ")
        _ = text.append(event.event_type.value.upper(), style=style)

        if event.pid is not None:
            _ = text.append(f" (pid={event.pid})", style=Style(dim=True))

        if event.exit_code is not None:
            _ = text.append(f" exit_code={event.exit_code}", style=Style(dim=True))

        if event.message:
            _ = text.append(f" - {event.message}", style=style)

        self._console.print(text)
