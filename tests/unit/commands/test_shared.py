"""Unit tests for the shared CLI utilities module."""

from io import StringIO

import pytest
from rich.console import Console

from respawn.cli._commands._shared import ExitCode, exit_with_error, get_error_console


class TestExitCode:
    def test_values(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.FAILURE == 1

    def test_usable_with_system_exit(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            raise SystemExit(ExitCode.FAILURE)
        assert exc_info.value.code == 1


class TestExitWithError:
    def test_prints_and_exits(self) -> None:
        output = StringIO()
        console = Console(file=output, force_terminal=False, color_system=None)

        with pytest.raises(SystemExit) as exc_info:
            exit_with_error("Admin build failed", console=console)

        assert exc_info.value.code == ExitCode.FAILURE
        assert output.getvalue() == "Error: Admin build failed\n"

    def test_error_console_targets_stderr(self) -> None:
        assert get_error_console().stderr is True
