"""respawn exceptions."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class RespawnError(Exception):
    """Base exception for respawn errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(RespawnError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Protocol Exceptions
# =============================================================================


class ProtocolError(RespawnError):
    """Raised when a control frame cannot be encoded or decoded.

    Attributes:
        frame: The raw frame that could not be handled, if any.
    """

    def __init__(self, message: str, *, frame: bytes | str | None = None) -> None:
        """Initialize with error message and the offending frame.

        Args:
            message: Human-readable error message.
            frame: The raw frame that could not be handled.
        """
        super().__init__(message)
        self.frame: bytes | str | None = frame


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class SupervisorError(RespawnError):
    """Base exception for supervisor errors."""


class WorkerSpawnError(SupervisorError):
    """Raised when the worker process cannot be spawned.

    Attributes:
        command: The command that was used to spawn the worker.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and spawn context.

        Args:
            message: Human-readable error message.
            command: The command that was used to spawn the worker.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.command: tuple[str, ...] | None = tuple(command) if command else None
        self.cause: Exception | None = cause


class AuxiliaryProcessError(SupervisorError):
    """Raised when the admin build or admin watch process fails.

    Attributes:
        command: The auxiliary command that failed.
        exit_code: The exit code of the command, if it ran.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        exit_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            command: The auxiliary command that failed.
            exit_code: The exit code of the command, if it ran.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.exit_code: int | None = exit_code
        self.cause: Exception | None = cause


# =============================================================================
# Worker Exceptions
# =============================================================================


class WorkerError(RespawnError):
    """Base exception for worker errors."""


class ApplicationLoadError(WorkerError):
    """Raised when the application factory cannot be imported or called.

    Attributes:
        target: The import string that was being loaded.
    """

    def __init__(self, message: str, *, target: str) -> None:
        """Initialize with error message and import target.

        Args:
            message: Human-readable error message.
            target: The import string that was being loaded.
        """
        super().__init__(message)
        self.target: str = target


class ApplicationStartError(WorkerError):
    """Raised when the supervised application fails to start.

    Attributes:
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        """Initialize with error message and cause.

        Args:
            message: Human-readable error message.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.cause: BaseException | None = cause
