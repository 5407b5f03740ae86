"""Logging utilities for respawn.

This module provides standalone structlog logger factories. Loggers render
human-readable lines to stderr by default, or JSON, and can write to a log
file instead, optionally rotated by size. Each logger is self-contained and
does not modify global structlog configuration.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]


def _get_log_level() -> int:
    """Get the log level from environment variables.

    Checks RESPAWN_DEBUG first (sets DEBUG if present), then RESPAWN_LOG_LEVEL.
    Defaults to INFO if neither is set.

    Returns:
        The logging level as an integer.
    """
    if getenv("RESPAWN_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(getenv("RESPAWN_LOG_LEVEL", "info").upper(), logging.INFO)


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, RESPAWN_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("RESPAWN_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def _file_logger(
    log_path: Path, *, max_bytes: int, backup_count: int
) -> logging.Logger:
    """Return the stdlib logger that owns the handler for ``log_path``.

    There is one logger per file. Creating it again closes the previous
    handler, so repeated factory calls never leave file handles open.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    stdlib_logger = logging.getLogger(f"respawn.file.{handler.baseFilename}")
    for previous in stdlib_logger.handlers:
        previous.close()
    stdlib_logger.handlers = [handler]
    stdlib_logger.propagate = False
    # Level filtering happens in the structlog wrapper
    stdlib_logger.setLevel(logging.DEBUG)
    return stdlib_logger


def _create_logger(
    log_file_path: str = "",
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "text",
    max_bytes: int = 0,
    backup_count: int = 0,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        log_file_path: Path to the log file (opened in append mode). Empty
            writes to stderr.
        log_level: Override log level (uses env vars if not specified).
        log_format: Output format, either "json" or "text".
        max_bytes: Rotate the file once it reaches this size. Zero never
            rotates.
        backup_count: Number of rotated log files to keep.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = log_level if log_level is not None else _get_log_level()

    to_stderr = not log_file_path
    raw_logger: object
    if to_stderr:
        raw_logger = structlog.PrintLoggerFactory(file=sys.stderr)()
    else:
        raw_logger = _file_logger(
            Path(log_file_path), max_bytes=max_bytes, backup_count=backup_count
        )

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Colors only make sense on an interactive terminal
        colors = to_stderr and sys.stderr.isatty()
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def create_cli_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    log_file: str = "",
    max_bytes: int = 0,
    backup_count: int = 0,
    command: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for CLI commands.

    The log level can be overridden by environment variables:
    - RESPAWN_DEBUG: If set, enables DEBUG level logging regardless of config

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file (writes to stderr if empty).
        max_bytes: Log file size that triggers rotation (0 disables it).
        backup_count: Number of rotated log files to keep.
        command: Name of the CLI command for context (bound to all entries).

    Returns:
        A FilteringBoundLogger instance configured for CLI logging.
    """
    effective_level = _log_level_from_string(level, respect_env=True)

    logger = _create_logger(
        log_file,
        log_level=effective_level,
        log_format=log_format,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )

    if command:
        return logger.bind(command=command)
    return logger


def create_process_logger(
    role: Literal["supervisor", "worker"],
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    log_file: str = "",
    max_bytes: int = 0,
    backup_count: int = 0,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for one side of the supervision protocol.

    Every entry is bound with the process role so supervisor and worker lines
    can be told apart when both write to the same terminal or file.

    Args:
        role: Which process the logger belongs to.
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file (writes to stderr if empty).
        max_bytes: Log file size that triggers rotation (0 disables it).
        backup_count: Number of rotated log files to keep.

    Returns:
        A FilteringBoundLogger instance bound with the process role.
    """
    logger = create_cli_logger(
        level=level,
        log_format=log_format,
        log_file=log_file,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    return logger.bind(process=role)
