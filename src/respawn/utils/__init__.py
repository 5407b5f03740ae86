"""Shared utilities for respawn."""

from ._errors import first_leaf
from ._ignore import (
    DEFAULT_IGNORE_PATTERNS,
    IgnoreConfig,
    collect_patterns,
    create_pathspec,
    matches_any,
    relative_to_root,
)
from ._logging import create_cli_logger, create_process_logger
from ._paths import (
    CONFIG_FILE_NAME,
    get_admin_build_dir,
    get_project_config_file,
    get_project_root,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_IGNORE_PATTERNS",
    "IgnoreConfig",
    "collect_patterns",
    "create_cli_logger",
    "create_pathspec",
    "create_process_logger",
    "first_leaf",
    "get_admin_build_dir",
    "get_project_config_file",
    "get_project_root",
    "matches_any",
    "relative_to_root",
]
