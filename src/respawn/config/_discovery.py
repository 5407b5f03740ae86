"""Configuration sources in precedence order.

From highest to lowest: CLI overrides, ``RESPAWN_*`` environment variables,
the project's ``respawn.toml`` and the built-in defaults.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from respawn.utils import get_project_config_file, get_project_root

from ._defaults import DEFAULT_CONFIG
from ._loader import parse_env_vars, read_toml_file

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


class ConfigSourceName(StrEnum):
    """Where a layer of configuration came from."""

    CLI = "cli"
    ENV = "env"
    PROJECT = "project"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """One layer of configuration values.

    ``path`` is only set for the project file. ``exists`` is False when the
    project file is absent or no CLI overrides were given.
    """

    name: ConfigSourceName
    path: Path | None = None
    exists: bool = True
    values: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]


def _project_source(project_root: Path | None) -> ConfigSource:
    path = get_project_config_file(get_project_root(project_root))
    try:
        present = path.is_file()
    except OSError:
        present = False
    if not present:
        return ConfigSource(ConfigSourceName.PROJECT, path=path, exists=False)
    return ConfigSource(ConfigSourceName.PROJECT, path=path, values=read_toml_file(path))


def discover_sources(
    project_root: Path | None = None,
    *,
    include_env: bool = True,
    include_cli: bool = False,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
    environ: Mapping[str, str] | None = None,
) -> list[ConfigSource]:
    """Collect and read every configuration source, highest precedence first.

    Raises:
        ConfigLoadError: If the project file cannot be parsed.
    """
    sources: list[ConfigSource] = []
    if include_cli:
        sources.append(
            ConfigSource(
                ConfigSourceName.CLI,
                exists=bool(cli_overrides),
                values=cli_overrides or {},
            )
        )
    if include_env:
        sources.append(ConfigSource(ConfigSourceName.ENV, values=parse_env_vars(environ)))
    sources.append(_project_source(project_root))
    sources.append(ConfigSource(ConfigSourceName.DEFAULT, values=DEFAULT_CONFIG))
    return sources
