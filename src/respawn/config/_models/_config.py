# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access.

This module provides the main Config class that serves as the primary
interface for accessing respawn configuration values.
"""

from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from respawn.config._defaults import DEFAULT_CONFIG
from respawn.config._discovery import ConfigSource, ConfigSourceName, discover_sources
from respawn.config._loader import copy_value, deep_merge, read_toml_file
from respawn.config._models._admin import AdminConfig
from respawn.config._models._develop import DevelopConfig
from respawn.config._models._logging import LoggingConfig
from respawn.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def _parse_section(
    model: type[M],
    data: dict[str, Any],
    section: str,
    *,
    source: str | None = None,
) -> M:
    """Validate one configuration section into its model.

    Args:
        model: The pydantic model for the section.
        data: The merged configuration dictionary.
        section: Dotted path of the section (e.g. "server.admin").
        source: Where the values came from, for error reporting.

    Returns:
        The validated section.

    Raises:
        ConfigValidationError: On the first invalid field in the section.
    """
    values: Any = data
    for part in section.split("."):
        values = values.get(part, {}) if isinstance(values, dict) else {}

    if not isinstance(values, dict):
        msg = f"Configuration section [{section}] must be a table"
        raise ConfigValidationError(
            msg, key=section, value=values, expected="table", source=source
        )

    try:
        return model.model_validate(values)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join([section, *(str(loc) for loc in error["loc"])])
        msg = f"Invalid value for {key}: {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=error["type"],
            source=source,
        ) from e


class Config(BaseModel):
    """Configuration container with typed access.

    Immutable, type-safe access to respawn configuration. Use the factory
    methods to create instances rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _admin: AdminConfig = PrivateAttr(default_factory=AdminConfig)
    _develop: DevelopConfig = PrivateAttr(default_factory=DevelopConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _sources: tuple[ConfigSource, ...] = (),
        _logging: LoggingConfig | None = None,
        _admin: AdminConfig | None = None,
        _develop: DevelopConfig | None = None,
    ) -> None:
        """Initialize configuration container.

        This constructor is intended for internal use. Use factory methods
        like from_dict(), from_file(), or load() to create Config instances.
        """
        super().__init__()
        self._data = _data if _data is not None else {}
        self._sources = _sources
        self._logging = _logging if _logging is not None else LoggingConfig()
        self._admin = _admin if _admin is not None else AdminConfig()
        self._develop = _develop if _develop is not None else DevelopConfig()

    @classmethod
    def _build(
        cls,
        merged: dict[str, Any],
        sources: tuple[ConfigSource, ...],
        *,
        source: str | None = None,
    ) -> Self:
        return cls(
            _data=merged,
            _sources=sources,
            _logging=_parse_section(LoggingConfig, merged, "logging", source=source),
            _admin=_parse_section(AdminConfig, merged, "server.admin", source=source),
            _develop=_parse_section(DevelopConfig, merged, "develop", source=source),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a section fails validation.
        """
        return cls._build(deep_merge(DEFAULT_CONFIG, data), ())

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to the TOML config file.
            overrides: Values applied on top of the file (CLI flags).

        Returns:
            Configuration object from the defaults, the file and overrides.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        data = read_toml_file(path)
        sources = [ConfigSource(ConfigSourceName.PROJECT, path=path, values=data)]
        merged = deep_merge(DEFAULT_CONFIG, data)
        if overrides:
            sources.insert(0, ConfigSource(ConfigSourceName.CLI, values=overrides))
            merged = deep_merge(merged, overrides)

        return cls._build(merged, tuple(sources), source=str(path))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        include_cli: bool = False,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged in precedence order
        (defaults -> project -> env -> cli).

        Args:
            project_root: Project root directory. Defaults to the current
                working directory.
            include_env: Include environment variables as a source.
            include_cli: Include CLI overrides.
            cli_overrides: Dict of CLI argument overrides. Only used if
                include_cli is True.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If the project file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        sources = discover_sources(
            project_root=project_root,
            include_env=include_env,
            include_cli=include_cli,
            cli_overrides=cli_overrides,
        )

        merged: dict[str, Any] = {}
        for source in reversed(sources):
            merged = deep_merge(merged, source.values)

        return cls._build(merged, tuple(sources))

    @property
    def sources(self) -> list[ConfigSource]:
        """Return the sources that contributed to this configuration."""
        return list(self._sources)

    @property
    def logging(self) -> LoggingConfig:
        """Return the logging configuration section."""
        return self._logging

    @property
    def admin(self) -> AdminConfig:
        """Return the ``[server.admin]`` configuration section."""
        return self._admin

    @property
    def develop(self) -> DevelopConfig:
        """Return the develop command configuration section."""
        return self._develop

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, default: T) -> T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("develop.port")
            1337
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data

        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the merged configuration dictionary."""
        return copy_value(self._data)
