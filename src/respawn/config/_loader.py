# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Reading ``respawn.toml``, parsing ``RESPAWN_*`` variables and layering them."""

import os
import tomllib
from typing import TYPE_CHECKING, Any

import orjson

from respawn.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

ENV_PREFIX = "RESPAWN_"

# Process-level switches that share the prefix but are not config keys
_RESERVED_ENV_VARS = frozenset(
    {"RESPAWN_DEBUG", "RESPAWN_LOG_LEVEL", "RESPAWN_STRICT_CONFIG"}
)


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse a TOML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.colno) from e


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Return a new dictionary with ``override`` layered over ``base``.

    Tables merge key by key. Anything else, lists included, is replaced
    whole by the override.
    """
    result = {key: copy_value(value) for key, value in base.items()}
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy_value(value)
    return result


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    """Copy nested dicts and lists; other values are shared."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def parse_env_vars(
    environ: Mapping[str, str] | None = None,
    *,
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Build a nested config dictionary from prefixed environment variables.

    A double underscore separates table levels, so
    ``RESPAWN_SERVER__ADMIN__SERVE_ADMIN_PANEL=false`` sets
    ``server.admin.serve_admin_panel``.
    """
    env = os.environ if environ is None else environ
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key, value in env.items():
        if not key.startswith(prefix) or key in _RESERVED_ENV_VARS:
            continue
        config_key = key[len(prefix) :]
        if config_key:
            set_nested_key(
                result, config_key.replace("__", ".").lower(), parse_string_value(value)
            )

    return result


def parse_string_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Infer the type of an environment value.

    Examples:
        >>> parse_string_value("true")
        True
        >>> parse_string_value("1337")
        1337
        >>> parse_string_value("2.5")
        2.5
        >>> parse_string_value('["npm", "run"]')
        ['npm', 'run']
        >>> parse_string_value("localhost")
        'localhost'
    """
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        pass

    if value[:1] in ("[", "{"):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            pass

    return value


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Set ``value`` at a dotted path, replacing non-table values on the way."""
    *parents, leaf = key_path.split(".")
    current = d
    for part in parents:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[leaf] = value
