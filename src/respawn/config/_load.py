import os
import sys
from typing import TYPE_CHECKING

from respawn.exceptions import ConfigError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def _fail_or_warn(error_msg: str, *, strict: bool) -> tuple[Config, str]:
    if strict:
        print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: {error_msg}", file=sys.stderr)  # noqa: T201
    return Config.from_dict({}), error_msg


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Attempts to load configuration and handles errors based on the
    RESPAWN_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and return the default config
    - If "1": fail fast with sys.exit(1)

    When config_path is provided, the file must exist (explicit user request).
    CLI overrides are applied on top of an explicit file as well.

    Args:
        config_path: Explicit path to config file (--config flag).
        project_root: Project root directory override (--project-root flag).
        cli_overrides: CLI argument overrides to pass to Config.load().

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure (non-strict mode), returns the default Config with the
        error message.
    """
    strict_mode = os.environ.get("RESPAWN_STRICT_CONFIG", "0") == "1"

    try:
        if config_path is not None:
            if not config_path.exists():
                print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
                sys.exit(1)
            return Config.from_file(config_path, overrides=cli_overrides), None

        config = Config.load(
            project_root=project_root,
            include_env=True,
            include_cli=cli_overrides is not None,
            cli_overrides=cli_overrides,
        )
    except ConfigError as e:
        return _fail_or_warn(f"Failed to load config: {e}", strict=strict_mode)
    except OSError as e:
        return _fail_or_warn(f"Failed to load config: {e}", strict=strict_mode)
    else:
        return config, None
