from pathlib import Path

CONFIG_FILE_NAME = "respawn.toml"


def get_project_root(start: Path | None = None) -> Path:
    """Get the project root directory.

    The project root is the directory the developer runs ``respawn develop``
    in, unless overridden with ``--project-root``.
    """
    return (start or Path.cwd()).resolve()


def get_project_config_file(project_root: Path) -> Path:
    """Get the path to the project config file (respawn.toml)."""
    return project_root / CONFIG_FILE_NAME


def get_admin_build_dir(project_root: Path, build_dir: str) -> Path:
    """Get the path to the pre-built admin bundle directory.

    Args:
        project_root: The project root directory.
        build_dir: Build directory name or path, relative to the root.

    Returns:
        Path to the admin build directory (may not exist yet).
    """
    return project_root / build_dir
