"""Gitignore-style pattern matching for the file watcher.

This module builds the Ignore Rule Set applied to every candidate path before
a change event is emitted: built-in defaults first, then caller-supplied
patterns, compiled into a single PathSpec.
"""

from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pathspec import PathSpec


DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".*",
    "tmp",
    "**/admin",
    "**/admin/**",
    "extensions/**/admin",
    "extensions/**/admin/**",
    "**/documentation",
    "**/documentation/**",
    "**/node_modules",
    "**/node_modules/**",
    "**/plugins.json",
    "**/index.html",
    "**/public",
    "**/public/**",
    "**/*.db*",
    "**/exports/**",
)
"""Default patterns excluded from watching.

Covers dotfiles, scratch directories, the admin front-end and its output
(also inside extensions), generated documentation, dependencies, the plugin
manifest, the admin entry HTML, public static assets, database files and
exports. Order matters only for readability; any match excludes a path.
"""


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    """Configuration for ignore pattern collection.

    Attributes:
        include_defaults: Whether to include DEFAULT_IGNORE_PATTERNS.
        extra_patterns: Additional patterns appended after the defaults.
    """

    include_defaults: bool = True
    extra_patterns: tuple[str, ...] = field(default_factory=tuple)


def collect_patterns(config: IgnoreConfig | None = None) -> list[str]:
    """Collect ignore patterns from all configured sources.

    Args:
        config: Configuration for pattern sources. Uses defaults if None.

    Returns:
        List of all collected patterns, deduplicated while preserving order.
        Blank patterns and comments are dropped.
    """
    if config is None:
        config = IgnoreConfig()

    patterns: list[str] = []
    seen: set[str] = set()

    def add_patterns(new_patterns: Iterable[str]) -> None:
        for pattern in new_patterns:
            stripped = pattern.strip()
            if not stripped or stripped.startswith("#") or stripped in seen:
                continue
            seen.add(stripped)
            patterns.append(stripped)

    if config.include_defaults:
        add_patterns(DEFAULT_IGNORE_PATTERNS)

    add_patterns(config.extra_patterns)

    return patterns


def create_pathspec(config: IgnoreConfig | None = None) -> PathSpec:
    """Create a PathSpec from collected ignore patterns.

    Args:
        config: Configuration for pattern sources. Uses defaults if None.

    Returns:
        A PathSpec instance configured with gitignore-style pattern matching.
    """
    from pathspec import PathSpec as PathSpecClass  # noqa: PLC0415
    from pathspec.patterns.gitwildmatch import GitWildMatchPattern  # noqa: PLC0415

    return PathSpecClass.from_lines(GitWildMatchPattern, collect_patterns(config))


def matches_any(spec: PathSpec, path: str | PurePath) -> bool:
    """Check whether a path, or any of its parent directories, is ignored.

    Parents are checked so that a pattern naming a directory (``tmp``,
    ``**/public``) also excludes everything beneath it.

    Args:
        spec: The compiled ignore rules.
        path: A path relative to the watched root.

    Returns:
        True if the path should be ignored.
    """
    rel = PurePath(path)
    if spec.match_file(rel.as_posix()):
        return True
    return any(
        spec.match_file(f"{parent.as_posix()}/")
        for parent in rel.parents
        if parent != PurePath(".")
    )


def relative_to_root(root: Path, path: str | Path) -> PurePath:
    """Express a watched path relative to the watched root.

    Args:
        root: The watched root directory.
        path: An absolute (or already relative) path reported by the watcher.

    Returns:
        The relative path, or the path unchanged if it lies outside root.
    """
    candidate = Path(path)
    try:
        return candidate.relative_to(root)
    except ValueError:
        return candidate
