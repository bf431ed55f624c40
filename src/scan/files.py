"""File scanning utilities for coverage data directories."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


def _matches_any(rel_path_str: str, name: str, patterns: list[str]) -> bool:
    return any(fnmatch(name, pat) or fnmatch(rel_path_str, pat) for pat in patterns)


def _should_include_file(
    path: Path,
    directory: Path,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if include_patterns and not _matches_any(rel_path_str, path.name, include_patterns):
        return False

    has_excluded_match = exclude_patterns and _matches_any(
        rel_path_str, path.name, exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def find_data_files(
    directory: Path,
    *,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
) -> Iterator[Path]:
    """Find coverage data files below a directory.

    Args:
        directory: Directory to search
        include_patterns: Optional list of fnmatch patterns, matched against
            the file name and the relative path; if provided, files must
            match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded

    Yields:
        Path objects for each data file found, sorted lexicographically
        by relative path for deterministic ordering. Nothing is yielded
        when the directory does not exist.
    """
    if not directory.is_dir():
        return

    matched_files = [
        path
        for path in directory.rglob("*")
        if _should_include_file(
            path,
            directory,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


__all__ = ["_should_include_file", "find_data_files"]
