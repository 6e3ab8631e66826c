"""Filename and directory helpers shared by listing and conversion steps."""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Final

WINDOWS_SEPARATOR_PATTERN: Final[re.Pattern[str]] = re.compile(r"[\\/]+")


def _segments(path: str | Path) -> list[str]:
    """Split a path into non-empty segments, accepting either separator."""
    return [part for part in WINDOWS_SEPARATOR_PATTERN.split(str(path)) if part]


def filename_from_path(path: str | Path) -> str:
    """Return the bare filename of a path, or an empty string for a bare root."""
    parts = _segments(path)
    if not parts:
        return ""
    return parts[-1]


def trailing_segments(path: str | Path, depth: int = 1) -> str:
    """Return the last ``depth`` segments of a path joined with '/'."""
    if depth < 1:
        return ""
    parts = _segments(path)
    return "/".join(parts[-depth:])


def strip_suffix(filename: str, suffix: str) -> str:
    """Drop the last occurrence of ``suffix`` and everything after it."""
    position = filename.rfind(suffix)
    if position < 0:
        return filename
    return filename[:position]


def ensure_directory(path: Path) -> Path:
    """Create a directory tree if it is missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def cleanup_directory(path: Path) -> None:
    """Recursively remove a directory tree; missing trees are ignored."""
    if not path.exists():
        return
    shutil.rmtree(path)
