"""Archive listing and old/new matching."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from jar_compat.analysis.models import CommonFile, MatchResult
from jar_compat.paths import filename_from_path

DEFAULT_ARCHIVE_PATTERN = r"\.jar$"


def list_matching_files(root: Path, pattern: str = DEFAULT_ARCHIVE_PATTERN) -> list[str]:
    """Return regular files under ``root`` whose path matches ``pattern``, sorted."""
    compiled = re.compile(pattern)
    matches: list[str] = []
    for current_dir, dir_names, file_names in os.walk(root):
        dir_names.sort()
        for file_name in sorted(file_names):
            full_path = os.path.join(current_dir, file_name)
            if not compiled.search(full_path):
                continue
            if not os.path.isfile(full_path):
                continue
            matches.append(full_path)
    return matches


def index_by_filename(paths: Iterable[str]) -> dict[str, str]:
    """Map bare filename to full path; later duplicates replace earlier ones."""
    result: dict[str, str] = {}
    for path in paths:
        result[filename_from_path(path)] = path
    return result


def classify(old_files: Mapping[str, str], new_files: Mapping[str, str]) -> MatchResult:
    """Split two filename mappings into common, missing and new archives."""
    common: list[CommonFile] = []
    added: list[str] = []
    for name, new_path in new_files.items():
        old_path = old_files.get(name)
        if old_path is None:
            added.append(name)
            continue
        common.append(CommonFile(target_file=name, old_path=old_path, new_path=new_path))

    missing = [name for name in old_files if name not in new_files]
    return MatchResult(
        common_files=tuple(common),
        missing_files=tuple(missing),
        new_files=tuple(added),
    )
