"""Detection and conversion of Android dex archives into plain jars."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from jar_compat.analysis import list_matching_files
from jar_compat.config import ToolsConfig
from jar_compat.paths import ensure_directory, filename_from_path, strip_suffix
from jar_compat.process import run_command

logger = logging.getLogger(__name__)

DEX_SUFFIX = ".dex"
MERGE_STAGING_DIR = "_tmp"


def is_dex_archive(archive_path: str, tools: ToolsConfig) -> bool:
    """Return whether the archive listing contains a ``.dex`` entry.

    Raises ``CommandError`` if the listing tool itself fails.
    """
    for line in run_command([tools.unzip, "-l", archive_path]):
        if line.rstrip().endswith(DEX_SUFFIX):
            return True
    return False


def extract_archive(
    archive_path: str,
    output_dir: Path,
    tools: ToolsConfig,
    member_pattern: str | None = None,
) -> None:
    """Extract an archive (optionally only matching members) into ``output_dir``."""
    args = [tools.unzip, "-o", "-qq", archive_path]
    if member_pattern is not None:
        args.append(member_pattern)
    args.extend(["-d", str(output_dir)])
    # unzip exits non-zero when the member pattern matches nothing
    run_command(args, check=False)


def convert_dex_to_jar(dex_path: str, output_dir: Path, tools: ToolsConfig) -> str:
    """Convert one dex file into ``<output_dir>/<stem>.jar`` and return its path."""
    output_dir = output_dir.absolute()
    stem = strip_suffix(filename_from_path(dex_path), DEX_SUFFIX)
    output_path = output_dir / f"{stem}.jar"
    # the converter runs inside output_dir, so both paths must be absolute
    run_command(
        [tools.dex2jar, str(Path(dex_path).absolute()), "-o", str(output_path), "--force"],
        cwd=output_dir,
    )
    return str(output_path)


def merge_archives(
    archive_paths: list[str],
    output_path: Path,
    work_dir: Path,
    tools: ToolsConfig,
) -> str:
    """Re-pack the contents of several archives into a single archive."""
    staging = ensure_directory(work_dir / MERGE_STAGING_DIR)
    for archive_path in archive_paths:
        extract_archive(archive_path, staging, tools)
    if output_path.exists():
        output_path.unlink()
    entries = sorted(os.listdir(staging))
    run_command(
        [tools.zip, "-r", "-o", "-q", str(output_path.absolute()), *entries],
        cwd=staging,
    )
    return str(output_path)


def convert_if_dex(archive_path: str, work_dir: Path, tools: ToolsConfig) -> str:
    """Return a plain-jar path for the archive, converting dex content if needed.

    Large apps are split over several dex files because of the per-dex symbol
    ceiling; their converted jars are merged so exactly one path is returned.
    """
    if not is_dex_archive(archive_path, tools):
        return archive_path

    work_dir = work_dir.absolute()
    ensure_directory(work_dir)
    extract_archive(archive_path, work_dir, tools, member_pattern=f"*{DEX_SUFFIX}")
    dex_files = list_matching_files(work_dir, r"\.dex$")
    converted = sorted(convert_dex_to_jar(dex_file, work_dir, tools) for dex_file in dex_files)
    logger.debug("converted %d dex file(s) from %s", len(converted), archive_path)

    if not converted:
        return archive_path
    if len(converted) == 1:
        return converted[0]
    merged_path = work_dir / filename_from_path(archive_path)
    return merge_archives(converted, merged_path, work_dir, tools)
