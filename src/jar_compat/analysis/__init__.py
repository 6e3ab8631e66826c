"""Archive listing and matching package."""

from .matcher import DEFAULT_ARCHIVE_PATTERN, classify, index_by_filename, list_matching_files
from .models import CommonFile, MatchResult

__all__ = [
    "CommonFile",
    "DEFAULT_ARCHIVE_PATTERN",
    "MatchResult",
    "classify",
    "index_by_filename",
    "list_matching_files",
]
