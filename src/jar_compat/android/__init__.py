"""Android build-output filtering and dex conversion."""

from .deploy import DEPLOY_BASE_PATHS, filter_to_deployed_only, is_deployed_artifact
from .dex import convert_dex_to_jar, convert_if_dex, extract_archive, is_dex_archive, merge_archives

__all__ = [
    "DEPLOY_BASE_PATHS",
    "convert_dex_to_jar",
    "convert_if_dex",
    "extract_archive",
    "filter_to_deployed_only",
    "is_deployed_artifact",
    "is_dex_archive",
    "merge_archives",
]
