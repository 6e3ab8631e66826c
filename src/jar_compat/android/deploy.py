"""Restrict Android build output listings to deployed partitions."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final

from jar_compat.paths import filename_from_path

DEPLOY_BASE_PATHS = (
    "system/",
    "system_ext/",
    "product/",
    "oem/",
    "vendor/",
    "odm/",
    "apex/",
)

# out/target/product/<device>/ is the build output root, not a partition
PRODUCT_OUT_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?:^|/)target/product/[^/]+/")


def deployment_relative_path(path: str) -> str:
    """Return the part of ``path`` below the device product-out directory."""
    normalized = path.replace("\\", "/")
    matches = list(PRODUCT_OUT_PATTERN.finditer(normalized))
    if not matches:
        return normalized
    return normalized[matches[-1].end() :]


def is_deployed_artifact(path: str) -> bool:
    """Return whether the path lies under a known partition prefix."""
    relative = deployment_relative_path(path)
    for base_path in DEPLOY_BASE_PATHS:
        if base_path in relative:
            return True
    return False


def filter_to_deployed_only(files: Mapping[str, str]) -> dict[str, str]:
    """Keep only entries whose path is under a deployed partition."""
    result: dict[str, str] = {}
    for path in files.values():
        if is_deployed_artifact(path):
            result[filename_from_path(path)] = path
    return result
