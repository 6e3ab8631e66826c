"""Typed models for archive listing analysis."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class CommonFile:
    """Archive present in both builds."""

    target_file: str
    old_path: str
    new_path: str


@dataclass(slots=True, frozen=True)
class MatchResult:
    """Classification of two archive listings."""

    common_files: tuple[CommonFile, ...]
    missing_files: tuple[str, ...]
    new_files: tuple[str, ...]
