"""Thread-safe result accumulation and classification."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from jar_compat.results.models import ClassifiedResults, CompatibilityResult


class ResultCollector:
    """Append-only result collection shared by concurrently running tasks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: list[CompatibilityResult] = []

    def add_result(self, result: CompatibilityResult) -> None:
        """Append one result; safe to call from any worker thread."""
        with self._lock:
            self._results.append(result)

    def snapshot(self) -> tuple[CompatibilityResult, ...]:
        """Return the results collected so far in arrival order."""
        with self._lock:
            return tuple(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


def result_sort_key(result: CompatibilityResult) -> str:
    return result.jar_name.lower()


def classify_results(results: Iterable[CompatibilityResult]) -> ClassifiedResults:
    """Sort by jar name (case-insensitive) and partition in one stable pass."""
    problematic: list[CompatibilityResult] = []
    compatible: list[CompatibilityResult] = []
    for result in sorted(results, key=result_sort_key):
        if result.is_compatible:
            compatible.append(result)
        else:
            problematic.append(result)
    return ClassifiedResults(problematic=tuple(problematic), compatible=tuple(compatible))
