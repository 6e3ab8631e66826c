"""Compatibility result models and aggregation."""

from .aggregator import ResultCollector, classify_results, result_sort_key
from .models import FULLY_COMPATIBLE, ClassifiedResults, CompatibilityResult

__all__ = [
    "ClassifiedResults",
    "CompatibilityResult",
    "FULLY_COMPATIBLE",
    "ResultCollector",
    "classify_results",
    "result_sort_key",
]
