"""Typed models for compatibility results."""

from __future__ import annotations

from dataclasses import dataclass

FULLY_COMPATIBLE = 100


@dataclass(slots=True, frozen=True)
class CompatibilityResult:
    """Parsed outcome of one archive comparison."""

    jar_name: str
    bin_compatibility: int = 0
    src_compatibility: int = 0
    bin_problem: int = 0
    bin_warning: int = 0
    src_problem: int = 0
    src_warning: int = 0
    report: str = ""

    @property
    def is_compatible(self) -> bool:
        """Return True only when every score is perfect and no issue was counted."""
        return (
            self.bin_compatibility == FULLY_COMPATIBLE
            and self.src_compatibility == FULLY_COMPATIBLE
            and self.bin_problem == 0
            and self.bin_warning == 0
            and self.src_problem == 0
            and self.src_warning == 0
        )

    def to_row(self) -> dict[str, object]:
        """Return the report row using the published column labels."""
        return {
            "jarName": self.jar_name,
            "binCompatibility": self.bin_compatibility,
            "srcCompatibility": self.src_compatibility,
            "binProblem": self.bin_problem,
            "binWarning": self.bin_warning,
            "srcProblem": self.src_problem,
            "srcWarning": self.src_warning,
            "report": self.report,
        }


@dataclass(slots=True, frozen=True)
class ClassifiedResults:
    """Sorted results split into problematic and fully compatible archives."""

    problematic: tuple[CompatibilityResult, ...]
    compatible: tuple[CompatibilityResult, ...]
