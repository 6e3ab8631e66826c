"""Per-archive API compatibility check run through the external checker."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Final

from jar_compat.android import convert_if_dex
from jar_compat.config import Options
from jar_compat.paths import filename_from_path, strip_suffix
from jar_compat.process import CommandError, iter_command_lines
from jar_compat.results import CompatibilityResult

logger = logging.getLogger(__name__)

ResultSink = Callable[[CompatibilityResult], None]

BIN_COMPAT_PREFIX: Final[str] = "Binary compatibility: "
SRC_COMPAT_PREFIX: Final[str] = "Source compatibility: "
BIN_TOTALS_PREFIX: Final[str] = "Total binary compatibility problems: "
SRC_TOTALS_PREFIX: Final[str] = "Total source compatibility problems: "
WARNINGS_LABEL: Final[str] = ", warnings: "

LEADING_INT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*([+-]?\d+)")

RESULT_FIELDS = (
    "bin_compatibility",
    "src_compatibility",
    "bin_problem",
    "bin_warning",
    "src_problem",
    "src_warning",
)


def leading_int(text: str) -> int:
    """Parse the integer at the start of ``text``; 0 when there is none."""
    match = LEADING_INT_PATTERN.match(text)
    if match is None:
        return 0
    return int(match.group(1))


def _parse_totals(rest: str) -> tuple[int, int] | None:
    if "," not in rest:
        return None
    position = rest.find(WARNINGS_LABEL)
    if position < 0:
        return None
    return leading_int(rest), leading_int(rest[position + len(WARNINGS_LABEL) :])


def parse_checker_line(fields: dict[str, int], line: str) -> None:
    """Update ``fields`` from one checker output line; unknown lines are ignored."""
    if line.startswith(BIN_COMPAT_PREFIX):
        fields["bin_compatibility"] = leading_int(line[len(BIN_COMPAT_PREFIX) :])
    elif line.startswith(SRC_COMPAT_PREFIX):
        fields["src_compatibility"] = leading_int(line[len(SRC_COMPAT_PREFIX) :])
    elif line.startswith(BIN_TOTALS_PREFIX):
        totals = _parse_totals(line[len(BIN_TOTALS_PREFIX) :])
        if totals is not None:
            fields["bin_problem"], fields["bin_warning"] = totals
    elif line.startswith(SRC_TOTALS_PREFIX):
        totals = _parse_totals(line[len(SRC_TOTALS_PREFIX) :])
        if totals is not None:
            fields["src_problem"], fields["src_warning"] = totals


def parse_checker_output(jar_name: str, lines: Iterable[str], report: str = "") -> CompatibilityResult:
    """Build a result from a complete checker transcript."""
    fields = dict.fromkeys(RESULT_FIELDS, 0)
    for line in lines:
        parse_checker_line(fields, line)
    return CompatibilityResult(jar_name=jar_name, report=report, **fields)


def report_location(
    options: Options, jar_name: str, old_label: str, new_label: str
) -> str:
    """Return the path or URL of the checker's HTML report for one archive."""
    base = options.report_base or str(options.output_dir)
    return f"{base}/compat_reports/{jar_name}/{old_label}_to_{new_label}/compat_report.html"


def build_checker_command(
    options: Options,
    jar_name: str,
    old_path: str,
    new_path: str,
    old_label: str,
    new_label: str,
) -> list[str]:
    """Return the argument vector for one checker invocation.

    The checker runs inside the output directory, so archive paths are made
    absolute against the current directory first.
    """
    return [
        options.tools.compliance_checker,
        "-old",
        os.path.abspath(old_path),
        "-new",
        os.path.abspath(new_path),
        "-lib",
        jar_name,
        "-v1",
        old_label,
        "-v2",
        new_label,
    ]


class CompatibilityCheckTask:
    """Compares one archive between the old and new build."""

    def __init__(
        self,
        jar_name: str,
        old_path: str,
        new_path: str,
        old_label: str,
        new_label: str,
        options: Options,
        sink: ResultSink | None,
    ) -> None:
        self._jar_name = jar_name
        self._old_path = old_path
        self._new_path = new_path
        self._old_label = old_label
        self._new_label = new_label
        self._options = options
        self._sink = sink

    @property
    def name(self) -> str:
        return f"compat-check {self._jar_name}"

    def work_dir(self, archive_path: str, side: str) -> Path:
        """Return the per-archive, per-side temporary directory."""
        stem = strip_suffix(filename_from_path(archive_path), ".jar")
        return self._options.temp_dir / stem / side

    def _prepare(self, archive_path: str, side: str) -> str:
        try:
            return convert_if_dex(
                archive_path, self.work_dir(archive_path, side), self._options.tools
            )
        except (CommandError, OSError) as error:
            logger.warning("dex conversion skipped for %s (%s): %s", self._jar_name, side, error)
            return archive_path

    def _run_checker(self, old_path: str, new_path: str) -> dict[str, int]:
        fields = dict.fromkeys(RESULT_FIELDS, 0)
        command = build_checker_command(
            self._options,
            self._jar_name,
            old_path,
            new_path,
            self._old_label,
            self._new_label,
        )
        try:
            for line in iter_command_lines(command, cwd=self._options.output_dir):
                if self._options.verbose:
                    logger.debug("%s: %s", self._jar_name, line)
                parse_checker_line(fields, line)
        except OSError as error:
            logger.warning("compliance checker failed for %s: %s", self._jar_name, error)
        return fields

    def execute(self) -> None:
        old_path = self._prepare(self._old_path, "old")
        new_path = self._prepare(self._new_path, "new")
        fields = self._run_checker(old_path, new_path)
        result = CompatibilityResult(
            jar_name=self._jar_name,
            report=report_location(
                self._options, self._jar_name, self._old_label, self._new_label
            ),
            **fields,
        )
        if self._sink is not None:
            self._sink(result)
