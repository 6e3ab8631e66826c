"""Report section layout for missing, new, problematic and compatible archives."""

from __future__ import annotations

from collections.abc import Sequence

from jar_compat.analysis import MatchResult
from jar_compat.config import Options
from jar_compat.reporting.styles import Reporter, Row, rows_from_names
from jar_compat.results import ClassifiedResults

EMPTY_SECTION_TEXT = "nothing"

MISSING_TITLE = "missing files"
NEW_TITLE = "new files"
PROBLEM_TITLE = "Potential problematic Jars"
COMPATIBLE_TITLE = "100% compatible Jars"


def emit_section(
    reporter: Reporter,
    title: str,
    rows: Sequence[Row],
    *,
    dont_report_if_no_issue: bool,
    trailing_blank: bool = True,
) -> bool:
    """Write one section; returns whether anything was written."""
    if dont_report_if_no_issue and not rows:
        return False
    reporter.title_out(title)
    if rows:
        reporter.report(rows)
    else:
        reporter.write_line(EMPTY_SECTION_TEXT)
    if trailing_blank:
        reporter.write_line()
    return True


def emit_listing_sections(reporter: Reporter, match: MatchResult, options: Options) -> None:
    """Write the missing-files and new-files sections."""
    if options.section_enabled("missing"):
        emit_section(
            reporter,
            MISSING_TITLE,
            rows_from_names(match.missing_files),
            dont_report_if_no_issue=options.dont_report_if_no_issue,
        )
    if options.section_enabled("new"):
        emit_section(
            reporter,
            NEW_TITLE,
            rows_from_names(match.new_files),
            dont_report_if_no_issue=options.dont_report_if_no_issue,
        )


def emit_result_sections(
    reporter: Reporter, classified: ClassifiedResults, options: Options
) -> None:
    """Write the problematic and fully compatible sections.

    The compatible section lists no issues, so it is omitted entirely when
    only issues are requested.
    """
    if options.section_enabled("problem"):
        emit_section(
            reporter,
            PROBLEM_TITLE,
            [result.to_row() for result in classified.problematic],
            dont_report_if_no_issue=options.dont_report_if_no_issue,
        )
    if options.section_enabled("compatible") and not options.dont_report_if_no_issue:
        emit_section(
            reporter,
            COMPATIBLE_TITLE,
            [result.to_row() for result in classified.compatible],
            dont_report_if_no_issue=False,
            trailing_blank=False,
        )
