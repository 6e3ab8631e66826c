"""Multi-format report rendering."""

from .sections import (
    COMPATIBLE_TITLE,
    EMPTY_SECTION_TEXT,
    MISSING_TITLE,
    NEW_TITLE,
    PROBLEM_TITLE,
    emit_listing_sections,
    emit_result_sections,
    emit_section,
)
from .styles import (
    REPORT_STYLES,
    CsvStyle,
    MarkdownStyle,
    PlainStyle,
    Reporter,
    ReportStyle,
    build_reporter,
    markdown_cell,
    rows_from_names,
)

__all__ = [
    "COMPATIBLE_TITLE",
    "CsvStyle",
    "EMPTY_SECTION_TEXT",
    "MISSING_TITLE",
    "MarkdownStyle",
    "NEW_TITLE",
    "PROBLEM_TITLE",
    "PlainStyle",
    "REPORT_STYLES",
    "ReportStyle",
    "Reporter",
    "build_reporter",
    "emit_listing_sections",
    "emit_result_sections",
    "emit_section",
    "markdown_cell",
    "rows_from_names",
]
