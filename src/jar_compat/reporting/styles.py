"""Format strategies and the reporter that writes rows through them."""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, TextIO

from jar_compat.paths import filename_from_path

Row = Mapping[str, object] | Sequence[object] | object

URL_PREFIXES = ("http://", "https://")


def _row_cells(row: Row, keys: bool, values: bool) -> list[object] | None:
    """Flatten a row into cells; ``None`` for scalar rows."""
    if isinstance(row, Mapping):
        cells: list[object] = []
        for key, value in row.items():
            if keys:
                cells.append(key)
            if values:
                cells.append(value)
        return cells
    if isinstance(row, Sequence) and not isinstance(row, str):
        return list(row) if values else []
    return None


class ReportStyle(Protocol):
    """Rendering rules for one output format."""

    name: str

    def title_lines(self, title: str) -> list[str]: ...

    def row_lines(
        self, row: Row, *, keys: bool = False, values: bool = True, first_line: bool = False
    ) -> list[str]: ...


@dataclass(slots=True, frozen=True)
class PlainStyle:
    """Tab-separated text with the title printed as is."""

    name: str = "plain"

    def title_lines(self, title: str) -> list[str]:
        return [title]

    def row_lines(
        self, row: Row, *, keys: bool = False, values: bool = True, first_line: bool = False
    ) -> list[str]:
        cells = _row_cells(row, keys, values)
        if cells is None:
            return [str(row)]
        return ["\t".join(str(cell) for cell in cells)]


def markdown_cell(value: object) -> str:
    """Render a table cell, turning URLs into links labelled by their basename."""
    if isinstance(value, str) and value.startswith(URL_PREFIXES):
        return f"[{filename_from_path(value)}]({value})"
    return str(value)


@dataclass(slots=True, frozen=True)
class MarkdownStyle:
    """Markdown headings and pipe tables."""

    name: str = "markdown"

    def title_lines(self, title: str) -> list[str]:
        return [f"# {title}", ""]

    def row_lines(
        self, row: Row, *, keys: bool = False, values: bool = True, first_line: bool = False
    ) -> list[str]:
        cells = _row_cells(row, keys, values)
        if cells is None:
            return [f"| {markdown_cell(row)} |"]
        line = "|" + "".join(f" {markdown_cell(cell)} |" for cell in cells)
        lines = [line]
        if first_line and cells:
            lines.append("|" + " :--- |" * len(cells))
        return lines


@dataclass(slots=True, frozen=True)
class CsvStyle:
    """Comma-separated rows; section titles collapse to a blank line."""

    name: str = "csv"

    def title_lines(self, title: str) -> list[str]:
        return [""]

    def row_lines(
        self, row: Row, *, keys: bool = False, values: bool = True, first_line: bool = False
    ) -> list[str]:
        cells = _row_cells(row, keys, values)
        if cells is None:
            return [str(row)]
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerow(cells)
        return [buffer.getvalue().rstrip("\n")]


REPORT_STYLES: dict[str, ReportStyle] = {
    "plain": PlainStyle(),
    "ruby": PlainStyle(),
    "markdown": MarkdownStyle(),
    "csv": CsvStyle(),
}


class Reporter:
    """Writes titles and row collections to a stream using one style."""

    def __init__(self, style: ReportStyle, out: TextIO) -> None:
        self._style = style
        self._out = out

    @property
    def style(self) -> ReportStyle:
        return self._style

    def write_line(self, line: str = "") -> None:
        self._out.write(f"{line}\n")

    def title_out(self, title: str) -> None:
        for line in self._style.title_lines(title):
            self.write_line(line)

    def report(self, rows: Sequence[Row]) -> None:
        """Render rows; a mapping first row also emits a header of its keys."""
        if not rows:
            return
        first = rows[0]
        if isinstance(first, Mapping):
            for line in self._style.row_lines(first, keys=True, values=False, first_line=True):
                self.write_line(line)
        for row in rows:
            for line in self._style.row_lines(row):
                self.write_line(line)


def build_reporter(report_format: str, out: TextIO) -> Reporter:
    """Return a reporter for a configured format name."""
    style = REPORT_STYLES.get(report_format.lower())
    if style is None:
        raise ValueError(f"Unsupported report format: {report_format}")
    return Reporter(style=style, out=out)


def rows_from_names(names: Sequence[str], key: str = "jarName") -> list[dict[str, object]]:
    """Wrap bare names as single-column rows."""
    return [{key: name} for name in names]
