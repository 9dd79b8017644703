"""Line-oriented CSV parsing for bulk roster templates.

The templates we hand out carry ``#`` comment lines (field rules, examples)
and operators routinely leave blank lines behind, so both are dropped before
the header is read. Quoting is deliberately minimal: a double quote toggles
"inside quotes" and is itself stripped; there is no escaped-quote support.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from domain.models.bulk_import import ImportRow

DELIMITER = ","
QUOTE = '"'
COMMENT_PREFIX = "#"


@dataclass
class CsvTable:
    headers: List[str] = field(default_factory=list)
    rows: List[ImportRow] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def split_line(line: str, delimiter: str = DELIMITER) -> List[str]:
    """Split one line, keeping delimiters that sit inside double quotes."""
    values: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(char)
    values.append("".join(current))
    return values


def significant_lines(lines: Iterable[str]) -> List[str]:
    """Drop blank lines and template comments."""
    kept: List[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        kept.append(line)
    return kept


def parse_lines(lines: Iterable[str]) -> CsvTable:
    lines = significant_lines(lines)
    if len(lines) < 2:
        return CsvTable()

    headers = [h.strip() for h in lines[0].split(DELIMITER)]
    rows: List[ImportRow] = []
    for line in lines[1:]:
        values = split_line(line)
        # Rows with the wrong field count are dropped, not reported.
        if len(values) != len(headers):
            continue
        rows.append(
            ImportRow(
                row_number=len(rows) + 2,
                values={h: v.strip() for h, v in zip(headers, values)},
            )
        )
    return CsvTable(headers=headers, rows=rows)


def parse_csv(content: str) -> CsvTable:
    """Parse raw CSV text into a header row and numbered data rows.

    Returns an empty table (no headers, no rows) when fewer than two
    significant lines survive; callers treat that as "no data".
    """
    return parse_lines((content or "").split("\n"))
