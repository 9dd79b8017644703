"""Spreadsheet uploads for the bulk importer.

An ``.xlsx`` workbook is flattened into the same comma-separated lines the
CSV parser reads, so both upload forms share one set of parsing rules
(comment/blank dropping, field-count check, row numbering).
"""

from __future__ import annotations

from typing import IO, List

import pandas as pd

from middleware.errors import ImportParsingError
from utils.csv_table import COMMENT_PREFIX, DELIMITER, QUOTE, CsvTable, parse_lines


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_line(cells: List[str]) -> str:
    out = []
    for cell in cells:
        text = cell.replace(QUOTE, "")
        out.append(f"{QUOTE}{text}{QUOTE}" if DELIMITER in text else text)
    return DELIMITER.join(out)


def workbook_lines(stream: IO[bytes]) -> List[str]:
    """Read the first worksheet and render each row as a CSV line.

    Rows are cut to the header's width (trailing empty header cells come from
    sheet formatting, not data); rows with no content become blank lines.
    """
    try:
        frame = pd.read_excel(
            stream,
            sheet_name=0,
            header=None,
            dtype=object,
            engine="openpyxl",
        )
    except Exception as exc:
        raise ImportParsingError(
            "Workbook could not be read", details={"reason": str(exc)}
        ) from exc

    rows = [[_cell_text(v) for v in record] for record in frame.itertuples(index=False, name=None)]

    width = None
    for cells in rows:
        first = next((c for c in cells if c), "")
        if first and not first.startswith(COMMENT_PREFIX):
            width = len(cells)
            while width and not cells[width - 1]:
                width -= 1
            break

    lines: List[str] = []
    for cells in rows:
        if not any(cells):
            lines.append("")
        elif cells[0].startswith(COMMENT_PREFIX):
            lines.append(cells[0])
        elif width is None:
            lines.append(_to_line(cells))
        else:
            lines.append(_to_line(cells[:width]))
    return lines


def parse_workbook(stream: IO[bytes]) -> CsvTable:
    return parse_lines(workbook_lines(stream))
