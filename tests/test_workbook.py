from io import BytesIO

import pytest
from openpyxl import Workbook

from middleware.errors import ImportParsingError
from utils.workbook import parse_workbook, workbook_lines


def _xlsx(*rows) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream


def test_rows_are_flattened_to_csv_lines():
    lines = workbook_lines(
        _xlsx(
            ["firstName", "lastName", "email", "phone"],
            ["# PARENT: optional, all of it"],
            ["Ann", "Lee", "ann@test.com", 5551234],
        )
    )

    assert lines[0] == "firstName,lastName,email,phone"
    assert lines[1] == "# PARENT: optional, all of it"
    assert lines[2] == "Ann,Lee,ann@test.com,5551234"


def test_cells_with_commas_are_quoted():
    table = parse_workbook(
        _xlsx(["firstName", "lastName", "email"], ["Ann", "Lee, Jr.", "ann@test.com"])
    )

    assert table.rows[0].get("lastName") == "Lee, Jr."


def test_missing_trailing_cells_keep_the_header_width():
    table = parse_workbook(
        _xlsx(
            ["firstName", "lastName", "email", "parentEmail"],
            ["Ann", "Lee", "ann@test.com"],
        )
    )

    assert len(table.rows) == 1
    assert table.rows[0].get("parentEmail") == ""


def test_unreadable_workbook():
    with pytest.raises(ImportParsingError):
        workbook_lines(BytesIO(b"not a workbook"))
