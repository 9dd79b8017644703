from utils.csv_table import parse_csv, split_line


def test_quoted_field_keeps_delimiter():
    table = parse_csv('firstName,lastName,email\n"John, Jr",Doe,john@test.com')

    assert table.headers == ["firstName", "lastName", "email"]
    assert len(table.rows) == 1
    assert table.rows[0].values["firstName"] == "John, Jr"
    assert table.rows[0].row_number == 2


def test_comments_and_blank_lines_are_ignored():
    plain = "firstName,lastName,email\nJohn,Doe,john@test.com\nAnn,Lee,ann@test.com"
    commented = (
        "# Example: John,Doe,john@test.com\n"
        "\n"
        "firstName,lastName,email\n"
        "   # --- Enter your data below this line ---\n"
        "John,Doe,john@test.com\n"
        "   \n"
        "Ann,Lee,ann@test.com\n"
    )

    a = parse_csv(plain)
    b = parse_csv(commented)
    assert a.headers == b.headers
    assert [r.values for r in a.rows] == [r.values for r in b.rows]
    assert [r.row_number for r in b.rows] == [2, 3]


def test_rows_with_wrong_field_count_are_dropped():
    table = parse_csv("a,b,c\n1,2,3\n1,2\n4,5,6,7\n7,8,9")

    assert [r.values["a"] for r in table.rows] == ["1", "7"]
    assert [r.row_number for r in table.rows] == [2, 3]


def test_fewer_than_two_lines_yields_empty_table():
    assert parse_csv("").is_empty
    assert parse_csv("firstName,lastName,email\n# nothing here\n").is_empty
    assert parse_csv("firstName,lastName,email\n").headers == []


def test_values_and_headers_are_trimmed_and_crlf_tolerated():
    table = parse_csv(" firstName , email \r\n  Jane ,jane@test.com\r\n")

    assert table.headers == ["firstName", "email"]
    assert table.rows[0].values == {"firstName": "Jane", "email": "jane@test.com"}


def test_split_line_strips_quotes_without_escape_support():
    assert split_line('"a,b",c') == ["a,b", "c"]
    assert split_line('say ""hi""') == ["say hi"]
    assert split_line("x,,") == ["x", "", ""]
