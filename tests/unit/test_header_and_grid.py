from __future__ import annotations

from payroll_ingest.excel.header import detect_header_row, score_row
from payroll_ingest.excel.reader import assemble_numbered, assemble_records, normalize_grid, pad_row

"""Header detection, grid normalization and record assembly."""

EXPECTED = ["Förnamn", "Efternamn", "E-post"]


def test_score_row_partial_and_case_insensitive():
    assert score_row(["förnamn", "Efternamn (juridiskt)", ""], ["förnamn", "efternamn"]) == 2


def test_header_found_below_title():
    grid = [["Personallista"], [], ["Förnamn", "Efternamn", "E-post"], ["Anna", "A", "a@b.se"]]
    assert detect_header_row(grid, EXPECTED) == 2


def test_header_ties_go_to_earliest_row():
    grid = [["Förnamn"], ["Efternamn"]]
    assert detect_header_row(grid, EXPECTED) == 0


def test_header_outside_scan_limit_is_not_found():
    grid = [["x"]] * 5 + [["Förnamn", "Efternamn", "E-post"]]
    assert detect_header_row(grid, EXPECTED, scan_limit=5) == 0


def test_no_vocabulary_or_empty_grid():
    assert detect_header_row([["a"], ["b"]]) == 0
    assert detect_header_row([], EXPECTED) == 0


def test_normalize_grid_drops_blank_rows_and_keeps_row_numbers():
    grid = [
        ["Titel"],
        ["Förnamn", "Efternamn", "E-post"],
        ["Anna", "Andersson", "anna@example.se"],
        ["", None, "  "],
        ["Bertil", "Berg"],
    ]
    sheet = normalize_grid(grid, EXPECTED)
    assert sheet.header_row_index == 1
    assert sheet.headers == ["Förnamn", "Efternamn", "E-post"]
    assert sheet.row_count == 2
    assert sheet.row_numbers == [3, 5]
    assert sheet.rows[1] == ["Bertil", "Berg"]


def test_normalize_grid_pad_rows():
    grid = [["Förnamn", "Efternamn", "E-post"], ["Anna"], ["B", "C", "D", "extra"]]
    sheet = normalize_grid(grid, EXPECTED, pad_rows=True)
    assert sheet.rows == [["Anna", "", ""], ["B", "C", "D"]]


def test_normalize_grid_empty():
    sheet = normalize_grid([], EXPECTED)
    assert sheet.is_empty
    header_only = normalize_grid([["Förnamn", "Efternamn"]], EXPECTED)
    assert header_only.is_empty
    assert header_only.headers == ["Förnamn", "Efternamn"]


def test_serials_converted_only_in_date_columns():
    grid = [["Antal", "Datum utbet"], [45306, 45306]]
    sheet = normalize_grid(grid, ["Antal", "Datum utbet"], date_columns={"Datum utbet"})
    assert sheet.rows[0] == [45306, "2024-01-15"]


def test_assemble_skips_unnamed_columns_and_blank_records():
    records = assemble_records(["Förnamn", "", "E-post"], [["Anna", "ignored", "a@b.se"], ["", "x", ""]])
    assert records == [{"Förnamn": "Anna", "E-post": "a@b.se"}]


def test_assemble_short_rows_fill_with_empty():
    assert assemble_records(["a", "b"], [["1"]]) == [{"a": "1", "b": ""}]


def test_assemble_numbered():
    sheet = normalize_grid([["Förnamn", "E-post"], ["Anna", ""], ["", "b@c.se"]], EXPECTED)
    assert assemble_numbered(sheet) == [(2, {"Förnamn": "Anna", "E-post": ""}), (3, {"Förnamn": "", "E-post": "b@c.se"})]


def test_pad_row():
    assert pad_row(3, None) == ["", "", ""]
    assert pad_row(2, [1, 2, 3]) == [1, 2]
