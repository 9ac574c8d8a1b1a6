from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from payroll_ingest.excel.cells import (
    cell_to_text,
    clean_cell,
    is_blank_cell,
    normalize_date,
    normalize_period,
    parse_bool,
)


def test_clean_cell_unwraps_and_blanks():
    assert clean_cell(None) == ""
    assert clean_cell(float("nan")) == ""
    assert clean_cell(pd.NaT) == ""
    assert clean_cell(np.int64(3)) == 3
    assert clean_cell(4.0) == 4
    assert isinstance(clean_cell(4.0), int)
    assert clean_cell(4.5) == 4.5
    assert clean_cell(np.datetime64("2024-01-15")) == pd.Timestamp("2024-01-15")


def test_is_blank_cell():
    assert is_blank_cell("  ")
    assert is_blank_cell(None)
    assert not is_blank_cell(0)


def test_cell_to_text():
    assert cell_to_text(" Anna ") == "Anna"
    assert cell_to_text(8327) == "8327"
    assert cell_to_text(True) == "true"
    assert cell_to_text(datetime(2024, 1, 15, 10, 30)) == "2024-01-15"


@pytest.mark.parametrize(
    "value,expected",
    [
        (date(2024, 1, 15), "2024-01-15"),
        (pd.Timestamp("2024-01-15 08:00"), "2024-01-15"),
        (45306, "2024-01-15"),
        ("2024-01-15", "2024-01-15"),
        ("2024-01-15T10:20:00", "2024-01-15"),
        ("15/01/2024", "2024-01-15"),
        ("15.01.2024", "2024-01-15"),
        ("nästa vecka", "nästa vecka"),
        ("", ""),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_normalize_date_serial_only_when_allowed():
    assert normalize_date(45306, allow_serial=False) == 45306
    assert normalize_date(0) == 0


def test_normalize_period():
    assert normalize_period("2024-03") == "2024-03"
    assert normalize_period(date(2024, 3, 1)) == "2024-03"
    assert normalize_period("2024-03-01") == "2024-03"
    assert normalize_period("mars") == "mars"


@pytest.mark.parametrize("value", ["ja", "Ja", "x", "true", 1, True, "SANT"])
def test_parse_bool_true(value):
    assert parse_bool(value) is True


@pytest.mark.parametrize("value", ["nej", "false", 0, False, "n"])
def test_parse_bool_false(value):
    assert parse_bool(value, default=True) is False


def test_parse_bool_blank_uses_default():
    assert parse_bool("", default=True) is True
    assert parse_bool(None) is False
