from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

"""Cell value coercion.

Decoded cells arrive as text, numbers (python or numpy), datetime-like
values or blanks (None / NaN). These helpers turn them into one of: str,
int, float, or a canonical YYYY-MM-DD string. Unparsable date-like text is
passed through unchanged; validation reports it later.
"""

__all__ = [
    "EXCEL_EPOCH",
    "clean_cell",
    "is_blank_cell",
    "cell_to_text",
    "normalize_date",
    "normalize_period",
    "parse_bool",
]

# Excel's day zero (accounts for the 1900 leap-year bug).
EXCEL_EPOCH = "1899-12-30"
SERIAL_MIN = 1
SERIAL_MAX = 2958465  # 9999-12-31

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_DATETIME = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?$")
_DMY = re.compile(r"^(\d{2})[/.\-](\d{2})[/.\-](\d{4})$")
_PERIOD = re.compile(r"^\d{4}-\d{2}$")

_TRUE = {"true", "ja", "yes", "y", "x", "1", "sant"}
_FALSE = {"false", "nej", "no", "n", "0", "falskt", ""}


def clean_cell(value: Any) -> Any:
    """Unwrap numpy scalars, map blanks to "" and whole floats to int."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, np.datetime64):
        ts = pd.Timestamp(value)
        return "" if pd.isna(ts) else ts
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            return int(value)
    return value


def is_blank_cell(value: Any) -> bool:
    value = clean_cell(value)
    return isinstance(value, str) and value.strip() == ""


def cell_to_text(value: Any) -> str:
    value = clean_cell(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return normalize_date(value)
    return str(value).strip()


def _is_datetime_like(value: Any) -> bool:
    return isinstance(value, (datetime, date, pd.Timestamp, np.datetime64))


def _from_serial(value: float) -> date | None:
    if not SERIAL_MIN <= value <= SERIAL_MAX:
        return None
    ts = pd.to_datetime(value, unit="D", origin=EXCEL_EPOCH, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def _to_date(value: Any) -> date | None:
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def normalize_date(value: Any, *, allow_serial: bool = True) -> Any:
    """Convert a date-like cell to YYYY-MM-DD.

    Accepted: native date/datetime values, Excel serial numbers (when
    allow_serial), ISO strings (a time part is dropped), and dd/mm/yyyy,
    dd.mm.yyyy, dd-mm-yyyy. Anything else is returned unchanged.
    """
    value = clean_cell(value)
    if _is_datetime_like(value):
        d = _to_date(value)
        return d.isoformat() if d else ""

    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if not allow_serial:
            return value
        d = _from_serial(float(value))
        return d.isoformat() if d else value

    if isinstance(value, str):
        text = value.strip()
        if _ISO_DATE.match(text):
            return text
        m = _ISO_DATETIME.match(text)
        if m:
            return m.group(1)
        m = _DMY.match(text)
        if m:
            dd, mm, yyyy = m.groups()
            return f"{yyyy}-{mm}-{dd}"
    return value


def normalize_period(value: Any) -> Any:
    """Convert a period cell to YYYY-MM; unparsable input is returned unchanged."""
    value = clean_cell(value)
    if isinstance(value, str):
        text = value.strip()
        if _PERIOD.match(text):
            return text
        value = text
    normalized = normalize_date(value)
    if isinstance(normalized, str) and _ISO_DATE.match(normalized):
        return normalized[:7]
    return value


def parse_bool(value: Any, default: bool = False) -> bool:
    """Interpret a flag cell (ja/nej, true/false, 1/0, x)."""
    value = clean_cell(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return default if text == "" else False
    return default
