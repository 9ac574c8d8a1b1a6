from __future__ import annotations

import re
from datetime import date

"""Swedish personal identity number (personnummer) normalization.

10-digit form: YYMMDD-XXXX, 12-digit form: YYYYMMDD-XXXX.

Century inference for the 10-digit form is a heuristic and depends on the
reference date, which callers must pass in explicitly. Numbers within about
ten years of the century rollover cannot be disambiguated without a registry
lookup; results for those may differ between reference years.
"""

__all__ = [
    "clean_personnummer",
    "infer_century",
    "normalize_personnummer",
    "derive_age",
]

_SEPARATORS = re.compile(r"[-+\s]")
# Years ahead of the reference year still treated as the current century.
CENTURY_LOOKAHEAD_YEARS = 10
MIN_BIRTH_YEAR = 1900


def clean_personnummer(value: object) -> str:
    """Strip separators (dash, plus, whitespace). Non-digit content is kept."""
    if value is None:
        return ""
    return _SEPARATORS.sub("", str(value))


def infer_century(yy: int, reference_date: date, lookahead: int = CENTURY_LOOKAHEAD_YEARS) -> int:
    """Return the century (e.g. 1900, 2000) for a two-digit year.

    cutoff = (reference year within its century) + lookahead; yy above the
    cutoff belongs to the previous century.
    """
    current_year = reference_date.year
    current_century = (current_year // 100) * 100
    cutoff = (current_year - current_century) + lookahead
    return current_century if yy <= cutoff else current_century - 100


def normalize_personnummer(value: str, reference_date: date) -> str:
    """Canonicalize to YYYYMMDD-XXXX.

    Best effort: anything that is not 10 or 12 digits after stripping
    separators is returned unchanged. Validity is checked elsewhere.
    """
    digits = clean_personnummer(value)
    if not digits.isdigit():
        return value

    if len(digits) == 10:
        yy = int(digits[:2])
        century = infer_century(yy, reference_date)
        return f"{century + yy}{digits[2:6]}-{digits[6:]}"

    if len(digits) == 12:
        return f"{digits[:8]}-{digits[8:]}"

    return value


def _birth_date_digits(value: str, reference_date: date) -> str | None:
    digits = clean_personnummer(value)
    if not digits.isdigit():
        return None
    if len(digits) in (12, 8):
        return digits[:8]
    if len(digits) in (10, 6):
        # A birth date cannot lie in the future: no lookahead here.
        yy = int(digits[:2])
        century = infer_century(yy, reference_date, lookahead=0)
        return f"{century + yy}{digits[2:6]}"
    return None


def derive_age(value: str, reference_date: date) -> int | None:
    """Whole years between the birth date encoded in value and reference_date.

    Returns None instead of raising for anything that does not parse into a
    plausible birth date.
    """
    if not value:
        return None
    ymd = _birth_date_digits(value, reference_date)
    if ymd is None:
        return None

    year, month, day = int(ymd[:4]), int(ymd[4:6]), int(ymd[6:8])
    if year < MIN_BIRTH_YEAR or year > reference_date.year + 1:
        return None
    try:
        birth = date(year, month, day)
    except ValueError:
        return None

    age = reference_date.year - birth.year
    if (reference_date.month, reference_date.day) < (birth.month, birth.day):
        age -= 1
    return age if age >= 0 else None
