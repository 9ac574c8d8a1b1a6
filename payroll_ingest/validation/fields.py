from __future__ import annotations

import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from ..models.warning import Severity, ValidationWarning
from .personnummer import clean_personnummer

"""Per-field validators.

Every validator here:
- treats None / "" / whitespace-only input as valid (required-ness is a
  separate check in records.py)
- returns a list of ValidationWarning and never raises

User facing messages are Swedish, matching the column vocabulary.
"""

__all__ = [
    "CostCenterResolver",
    "ValidationContext",
    "is_blank",
    "parse_number",
    "validate_personnummer",
    "validate_clearingnr",
    "validate_bankkonto",
    "validate_email",
    "validate_date",
    "validate_period",
    "validate_cost_center",
    "validate_tax_rate",
    "validate_quantity",
    "validate_rate",
    "validate_person",
]

_BANK_SEPARATORS = re.compile(r"[-\s]")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PERIOD = re.compile(r"^(\d{4})-(\d{2})$")


class CostCenterResolver(Protocol):
    """Injected cost-center lookup (see services.cost_centers)."""

    def is_valid(self, text: str) -> bool: ...

    def resolve_display_text(self, code: str) -> str: ...


@dataclass(frozen=True)
class ValidationContext:
    """External data some validators need. Every member is optional."""
    cost_centers: CostCenterResolver | None = None
    personnel_names: frozenset[str] = frozenset()  # lower-cased "Förnamn Efternamn"
    typing: bool = False  # live-input mode for the identity number

    @classmethod
    def with_roster(
        cls,
        personnel: Iterable[dict[str, Any]],
        cost_centers: CostCenterResolver | None = None,
    ) -> ValidationContext:
        names = frozenset(
            f"{p.get('Förnamn', '')} {p.get('Efternamn', '')}".strip().lower() for p in personnel
        )
        return cls(cost_centers=cost_centers, personnel_names=names)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def parse_number(value: Any) -> float | None:
    """Parse a cell into a float. Accepts Swedish decimal comma and spaces."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None  # NaN
    text = str(value).strip().replace("\u00a0", "").replace(" ", "").replace(",", ".")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if number == number else None


def _warn(field: str, message: str, severity: Severity = Severity.ERROR) -> list[ValidationWarning]:
    return [ValidationWarning(field=field, message=message, severity=severity)]


def validate_personnummer(value: Any, typing: bool = False, field: str = "Personnummer") -> list[ValidationWarning]:
    """Identity number: digits only, 10 or 12 of them.

    typing=True is for live input: nothing is reported until at least ten
    characters have been entered, then the full rule applies.
    """
    if is_blank(value):
        return []
    cleaned = clean_personnummer(str(value).strip())

    if typing and len(cleaned) < 10:
        return []

    if not cleaned.isdigit():
        return _warn(field, "Personnummer ska endast innehålla siffror och bindestreck")

    if len(cleaned) == 10:
        return _warn(
            field,
            "10-siffrigt personnummer kommer att konverteras till 12-siffrigt format",
            Severity.WARNING,
        )
    if len(cleaned) == 12:
        return []
    if len(cleaned) < 10:
        return _warn(field, "Personnummer är för kort (minst 10 siffror krävs)")
    return _warn(field, "Personnummer ska vara 10 eller 12 siffror (YYYYMMDD-XXXX)")


def _digits_in_range(value: Any, lo: int, hi: int) -> bool:
    cleaned = _BANK_SEPARATORS.sub("", str(value).strip())
    return cleaned.isdigit() and lo <= len(cleaned) <= hi


def validate_clearingnr(value: Any, field: str = "Clearingnr") -> list[ValidationWarning]:
    if is_blank(value) or _digits_in_range(value, 4, 5):
        return []
    return _warn(field, "Clearingnummer ska vara 4-5 siffror", Severity.WARNING)


def validate_bankkonto(value: Any, field: str = "Bankkonto") -> list[ValidationWarning]:
    if is_blank(value) or _digits_in_range(value, 7, 11):
        return []
    return _warn(field, "Bankkontonummer ska vara 7-11 siffror", Severity.WARNING)


def validate_email(value: Any, field: str = "E-post") -> list[ValidationWarning]:
    if is_blank(value) or _EMAIL.match(str(value).strip()):
        return []
    return _warn(field, "Ogiltig e-postadress")


def validate_date(value: Any, field: str) -> list[ValidationWarning]:
    """YYYY-MM-DD that is also a real calendar date."""
    if is_blank(value):
        return []
    text = str(value).strip()
    if not _ISO_DATE.match(text):
        return _warn(field, "Datum ska vara i format YYYY-MM-DD")
    try:
        date.fromisoformat(text)
    except ValueError:
        return _warn(field, "Ogiltigt datum")
    return []


def validate_period(value: Any, field: str = "Avser Mån/år") -> list[ValidationWarning]:
    if is_blank(value):
        return []
    m = _PERIOD.match(str(value).strip())
    if not m:
        return _warn(field, "Period måste vara i format YYYY-MM")
    if not 1 <= int(m.group(2)) <= 12:
        return _warn(field, "Ogiltig månad i period")
    return []


def validate_cost_center(
    value: Any, resolver: CostCenterResolver | None, field: str = "Kostnadsställe"
) -> list[ValidationWarning]:
    """Unresolvable non-empty value is an error. No resolver means no check."""
    if is_blank(value) or resolver is None:
        return []
    if resolver.is_valid(str(value).strip()):
        return []
    return _warn(field, f"Okänt kostnadsställe: {str(value).strip()}")


def validate_tax_rate(value: Any, field: str = "Skattesats") -> list[ValidationWarning]:
    if is_blank(value):
        return []
    number = parse_number(value)
    if number is None:
        return _warn(field, "Skattesats måste vara ett tal")
    if not 0 <= number <= 100:
        return _warn(field, "Skattesats måste vara mellan 0 och 100%")
    return []


def validate_quantity(value: Any, field: str = "Antal") -> list[ValidationWarning]:
    if is_blank(value):
        return []
    number = parse_number(value)
    if number is None or number <= 0:
        return _warn(field, "Antal måste vara ett positivt tal")
    return []


def validate_rate(value: Any, field: str = "Ersättning") -> list[ValidationWarning]:
    if is_blank(value):
        return []
    number = parse_number(value)
    if number is None or number < 0:
        return _warn(field, "Ersättning måste vara 0 eller större")
    return []


def validate_person(value: Any, personnel_names: Collection[str], field: str = "Ledare") -> list[ValidationWarning]:
    """Warn when the name is not in a non-empty personnel roster."""
    if is_blank(value) or not personnel_names:
        return []
    if str(value).strip().lower() in personnel_names:
        return []
    return _warn(field, "Person finns inte i personallistan", Severity.WARNING)
