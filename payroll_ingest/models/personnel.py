from __future__ import annotations

"""Personnel record shape.

A personnel record is a plain dict keyed by the Swedish column names below.
Every key is always present; missing cells become "" (text), 0 (numbers) or
False (flags), never absent.
"""

__all__ = [
    "PERSONNEL_FIELDS",
    "PERSONNEL_EXPECTED_HEADERS",
    "PERSONNEL_REQUIRED_FIELDS",
    "PERSONNEL_TEXT_FIELDS",
    "PERSONNEL_BOOLEAN_FIELDS",
]

PERSONNUMMER = "Personnummer"
EMAIL = "E-post"
CLEARINGNR = "Clearingnr"
BANKKONTO = "Bankkonto"
KOSTNADSSTALLE = "Kostnadsställe"
ANDRINGSDAG = "Ändringsdag"
SKATTESATS = "Skattesats"
SOCIALA_AVGIFTER = "Sociala Avgifter"
AKTIV = "Aktiv"
FORNAMN = "Förnamn"
EFTERNAMN = "Efternamn"
EMPLOYEE_REF = "fortnox_employee_id"

PERSONNEL_FIELDS: tuple[str, ...] = (
    "Upplagd av",
    PERSONNUMMER,
    FORNAMN,
    EFTERNAMN,
    EMAIL,
    CLEARINGNR,
    BANKKONTO,
    "Adress",
    "Postnr",
    "Postort",
    KOSTNADSSTALLE,
    ANDRINGSDAG,
    "Månad",  # pay rates
    "Timme",
    "Heldag",
    "Annan",
    "Kommentar",
    "Befattning",
    AKTIV,
    SKATTESATS,
    SOCIALA_AVGIFTER,
    EMPLOYEE_REF,
)

# Header vocabulary used to locate the header row of an upload.
PERSONNEL_EXPECTED_HEADERS: tuple[str, ...] = (
    FORNAMN,
    EFTERNAMN,
    EMAIL,
    PERSONNUMMER,
    CLEARINGNR,
    BANKKONTO,
    "Adress",
    "Postnr",
    "Postort",
    KOSTNADSSTALLE,
    ANDRINGSDAG,
    "Månad",
    "Timme",
    "Heldag",
    "Annan",
    "Kommentar",
    "Befattning",
    SKATTESATS,
    SOCIALA_AVGIFTER,
)

PERSONNEL_REQUIRED_FIELDS: tuple[str, ...] = (FORNAMN, EFTERNAMN, EMAIL)

PERSONNEL_BOOLEAN_FIELDS: frozenset[str] = frozenset({AKTIV, SOCIALA_AVGIFTER})
PERSONNEL_NUMERIC_FIELDS: frozenset[str] = frozenset({SKATTESATS})
PERSONNEL_TEXT_FIELDS: tuple[str, ...] = tuple(
    f for f in PERSONNEL_FIELDS if f not in PERSONNEL_BOOLEAN_FIELDS and f not in PERSONNEL_NUMERIC_FIELDS
)
