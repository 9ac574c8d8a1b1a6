"""Field validation and identity-number handling."""

from .fields import (
    ValidationContext,
    validate_bankkonto,
    validate_clearingnr,
    validate_cost_center,
    validate_date,
    validate_email,
    validate_period,
    validate_personnummer,
    validate_quantity,
    validate_rate,
    validate_tax_rate,
)
from .personnummer import clean_personnummer, derive_age, normalize_personnummer
from .records import is_acceptable, validate_field, validate_record

__all__ = [
    "ValidationContext",
    "clean_personnummer",
    "derive_age",
    "is_acceptable",
    "normalize_personnummer",
    "validate_bankkonto",
    "validate_clearingnr",
    "validate_cost_center",
    "validate_date",
    "validate_email",
    "validate_field",
    "validate_period",
    "validate_personnummer",
    "validate_quantity",
    "validate_rate",
    "validate_record",
    "validate_tax_rate",
]
