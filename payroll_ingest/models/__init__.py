"""Domain models for the spreadsheet -> payroll record import engine.

This package contains the record shapes, validation warnings and fee rules
shared by the excel, validation and service layers.
"""

from .compensation import COMPENSATION_FIELDS, CompensationStatus
from .error_record import ErrorRecord
from .fee_rule import AgeFeeRule, FeeTableReport
from .import_result import ImportResult, RowFailure
from .personnel import PERSONNEL_FIELDS
from .row_data import RowData
from .sheet import ParsedSheet
from .warning import Severity, ValidationResult, ValidationWarning

__all__ = [
    # Record shapes
    "COMPENSATION_FIELDS",
    "PERSONNEL_FIELDS",
    "CompensationStatus",
    # Parsing / import
    "ParsedSheet",
    "RowData",
    "RowFailure",
    "ImportResult",
    # Validation
    "Severity",
    "ValidationWarning",
    "ValidationResult",
    # Fees
    "AgeFeeRule",
    "FeeTableReport",
    # Error log
    "ErrorRecord",
]
