"""Import, fee, compensation and export services."""

from .age_fees import resolve_fee_rate, validate_fee_table
from .compensation import calculate_total, derive_total, group_by_person, summarize_salaries
from .cost_centers import CostCenter, CostCenterDirectory
from .export import ExportError, Exporter, export_compensations
from .importer import ImportContext, ProcessingError, import_file, import_grid, scan_excel_files
from .summary import render_summary_line

__all__ = [
    # Import
    "ImportContext",
    "ProcessingError",
    "import_grid",
    "import_file",
    "scan_excel_files",
    "render_summary_line",
    # Lookups and fees
    "CostCenter",
    "CostCenterDirectory",
    "resolve_fee_rate",
    "validate_fee_table",
    # Compensation
    "derive_total",
    "calculate_total",
    "group_by_person",
    "summarize_salaries",
    # Export
    "Exporter",
    "ExportError",
    "export_compensations",
]
