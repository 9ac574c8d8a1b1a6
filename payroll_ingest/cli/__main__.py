from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config, resolve_dsn
from ..db.batch_insert import BatchInsertError, PostgresExporter, insert_records
from ..excel.reader import GridReadError, assemble_records, normalize_grid, read_grid
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models import compensation as comp
from ..models import personnel as pers
from ..models.error_record import ErrorRecord
from ..models.import_result import ImportResult
from ..services.age_fees import validate_fee_table
from ..services.compensation import summarize_salaries
from ..services.export import export_compensations
from ..services.importer import (
    EXPECTED_HEADERS,
    ImportContext,
    ProcessingError,
    import_file,
    rejected_workbook,
    roster_from_results,
    scan_excel_files,
)
from ..services.progress import ProgressTracker
from ..services.records import DATE_COLUMNS
from ..services.summary import render_summary_line
from ..validation.records import COMPENSATION, PERSONNEL, RECORD_KINDS

"""CLI entrypoint: `python -m payroll_ingest.cli`.

Flow:
- Load .env and config
- Scan source_directory for .xlsx files (non-recursive)
- Import every file (validate, coerce), collecting rejected rows in the error log
- Optionally persist accepted rows when `tables` is configured and a
  database is reachable (otherwise mock mode)
- Print the SUMMARY line

Exit codes: 0 every row accepted, 2 some rows or files rejected, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

INSPECT_SAMPLE_ROWS = 3


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="payroll_ingest", description="Spreadsheet -> payroll record importer")
    p.add_argument("--kind", choices=RECORD_KINDS, default=PERSONNEL, help="Record kind of the files (default: personnel)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (default: config/import.yml)")
    p.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="Date used for century and age resolution, YYYY-MM-DD (default: today)",
    )
    p.add_argument("--roster", type=Path, default=None, help="Personnel .xlsx used to check Ledare names")
    p.add_argument("--salaries", action="store_true", help="Print salary summaries after a compensation import")
    p.add_argument("--inspect-data", action="store_true", help="Print detected header and first rows then exit")
    p.add_argument("--check-fees", action="store_true", help="Validate the configured fee table then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:
    """psycopg2 cursor in one transaction; committed on success, rolled back on error."""
    conn = psycopg2.connect(resolve_dsn(cfg.database))
    try:
        conn.autocommit = False
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _check_fees(cfg: ImportConfig, log: logging.Logger) -> int:
    report = validate_fee_table(cfg.age_based_fees)
    for e in report.errors:
        log.error(f"fees: {e}")
    for w in report.warnings:
        log.warning(f"fees: {w}")
    log.info(f"fees: rules={len(cfg.age_based_fees)} errors={len(report.errors)} warnings={len(report.warnings)}")
    return EXIT_SUCCESS_ALL if report.is_valid else EXIT_FATAL


def _inspect_data(files: Sequence[Path], cfg: ImportConfig, kind: str) -> int:
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            grid = read_grid(f)
        except GridReadError as e:
            print(f"  read_error: {e}")
            continue
        sheet = normalize_grid(
            grid,
            expected_headers=EXPECTED_HEADERS[kind],
            scan_limit=cfg.scan_limit,
            pad_rows=cfg.pad_rows,
            date_columns=DATE_COLUMNS[kind],
        )
        print(f"  header_row={sheet.header_row_index + 1} rows={sheet.row_count} cols={sheet.headers}")
        print("    sample_rows=", assemble_records(sheet.headers, sheet.rows)[:INSPECT_SAMPLE_ROWS])
    return EXIT_SUCCESS_ALL


def _load_roster(path: Path | None, context: ImportContext) -> list[dict[str, Any]]:
    if path is None:
        return []
    result = import_file(path, PERSONNEL, context)
    return roster_from_results([result])


def _persist(
    cfg: ImportConfig, kind: str, results: Sequence[ImportResult], context: ImportContext, log: logging.Logger
) -> str:
    """Write accepted records to the configured table; returns the mode used."""
    table = cfg.tables.get(kind)
    if not table:
        return "mock"
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        log.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        return "mock"
    records = [v for r in results for v in r.accepted_values()]
    try:
        with _db_connection(cfg) as cur:
            if kind == PERSONNEL:
                inserted = insert_records(cur, table, pers.PERSONNEL_FIELDS, records).inserted_rows
                log.info(f"db: table={table} inserted={inserted}")
            else:
                exporter = PostgresExporter(cur, table, comp.COMPENSATION_FIELDS)
                report = export_compensations(records, exporter, context.validation_context())
                log.info(
                    f"db: table={table} sent={report.sent} failed={report.failed} "
                    f"rejected={report.rejected} skipped={report.skipped}"
                )
                for e in report.errors:
                    log.warning(f"export: {e}")
    except (psycopg2.Error, BatchInsertError) as e:
        log.info(f"DB unavailable -> mock mode: {e}")
        return "mock"
    return "live"


def _write_rejected(result: ImportResult, logs_dir: Path, log: logging.Logger) -> Path:
    """Save rejected rows as logs/rejected-<stem>.xlsx for correction and re-upload."""
    stem = Path(result.source or "sheet").stem
    path = logs_dir / f"rejected-{stem}.xlsx"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(rejected_workbook(result))
    log.info(f"rejected rows: {path}")
    return path


def _print_salaries(results: Sequence[ImportResult], roster: Sequence[dict[str, Any]], cfg: ImportConfig, ref: date) -> None:
    records = [v for r in results for v in r.accepted_values()]
    for s in summarize_salaries(
        records,
        roster,
        cfg.age_based_fees,
        ref,
        holiday_pay_rate=cfg.holiday_pay_rate,
        standard_social_fee_rate=cfg.standard_social_fee_rate,
    ):
        print(
            f"SALARY employee={s.employee_id} name={s.employee_name!r} base={s.base_salary:.2f} "
            f"holiday={s.holiday_pay:.2f} tax={s.tax:.2f} social_fees={s.social_fees:.2f} net={s.net_salary:.2f}"
        )


def main(argv: list[str] | None = None) -> int:
    log = setup_logging()
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        log.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        log.error(f"config: {e}")
        return EXIT_FATAL

    if args.check_fees:
        return _check_fees(cfg, log)

    reference_date = args.reference_date or date.today()
    directory = Path(cfg.source_directory)
    try:
        files = scan_excel_files(directory)
    except ProcessingError as e:
        log.error(f"processing: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(files, cfg, args.kind)

    log.info(f"Processing {len(files)} file(s) from: {directory} kind={args.kind}")
    context = ImportContext(
        reference_date=reference_date,
        cost_centers=cfg.cost_centers if len(cfg.cost_centers) else None,
        scan_limit=cfg.scan_limit,
        pad_rows=cfg.pad_rows,
    )
    try:
        roster = _load_roster(args.roster, context)
    except GridReadError as e:
        log.error(f"roster: {e}")
        return EXIT_FATAL
    if roster:
        context = replace(context, personnel=roster)

    start = time.perf_counter()
    error_log = ErrorLogBuffer()
    results: list[ImportResult] = []
    unreadable = 0
    with ProgressTracker(len(files)) as progress:
        for f in files:
            progress.start_file(f)
            try:
                result = import_file(f, args.kind, context)
            except GridReadError as e:
                unreadable += 1
                error_log.append(ErrorRecord.create(f.name, -1, "", "error", str(e)))
                log.warning(f"{f.name}: {e}")
                progress.finish_file(failed=unreadable)
                continue
            results.append(result)
            error_log.add_result(result)
            if result.rejected:
                log.warning(f"{f.name}: rejected={len(result.rejected)} accepted={len(result.accepted)}")
                _write_rejected(result, error_log.logs_dir, log)
            progress.finish_file(
                accepted=sum(len(r.accepted) for r in results),
                rejected=sum(len(r.rejected) for r in results),
            )

    log_path = error_log.flush()
    if log_path is not None:
        log.info(f"error log: {log_path}")

    mode = _persist(cfg, args.kind, results, context, log)
    log.info(f"mode={mode}")

    if args.salaries and args.kind == COMPENSATION:
        _print_salaries(results, roster, cfg, reference_date)

    summary_line = render_summary_line(results, total_files=len(files), elapsed_seconds=time.perf_counter() - start)
    log_summary(summary_line[len("SUMMARY "):])

    if unreadable or any(r.rejected for r in results):
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
