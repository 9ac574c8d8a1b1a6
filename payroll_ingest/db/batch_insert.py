from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

from ..services.export import ExportError

"""PostgreSQL persistence for validated records.

batch_insert() writes many rows with psycopg2.extras.execute_values.
PostgresExporter sends one compensation record at a time inside a SAVEPOINT
so that a failing row does not abort the surrounding transaction.
"""


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one batch insert."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform a batched INSERT.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (trusted, from config)
    columns: column names; Swedish names are quoted as identifiers
    rows: row sequences aligned with columns
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics; not called for an empty batch
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(_quote_ident(c) for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except psycopg2.Error as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )
    return InsertResult(inserted_rows=len(rows_list))


def insert_records(
    cursor: Any, table: str, columns: Sequence[str], records: Iterable[Mapping[str, Any]], page_size: int = 1000
) -> InsertResult:
    """Insert dict records, projected onto `columns`."""
    return batch_insert(cursor, table, columns, ([r.get(c) for c in columns] for r in records), page_size=page_size)


class PostgresExporter:
    """Exporter that stores each compensation record as one row.

    export_compensations() hands over the record with the status it gets on
    success, so a stored row reads "sent". A failed insert is rolled back to
    the savepoint and nothing is stored for that record.
    """

    def __init__(self, cursor: Any, table: str, columns: Sequence[str]) -> None:
        self.cursor = cursor
        self.table = table
        self.columns = list(columns)

    def send(self, record: Mapping[str, Any]) -> None:
        self.cursor.execute("SAVEPOINT export_row")
        try:
            insert_records(self.cursor, self.table, self.columns, [record])
        except BatchInsertError as e:
            self.cursor.execute("ROLLBACK TO SAVEPOINT export_row")
            raise ExportError(str(e)) from e
        self.cursor.execute("RELEASE SAVEPOINT export_row")
