"""
Module: ingestion.inspection

Purpose:
    Pre-import integrity check of a single source file: which table would
    be imported, how many rows it holds and how many of them would be
    skipped for having neither question text nor a reference id.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from .column_mapper import map_columns, select_table
from .config import IngestionConfig
from .engine import (
    SourceFile,
    SourceIngestionError,
    discover_tables,
    open_source,
    quote_identifier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityReport:
    """
    Result of inspecting one source.

    Attributes:
        table: Table the merge would import
        total_rows: Rows in that table
        missing_text_count: Rows with empty text and empty reference id
    """

    table: str
    total_rows: int
    missing_text_count: int

    @property
    def importable_rows(self) -> int:
        return self.total_rows - self.missing_text_count


def inspect_source(
    source: SourceFile,
    config: Optional[IngestionConfig] = None,
) -> IntegrityReport:
    """
    Inspect a source file without importing it.

    Raises:
        SourceIngestionError: If the file is unreadable or has no tables
    """
    config = config or IngestionConfig()
    with open_source(source.data) as conn:
        tables = discover_tables(conn, config)
        table = select_table(tables, config)
        field_map = map_columns(tables[table], config.aliases)

        blank_checks = [
            f"TRIM(COALESCE({quote_identifier(column)}, '')) = ''"
            for column in (field_map.question_text, field_map.ref_id)
            if column
        ]
        missing_sql = " AND ".join(blank_checks) if blank_checks else "1"
        try:
            total, missing = conn.execute(
                f"SELECT COUNT(*), COALESCE(SUM(CASE WHEN {missing_sql} THEN 1 ELSE 0 END), 0) "
                f"FROM {quote_identifier(table)}"
            ).fetchone()
        except sqlite3.Error as e:
            raise SourceIngestionError(f"Could not inspect table {table!r}: {e}") from e

    logger.info(f"{source.display_name}: table {table!r}, {total} rows, {missing} without text")
    return IntegrityReport(table=table, total_rows=total, missing_text_count=missing)
