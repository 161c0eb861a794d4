"""
Canonical Dataset Schema

Single definition of the merged ``questions`` table. The ingestion engine
creates it; the dataset handle checks for it and reads from it.
"""

from __future__ import annotations

import sqlite3
from typing import Tuple

CANONICAL_TABLE = "questions"

CANONICAL_COLUMNS: Tuple[str, ...] = (
    "id",
    "source_file",
    "question_text",
    "ref_id",
    "correct_answer",
    "choices_json",
    "explanation",
    "domain",
    "sub_domain",
    "topic",
    "chapter",
    "heading",
    "hint_1",
    "hint_2",
    "hint_3",
    "kind",
)

CANONICAL_SCHEMA = f"""
CREATE TABLE {CANONICAL_TABLE} (
    id TEXT PRIMARY KEY,
    source_file TEXT,
    question_text TEXT,
    ref_id TEXT,
    correct_answer TEXT,
    choices_json TEXT,
    explanation TEXT,
    domain TEXT,
    sub_domain TEXT,
    topic TEXT,
    chapter TEXT,
    heading TEXT,
    hint_1 TEXT,
    hint_2 TEXT,
    hint_3 TEXT,
    kind TEXT NOT NULL
)
"""

INSERT_SQL = (
    f"INSERT INTO {CANONICAL_TABLE} ({', '.join(CANONICAL_COLUMNS)}) "
    f"VALUES ({', '.join(':' + col for col in CANONICAL_COLUMNS)})"
)


class SchemaError(Exception):
    """Raised when a database does not hold a canonical dataset."""
    pass


def validate_canonical(conn: sqlite3.Connection) -> None:
    """
    Check that a connection holds the canonical table with every column.

    Args:
        conn: Open connection to check

    Raises:
        SchemaError: If the table or any column is missing, or the bytes
            are not a database
    """
    try:
        columns = {row[1] for row in conn.execute(f"PRAGMA table_info({CANONICAL_TABLE})")}
    except sqlite3.Error as e:
        raise SchemaError(f"Not a database: {e}") from e
    if not columns:
        raise SchemaError(f"Missing table {CANONICAL_TABLE!r}")
    missing = [col for col in CANONICAL_COLUMNS if col not in columns]
    if missing:
        raise SchemaError(f"Canonical table is missing columns: {missing}")
