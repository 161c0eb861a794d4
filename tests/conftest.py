import sqlite3
import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence

import pytest

# Add src to sys.path so we can import qbank_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from qbank_toolkit.ingestion import SourceFile, merge_sources  # noqa: E402
from qbank_toolkit.bank import QuestionBank  # noqa: E402


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def build_sqlite(tables: dict) -> bytes:
    """
    Build an SQLite file in memory and return its bytes.

    Args:
        tables: {table name: (columns, rows)}
    """
    conn = sqlite3.connect(":memory:")
    try:
        for name, (columns, rows) in tables.items():
            cols = ", ".join(_quote(c) for c in columns)
            conn.execute(f"CREATE TABLE {_quote(name)} ({cols})")
            marks = ", ".join("?" for _ in columns)
            conn.executemany(f"INSERT INTO {_quote(name)} VALUES ({marks})", rows)
        conn.commit()
        return conn.serialize()
    finally:
        conn.close()


# Common test fixtures
@pytest.fixture
def make_db() -> Callable[[dict], bytes]:
    """Factory building SQLite file bytes from {table: (columns, rows)}."""
    return build_sqlite


@pytest.fixture
def make_source(make_db) -> Callable[..., SourceFile]:
    """Factory building a SourceFile with one table."""
    def _make(
        columns: Sequence[str],
        rows: Iterable[Sequence],
        source_id: str = "s1",
        name: str = "bank.db",
        table: str = "questions",
    ) -> SourceFile:
        return SourceFile(source_id, name, make_db({table: (list(columns), list(rows))}))
    return _make


@pytest.fixture
def book_bank(make_source) -> QuestionBank:
    """Small dataset covering books, chapters, domains, tags and review flags."""
    columns = ["ID", "RefID", "Question", "Answer", "Domain", "A", "B", "C", "D"]
    rows = [
        (1, "PT_1.2", "Second of chapter one", "B", "Security", "a", "b", "c", "d"),
        (2, "PT_1.1", "First of chapter one", "A", "Security | Networking", "a", "b", "c", "d"),
        (3, "PT_1.10", "Tenth of chapter one", "C", "Networking", "a", "b", "c", "d"),
        (4, "PT_2.1", "~ Flagged in chapter two", "D", "", "a", "b", "c", "d"),
        (5, "AB_1.1", "[PIC] Diagram question", "A", "General", "a", "b", "c", "d"),
        (6, "PT_AS.1", "[MULTI] Pick all that apply", "A,B", "Security", "a", "b", "c", "d"),
        (7, "", "[MATCH] Pair them", "A,1\\nB,2", "Governance", "A. x", "B. y", "1) p", "2) q"),
    ]
    result = merge_sources([make_source(columns, rows)])
    return QuestionBank(result.data, imported_count=result.imported_count)
