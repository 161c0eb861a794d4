"""
Module: bank.dataset

Purpose:
    QuestionBank - the explicit handle to one canonical dataset. Wraps the
    immutable serialized database produced by a merge and exposes
    read-only access to it. A new merge produces a new handle; old handles
    stay valid for whoever still holds them.

Key Classes:
    - QuestionBank: Read-only canonical dataset handle

Dependencies:
    - sqlite3 (std): In-memory copy of the serialized dataset
    - threading (std): Serializes access to the shared connection
    - core.schemas: Canonical table checks

Used By:
    - ingestion.worker: Publishes a new handle after each merge
    - bank.query: All query operations
    - bank.storage: Snapshots
"""

from __future__ import annotations

import logging
import sqlite3
from threading import Lock
from typing import Any, List, Optional, Sequence

from qbank_toolkit.core.models import Question
from qbank_toolkit.core.schemas import CANONICAL_TABLE, SchemaError, validate_canonical

logger = logging.getLogger(__name__)


class QuestionBank:
    """
    Read-only handle to a canonical dataset.

    The serialized bytes are loaded into a private in-memory database that
    is never written to. Thread-safe for concurrent reads.

    Attributes:
        data: Serialized canonical database (immutable)
        imported_count: Rows reported by the merge that built it, if known

    Example:
        >>> bank = QuestionBank(result.data, imported_count=result.imported_count)
        >>> len(bank)
        120
        >>> bank.get("s1_42").correct_answer
        'C'
    """

    def __init__(self, data: bytes, imported_count: Optional[int] = None) -> None:
        """
        Load a serialized canonical dataset.

        Args:
            data: Bytes produced by a merge or read from a snapshot
            imported_count: Count reported by the merge

        Raises:
            SchemaError: If the bytes do not hold a canonical dataset
        """
        self._data = bytes(data)
        self._lock = Lock()
        self._conn = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            self._conn.deserialize(self._data)
            validate_canonical(self._conn)
            self._conn.execute("PRAGMA query_only = ON")
        except (sqlite3.Error, SchemaError) as e:
            self._conn.close()
            if isinstance(e, SchemaError):
                raise
            raise SchemaError(f"Not a canonical dataset: {e}") from e
        self._conn.row_factory = sqlite3.Row
        self.imported_count = imported_count

    @property
    def data(self) -> bytes:
        """Serialized canonical database."""
        return self._data

    def execute(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        """
        Run a read-only statement and fetch all rows.

        Raises:
            sqlite3.Error: On invalid SQL or a write attempt
        """
        with self._lock:
            return self._conn.execute(sql, tuple(params)).fetchall()

    def questions(self) -> List[Question]:
        """All questions in table order."""
        rows = self.execute(f"SELECT * FROM {CANONICAL_TABLE} ORDER BY rowid")
        return [Question.from_record(row) for row in rows]

    def get(self, question_id: str) -> Optional[Question]:
        """Look up one question by id."""
        rows = self.execute(f"SELECT * FROM {CANONICAL_TABLE} WHERE id = ?", (question_id,))
        return Question.from_record(rows[0]) if rows else None

    def close(self) -> None:
        """Release the in-memory copy."""
        with self._lock:
            self._conn.close()

    def __len__(self) -> int:
        return self.execute(f"SELECT COUNT(*) FROM {CANONICAL_TABLE}")[0][0]

    def __enter__(self) -> "QuestionBank":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"QuestionBank(bytes={len(self._data)}, imported={self.imported_count})"
