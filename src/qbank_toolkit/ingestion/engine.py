"""
Module: ingestion.engine

Purpose:
    Merge any number of SQLite question-bank files into one canonical
    ``questions`` table. Each source is opened from raw bytes, its best
    table is discovered and mapped, every row is normalized and inserted.
    The merged database is returned as an immutable byte blob.

Key Functions:
    - merge_sources(): Synchronous merge of all sources
    - open_source(): Open raw bytes as an in-memory SQLite database
    - discover_tables(): Candidate tables and their columns
    - build_question(): Normalize one source row into a Question

Key Classes:
    - SourceFile: One input file (id, display name, raw bytes)
    - SourceFailure: Recorded per-source failure
    - MergeResult: Imported count, merged bytes, failures
    - SourceIngestionError: A single source could not be ingested
    - MergeError: The merge as a whole failed

Transactions:
    One transaction per source. A failing source rolls back only its own
    rows; rows committed for earlier sources stay.

Dependencies:
    - sqlite3 (std): Source and canonical databases
    - ingestion.column_mapper, ingestion.normalizer

Used By:
    - ingestion.worker: Background merge entry point
    - ingestion.inspection: Shares open_source / discover_tables
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from qbank_toolkit.core.models import Question, classify_question
from qbank_toolkit.core.schemas import CANONICAL_SCHEMA, INSERT_SQL
from qbank_toolkit.core.utils.text import normalize_cell

from .column_mapper import FieldMap, map_columns, select_table
from .config import IngestionConfig
from .normalizer import clean_answer, normalize_choices

logger = logging.getLogger(__name__)


class SourceIngestionError(Exception):
    """A single source file could not be ingested."""
    pass


class MergeError(Exception):
    """The merge as a whole failed; no dataset is published."""
    pass


@dataclass(frozen=True)
class SourceFile:
    """
    One raw input file.

    Attributes:
        id: Caller-chosen identifier, prefixes every question id
        display_name: Human-readable name (usually the file name)
        data: Raw bytes of a SQLite database file
    """

    id: str
    display_name: str
    data: bytes


@dataclass(frozen=True)
class SourceFailure:
    """A source that was skipped, with the reason."""

    source_id: str
    display_name: str
    message: str


@dataclass(frozen=True)
class MergeResult:
    """
    Outcome of a completed merge (immutable).

    Attributes:
        imported_count: Rows inserted across all sources
        data: Serialized canonical database
        failures: Sources that were skipped
    """

    imported_count: int
    data: bytes
    failures: Tuple[SourceFailure, ...] = ()


def quote_identifier(name: str) -> str:
    """Quote an SQLite identifier."""
    return '"' + name.replace('"', '""') + '"'


@contextmanager
def open_source(data: bytes) -> Iterator[sqlite3.Connection]:
    """
    Open raw bytes as an in-memory SQLite database.

    Args:
        data: Raw database file bytes

    Yields:
        Connection to a private copy of the database

    Raises:
        SourceIngestionError: If the bytes cannot be loaded
    """
    conn = sqlite3.connect(":memory:")
    try:
        try:
            conn.deserialize(bytes(data))
        except (sqlite3.Error, OverflowError, TypeError) as e:
            raise SourceIngestionError(f"Unreadable database: {e}") from e
        yield conn
    finally:
        conn.close()


def discover_tables(
    conn: sqlite3.Connection,
    config: Optional[IngestionConfig] = None,
) -> Dict[str, List[str]]:
    """
    List non-system tables and their columns, in discovery order.

    Args:
        conn: Open source connection
        config: Supplies the excluded table prefixes

    Returns:
        Table name -> column names

    Raises:
        SourceIngestionError: If the file is not a database or has no
            usable tables
    """
    config = config or IngestionConfig()
    try:
        names = [
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        ]
    except sqlite3.Error as e:
        raise SourceIngestionError(f"Unreadable database: {e}") from e

    prefixes = tuple(p.lower() for p in config.excluded_table_prefixes)
    tables: Dict[str, List[str]] = {}
    for name in names:
        if name.lower().startswith(prefixes):
            continue
        try:
            columns = [row[1] for row in conn.execute(f"PRAGMA table_info({quote_identifier(name)})")]
        except sqlite3.Error as e:
            logger.debug(f"Skipping table {name!r}: {e}")
            continue
        tables[name] = columns

    if not tables:
        raise SourceIngestionError("No tables found in database")
    return tables


def build_question(
    row: Mapping[str, Any],
    field_map: FieldMap,
    question_id: str,
    source_name: str,
    config: IngestionConfig,
) -> Optional[Question]:
    """
    Normalize one source row into a canonical Question.

    Args:
        row: Column name -> raw value
        field_map: Resolved columns for the table
        question_id: Composite id to assign
        source_name: Display name stored as source_file
        config: Defaults for explanation and placeholder choices

    Returns:
        Question, or None when the row has neither text nor reference id
    """
    def cell(column: Optional[str]) -> str:
        return normalize_cell(row.get(column)) if column else ""

    text = cell(field_map.question_text)
    ref_id = cell(field_map.ref_id)
    if not text and not ref_id:
        return None

    choices = normalize_choices(row, field_map.choice_columns)
    if not text and not choices:
        choices = dict(config.placeholder_choices)

    answer = clean_answer(row.get(field_map.correct_answer) if field_map.correct_answer else None)

    return Question(
        id=question_id,
        source_file=source_name,
        text=text,
        ref_id=ref_id,
        correct_answer=answer,
        choices=choices,
        explanation=cell(field_map.explanation) or config.default_explanation,
        domain=cell(field_map.domain),
        sub_domain=cell(field_map.sub_domain),
        topic=cell(field_map.topic),
        chapter=cell(field_map.chapter),
        heading=cell(field_map.heading),
        hint_1=cell(field_map.hint_1) or None,
        hint_2=cell(field_map.hint_2) or None,
        hint_3=cell(field_map.hint_3) or None,
        kind=classify_question(text, answer, tuple(choices)),
    )


def _composite_id(source_id: str, raw_id: str, seen: Set[str]) -> str:
    """Build "<source>_<raw>", falling back to a random token when unusable."""
    if raw_id:
        candidate = f"{source_id}_{raw_id}"
        if candidate not in seen:
            return candidate
        logger.debug(f"Duplicate id {candidate!r}, assigning a random token")
    while True:
        candidate = f"{source_id}_{uuid.uuid4().hex[:9]}"
        if candidate not in seen:
            return candidate


def _ingest_source(
    master: sqlite3.Connection,
    source: SourceFile,
    config: IngestionConfig,
    seen_ids: Set[str],
) -> int:
    """
    Ingest one source inside its own transaction.

    Returns:
        Number of rows inserted

    Raises:
        SourceIngestionError: If the source cannot be read or inserted
    """
    source_name = source.display_name or config.default_source_name

    with open_source(source.data) as conn:
        tables = discover_tables(conn, config)
        table = select_table(tables, config)
        field_map = map_columns(tables[table], config.aliases)
        logger.debug(f"{source_name}: using table {table!r} with mapping {field_map}")

        taken = set(seen_ids)
        inserted = 0
        master.execute("BEGIN")
        try:
            cursor = conn.execute(f"SELECT * FROM {quote_identifier(table)}")
            columns = [desc[0] for desc in cursor.description]
            for values in cursor:
                row = dict(zip(columns, values))
                raw_id = normalize_cell(row.get(field_map.row_id)) if field_map.row_id else ""
                question_id = _composite_id(source.id, raw_id, taken)
                question = build_question(row, field_map, question_id, source_name, config)
                if question is None:
                    continue
                master.execute(INSERT_SQL, question.to_record())
                taken.add(question_id)
                inserted += 1
            master.execute("COMMIT")
        except Exception as e:
            master.execute("ROLLBACK")
            raise SourceIngestionError(f"Failed to import table {table!r}: {e}") from e

    seen_ids.update(taken)
    return inserted


def merge_sources(
    sources: Sequence[SourceFile],
    config: Optional[IngestionConfig] = None,
) -> MergeResult:
    """
    Merge source files into a fresh canonical dataset.

    Process:
    1. Create the canonical table in a new in-memory database
    2. For each source: open, pick a table, map columns, insert rows
       (one transaction per source; failures are recorded and skipped)
    3. Serialize the canonical database

    Args:
        sources: Files to merge, in order
        config: Ingestion configuration

    Returns:
        MergeResult with imported count, serialized data and failures

    Raises:
        MergeError: If no sources were given or the canonical database
            cannot be created or exported

    Example:
        >>> result = merge_sources([SourceFile("s1", "bank.db", data)])
        >>> result.imported_count
        120
    """
    if not sources:
        raise MergeError("No sources provided")
    config = config or IngestionConfig()

    try:
        master = sqlite3.connect(":memory:", isolation_level=None)
        master.execute(CANONICAL_SCHEMA)
    except sqlite3.Error as e:
        raise MergeError(f"Could not create canonical table: {e}") from e

    try:
        total = 0
        failures: List[SourceFailure] = []
        seen_ids: Set[str] = set()

        for source in sources:
            try:
                count = _ingest_source(master, source, config, seen_ids)
            except SourceIngestionError as e:
                logger.warning(f"Skipping source {source.display_name!r}: {e}")
                failures.append(SourceFailure(source.id, source.display_name, str(e)))
                continue
            logger.info(f"Imported {count} questions from {source.display_name!r}")
            total += count

        try:
            data = master.serialize()
        except sqlite3.Error as e:
            raise MergeError(f"Could not export canonical dataset: {e}") from e
    finally:
        master.close()

    logger.info(
        f"Merged {total} questions from {len(sources) - len(failures)}/{len(sources)} sources"
    )
    return MergeResult(imported_count=total, data=data, failures=tuple(failures))
