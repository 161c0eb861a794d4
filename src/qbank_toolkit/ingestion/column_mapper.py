"""
Module: ingestion.column_mapper

Purpose:
    Heuristic schema matching. Picks the most question-like table in a
    source file and maps its columns onto canonical fields. Everything here
    is a pure function of column names, so the same table always yields the
    same mapping.

Key Functions:
    - score_table(): Points for "question"-like and "answer"-like columns
    - select_table(): Highest-scoring table, first one wins ties
    - map_columns(): Resolve canonical fields from alias lists
    - choice_key(): Recognise "A", "Choice B", "choice_3" style columns

Key Classes:
    - FieldMap: Canonical field -> source column (None when unresolved)

Dependencies:
    - re (std)
    - ingestion.config: ColumnAliases, IngestionConfig

Used By:
    - ingestion.engine: Per-source table discovery and row mapping
    - ingestion.inspection: Integrity report
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

from qbank_toolkit.core.utils.text import letter_for_number

from .config import ColumnAliases, IngestionConfig

logger = logging.getLogger(__name__)

_CHOICE_COLUMN_RE = re.compile(
    r"^(?:choice[ _]?)?([a-z]|[1-9]|1[0-9]|2[0-6])$",
    re.IGNORECASE,
)
_QUESTION_RE = re.compile(r"question", re.IGNORECASE)
_ANSWER_RE = re.compile(r"answer", re.IGNORECASE)


@dataclass(frozen=True)
class FieldMap:
    """
    Resolved column for each canonical field (immutable).

    Unresolved fields are None. ``choice_columns`` lists
    (column name, canonical key) pairs in table column order.
    """

    question_text: Optional[str] = None
    ref_id: Optional[str] = None
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    domain: Optional[str] = None
    sub_domain: Optional[str] = None
    topic: Optional[str] = None
    chapter: Optional[str] = None
    heading: Optional[str] = None
    row_id: Optional[str] = None
    hint_1: Optional[str] = None
    hint_2: Optional[str] = None
    hint_3: Optional[str] = None
    choice_columns: Tuple[Tuple[str, str], ...] = ()

    @property
    def choice_keys(self) -> Tuple[str, ...]:
        """Canonical choice keys in column order (may repeat)."""
        return tuple(key for _, key in self.choice_columns)


def score_table(columns: Sequence[str], config: Optional[IngestionConfig] = None) -> int:
    """
    Score how question-bank-like a table is.

    Args:
        columns: Column names of the table
        config: Scoring weights (defaults: question=5, answer=2)

    Returns:
        Sum of the awarded points

    Example:
        >>> score_table(["Question", "Answer", "ChoiceA"])
        7
    """
    config = config or IngestionConfig()
    score = 0
    if any(_QUESTION_RE.search(col or "") for col in columns):
        score += config.question_score
    if any(_ANSWER_RE.search(col or "") for col in columns):
        score += config.answer_score
    return score


def select_table(
    tables: Mapping[str, Sequence[str]],
    config: Optional[IngestionConfig] = None,
) -> Optional[str]:
    """
    Pick the best candidate table.

    Args:
        tables: Table name -> column names, in discovery order
        config: Scoring weights

    Returns:
        Name of the highest-scoring table (first encountered on ties),
        or None when there are no tables
    """
    best_name: Optional[str] = None
    best_score = -1
    for name, columns in tables.items():
        score = score_table(columns, config)
        logger.debug(f"Table {name!r} scored {score}")
        if score > best_score:
            best_name, best_score = name, score
    return best_name


def choice_key(column: str) -> Optional[str]:
    """
    Canonical choice key for a column name, or None if it is not a choice column.

    Accepts an optional "choice" / "choice " / "choice_" prefix followed by a
    single letter or a number 1-26; numbers map to letters.

    Example:
        >>> choice_key("Choice B"), choice_key("2"), choice_key("notes")
        ('B', 'B', None)
    """
    match = _CHOICE_COLUMN_RE.match((column or "").strip())
    if not match:
        return None
    token = match.group(1)
    if token.isdigit():
        return letter_for_number(int(token))
    return token.upper()


def _find_column(columns: Sequence[str], aliases: Sequence[str]) -> Optional[str]:
    """First column matching an alias (case-insensitive, trimmed), alias order wins."""
    cleaned = [(col or "").strip().lower() for col in columns]
    for alias in aliases:
        wanted = alias.strip().lower()
        if wanted in cleaned:
            return columns[cleaned.index(wanted)]
    return None


def map_columns(
    columns: Sequence[str],
    aliases: Optional[ColumnAliases] = None,
) -> FieldMap:
    """
    Map a table's columns onto canonical fields.

    Process:
    1. For each canonical field, test its alias list in order
    2. Collect choice columns among the columns not claimed in step 1

    Args:
        columns: Column names of the chosen table
        aliases: Alias lists (defaults to ColumnAliases())

    Returns:
        FieldMap; never raises on unexpected names

    Example:
        >>> fm = map_columns(["Question", "Answer", "ChoiceA", "ChoiceB"])
        >>> fm.question_text, fm.correct_answer, fm.choice_keys
        ('Question', 'Answer', ('A', 'B'))
    """
    aliases = aliases or ColumnAliases()
    resolved = {
        field_name: _find_column(columns, alias_list)
        for field_name, alias_list in aliases.as_dict().items()
    }
    claimed = {col for col in resolved.values() if col is not None}

    choice_columns = []
    for col in columns:
        if col in claimed:
            continue
        key = choice_key(col)
        if key:
            choice_columns.append((col, key))

    return FieldMap(choice_columns=tuple(choice_columns), **resolved)
