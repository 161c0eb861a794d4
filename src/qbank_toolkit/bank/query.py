"""
Module: bank.query

Purpose:
    Read-side of the canonical dataset: filtered question selection,
    counts, per-domain statistics and the book/chapter outline.
    Every operation takes the QuestionBank handle explicitly.

Key Functions:
    - select_questions(): Random sample or reading-order slice
    - available_count(): Rows matching the filters (ignores count/books)
    - total_count(): All rows
    - domain_stats(): Question count per domain label
    - books_and_chapters(): Parsed books with their chapters

Algorithm (select_questions):
    1. Build SQL conditions for domain, review flag, type, images, search
       (and a broad prefix match on book scope)
    2. Reading order requested (sequential or books):
       strict book/chapter filter on parsed reference ids,
       sort by reading order, truncate to count
    3. Otherwise: seeded random sample of `count` rows

Error Handling:
    - bank is None -> DatasetNotInitializedError
    - sqlite3.Error at query time -> logged, empty result

Dependencies:
    - random (std): Seeded sampling
    - sqlite3 (std): Error type
    - bank.refid: Reference parsing and ordering

Used By:
    - Host applications
"""

from __future__ import annotations

import logging
import random
import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from qbank_toolkit.core.models import Question, QuestionKind
from qbank_toolkit.core.schemas import CANONICAL_TABLE
from qbank_toolkit.core.utils.text import natural_key, normalize_cell, split_labels

from .config import UNCATEGORIZED, QueryConfig, QuestionTypeFilter, ReviewFilter
from .dataset import QuestionBank
from .refid import UNCATEGORIZED_BOOK, parse_reference, reading_order_key

logger = logging.getLogger(__name__)

IGNORED_DOMAINS = frozenset({"Assessment", "Assessment Test", "General Knowledge", "General"})

_PIPE_DOMAIN_SQL = (
    "('|' || REPLACE(REPLACE(REPLACE(TRIM(COALESCE(domain, '')), ' | ', '|'), ' |', '|'), '| ', '|') || '|')"
)


class DatasetNotInitializedError(Exception):
    """Raised when querying before any dataset has been built."""
    pass


@dataclass(frozen=True)
class DomainStat:
    """Number of questions carrying a domain label."""

    name: str
    count: int


@dataclass(frozen=True)
class BookStructure:
    """A parsed book and its chapters in natural order."""

    book: str
    chapters: Tuple[str, ...]


def _require(bank: Optional[QuestionBank]) -> QuestionBank:
    if bank is None:
        raise DatasetNotInitializedError("Database not initialized")
    return bank


def _like_escape(text: str) -> str:
    """Escape LIKE wildcards; pair with ESCAPE '\\'."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ─────────────────────────────────────────────────────────────────────────────
# SQL construction
# ─────────────────────────────────────────────────────────────────────────────

def _review_condition(review_filter: ReviewFilter) -> Optional[str]:
    if review_filter is ReviewFilter.EXCLUDE:
        return "(LTRIM(question_text) NOT LIKE '~%')"
    if review_filter is ReviewFilter.ONLY:
        return "(LTRIM(question_text) LIKE '~%')"
    return None


def _domain_condition(domains: List[str]) -> Tuple[Optional[str], List[Any]]:
    wanted = [normalize_cell(d) for d in domains if normalize_cell(d)]
    if not wanted:
        return None, []

    parts: List[str] = []
    params: List[Any] = []
    if UNCATEGORIZED in wanted:
        parts.append("(domain IS NULL OR TRIM(domain) = '')")
    for name in wanted:
        if name == UNCATEGORIZED:
            continue
        parts.append(f"({_PIPE_DOMAIN_SQL} LIKE ? ESCAPE '\\')")
        params.append(f"%|{_like_escape(name)}|%")
    return f"({' OR '.join(parts)})", params


def _book_condition(books: List[str]) -> Tuple[Optional[str], List[Any]]:
    parts: List[str] = []
    params: List[Any] = []
    for book in books:
        if book == UNCATEGORIZED_BOOK:
            parts.append("(TRIM(COALESCE(source_file, '')) = '')")
        prefix = f"{_like_escape(book)}%"
        parts.append("(ref_id LIKE ? ESCAPE '\\' OR source_file LIKE ? ESCAPE '\\')")
        params.extend([prefix, prefix])
    if not parts:
        return None, []
    return f"({' OR '.join(parts)})", params


def _build_where(config: QueryConfig, include_books: bool = True) -> Tuple[str, List[Any]]:
    """Combine every filter into a WHERE clause and its parameters."""
    conditions: List[str] = []
    params: List[Any] = []

    domain_sql, domain_params = _domain_condition(config.domains)
    if domain_sql:
        conditions.append(domain_sql)
        params.extend(domain_params)

    review_sql = _review_condition(config.review_filter)
    if review_sql:
        conditions.append(review_sql)

    if config.question_type is QuestionTypeFilter.MATCHING:
        conditions.append("(kind = ?)")
        params.append(QuestionKind.MATCHING.value)
    elif config.question_type is QuestionTypeFilter.MULTI:
        conditions.append("(kind = ?)")
        params.append(QuestionKind.MULTI.value)
    elif config.question_type is QuestionTypeFilter.IMAGE:
        conditions.append("(question_text LIKE '%[PIC]%')")

    if config.exclude_images:
        conditions.append("(question_text NOT LIKE '%[PIC]%')")

    search = normalize_cell(config.search_text)
    if search:
        conditions.append("(question_text LIKE ? ESCAPE '\\')")
        params.append(f"%{_like_escape(search)}%")

    if include_books and config.book_mode:
        book_sql, book_params = _book_condition(config.books)
        if book_sql:
            conditions.append(book_sql)
            params.extend(book_params)

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


# ─────────────────────────────────────────────────────────────────────────────
# Selection
# ─────────────────────────────────────────────────────────────────────────────

def _in_book_scope(question: Question, books: Set[str], chapters: Optional[Set[str]]) -> bool:
    parsed = parse_reference(question.ref_id, question.source_file)
    if parsed.book not in books:
        return False
    return chapters is None or parsed.chapter in chapters


def select_questions(bank: Optional[QuestionBank], config: QueryConfig) -> List[Question]:
    """
    Select questions for a quiz.

    Args:
        bank: Dataset handle
        config: Filters, scope and ordering

    Returns:
        At most config.count questions; reading order when sequential or
        a book scope is set, a random sample otherwise

    Raises:
        DatasetNotInitializedError: If bank is None

    Example:
        >>> select_questions(bank, QueryConfig(count=5, books=["PT"], chapters=["1"]))
        [Question('s1_PT_1.1', ...), Question('s1_PT_1.2', ...), ...]
    """
    bank = _require(bank)
    where, params = _build_where(config)
    sql = f"SELECT * FROM {CANONICAL_TABLE} {where} ORDER BY id"

    try:
        rows = bank.execute(sql, params)
    except sqlite3.Error as e:
        logger.warning(f"Question query failed: {e}")
        return []

    if config.ordered:
        questions = [Question.from_record(row) for row in rows]
        if config.book_mode:
            books = set(config.books)
            chapters = config.chapter_set
            questions = [q for q in questions if _in_book_scope(q, books, chapters)]
        questions.sort(key=reading_order_key)
        selected = questions[: config.count]
    else:
        rng = random.Random(config.seed)
        sample = rng.sample(rows, min(config.count, len(rows)))
        selected = [Question.from_record(row) for row in sample]

    logger.info(
        f"Selected {len(selected)} of {len(rows)} matching questions "
        f"({'reading order' if config.ordered else 'random'})"
    )
    return selected


def available_count(bank: Optional[QuestionBank], config: QueryConfig) -> int:
    """
    Number of rows matching the filters of config.

    Book scope and count are ignored; 0 on query failure.

    Raises:
        DatasetNotInitializedError: If bank is None
    """
    bank = _require(bank)
    where, params = _build_where(config, include_books=False)
    try:
        return bank.execute(f"SELECT COUNT(*) FROM {CANONICAL_TABLE} {where}", params)[0][0]
    except sqlite3.Error as e:
        logger.warning(f"Count query failed: {e}")
        return 0


def total_count(bank: Optional[QuestionBank]) -> int:
    """Number of rows in the dataset, 0 on query failure."""
    bank = _require(bank)
    try:
        return bank.execute(f"SELECT COUNT(*) FROM {CANONICAL_TABLE}")[0][0]
    except sqlite3.Error as e:
        logger.warning(f"Count query failed: {e}")
        return 0


# ─────────────────────────────────────────────────────────────────────────────
# Outline
# ─────────────────────────────────────────────────────────────────────────────

def domain_stats(
    bank: Optional[QuestionBank],
    review_filter: ReviewFilter = ReviewFilter.ALL,
) -> List[DomainStat]:
    """
    Count questions per domain label.

    A question with several pipe-separated labels counts once per label.
    Generic labels (Assessment, General, ...) are ignored; rows with no
    domain are counted as "Uncategorized".

    Returns:
        DomainStat list in natural name order

    Raises:
        DatasetNotInitializedError: If bank is None
    """
    bank = _require(bank)
    review_sql = _review_condition(ReviewFilter(review_filter))
    where = f"WHERE {review_sql}" if review_sql else ""
    try:
        rows = bank.execute(f"SELECT domain FROM {CANONICAL_TABLE} {where}")
    except sqlite3.Error as e:
        logger.warning(f"Domain query failed: {e}")
        return []

    counts: Dict[str, int] = {}
    for row in rows:
        labels = split_labels(normalize_cell(row[0]))
        if not labels:
            counts[UNCATEGORIZED] = counts.get(UNCATEGORIZED, 0) + 1
            continue
        for label in labels:
            if label not in IGNORED_DOMAINS:
                counts[label] = counts.get(label, 0) + 1

    return [
        DomainStat(name, count)
        for name, count in sorted(counts.items(), key=lambda item: natural_key(item[0]))
    ]


def books_and_chapters(bank: Optional[QuestionBank]) -> List[BookStructure]:
    """
    Outline of the parsed books and their chapters.

    Returns:
        BookStructure list, books and chapters in natural order

    Raises:
        DatasetNotInitializedError: If bank is None
    """
    bank = _require(bank)
    try:
        rows = bank.execute(f"SELECT DISTINCT ref_id, source_file FROM {CANONICAL_TABLE}")
    except sqlite3.Error as e:
        logger.warning(f"Book query failed: {e}")
        return []

    outline: Dict[str, Set[str]] = {}
    for ref_id, source_file in rows:
        parsed = parse_reference(ref_id, source_file)
        outline.setdefault(parsed.book, set()).add(parsed.chapter)

    return [
        BookStructure(book, tuple(sorted(chapters, key=natural_key)))
        for book, chapters in sorted(outline.items(), key=lambda item: natural_key(item[0]))
    ]
