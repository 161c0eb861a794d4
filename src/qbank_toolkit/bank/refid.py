"""
Module: bank.refid

Purpose:
    Recover book / chapter / question structure from a reference id such
    as "PT_1.1" and order questions in reading order. Total: every input,
    including the empty string, parses to a fully populated reference.

Key Functions:
    - parse_reference(): ref id + source name -> ParsedReference
    - compare_references(): Three-way reading-order comparison
    - reading_order_key(): Sort key for sorted()/list.sort()

Parsing Rules (split on runs of "_" or "."):
    3+ parts: book=p0, chapter=p1, label=p2.p3...
    2 parts:  book=p0, chapter="General", label=p1
    0-1 part: book=source name without extension, chapter="All", label=p0 or "0"

Dependencies:
    - re (std)
    - functools (std): cmp_to_key

Used By:
    - bank.query: Book scoping, sequential order, books_and_chapters
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Any, Optional

from qbank_toolkit.core.models import ParsedReference, Question
from qbank_toolkit.core.utils.text import leading_int, natural_compare

_SEPARATOR_RE = re.compile(r"[_.]+")
_EXTENSION_RE = re.compile(r"\.(?:db|sqlite3?)$", re.IGNORECASE)

GENERAL_CHAPTER = "General"
ALL_CHAPTERS = "All"
UNCATEGORIZED_BOOK = "Uncategorized"


def _book_from_source(source_file: Optional[str]) -> str:
    name = _EXTENSION_RE.sub("", (source_file or "").strip())
    return name or UNCATEGORIZED_BOOK


def parse_reference(ref_id: Optional[str], source_file: Optional[str] = None) -> ParsedReference:
    """
    Parse a reference id into book, chapter and question label.

    Args:
        ref_id: Raw reference id (may be empty)
        source_file: Source display name, the fallback book

    Returns:
        ParsedReference with no empty book or chapter

    Example:
        >>> parse_reference("PT_1.1")
        ParsedReference(book='PT', chapter='1', question_label='1', question_number=1)
        >>> parse_reference("", "bank.sqlite")
        ParsedReference(book='bank', chapter='All', question_label='0', question_number=0)
    """
    parts = [p for p in _SEPARATOR_RE.split((ref_id or "").strip()) if p]

    if len(parts) >= 3:
        book, chapter, label = parts[0], parts[1], ".".join(parts[2:])
    elif len(parts) == 2:
        book, chapter, label = parts[0], GENERAL_CHAPTER, parts[1]
    else:
        book = _book_from_source(source_file)
        chapter = ALL_CHAPTERS
        label = parts[0] if parts else "0"

    return ParsedReference(book, chapter, label, leading_int(label))


def compare_references(a: ParsedReference, b: ParsedReference) -> int:
    """
    Three-way reading-order comparison.

    Book, then chapter (natural, case-insensitive), then question number
    when both are non-zero and differ, else natural label comparison.
    """
    result = natural_compare(a.book, b.book)
    if result:
        return result
    result = natural_compare(a.chapter, b.chapter)
    if result:
        return result
    if a.question_number and b.question_number and a.question_number != b.question_number:
        return -1 if a.question_number < b.question_number else 1
    return natural_compare(a.question_label, b.question_label)


_reference_key = cmp_to_key(compare_references)


def reference_for(question: Question) -> ParsedReference:
    """Parsed reference of a question."""
    return parse_reference(question.ref_id, question.source_file)


def reading_order_key(question: Question) -> Any:
    """
    Sort key placing questions in reading order.

    Example:
        >>> ordered = sorted(questions, key=reading_order_key)
    """
    return _reference_key(reference_for(question))
