"""
Module: references

Purpose:
    ParsedReference - the book / chapter / question components recovered
    from a structured reference id. Produced by bank.refid.

Used By:
    - bank.refid: Parser and reading-order comparator
    - bank.query: Book/chapter scoping and sequential ordering
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedReference:
    """
    Location of a question inside a book (immutable).

    Attributes:
        book: Book code, never empty
        chapter: Chapter code ("General" / "All" when the id has none)
        question_label: Question label such as "3" or "1.2"
        question_number: Leading integer of the label, 0 when non-numeric

    Example:
        >>> ParsedReference("PT", "1", "4", 4)
        ParsedReference(book='PT', chapter='1', question_label='4', question_number=4)
    """

    book: str
    chapter: str
    question_label: str
    question_number: int = 0
