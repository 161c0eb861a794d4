"""
Module: questions

Purpose:
    Provides the Question dataclass - the canonical row shared by the
    ingestion engine, the query layer and the grader. Immutable, with the
    question kind decided once and carried alongside the row.

Key Classes:
    - QuestionKind: SINGLE / MULTI / MATCHING variant
    - Question: Canonical question record

Key Functions:
    - classify_question(): Decide the QuestionKind from text tags and answer shape
    - Question.to_record() / Question.from_record(): Canonical table mapping

Dependencies:
    - dataclasses (std)
    - json (std)
    - re (std)

Used By:
    - ingestion.engine: Builds records for the canonical table
    - bank.dataset, bank.query: Rebuild Questions from rows
    - grading.matching, grading.evaluator

Design Note:
    The answer string means different things per kind. Instead of
    re-guessing "is this multi-select?" at every call site, the kind is
    classified at normalization time and stored in the canonical table.
    The multi-select heuristic (comma in answer, or every character a valid
    key) is kept for compatibility; a single-choice answer made of several
    characters that are all valid keys is classified as MULTI.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from ..utils.text import split_labels

MATCH_TAG = re.compile(r"\[MATCH\]", re.IGNORECASE)
MULTI_TAG = re.compile(r"\[MULTI\]", re.IGNORECASE)
IMAGE_TAG = re.compile(r"\[PIC\]", re.IGNORECASE)
REVIEW_MARKER = "~"

_ALL_TAGS = re.compile(r"\[(?:MATCH|MULTI|PIC)\]", re.IGNORECASE)


class QuestionKind(str, Enum):
    """How a question's answer key is encoded and graded."""

    SINGLE = "single"
    MULTI = "multi"
    MATCHING = "matching"


def classify_question(
    text: str,
    correct_answer: str,
    choice_keys: Optional[Tuple[str, ...]] = None,
) -> QuestionKind:
    """
    Decide the question kind.

    Priority:
    1. [MATCH] tag in text -> MATCHING
    2. [MULTI] tag in text -> MULTI
    3. Comma in the answer key -> MULTI
    4. Answer longer than one character and every character is a choice key -> MULTI
    5. Otherwise SINGLE

    Args:
        text: Question text (may carry inline tags)
        correct_answer: Normalized answer key
        choice_keys: Keys of the question's choices

    Returns:
        QuestionKind for the row

    Example:
        >>> classify_question("Pick two", "A,C", ("A", "B", "C", "D"))
        <QuestionKind.MULTI: 'multi'>
    """
    text = text or ""
    if MATCH_TAG.search(text):
        return QuestionKind.MATCHING
    if MULTI_TAG.search(text):
        return QuestionKind.MULTI

    answer = (correct_answer or "").strip().upper()
    if "," in answer:
        return QuestionKind.MULTI

    keys = set(choice_keys or ())
    if len(answer) > 1 and keys and all(ch in keys for ch in answer):
        return QuestionKind.MULTI
    return QuestionKind.SINGLE


@dataclass(frozen=True)
class Question:
    """
    Canonical question record (immutable).

    Attributes:
        id: Globally unique id, "<source id>_<raw row id>"
        source_file: Display name of the file the row came from
        text: Question text, may carry [MATCH]/[MULTI]/[PIC] tags or a
            leading "~" review marker
        correct_answer: Normalized answer key (encoding depends on kind)
        choices: Ordered mapping of single-character key -> option text
        ref_id: Structured locator such as "PT_1.1" ("" when absent)
        explanation: Explanation text
        domain / sub_domain / topic: Pipe-delimited category labels
        chapter / heading: Pipe-delimited, optional
        hint_1..hint_3: Optional hints
        kind: Answer encoding; classified from the other fields when omitted

    Example:
        >>> q = Question(id="s1_1", source_file="bank.db", text="2+2?",
        ...              correct_answer="B", choices={"A": "3", "B": "4"})
        >>> q.kind
        <QuestionKind.SINGLE: 'single'>
    """

    id: str
    source_file: str
    text: str
    correct_answer: str
    choices: Dict[str, str] = field(default_factory=dict)
    ref_id: str = ""
    explanation: str = ""
    domain: str = ""
    sub_domain: str = ""
    topic: str = ""
    chapter: str = ""
    heading: str = ""
    hint_1: Optional[str] = None
    hint_2: Optional[str] = None
    hint_3: Optional[str] = None
    kind: Optional[QuestionKind] = None

    def __post_init__(self) -> None:
        """Fill in the kind when the caller did not supply one."""
        if self.kind is None:
            kind = classify_question(self.text, self.correct_answer, tuple(self.choices))
            object.__setattr__(self, "kind", kind)
        elif not isinstance(self.kind, QuestionKind):
            object.__setattr__(self, "kind", QuestionKind(self.kind))

    # ─────────────────────────────────────────────────────────────────────────
    # Derived views
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def domains(self) -> Tuple[str, ...]:
        """Domain labels; empty means uncategorized."""
        return split_labels(self.domain)

    @property
    def sub_domains(self) -> Tuple[str, ...]:
        return split_labels(self.sub_domain)

    @property
    def topics(self) -> Tuple[str, ...]:
        return split_labels(self.topic)

    @property
    def is_matching(self) -> bool:
        return self.kind is QuestionKind.MATCHING

    @property
    def is_multi_select(self) -> bool:
        return self.kind is QuestionKind.MULTI

    @property
    def is_flagged_for_review(self) -> bool:
        """Rows whose text starts with "~" are flagged for review."""
        return self.text.lstrip().startswith(REVIEW_MARKER)

    @property
    def has_image(self) -> bool:
        return bool(IMAGE_TAG.search(self.text))

    @property
    def display_text(self) -> str:
        """Question text with inline type tags removed."""
        return _ALL_TAGS.sub("", self.text).strip()

    @property
    def hints(self) -> Tuple[str, ...]:
        """Non-empty hints in order."""
        return tuple(h for h in (self.hint_1, self.hint_2, self.hint_3) if h)

    # ─────────────────────────────────────────────────────────────────────────
    # Canonical table mapping
    # ─────────────────────────────────────────────────────────────────────────

    def to_record(self) -> Dict[str, Any]:
        """
        Serialize to a canonical-table row.

        Returns:
            Dict keyed by canonical column name, choices as JSON
        """
        return {
            "id": self.id,
            "source_file": self.source_file,
            "question_text": self.text,
            "ref_id": self.ref_id,
            "correct_answer": self.correct_answer,
            "choices_json": json.dumps(self.choices, ensure_ascii=False),
            "explanation": self.explanation,
            "domain": self.domain,
            "sub_domain": self.sub_domain,
            "topic": self.topic,
            "chapter": self.chapter,
            "heading": self.heading,
            "hint_1": self.hint_1,
            "hint_2": self.hint_2,
            "hint_3": self.hint_3,
            "kind": self.kind.value,
        }

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> Question:
        """
        Rebuild a Question from a canonical-table row.

        Args:
            row: Mapping such as sqlite3.Row

        Returns:
            Question instance
        """
        try:
            choices = json.loads(row["choices_json"] or "{}")
        except (TypeError, ValueError):
            choices = {}
        return cls(
            id=str(row["id"]),
            source_file=row["source_file"] or "",
            text=row["question_text"] or "",
            ref_id=row["ref_id"] or "",
            correct_answer=row["correct_answer"] or "",
            choices=dict(choices),
            explanation=row["explanation"] or "",
            domain=row["domain"] or "",
            sub_domain=row["sub_domain"] or "",
            topic=row["topic"] or "",
            chapter=row["chapter"] or "",
            heading=row["heading"] or "",
            hint_1=row["hint_1"] or None,
            hint_2=row["hint_2"] or None,
            hint_3=row["hint_3"] or None,
            kind=QuestionKind(row["kind"]) if row["kind"] else None,
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"Question({self.id!r}, kind={self.kind.value}, choices={len(self.choices)})"
