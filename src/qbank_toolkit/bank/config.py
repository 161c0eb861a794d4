"""
Module: bank.config

Purpose:
    Configuration dataclass for question selection.
    Immutable configuration with validation on construction.

Key Classes:
    - ReviewFilter: Treatment of questions flagged for review
    - QuestionTypeFilter: Restrict to one question type
    - QueryConfig: Inputs of select_questions / available_count

Dependencies:
    - dataclasses (std)

Used By:
    - bank.query: Query layer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from .refid import ALL_CHAPTERS

UNCATEGORIZED = "Uncategorized"


class ReviewFilter(str, Enum):
    """Include, drop, or keep only rows whose text starts with "~"."""

    ALL = "all"
    EXCLUDE = "exclude"
    ONLY = "only"


class QuestionTypeFilter(str, Enum):
    """Restrict results to one question type."""

    ALL = "all"
    MATCHING = "matching"
    MULTI = "multi"
    IMAGE = "image"


@dataclass(frozen=True)
class QueryConfig:
    """
    Inputs for selecting questions (immutable).

    Attributes:
        count: Maximum number of questions to return
        domains: Domain allow-list (empty = all; "Uncategorized" = empty domain)
        review_filter: all / exclude / only flagged questions
        search_text: Substring the question text must contain
        question_type: all / matching / multi / image
        exclude_images: Drop [PIC] questions
        books: Book scope (non-empty switches to reading order)
        chapters: Chapters within the books (empty or "All" = every chapter)
        sequential: Reading order instead of a random sample
        seed: Random seed for reproducible samples (None = unseeded)

    Invariants:
        - count > 0

    Example:
        >>> config = QueryConfig(count=20, domains=["Security"], review_filter="exclude")
        >>> config.review_filter
        <ReviewFilter.EXCLUDE: 'exclude'>
    """

    count: int

    # Filters
    domains: List[str] = field(default_factory=list)
    review_filter: ReviewFilter = ReviewFilter.ALL
    search_text: str = ""
    question_type: QuestionTypeFilter = QuestionTypeFilter.ALL
    exclude_images: bool = False

    # Book scope
    books: List[str] = field(default_factory=list)
    chapters: List[str] = field(default_factory=list)

    # Ordering
    sequential: bool = False
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.count <= 0:
            raise ValueError(f"count must be positive: {self.count}")
        # Accept plain strings for the enum fields
        object.__setattr__(self, "review_filter", ReviewFilter(self.review_filter))
        object.__setattr__(self, "question_type", QuestionTypeFilter(self.question_type))

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def book_mode(self) -> bool:
        """True when a book scope was requested."""
        return bool(self.books)

    @property
    def ordered(self) -> bool:
        """True when results come back in reading order."""
        return self.sequential or self.book_mode

    @property
    def chapter_set(self) -> Optional[Set[str]]:
        """Requested chapters, None meaning every chapter."""
        chapters = {c.strip() for c in self.chapters if c and c.strip()}
        if not chapters or ALL_CHAPTERS in chapters:
            return None
        return chapters
