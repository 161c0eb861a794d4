"""
Question Bank Toolkit Core Package

Shared data models and utilities used by ingestion, the query layer and
the grader.

1. **Immutable Data Models**
   - Every record is a frozen dataclass; changes create new instances.

2. **Kind Decided Once**
   - A question's answer encoding (single / multi / matching) is classified
     at normalization time and stored, never re-derived ad hoc.

3. **Heuristics Never Raise**
   - Text helpers return safe defaults for NULLs and odd values.
"""

from .models import (
    Question,
    QuestionKind,
    classify_question,
    MatchConfiguration,
    ParsedReference,
)

__all__ = [
    "Question",
    "QuestionKind",
    "classify_question",
    "MatchConfiguration",
    "ParsedReference",
]
