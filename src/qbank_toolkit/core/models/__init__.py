"""
Core Models Package

Immutable data models shared by every stage of the toolkit.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation between ingestion, querying and grading
2. Safe to hand across threads and to the background merge worker
3. Easier to reason about data flow

| Model | Produced by | Consumed by |
|-------|-------------|-------------|
| `Question` | ingestion.engine / bank.dataset | bank.query, grading |
| `MatchConfiguration` | grading.matching | grading.evaluator |
| `ParsedReference` | bank.refid | bank.query |
"""

from .questions import Question, QuestionKind, classify_question
from .matching import MatchConfiguration, make_link
from .references import ParsedReference

__all__ = [
    "Question",
    "QuestionKind",
    "classify_question",
    "MatchConfiguration",
    "make_link",
    "ParsedReference",
]
