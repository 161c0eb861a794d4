"""
Module: ingestion.config

Purpose:
    Configuration dataclasses for the ingestion engine. Column alias lists
    are plain data here rather than conditionals scattered through the
    mapper.

Key Classes:
    - ColumnAliases: Ordered alias lists per canonical field
    - IngestionConfig: Main configuration for merging sources

Dependencies:
    - dataclasses (std)

Used By:
    - ingestion.column_mapper: Alias resolution
    - ingestion.engine: Merge behaviour and defaults
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Tuple


@dataclass(frozen=True)
class ColumnAliases:
    """
    Accepted column names per canonical field, in priority order.

    Matching is case-insensitive on trimmed names; the first alias that
    matches a column wins.
    """

    question_text: Tuple[str, ...] = (
        "Question Text", "QuestionText", "Question", "text", "body",
        "content", "description", "question_text",
    )
    ref_id: Tuple[str, ...] = (
        "Source", "Y", "RefID", "ReferenceID", "Reference_ID", "Source_ID",
        "Code", "Label", "QID", "ID",
    )
    correct_answer: Tuple[str, ...] = (
        "CorrectAnswer(s)", "CorrectAnswer", "Correct Answer", "Answer",
        "Key", "Ans", "correct_answer",
    )
    explanation: Tuple[str, ...] = ("Explanation",)
    domain: Tuple[str, ...] = ("Domain", "Domains")
    sub_domain: Tuple[str, ...] = ("Sub-Domain", "Sub Domain", "Sub_Domain", "SubDomain")
    topic: Tuple[str, ...] = ("Topic Area", "TopicArea", "Topic")
    chapter: Tuple[str, ...] = ("Chapter", "Module")
    heading: Tuple[str, ...] = ("Heading",)
    row_id: Tuple[str, ...] = ("ID", "id", "pk")
    hint_1: Tuple[str, ...] = ("hint_1", "Hint 1", "Hint1")
    hint_2: Tuple[str, ...] = ("hint_2", "Hint 2", "Hint2")
    hint_3: Tuple[str, ...] = ("hint_3", "Hint 3", "Hint3")

    def as_dict(self) -> Dict[str, Tuple[str, ...]]:
        """Field name -> alias tuple, in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for merging source files (immutable).

    Attributes:
        aliases: Column alias lists per canonical field
        excluded_table_prefixes: System tables that are never candidates
        placeholder_choices: Substituted when a row has no text and no choices
        default_explanation: Stored when a row has no explanation
        default_source_name: Stored when a source has no display name
        question_score: Points for a column containing "question"
        answer_score: Points for a column containing "answer"

    Example:
        >>> config = IngestionConfig(default_explanation="")
        >>> config.question_score
        5
    """

    aliases: ColumnAliases = field(default_factory=ColumnAliases)
    excluded_table_prefixes: Tuple[str, ...] = ("sqlite_", "android_")
    placeholder_choices: Tuple[Tuple[str, str], ...] = (
        ("A", "Option A"),
        ("B", "Option B"),
        ("C", "Option C"),
        ("D", "Option D"),
    )
    default_explanation: str = "No explanation."
    default_source_name: str = "Unknown Source"
    question_score: int = 5
    answer_score: int = 2

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.question_score < 0 or self.answer_score < 0:
            raise ValueError(
                f"table scores must be non-negative: "
                f"question={self.question_score}, answer={self.answer_score}"
            )
        for key, _ in self.placeholder_choices:
            if len(key) != 1 or not key.isupper():
                raise ValueError(f"placeholder choice keys must be single uppercase letters: {key!r}")
