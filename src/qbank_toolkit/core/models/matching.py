"""
Module: matching

Purpose:
    MatchConfiguration - the derived, never-persisted layout and answer key
    of a matching question. Built on demand by grading.matching.

Key Classes:
    - MatchConfiguration: left items, right choice keys, correct links

Used By:
    - grading.matching: Builds configurations
    - grading.evaluator: Grades matching submissions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

LINK_SEPARATOR = "||"


def make_link(left_text: str, choice_key: str) -> str:
    """Format a correct-link string "<leftText>||<choiceKey>"."""
    return f"{left_text}{LINK_SEPARATOR}{choice_key}"


@dataclass(frozen=True)
class MatchConfiguration:
    """
    Layout and answer key of one matching question (immutable).

    Attributes:
        left_items: Display texts of the items to match, in display order
        right_choices: Choice keys offered on the right, in display order
        correct_links: Every acceptable "<leftText>||<choiceKey>" pairing

    Invariants:
        - is_valid is False exactly when no pair could be resolved
    """

    left_items: Tuple[str, ...] = ()
    right_choices: Tuple[str, ...] = ()
    correct_links: FrozenSet[str] = frozenset()

    @property
    def is_valid(self) -> bool:
        return len(self.correct_links) > 0
