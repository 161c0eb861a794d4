"""
Module: grading.matching

Purpose:
    Derive the layout and answer key of a matching question from its
    choices and its free-text answer column.

Key Functions:
    - build_match_configuration(): Question -> MatchConfiguration

Algorithm:
    1. Group choices by identifier: the first character of the trimmed
       cell, uppercased ("A. text" and "A - text" both group under "A")
    2. Read answer lines ("A,1" per line, literal "\\n" accepted); the
       first character of each of the first two parts are the pair ids;
       a pair is kept only when both ids name a group
    3. Left ids and right ids are natural-sorted for display order
    4. Correct links are every left text x right key of each kept pair

    Nothing here raises: unparseable answers give an invalid configuration.

Dependencies:
    - core.models: MatchConfiguration
    - core.utils.text: Enumerator handling, natural sort

Used By:
    - grading.evaluator: Matching grading
    - Host applications: Rendering matching questions
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from qbank_toolkit.core.models import MatchConfiguration, Question, make_link
from qbank_toolkit.core.utils.text import natural_key, strip_enumerator

logger = logging.getLogger(__name__)

_QUOTES = "'\""
_QUOTE_TABLE = str.maketrans("", "", _QUOTES)


def _group_choices(question: Question) -> Dict[str, List[Tuple[str, str]]]:
    """Identifier -> [(choice key, display text)] in choice order."""
    groups: Dict[str, List[Tuple[str, str]]] = {}
    for key, value in question.choices.items():
        text = str(value).strip()
        if not text:
            continue
        groups.setdefault(text[0].upper(), []).append((key, strip_enumerator(text)))
    return groups


def _answer_pairs(answer: str) -> List[Tuple[str, str]]:
    """(left id, right id) per answer line with at least two parts."""
    pairs = []
    for line in answer.replace("\\n", "\n").split("\n"):
        line = line.strip()
        if not line:
            continue
        parts = [p.strip().translate(_QUOTE_TABLE).upper() for p in line.split(",")]
        if len(parts) >= 2 and parts[0] and parts[1]:
            pairs.append((parts[0][0], parts[1][0]))
    return pairs


def build_match_configuration(question: Question) -> MatchConfiguration:
    """
    Build the matching layout and answer key for a question.

    Args:
        question: Question whose answer encodes "left,right" pairs

    Returns:
        MatchConfiguration; is_valid is False when no pair resolves

    Example:
        >>> q = Question(id="m1", source_file="bank.db", text="[MATCH] Pair them",
        ...              correct_answer="A,1\\n C,2",
        ...              choices={"A": "A. x", "B": "B. y", "C": "C. z",
        ...                       "1": "1. p", "2": "2. q"})
        >>> config = build_match_configuration(q)
        >>> config.left_items, sorted(config.correct_links)
        (('x', 'z'), ['x||1', 'z||2'])
    """
    groups = _group_choices(question)

    left_ids = set()
    right_ids = set()
    valid_pairs = []
    for left, right in _answer_pairs(question.correct_answer or ""):
        if left in groups and right in groups:
            left_ids.add(left)
            right_ids.add(right)
            valid_pairs.append((left, right))
        else:
            logger.debug(f"{question.id}: dropping unresolved pair {left},{right}")

    left_items = tuple(
        text for ident in sorted(left_ids, key=natural_key) for _, text in groups[ident]
    )
    right_choices = tuple(
        key for ident in sorted(right_ids, key=natural_key) for key, _ in groups[ident]
    )
    correct_links = frozenset(
        make_link(left_text, right_key)
        for left, right in valid_pairs
        for _, left_text in groups[left]
        for right_key, _ in groups[right]
    )

    return MatchConfiguration(left_items, right_choices, correct_links)
