"""
Module: grading.evaluator

Purpose:
    Grade a submitted answer against a question with strict rules:
    matching and multi-select need the exact set, single choice needs the
    exact key. Grading dispatches on the stored question kind.

Key Functions:
    - is_correct(): True only for an exactly correct submission
    - correct_keys(): Canonical correct set of a question

Submission Shapes:
    SINGLE:   "B" (a sequence uses its first element)
    MULTI:    ["A", "C"] in any order (a bare string counts as one key)
    MATCHING: ["x||1", "z||2"] in any order (anything else counts as empty)
    None is always wrong.

Used By:
    - Host applications
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Tuple

from qbank_toolkit.core.models import Question, QuestionKind

from .matching import build_match_configuration

_QUOTES = "'\""
_QUOTE_TABLE = str.maketrans("", "", _QUOTES)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _answer_options(question: Question) -> Tuple[str, ...]:
    """Correct keys in answer order."""
    answer = (question.correct_answer or "").strip().upper()
    if "," in answer:
        return tuple(
            part.strip().translate(_QUOTE_TABLE) for part in answer.split(",")
        )
    if question.kind is QuestionKind.MULTI and len(answer) > 1:
        return tuple(answer)
    return (answer,)


def correct_keys(question: Question) -> FrozenSet[str]:
    """
    Canonical correct set of a question.

    Returns:
        Correct links for matching questions, correct choice keys otherwise
    """
    if question.kind is QuestionKind.MATCHING:
        return build_match_configuration(question).correct_links
    if question.kind is QuestionKind.MULTI:
        return frozenset(_answer_options(question))
    return frozenset(_answer_options(question)[:1])


def _as_set(values: Iterable[Any]) -> FrozenSet[Any]:
    """Submitted values as a set; unhashable entries make it empty."""
    try:
        return frozenset(values)
    except TypeError:
        return frozenset()


def is_correct(question: Question, submitted: Any) -> bool:
    """
    Grade a submission.

    Args:
        question: Question being answered
        submitted: Key, sequence of keys, sequence of links, or None

    Returns:
        True only for an exactly correct submission; never raises

    Example:
        >>> q = Question(id="q1", source_file="bank.db", text="Pick two",
        ...              correct_answer="A,C", choices={"A": "a", "B": "b", "C": "c", "D": "d"})
        >>> is_correct(q, ["A"]), is_correct(q, ["C", "A"])
        (False, True)
    """
    if submitted is None:
        return False

    if question.kind is QuestionKind.MATCHING:
        config = build_match_configuration(question)
        if not config.is_valid:
            return False
        links = _as_set(submitted) if _is_sequence(submitted) else frozenset()
        return links == config.correct_links

    if question.kind is QuestionKind.MULTI:
        selections = _as_set(submitted if _is_sequence(submitted) else [submitted])
        return selections == frozenset(_answer_options(question))

    if _is_sequence(submitted):
        if not submitted:
            return False
        submitted = next(iter(submitted))
    return submitted == _answer_options(question)[0]
