"""
Unit tests for answer grading.
"""

import pytest

from qbank_toolkit.core.models import Question, QuestionKind
from qbank_toolkit.grading import correct_keys, is_correct

CHOICES = {"A": "a", "B": "b", "C": "c", "D": "d"}


def make_question(answer: str, text: str = "Pick", choices=None, kind=None) -> Question:
    """Helper to create test questions."""
    return Question(
        id="q1",
        source_file="bank.db",
        text=text,
        correct_answer=answer,
        choices=CHOICES if choices is None else choices,
        kind=kind,
    )


class TestSingleChoice:
    """Tests for single-choice grading."""

    def test_is_correct_when_key_matches_then_true(self):
        assert is_correct(make_question("B"), "B")

    def test_is_correct_when_key_differs_then_false(self):
        assert not is_correct(make_question("B"), "C")

    def test_is_correct_when_sequence_then_first_element_used(self):
        assert is_correct(make_question("B"), ["B", "C"])
        assert not is_correct(make_question("B"), [])

    def test_is_correct_when_case_differs_then_false(self):
        assert not is_correct(make_question("B"), "b")

    def test_is_correct_when_none_then_false(self):
        assert not is_correct(make_question("B"), None)


class TestMultiSelect:
    """Tests for multi-select grading."""

    def test_is_correct_when_exact_set_in_any_order_then_true(self):
        q = make_question("A,C")
        assert q.kind is QuestionKind.MULTI
        assert is_correct(q, ["C", "A"])
        assert is_correct(q, ("A", "C"))

    def test_is_correct_when_subset_then_false(self):
        assert not is_correct(make_question("A,C"), ["A"])

    def test_is_correct_when_superset_then_false(self):
        assert not is_correct(make_question("A,C"), ["A", "B", "C"])

    def test_is_correct_when_concatenated_answer_then_split_into_keys(self):
        q = make_question("AC")
        assert is_correct(q, ["A", "C"])

    def test_is_correct_when_tagged_single_key_then_bare_string_accepted(self):
        q = make_question("B", text="[MULTI] Pick")
        assert is_correct(q, "B")
        assert is_correct(q, ["B"])

    def test_is_correct_when_unhashable_entries_then_false(self):
        assert not is_correct(make_question("A,C"), [["A"], ["C"]])


class TestMatching:
    """Tests for matching grading."""

    @pytest.fixture
    def question(self) -> Question:
        return make_question(
            "A,1\\n C,2",
            text="[MATCH] Pair",
            choices={"A": "A. x", "B": "B. y", "C": "C. z", "1": "1. p", "2": "2. q"},
        )

    def test_is_correct_when_cells_not_enumerated_then_pairs_graded(self):
        q = make_question(
            "A,1\nB,2",
            text="[MATCH] Capitals",
            choices={"A": "A - Paris", "B": "B - Rome", "C": "1 - France", "D": "2 - Italy"},
        )
        assert is_correct(q, ["A - Paris||C", "B - Rome||D"])

    def test_is_correct_when_all_links_then_true(self, question):
        assert is_correct(question, ["z||2", "x||1"])

    def test_is_correct_when_partial_links_then_false(self, question):
        assert not is_correct(question, ["x||1"])

    def test_is_correct_when_extra_link_then_false(self, question):
        assert not is_correct(question, ["x||1", "z||2", "y||1"])

    def test_is_correct_when_not_a_sequence_then_false(self, question):
        assert not is_correct(question, "x||1")

    def test_is_correct_when_configuration_invalid_then_false(self):
        q = make_question("nonsense", text="[MATCH] Pair")
        assert not is_correct(q, [])


class TestCorrectKeys:
    """Tests for correct_keys."""

    def test_correct_keys_when_single_then_one_key(self):
        assert correct_keys(make_question(" b ")) == frozenset({"B"})

    def test_correct_keys_when_multi_then_all_keys(self):
        assert correct_keys(make_question("'A', 'D'")) == frozenset({"A", "D"})

    def test_correct_keys_when_matching_then_links(self):
        q = make_question("A,B", text="[MATCH] Pair")
        assert correct_keys(q) == frozenset({"a||B"})
