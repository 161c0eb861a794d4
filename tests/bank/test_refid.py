"""
Unit tests for reference-id parsing and reading order.
"""

import pytest

from qbank_toolkit.bank import compare_references, parse_reference, reading_order_key
from qbank_toolkit.core.models import ParsedReference, Question


class TestParseReference:
    """Tests for parse_reference."""

    @pytest.mark.parametrize("ref_id,source,expected", [
        ("PT_1.1", "bank.db", ParsedReference("PT", "1", "1", 1)),
        ("PT_1.1.2", "bank.db", ParsedReference("PT", "1", "1.2", 1)),
        ("PT__1..3", "bank.db", ParsedReference("PT", "1", "3", 3)),
        ("PT_12", "bank.db", ParsedReference("PT", "General", "12", 12)),
        ("PT_1.intro", "bank.db", ParsedReference("PT", "1", "intro", 0)),
        ("42", "bank.sqlite3", ParsedReference("bank", "All", "42", 42)),
        ("", "Bank.DB", ParsedReference("Bank", "All", "0", 0)),
        ("", "notes.sqlite", ParsedReference("notes", "All", "0", 0)),
        ("__", "bank.db", ParsedReference("bank", "All", "0", 0)),
        ("", None, ParsedReference("Uncategorized", "All", "0", 0)),
        (None, "", ParsedReference("Uncategorized", "All", "0", 0)),
    ])
    def test_parse_reference_when_ref_id_then_components(self, ref_id, source, expected):
        assert parse_reference(ref_id, source) == expected

    def test_parse_reference_when_any_input_then_fields_populated(self):
        for ref_id in ["", "_", ".", "a", "a_b", "a_b_c_d", "  "]:
            parsed = parse_reference(ref_id)
            assert parsed.book and parsed.chapter and parsed.question_label


class TestReadingOrder:
    """Tests for compare_references and reading_order_key."""

    def test_compare_when_numeric_labels_then_numeric_order(self):
        assert compare_references(parse_reference("PT_1.2"), parse_reference("PT_1.10")) < 0

    def test_compare_when_same_number_then_label_order(self):
        assert compare_references(parse_reference("PT_1.1a"), parse_reference("PT_1.1b")) < 0
        assert compare_references(parse_reference("PT_1.1"), parse_reference("PT_1.1a")) < 0

    def test_compare_when_identical_then_zero(self):
        assert compare_references(parse_reference("pt_1.1"), parse_reference("PT_1.1")) == 0

    def test_compare_when_one_number_missing_then_natural_label(self):
        assert compare_references(parse_reference("PT_1.2"), parse_reference("PT_1.intro")) < 0

    def test_reading_order_key_when_sorting_then_book_chapter_question(self):
        refs = ["PT_2.1", "PT_1.10", "AB_1.1", "PT_10.1", "PT_1.2", "PT_AS.1", "PT_1.1"]
        questions = [
            Question(id=ref, source_file="bank.db", text=ref, correct_answer="A", ref_id=ref)
            for ref in refs
        ]
        ordered = [q.ref_id for q in sorted(questions, key=reading_order_key)]
        assert ordered == ["AB_1.1", "PT_1.1", "PT_1.2", "PT_1.10", "PT_2.1", "PT_10.1", "PT_AS.1"]
