"""
Unit tests for the shared text helpers.
"""

import pytest

from qbank_toolkit.core.utils import (
    leading_int,
    letter_for_number,
    natural_compare,
    natural_key,
    normalize_cell,
    split_labels,
    strip_enumerator,
)


class TestNormalizeCell:
    """Tests for normalize_cell."""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("  hello ", "hello"),
        (42, "42"),
        (b" bytes ", "bytes"),
        (2.0, "2"),
        (2.5, "2.5"),
    ])
    def test_normalize_cell_when_raw_value_then_trimmed_string(self, value, expected):
        assert normalize_cell(value) == expected


class TestNaturalOrdering:
    """Tests for natural_key and natural_compare."""

    def test_natural_key_when_numbers_then_numeric_order(self):
        assert sorted(["10", "2", "1"], key=natural_key) == ["1", "2", "10"]

    def test_natural_key_when_mixed_case_then_case_insensitive(self):
        assert natural_key("Ab") == natural_key("aB")

    def test_natural_key_when_digits_and_text_then_digits_first(self):
        assert sorted(["AS", "10", "b", "1"], key=natural_key) == ["1", "10", "AS", "b"]

    def test_natural_compare_when_equal_then_zero(self):
        assert natural_compare("ch2", "CH2") == 0
        assert natural_compare("ch2", "ch10") < 0
        assert natural_compare("b", "a") > 0


class TestEnumerators:
    """Tests for enumerator stripping."""

    @pytest.mark.parametrize("text,expected", [
        ("A. Integrity", "Integrity"),
        ("1) Plain", "Plain"),
        ("No prefix", "No prefix"),
        ("", ""),
    ])
    def test_strip_enumerator_when_prefixed_then_prefix_removed(self, text, expected):
        assert strip_enumerator(text) == expected


class TestLabelsAndNumbers:
    """Tests for split_labels, letter_for_number and leading_int."""

    def test_split_labels_when_pipe_delimited_then_trimmed_parts(self):
        assert split_labels("Security | Networking|") == ("Security", "Networking")

    def test_split_labels_when_empty_then_empty_tuple(self):
        assert split_labels("") == ()
        assert split_labels(None) == ()

    @pytest.mark.parametrize("number,expected", [(1, "A"), (26, "Z"), (0, None), (27, None)])
    def test_letter_for_number_when_in_range_then_letter(self, number, expected):
        assert letter_for_number(number) == expected

    @pytest.mark.parametrize("text,expected", [("12b", 12), ("3", 3), ("intro", 0), ("", 0)])
    def test_leading_int_when_label_then_leading_number(self, text, expected):
        assert leading_int(text) == expected
