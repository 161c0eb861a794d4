"""
Core utilities: pure text helpers used across the toolkit.
"""

from .text import (
    normalize_cell,
    natural_key,
    natural_compare,
    strip_enumerator,
    split_labels,
    letter_for_number,
    leading_int,
)

__all__ = [
    "normalize_cell",
    "natural_key",
    "natural_compare",
    "strip_enumerator",
    "split_labels",
    "letter_for_number",
    "leading_int",
]
