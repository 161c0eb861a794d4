"""
Module: ingestion.normalizer

Purpose:
    Clean raw answer-key cells and choice cells into canonical form.

Key Functions:
    - is_complex_answer(): Detect matching-style answer keys
    - clean_answer(): Normalize an answer-key cell
    - normalize_choices(): Build the ordered choices mapping for one row

Answer Rules:
    Complex (newline, or comma together with a digit):
        strip surrounding quotes only, keep the structure for the matching parser
    Simple:
        strip "Option:" / "Answer:" / "The answer is:" prefixes,
        strip one trailing "." or ")",
        "1".."26" -> "A".."Z", otherwise uppercase

Dependencies:
    - re (std)

Used By:
    - ingestion.engine: Row normalization
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Sequence, Tuple

from qbank_toolkit.core.utils.text import letter_for_number, normalize_cell

_PREFIX_RE = re.compile(r"^(?:Option[:\s]*|Answer[:\s]*|The answer is[:\s]*)", re.IGNORECASE)
_TRAILING_RE = re.compile(r"[.)]$")
_QUOTES = "\"'"


def is_complex_answer(text: str) -> bool:
    """
    True for answer keys that encode pairings rather than a key.

    Example:
        >>> is_complex_answer("A,1\\nB,2"), is_complex_answer("A,C")
        (True, False)
    """
    if "\n" in text or "\\n" in text:
        return True
    return "," in text and any(ch.isdigit() for ch in text)


def clean_answer(raw: Any) -> str:
    """
    Normalize a raw correct-answer cell.

    Args:
        raw: Cell value (any type, None allowed)

    Returns:
        Canonical answer string ("" for empty cells)

    Example:
        >>> clean_answer("Answer: 2."), clean_answer("b)"), clean_answer('"A,1"')
        ('B', 'B', 'A,1')
    """
    text = normalize_cell(raw)
    if not text:
        return ""

    if is_complex_answer(text):
        if text[0] in _QUOTES:
            text = text[1:]
        if text and text[-1] in _QUOTES:
            text = text[:-1]
        return text

    text = _PREFIX_RE.sub("", text, count=1)
    text = _TRAILING_RE.sub("", text, count=1).strip()

    if text.isdigit():
        letter = letter_for_number(int(text))
        if letter:
            return letter
    return text.upper()


def normalize_choices(
    row: Mapping[str, Any],
    choice_columns: Sequence[Tuple[str, str]],
) -> Dict[str, str]:
    """
    Build the ordered choices mapping for one row.

    Empty cells are omitted. When two columns share a key, the later
    non-empty column wins.

    Args:
        row: Column name -> raw value
        choice_columns: (column name, canonical key) pairs in column order

    Returns:
        Ordered key -> option text mapping (possibly empty)
    """
    choices: Dict[str, str] = {}
    for column, key in choice_columns:
        value = normalize_cell(row.get(column))
        if value:
            choices[key] = value
    return choices
