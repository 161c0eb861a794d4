"""
Module: core.utils.text

Purpose:
    Small, pure text helpers shared by ingestion, querying and grading.
    Nothing here raises on odd input; every helper returns a safe default.

Key Functions:
    - normalize_cell(): Cell value -> trimmed string ("" for NULL)
    - natural_key(): Numeric-aware, case-insensitive sort key
    - natural_compare(): Three-way comparison using natural_key
    - strip_enumerator(): Remove a leading "A. " / "1) " prefix
    - split_labels(): Split a pipe-delimited category cell
    - letter_for_number(): 1..26 -> "A".."Z"

Dependencies:
    - re (std)

Used By:
    - ingestion.column_mapper, ingestion.normalizer, ingestion.engine
    - bank.refid, bank.query
    - grading.matching
"""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

_CHUNK_RE = re.compile(r"(\d+)")
_ENUMERATOR_RE = re.compile(r"^\w+[.)]\s*")


def normalize_cell(value: Any) -> str:
    """
    Convert a raw cell value to a trimmed string.

    Args:
        value: Any value read from a SQLite row

    Returns:
        "" for None, otherwise str(value) with surrounding whitespace removed;
        integral floats render without ".0" (REAL 2.0 -> "2")
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def natural_key(value: str) -> Tuple[Tuple[int, int, str], ...]:
    """
    Build a natural sort key ("2" < "10", "a" == "A").

    Digit runs compare numerically and sort before text runs, so
    "1" < "10" < "AS" < "b".

    Example:
        >>> sorted(["10", "2", "AS", "1"], key=natural_key)
        ['1', '2', '10', 'AS']
    """
    key = []
    for chunk in _CHUNK_RE.split(value or ""):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((0, int(chunk), ""))
        else:
            key.append((1, 0, chunk.casefold()))
    return tuple(key)


def natural_compare(left: str, right: str) -> int:
    """Three-way natural comparison: negative, zero or positive."""
    a, b = natural_key(left), natural_key(right)
    return (a > b) - (a < b)


def strip_enumerator(text: str) -> str:
    """
    Remove a leading enumerator such as "A. " or "1) " from display text.

    Example:
        >>> strip_enumerator("B) Integrity")
        'Integrity'
    """
    return _ENUMERATOR_RE.sub("", text or "", count=1).strip()


def split_labels(cell: Optional[str]) -> Tuple[str, ...]:
    """
    Split a pipe-delimited category cell into trimmed labels.

    Returns:
        Tuple of non-empty labels; empty tuple means uncategorized
    """
    if not cell:
        return ()
    return tuple(part.strip() for part in cell.split("|") if part.strip())


def letter_for_number(number: int) -> Optional[str]:
    """Map 1..26 to "A".."Z"; anything else gives None."""
    if 1 <= number <= 26:
        return chr(ord("A") + number - 1)
    return None


def leading_int(text: str) -> int:
    """
    Parse the leading integer of a label, 0 when there is none.

    Example:
        >>> leading_int("12b")
        12
        >>> leading_int("intro")
        0
    """
    match = re.match(r"\s*(\d+)", text or "")
    return int(match.group(1)) if match else 0
