"""
Grading Package

Answer semantics: matching layouts and strict correctness checks.
"""

from .matching import build_match_configuration
from .evaluator import correct_keys, is_correct

__all__ = [
    "build_match_configuration",
    "correct_keys",
    "is_correct",
]
