"""
Bank Package

Read-side of the canonical dataset.

| Module | Role |
|--------|------|
| `dataset` | `QuestionBank` handle over the serialized dataset |
| `refid` | Reference-id parsing and reading order |
| `config` | `QueryConfig` and its filter enums |
| `query` | Selection, counts, domain stats, book outline |
| `storage` | Locked, atomic snapshots on disk |
"""

from .dataset import QuestionBank
from .refid import compare_references, parse_reference, reading_order_key
from .config import QueryConfig, QuestionTypeFilter, ReviewFilter
from .query import (
    BookStructure,
    DatasetNotInitializedError,
    DomainStat,
    available_count,
    books_and_chapters,
    domain_stats,
    select_questions,
    total_count,
)
from .storage import StorageError, load_bank, save_bank

__all__ = [
    "QuestionBank",
    "compare_references",
    "parse_reference",
    "reading_order_key",
    "QueryConfig",
    "QuestionTypeFilter",
    "ReviewFilter",
    "BookStructure",
    "DatasetNotInitializedError",
    "DomainStat",
    "available_count",
    "books_and_chapters",
    "domain_stats",
    "select_questions",
    "total_count",
    "StorageError",
    "load_bank",
    "save_bank",
]
