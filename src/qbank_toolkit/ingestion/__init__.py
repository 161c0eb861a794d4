"""
Ingestion Package

Turns loosely-structured SQLite question-bank files into one canonical
dataset.

Flow:
    SourceFile bytes -> discover_tables -> select_table -> map_columns
    -> build_question (clean_answer, normalize_choices, classify)
    -> canonical ``questions`` table -> serialized bytes -> QuestionBank

| Module | Role |
|--------|------|
| `config` | Column aliases and ingestion defaults |
| `column_mapper` | Table scoring and column resolution |
| `normalizer` | Answer and choice cleaning |
| `engine` | Synchronous merge core |
| `worker` | Background merges, publishes the current bank |
| `inspection` | Pre-import integrity report |
"""

from .config import ColumnAliases, IngestionConfig
from .column_mapper import FieldMap, choice_key, map_columns, score_table, select_table
from .normalizer import clean_answer, is_complex_answer, normalize_choices
from .engine import (
    MergeError,
    MergeResult,
    SourceFailure,
    SourceFile,
    SourceIngestionError,
    build_question,
    discover_tables,
    merge_sources,
    open_source,
)
from .worker import (
    IngestionEngine,
    MergeFailure,
    MergeMessage,
    MergeRequest,
    MergeSuccess,
    run_merge,
)
from .inspection import IntegrityReport, inspect_source

__all__ = [
    "ColumnAliases",
    "IngestionConfig",
    "FieldMap",
    "choice_key",
    "map_columns",
    "score_table",
    "select_table",
    "clean_answer",
    "is_complex_answer",
    "normalize_choices",
    "MergeError",
    "MergeResult",
    "SourceFailure",
    "SourceFile",
    "SourceIngestionError",
    "build_question",
    "discover_tables",
    "merge_sources",
    "open_source",
    "IngestionEngine",
    "MergeFailure",
    "MergeMessage",
    "MergeRequest",
    "MergeSuccess",
    "run_merge",
    "IntegrityReport",
    "inspect_source",
]
