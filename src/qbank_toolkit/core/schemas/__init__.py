"""
Schema definitions for the canonical dataset.
"""

from .canonical import (
    CANONICAL_TABLE,
    CANONICAL_COLUMNS,
    CANONICAL_SCHEMA,
    INSERT_SQL,
    SchemaError,
    validate_canonical,
)

__all__ = [
    "CANONICAL_TABLE",
    "CANONICAL_COLUMNS",
    "CANONICAL_SCHEMA",
    "INSERT_SQL",
    "SchemaError",
    "validate_canonical",
]
