"""
Database package for the reconciliation backend.

    from backend.core.db import get_db, list_recent_patterns
"""

# Base - connection, initialization
from .base import (
    DB_PATH,
    SCHEMA,
    get_db,
    init_db,
)

# Learned patterns
from .patterns import (
    add_learned_pattern,
    list_recent_patterns,
    count_learned_patterns,
    row_to_pattern,
)

__all__ = [
    "DB_PATH",
    "SCHEMA",
    "get_db",
    "init_db",
    "add_learned_pattern",
    "list_recent_patterns",
    "count_learned_patterns",
    "row_to_pattern",
]
