"""
Database base module - connection management and initialization.
"""
import sqlite3
from pathlib import Path
from contextlib import contextmanager

from backend.core.config import settings

# Database location
DB_PATH = Path(settings.DB_PATH)


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


SCHEMA = """
    -- Learned patterns: confirmed system/registry links, append-only
    CREATE TABLE IF NOT EXISTS learned_patterns (
        id TEXT PRIMARY KEY,
        system_description TEXT NOT NULL DEFAULT '',
        system_supplier TEXT NOT NULL DEFAULT '',
        registry_description TEXT NOT NULL DEFAULT '',
        registry_supplier TEXT NOT NULL DEFAULT '',
        tag TEXT NOT NULL,
        unit TEXT DEFAULT '',
        type TEXT DEFAULT '',
        original_score REAL DEFAULT 0,
        user TEXT DEFAULT 'unknown',
        timestamp TEXT NOT NULL,  -- When the link was confirmed (UTC ISO)
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_learned_patterns_timestamp ON learned_patterns(timestamp);
    CREATE INDEX IF NOT EXISTS idx_learned_patterns_tag ON learned_patterns(tag);
"""


def init_db():
    """Initialize database tables."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        # Enable WAL mode for better concurrency (allows concurrent reads during writes)
        conn.execute("PRAGMA journal_mode=WAL")
        # Set busy timeout to 5 seconds to handle lock contention
        conn.execute("PRAGMA busy_timeout=5000")

        conn.executescript(SCHEMA)
