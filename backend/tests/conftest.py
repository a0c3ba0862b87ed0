"""
Test configuration and fixtures for the reconciliation backend test suite.

Provides:
- In-memory SQLite test database (isolated per test)
- FastAPI TestClient fixture with fresh reconciliation state
- Factory fixture for seeding learned patterns
"""
import sqlite3
import uuid
from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from backend.core.db import SCHEMA


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

def _create_test_db() -> sqlite3.Connection:
    """Create an in-memory SQLite database with the full schema."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA)
    return conn


@contextmanager
def _test_get_db(conn: sqlite3.Connection):
    """Replacement for get_db() that uses the shared test connection."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


@pytest.fixture()
def test_db():
    """Provide a fresh in-memory SQLite database for each test."""
    conn = _create_test_db()
    yield conn
    conn.close()


@pytest.fixture()
def patch_db(test_db):
    """
    Patch the get_db context manager across all db modules so that
    every database call uses the in-memory test database.
    """
    cm = lambda: _test_get_db(test_db)  # noqa: E731

    with (
        patch("backend.core.db.base.get_db", cm),
        patch("backend.core.db.patterns.get_db", cm),
    ):
        yield test_db


@pytest.fixture()
def client(patch_db):
    """
    Provide a FastAPI TestClient with the database patched.

    init_db is skipped so no file database is created; learned patterns
    are loaded from the in-memory database on startup.
    """
    from backend.api.main import app
    from backend.core.reconcile import reset_reconcile

    reset_reconcile()
    with patch("backend.api.main.init_db"):
        with TestClient(app) as c:
            yield c
    reset_reconcile()


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------

def _insert_pattern(
    db: sqlite3.Connection,
    *,
    system_description: str = "Cadeira giratoria",
    registry_description: str = "Poltrona executiva",
    tag: str = "456",
    timestamp: str = "2026-01-08T12:00:00",
    user: str = "ana",
) -> str:
    """Insert a learned_patterns row and return its ID."""
    pid = str(uuid.uuid4())
    db.execute(
        """INSERT INTO learned_patterns
           (id, system_description, system_supplier, registry_description,
            registry_supplier, tag, unit, type, original_score, user, timestamp)
           VALUES (?, ?, '', ?, '', ?, 'Escola Central', 'Mobiliario', 0.4, ?, ?)""",
        (pid, system_description, registry_description, tag, user, timestamp),
    )
    db.commit()
    return pid


@pytest.fixture()
def create_pattern(test_db):
    """Factory fixture: create_pattern(**fields) -> row id."""
    def _create(**kwargs):
        return _insert_pattern(test_db, **kwargs)
    return _create
