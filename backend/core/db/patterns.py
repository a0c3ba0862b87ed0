"""
Learned pattern database operations (for reconciliation ranking).
"""
from datetime import datetime
from typing import Any, Dict, List
import uuid

from atlas.asset_match.models import LearnedPattern

from .base import get_db


def add_learned_pattern(pattern: LearnedPattern) -> str:
    """Append a confirmed pattern. Returns the new row id."""
    pattern_id = str(uuid.uuid4())

    with get_db() as conn:
        conn.execute("""
            INSERT INTO learned_patterns
                (id, system_description, system_supplier, registry_description,
                 registry_supplier, tag, unit, type, original_score, user, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            pattern_id,
            pattern.system_description,
            pattern.system_supplier,
            pattern.registry_description,
            pattern.registry_supplier,
            pattern.tag,
            pattern.unit,
            pattern.type,
            pattern.original_score,
            pattern.user,
            pattern.timestamp.isoformat(),
        ))

    return pattern_id


def list_recent_patterns(limit: int = 300) -> List[Dict[str, Any]]:
    """List the most recent patterns, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM learned_patterns ORDER BY timestamp DESC, rowid DESC LIMIT ?",
            (limit,)
        ).fetchall()
        return [dict(row) for row in rows]


def count_learned_patterns() -> int:
    """Total number of stored patterns."""
    with get_db() as conn:
        row = conn.execute("SELECT COUNT(*) AS total FROM learned_patterns").fetchone()
        return row["total"]


def row_to_pattern(row: Dict[str, Any]) -> LearnedPattern:
    """Convert a learned_patterns row into a LearnedPattern."""
    return LearnedPattern(
        system_description=row["system_description"] or "",
        system_supplier=row["system_supplier"] or "",
        registry_description=row["registry_description"] or "",
        registry_supplier=row["registry_supplier"] or "",
        tag=row["tag"],
        unit=row["unit"] or "",
        type=row["type"] or "",
        original_score=row["original_score"] or 0.0,
        timestamp=datetime.fromisoformat(row["timestamp"]),
        user=row["user"] or "unknown",
    )
