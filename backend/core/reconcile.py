"""
Reconciliation service state.

Holds the engine config and the shared PatternMemory, backed by the
learned_patterns table. Loaded once at startup; pattern load failures
leave the memory empty instead of blocking the service.
"""
import logging
from pathlib import Path
from typing import Optional

from atlas.asset_match import Config, PatternMemory, PatternStore, load_config
from atlas.asset_match.config import DEFAULT_CONFIG_PATH
from atlas.asset_match.models import LearnedPattern

from backend.core.config import settings
from backend.core.db import add_learned_pattern, list_recent_patterns, row_to_pattern

logger = logging.getLogger(__name__)


class SqlitePatternStore(PatternStore):
    """PatternStore over the learned_patterns table."""

    def recent(self, limit: int) -> list[LearnedPattern]:
        return [row_to_pattern(row) for row in list_recent_patterns(limit)]

    def append(self, pattern: LearnedPattern) -> None:
        add_learned_pattern(pattern)


# Global state (loaded on first use or at startup)
_reconcile_state = {
    "config": None,
    "memory": None,
}


def _config_path() -> Path:
    return Path(settings.CONFIG_PATH) if settings.CONFIG_PATH else DEFAULT_CONFIG_PATH


def init_reconcile(store: Optional[PatternStore] = None) -> PatternMemory:
    """Load config and learned patterns. Safe to call again to reload."""
    config = load_config(_config_path())
    memory = PatternMemory(store or SqlitePatternStore(), limit=config.settings.pattern_limit)
    memory.load()

    _reconcile_state["config"] = config
    _reconcile_state["memory"] = memory
    logger.info(f"Reconciliation ready with {len(memory)} learned patterns")
    return memory


def get_config() -> Config:
    if _reconcile_state["config"] is None:
        init_reconcile()
    return _reconcile_state["config"]


def get_memory() -> PatternMemory:
    if _reconcile_state["memory"] is None:
        init_reconcile()
    return _reconcile_state["memory"]


def reset_reconcile():
    """Drop cached state (used by tests)."""
    _reconcile_state["config"] = None
    _reconcile_state["memory"] = None
