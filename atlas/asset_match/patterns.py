"""
Pattern Memory - Learn from confirmed matches.

Every link a user confirms is stored as a LearnedPattern. The ranker uses
the most recent patterns to boost candidates that resemble earlier
decisions.

The store adapter pattern lets us swap implementations (in-memory for
testing, SQLite for the service) without changing ranking logic.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .config import DEFAULT_SETTINGS
from .models import LearnedPattern, RegistryRecord, SystemRecord

logger = logging.getLogger(__name__)


class PatternStore(ABC):
    """
    Abstract interface for append-only pattern storage.

    Implementations only need "most recent N" reads and single appends.
    """

    @abstractmethod
    def recent(self, limit: int) -> list[LearnedPattern]:
        """Return up to `limit` patterns, newest first."""
        pass

    @abstractmethod
    def append(self, pattern: LearnedPattern) -> None:
        """Persist a single pattern."""
        pass


class InMemoryPatternStore(PatternStore):
    """
    In-memory store for programmatic test setup.

    Useful for unit tests where you want to control exact patterns.
    """

    def __init__(self, patterns: list[LearnedPattern] | None = None):
        self._patterns = list(patterns or [])

    def recent(self, limit: int) -> list[LearnedPattern]:
        # Same timestamp: the later append comes first
        ordered = sorted(reversed(self._patterns), key=lambda p: p.timestamp, reverse=True)
        return ordered[:limit]

    def append(self, pattern: LearnedPattern) -> None:
        self._patterns.append(pattern)

    def __len__(self) -> int:
        return len(self._patterns)


def build_pattern(
    system_item: SystemRecord,
    registry_item: RegistryRecord,
    score: float,
    user: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LearnedPattern:
    """Create a LearnedPattern from a confirmed system/registry link."""
    registry_description = " ".join(
        part for part in (registry_item.description, registry_item.species) if part
    ).strip()

    return LearnedPattern(
        system_description=system_item.description or "",
        system_supplier=system_item.supplier or "",
        registry_description=registry_description,
        registry_supplier=registry_item.supplier or "",
        tag=registry_item.tag,
        unit=system_item.unit or "",
        type=system_item.type or "",
        original_score=score,
        timestamp=now or datetime.utcnow(),
        user=user or "unknown",
    )


class PatternMemory:
    """
    Bounded, newest-first cache of learned patterns.

    Reads never fail: if the store is unreachable the memory is simply
    empty and ranking falls back to plain similarity.
    """

    def __init__(self, store: PatternStore, limit: int = DEFAULT_SETTINGS.pattern_limit):
        self._store = store
        self._limit = limit
        self._patterns: list[LearnedPattern] = []
        self._lock = threading.Lock()

    @property
    def patterns(self) -> list[LearnedPattern]:
        """Snapshot of the cached patterns, newest first."""
        with self._lock:
            return list(self._patterns)

    @property
    def limit(self) -> int:
        return self._limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def load(self) -> list[LearnedPattern]:
        """Fetch the most recent patterns from the store into the cache."""
        try:
            loaded = self._store.recent(self._limit)
        except Exception as e:
            logger.warning(f"Could not load learned patterns, continuing without them: {e}")
            loaded = []

        with self._lock:
            self._patterns = list(loaded[:self._limit])

        logger.info(f"Loaded {len(loaded)} learned patterns")
        return self.patterns

    def remember(
        self,
        system_item: SystemRecord,
        registry_item: RegistryRecord,
        score: float,
        user: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LearnedPattern:
        """Add a pattern to the local cache only (prepend, then truncate)."""
        pattern = build_pattern(system_item, registry_item, score, user, now)
        with self._lock:
            self._patterns.insert(0, pattern)
            del self._patterns[self._limit:]
        return pattern

    def persist(self, pattern: LearnedPattern) -> bool:
        """
        Write a pattern to the store.

        Failures are logged, never raised: the match the pattern came from
        has already been applied by the caller.
        """
        try:
            self._store.append(pattern)
        except Exception as e:
            logger.error(f"Failed to save learned pattern for tag {pattern.tag}: {e}")
            return False
        logger.info(f"Saved learned pattern for tag {pattern.tag}")
        return True

    def record(
        self,
        system_item: SystemRecord,
        registry_item: RegistryRecord,
        score: float,
        user: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LearnedPattern:
        """Remember a confirmed match and persist it (best effort)."""
        pattern = self.remember(system_item, registry_item, score, user, now)
        self.persist(pattern)
        return pattern
