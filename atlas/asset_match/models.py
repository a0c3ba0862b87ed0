"""
Data models for asset reconciliation.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Optional text fields default to None so an unset field stays distinct
from a known-blank "" value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class MatchType(Enum):
    """
    Result tags for batch matching.

    Tiers are tried in declaration order; the first one satisfied wins.
    """
    PERFECT = "Perfect"                          # description + location + state
    HIGH = "High (description+location)"         # description + location
    EXACT = "Exact (description)"                # description only
    SIMILARITY = "By similarity"                 # fuzzy, clear winner
    AMBIGUOUS = "Ambiguous"                      # fuzzy, top two too close
    NOT_FOUND = "Not found"                      # nothing above threshold


@dataclass
class SystemRecord:
    """
    A locally managed inventory entry.

    This is the side being reconciled against the registry.
    """
    id: str
    description: Optional[str] = None
    supplier: Optional[str] = None
    unit: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    location: Optional[str] = None
    tag: Optional[str] = None   # Registry tag once linked


@dataclass
class RegistryRecord:
    """
    An externally sourced asset entry.

    `tag` is the canonical external identifier.
    """
    tag: str
    description: Optional[str] = None
    species: Optional[str] = None
    supplier: Optional[str] = None
    unit: Optional[str] = None
    status: Optional[str] = None


@dataclass
class LearnedPattern:
    """A human-confirmed link kept to bias future rankings."""
    system_description: str
    system_supplier: str
    registry_description: str   # Description and species, joined
    registry_supplier: str
    tag: str
    unit: str = ""
    type: str = ""
    original_score: float = 0.0
    timestamp: datetime = field(default_factory=datetime.utcnow)
    user: str = "unknown"

    def to_dict(self) -> dict:
        return {
            "system_description": self.system_description,
            "system_supplier": self.system_supplier,
            "registry_description": self.registry_description,
            "registry_supplier": self.registry_supplier,
            "tag": self.tag,
            "unit": self.unit,
            "type": self.type,
            "original_score": self.original_score,
            "timestamp": self.timestamp.isoformat(),
            "user": self.user,
        }


@dataclass
class MatchCandidate:
    """One scored registry record produced by a ranking call."""
    record: RegistryRecord
    base_score: float
    bonus_score: float = 0.0
    final_score: float = 0.0


@dataclass
class PastedRecord:
    """A row pasted from an external spreadsheet for bulk matching."""
    description: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    tag: Optional[str] = None


@dataclass
class MatchResult:
    """
    Output of the batch matcher for a single pasted record.

    `pool_index` points into the pool passed to the matcher so callers can
    tell structurally identical pool records apart.
    """
    pasted: PastedRecord
    match_type: MatchType
    matched: Optional[SystemRecord] = None
    pool_index: Optional[int] = None
    score: Optional[float] = None   # Set for the fuzzy tier only

    @property
    def label(self) -> str:
        """Human-readable tag, with the score for similarity matches."""
        if self.match_type == MatchType.SIMILARITY and self.score is not None:
            return f"{self.match_type.value} ({self.score * 100:.0f}%)"
        return self.match_type.value

    @property
    def is_matched(self) -> bool:
        return self.matched is not None


@dataclass
class BatchOutcome:
    """Results of one batch run plus the pool indices it consumed."""
    results: list[MatchResult]
    consumed: frozenset[int] = frozenset()
