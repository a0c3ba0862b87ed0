# Asset reconciliation engine
# Siloed module - no imports from the backend service

from .models import (
    SystemRecord,
    RegistryRecord,
    LearnedPattern,
    MatchCandidate,
    PastedRecord,
    MatchResult,
    MatchType,
    BatchOutcome,
)
from .config import load_config, get_registry_units, Config, MatchSettings, DEFAULT_SETTINGS
from .normalize import normalize_text, normalize_tag, parse_state_and_origin
from .similarity import similarity, distance
from .patterns import PatternMemory, PatternStore, InMemoryPatternStore, build_pattern
from .ranker import rank, top_score, is_best_guess
from .batch import match_batch, summarize_batch
from .preview import build_update_preview, count_saveable, UpdateStatus, PendingUpdate
from .adapters import (
    RecordAdapter,
    InMemoryRecordAdapter,
    FileRecordAdapter,
    load_system_records,
    load_registry_records,
    parse_pasted_rows,
)
from .report import format_console, format_candidates, export_csv

__version__ = "1.0.0"

__all__ = [
    # Models
    "SystemRecord",
    "RegistryRecord",
    "LearnedPattern",
    "MatchCandidate",
    "PastedRecord",
    "MatchResult",
    "MatchType",
    "BatchOutcome",
    # Config
    "Config",
    "MatchSettings",
    "DEFAULT_SETTINGS",
    "load_config",
    "get_registry_units",
    # Normalization
    "normalize_text",
    "normalize_tag",
    "parse_state_and_origin",
    # Scoring
    "similarity",
    "distance",
    # Patterns
    "PatternMemory",
    "PatternStore",
    "InMemoryPatternStore",
    "build_pattern",
    # Ranking
    "rank",
    "top_score",
    "is_best_guess",
    # Batch
    "match_batch",
    "summarize_batch",
    "build_update_preview",
    "count_saveable",
    "UpdateStatus",
    "PendingUpdate",
    # Adapters
    "RecordAdapter",
    "InMemoryRecordAdapter",
    "FileRecordAdapter",
    "load_system_records",
    "load_registry_records",
    "parse_pasted_rows",
    # Report
    "format_console",
    "format_candidates",
    "export_csv",
]
