"""
Configuration for asset reconciliation.

Handles scoring thresholds and the system-unit to registry-unit mapping.
Config is declarative JSON - edit the file, not the code.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from .normalize import normalize_text


DEFAULT_CONFIG_PATH = Path(__file__).parent / "reconcile_config.json"


@dataclass(frozen=True)
class MatchSettings:
    """
    Weights and thresholds for scoring, ranking and batch matching.

    The defaults reproduce the behavior users have been confirming matches
    against; change them only alongside a review of historical links.
    """
    # Similarity composite
    containment_score: float = 0.92
    jaccard_weight: float = 0.6
    substring_weight: float = 0.3
    edit_weight: float = 0.2
    substring_max_window: int = 8
    substring_min_window: int = 4
    edit_max_length: int = 50
    distance_length_gap: int = 20
    min_token_length: int = 3

    # Ranking
    supplier_threshold: float = 0.7
    supplier_bonus: float = 0.15
    pattern_system_threshold: float = 0.7
    pattern_registry_threshold: float = 0.6
    pattern_boost: float = 0.2
    best_guess_threshold: float = 0.5

    # Batch matching
    fuzzy_threshold: float = 0.65
    ambiguity_gap: float = 0.10

    # Pattern memory
    pattern_limit: int = 300


DEFAULT_SETTINGS = MatchSettings()


@dataclass
class Config:
    """Full configuration for reconciliation."""
    settings: MatchSettings = field(default_factory=MatchSettings)
    # System unit name -> registry unit names it covers
    unit_mapping: dict[str, list[str]] = field(default_factory=dict)


def load_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from JSON file.

    Unknown keys under "settings" are rejected so typos don't silently
    fall back to defaults.

    Args:
        config_path: Path to reconcile_config.json

    Returns:
        Config object with settings and unit mapping
    """
    path = Path(config_path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    settings_data = data.get("settings", {})
    known = {f.name for f in fields(MatchSettings)}
    unknown = set(settings_data) - known
    if unknown:
        raise ValueError(f"Unknown settings in {path.name}: {sorted(unknown)}")

    settings = MatchSettings(**settings_data)

    unit_mapping = {
        unit: list(targets)
        for unit, targets in data.get("unit_mapping", {}).items()
    }

    return Config(settings=settings, unit_mapping=unit_mapping)


def get_registry_units(unit: Optional[str], config: Config) -> list[str]:
    """
    Get normalized registry unit names for a system unit.

    A unit with no mapping maps to itself.

    Args:
        unit: System unit name (e.g., "Escola Central")
        config: Loaded configuration

    Returns:
        Normalized registry unit names, or empty list if unit is unset
    """
    if not unit:
        return []
    targets = config.unit_mapping.get(unit) or [unit]
    return [normalize_text(t) for t in targets]
