"""
Suggestion Ranker - Order registry candidates for one system record.

Score = base similarity
      + supplier bonus (suppliers look alike)
      + pattern bonus (resembles earlier confirmed links)
capped at 1.0. Every pool entry is returned; nothing is filtered out.
"""

import logging
from typing import Iterable, Optional, Sequence

from .config import MatchSettings, DEFAULT_SETTINGS
from .models import LearnedPattern, MatchCandidate, RegistryRecord, SystemRecord
from .similarity import similarity

logger = logging.getLogger(__name__)

# Suppliers recorded as a dash mean "not informed"
SUPPLIER_PLACEHOLDER = "-"


def _join(*parts: Optional[str]) -> str:
    return " ".join(part for part in parts if part)


def system_text(item: SystemRecord) -> str:
    """Comparison string for a system record: description + supplier."""
    return _join(item.description, item.supplier)


def registry_text(item: RegistryRecord) -> str:
    """Comparison string for a registry record: description + species + supplier."""
    return _join(item.description, item.species, item.supplier)


def _has_supplier(supplier: Optional[str]) -> bool:
    return bool(supplier) and supplier.strip() != SUPPLIER_PLACEHOLDER


def rank(
    item: SystemRecord,
    pool: Sequence[RegistryRecord],
    patterns: Iterable[LearnedPattern] = (),
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> list[MatchCandidate]:
    """
    Rank registry records by how well they match a system record.

    Args:
        item: System record being reconciled
        pool: Registry records to choose from
        patterns: Learned patterns, newest first
        settings: Weights and thresholds

    Returns:
        One MatchCandidate per pool entry, best first. Ties keep pool order.
    """
    query = system_text(item)
    candidates = []
    texts = []

    for record in pool:
        text = registry_text(record)
        base = similarity(query, text, settings)

        if _has_supplier(item.supplier) and _has_supplier(record.supplier):
            if similarity(item.supplier, record.supplier, settings) > settings.supplier_threshold:
                base += settings.supplier_bonus

        candidates.append(MatchCandidate(record=record, base_score=min(base, 1.0)))
        texts.append(text)

    for pattern in patterns:
        pattern_system = _join(pattern.system_description, pattern.system_supplier)
        system_sim = similarity(query, pattern_system, settings)
        if system_sim <= settings.pattern_system_threshold:
            continue

        pattern_registry = _join(pattern.registry_description, pattern.registry_supplier)
        for candidate, text in zip(candidates, texts):
            candidate_sim = similarity(text, pattern_registry, settings)
            if candidate_sim > settings.pattern_registry_threshold:
                boost = system_sim * candidate_sim * settings.pattern_boost
                candidate.bonus_score += boost
                logger.debug(f"Applied boost {boost:.3f} to {candidate.record.tag} from pattern {pattern.tag}")

    for candidate in candidates:
        candidate.final_score = min(candidate.base_score + candidate.bonus_score, 1.0)

    # sorted() is stable, so equal scores keep pool order
    return sorted(candidates, key=lambda c: c.final_score, reverse=True)


def top_score(candidates: Sequence[MatchCandidate]) -> float:
    """Absolute score of the best candidate, 0.0 when there are none."""
    return candidates[0].final_score if candidates else 0.0


def is_best_guess(candidates: Sequence[MatchCandidate], settings: MatchSettings = DEFAULT_SETTINGS) -> bool:
    """Whether the top candidate is strong enough to highlight for the user."""
    return top_score(candidates) >= settings.best_guess_threshold
