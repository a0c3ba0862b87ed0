"""
String similarity scoring.

Descriptions on both sides are typed by hand, so the score blends three
signals over the normalized text:

| Signal            | Weight | Catches                              |
|-------------------|--------|--------------------------------------|
| Token Jaccard     | 0.6    | Reordered or partially shared words  |
| Shared substring  | 0.3    | Catalog codes, model numbers         |
| Edit distance     | 0.2    | Typos (short strings only)           |

Exact and containment matches short-circuit to 1.0 and 0.92.
"""

from rapidfuzz.distance import Levenshtein

from .config import MatchSettings, DEFAULT_SETTINGS
from .normalize import normalize_text


def distance(a: str, b: str, max_gap: int = DEFAULT_SETTINGS.distance_length_gap) -> int:
    """
    Edit distance between two strings.

    Pairs whose lengths differ by more than `max_gap` return the longer
    length without running the full computation; they are never useful
    matches anyway.
    """
    if abs(len(a) - len(b)) > max_gap:
        return max(len(a), len(b))
    return Levenshtein.distance(a, b)


def _significant(text: str, min_length: int) -> str:
    return " ".join(word for word in text.split() if len(word) >= min_length)


def _substring_bonus(s1: str, s2: str, settings: MatchSettings) -> float:
    """Bonus for the longest shared run, scanning the largest window first."""
    longest = max(len(s1), len(s2))
    start = min(settings.substring_max_window, len(s1), len(s2))
    for size in range(start, settings.substring_min_window - 1, -1):
        for i in range(len(s1) - size + 1):
            if s1[i:i + size] in s2:
                return (size / longest) * settings.substring_weight
    return 0.0


def _edit_bonus(s1: str, s2: str, settings: MatchSettings) -> float:
    if len(s1) >= settings.edit_max_length or len(s2) >= settings.edit_max_length:
        return 0.0
    longest = max(len(s1), len(s2))
    dist = distance(s1, s2, settings.distance_length_gap)
    return (1 - dist / longest) * settings.edit_weight


def similarity(a, b, settings: MatchSettings = DEFAULT_SETTINGS) -> float:
    """
    Score how alike two descriptions are, from 0.0 to 1.0.

    Args:
        a: First text (None is treated as empty)
        b: Second text
        settings: Weights and thresholds

    Returns:
        1.0 for equal normalized text, 0.92 when one contains the other,
        otherwise the weighted composite clipped to 1.0. Empty input
        scores 0.0.
    """
    s1 = normalize_text(a)
    s2 = normalize_text(b)

    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return settings.containment_score

    # Same words once short connectors ("de", "em") are dropped
    core1 = _significant(s1, settings.min_token_length)
    core2 = _significant(s2, settings.min_token_length)
    if core1 and core1 == core2:
        return settings.containment_score

    words1 = set(core1.split())
    words2 = set(core2.split())
    if not words1 and not words2:
        return 0.0

    jaccard = len(words1 & words2) / len(words1 | words2)

    score = (
        jaccard * settings.jaccard_weight
        + _substring_bonus(s1, s2, settings)
        + _edit_bonus(s1, s2, settings)
    )
    return min(score, 1.0)
