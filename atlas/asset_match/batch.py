"""
Batch Matcher - Link pasted spreadsheet rows to system records.

Tier cascade per pasted row (first hit wins):
| Tier | Requires                                   | Result      |
|------|--------------------------------------------|-------------|
| 1    | description + location + state equal       | PERFECT     |
| 2    | description + location equal               | HIGH        |
| 3    | description equal                          | EXACT       |
| 4    | similarity > 0.65, clear winner            | SIMILARITY  |
| 4    | similarity > 0.65, top two within 0.10     | AMBIGUOUS   |
| 5    | nothing above 0.65                         | NOT_FOUND   |

Assignment is greedy in input order: an earlier row wins a contested
pool record. Ambiguous rows consume nothing and go to human review.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from .config import MatchSettings, DEFAULT_SETTINGS
from .models import BatchOutcome, MatchResult, MatchType, PastedRecord, SystemRecord
from .normalize import normalize_text
from .similarity import similarity

logger = logging.getLogger(__name__)


def _find_first(
    pool: Sequence[SystemRecord],
    consumed: set[int],
    predicate: Callable[[SystemRecord], bool],
) -> Optional[int]:
    for index, record in enumerate(pool):
        if index not in consumed and predicate(record):
            return index
    return None


def match_one(
    pasted: PastedRecord,
    pool: Sequence[SystemRecord],
    consumed: set[int],
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> MatchResult:
    """
    Match a single pasted row against unconsumed pool records.

    `consumed` is updated in place with the index of the chosen record.
    """
    description = normalize_text(pasted.description)
    location = normalize_text(pasted.location)
    state = normalize_text(pasted.state)

    # Description is the search key; without it nothing can be linked
    if not description:
        return MatchResult(pasted=pasted, match_type=MatchType.NOT_FOUND)

    tiers = (
        (MatchType.PERFECT, lambda r: (
            normalize_text(r.description) == description
            and normalize_text(r.location) == location
            and normalize_text(r.state) == state
        )),
        (MatchType.HIGH, lambda r: (
            normalize_text(r.description) == description
            and normalize_text(r.location) == location
        )),
        (MatchType.EXACT, lambda r: normalize_text(r.description) == description),
    )

    for match_type, predicate in tiers:
        index = _find_first(pool, consumed, predicate)
        if index is not None:
            consumed.add(index)
            return MatchResult(pasted=pasted, match_type=match_type, matched=pool[index], pool_index=index)

    scored = [
        (similarity(record.description, pasted.description, settings), index)
        for index, record in enumerate(pool)
        if index not in consumed
    ]
    scored = [pair for pair in scored if pair[0] > settings.fuzzy_threshold]
    scored.sort(key=lambda pair: pair[0], reverse=True)

    if not scored:
        return MatchResult(pasted=pasted, match_type=MatchType.NOT_FOUND)

    if len(scored) > 1 and scored[0][0] - scored[1][0] < settings.ambiguity_gap:
        logger.info(
            f"Ambiguous match for '{pasted.description}': "
            f"{scored[0][0]:.2f} vs {scored[1][0]:.2f}"
        )
        return MatchResult(pasted=pasted, match_type=MatchType.AMBIGUOUS, score=scored[0][0])

    best_score, best_index = scored[0]
    consumed.add(best_index)
    return MatchResult(
        pasted=pasted,
        match_type=MatchType.SIMILARITY,
        matched=pool[best_index],
        pool_index=best_index,
        score=best_score,
    )


def match_batch(
    pasted: Iterable[PastedRecord],
    pool: Sequence[SystemRecord],
    consumed: Iterable[int] = (),
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> BatchOutcome:
    """
    Match pasted rows against a pool of system records.

    Args:
        pasted: Rows in the order they were pasted
        pool: Candidate system records (usually one unit's inventory)
        consumed: Pool indices already taken before this run
        settings: Weights and thresholds

    Returns:
        BatchOutcome with one MatchResult per row, in input order, and the
        full set of consumed pool indices. Neither input is modified.
    """
    taken = set(consumed)
    results = [match_one(row, pool, taken, settings) for row in pasted]
    return BatchOutcome(results=results, consumed=frozenset(taken))


def summarize_batch(results: Sequence[MatchResult]) -> dict:
    """Count results per match type."""
    counts = {match_type.name.lower(): 0 for match_type in MatchType}
    for result in results:
        counts[result.match_type.name.lower()] += 1

    counts["total"] = len(results)
    counts["matched"] = sum(1 for r in results if r.is_matched)
    counts["needs_review"] = counts["ambiguous"] + counts["not_found"]
    return counts
