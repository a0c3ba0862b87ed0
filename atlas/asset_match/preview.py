"""
Update Preview - Check pasted rows before applying them.

Pasted rows are matched to one unit's system records, then each row's tag
is checked against the registry and the rest of the inventory:

| Status               | Meaning                                        |
|----------------------|------------------------------------------------|
| ok                   | Matched, tag (if any) is usable                |
| missing_description  | Row has no description to search by           |
| not_found            | No system record matched                       |
| ambiguous            | Several system records matched about equally   |
| tag_in_use           | Tag already belongs to another system record   |
| tag_wrong_location   | Registry places the tag in a different unit    |
| tag_not_in_registry  | Tag unknown to the registry (still saveable)   |
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .batch import match_one
from .config import Config, MatchSettings, get_registry_units
from .models import MatchResult, MatchType, PastedRecord, RegistryRecord, SystemRecord
from .normalize import normalize_tag, normalize_text


class UpdateStatus(Enum):
    OK = "ok"
    MISSING_DESCRIPTION = "missing_description"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    TAG_IN_USE = "tag_in_use"
    TAG_WRONG_LOCATION = "tag_wrong_location"
    TAG_NOT_IN_REGISTRY = "tag_not_in_registry"


SAVEABLE_STATUSES = {UpdateStatus.OK, UpdateStatus.TAG_NOT_IN_REGISTRY}


@dataclass
class PendingUpdate:
    """One previewed row and what would happen if it were saved."""
    row: int
    pasted: PastedRecord
    status: UpdateStatus
    match: Optional[MatchResult] = None
    registry_item: Optional[RegistryRecord] = None

    @property
    def system_item(self) -> Optional[SystemRecord]:
        return self.match.matched if self.match else None

    @property
    def is_saveable(self) -> bool:
        return self.status in SAVEABLE_STATUSES


def _classify(
    match: MatchResult,
    registry_item: Optional[RegistryRecord],
    tag: Optional[str],
    tag_owners: dict[str, SystemRecord],
    registry_units: list[str],
) -> UpdateStatus:
    if match.match_type == MatchType.AMBIGUOUS:
        return UpdateStatus.AMBIGUOUS
    if not match.is_matched:
        return UpdateStatus.NOT_FOUND
    if not tag:
        return UpdateStatus.OK

    owner = tag_owners.get(tag)
    if owner is not None and owner.id != match.matched.id:
        return UpdateStatus.TAG_IN_USE
    if registry_item is None:
        return UpdateStatus.TAG_NOT_IN_REGISTRY
    if normalize_text(registry_item.unit) not in registry_units:
        return UpdateStatus.TAG_WRONG_LOCATION
    return UpdateStatus.OK


def build_update_preview(
    rows: Sequence[PastedRecord],
    pool: Sequence[SystemRecord],
    registry: Sequence[RegistryRecord],
    target_unit: str,
    config: Config,
    inventory: Optional[Sequence[SystemRecord]] = None,
) -> list[PendingUpdate]:
    """
    Match pasted rows and classify each one for review.

    Args:
        rows: Parsed pasted rows, in paste order
        pool: System records of the target unit
        registry: All registry records (for tag lookups)
        target_unit: System unit the rows belong to
        config: Settings and unit mapping
        inventory: Full system inventory for tag ownership (defaults to pool)

    Returns:
        One PendingUpdate per row, in input order
    """
    settings: MatchSettings = config.settings
    registry_by_tag = {normalize_tag(r.tag): r for r in registry}
    tag_owners = {
        normalize_tag(r.tag): r
        for r in (inventory if inventory is not None else pool)
        if normalize_tag(r.tag)
    }
    registry_units = get_registry_units(target_unit, config)

    consumed: set[int] = set()
    updates = []

    for number, pasted in enumerate(rows):
        if not normalize_text(pasted.description):
            updates.append(PendingUpdate(row=number, pasted=pasted, status=UpdateStatus.MISSING_DESCRIPTION))
            continue

        match = match_one(pasted, pool, consumed, settings)
        tag = normalize_tag(pasted.tag) or None
        registry_item = registry_by_tag.get(tag) if tag else None

        status = _classify(match, registry_item, tag, tag_owners, registry_units)
        updates.append(PendingUpdate(
            row=number,
            pasted=pasted,
            status=status,
            match=match,
            registry_item=registry_item,
        ))

    return updates


def count_saveable(updates: Sequence[PendingUpdate]) -> int:
    """Number of previewed rows that can be saved."""
    return sum(1 for u in updates if u.is_saveable)
