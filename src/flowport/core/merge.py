"""Whole-entity merge of archived collections into live collections."""

import uuid
from dataclasses import dataclass, field

from flowport.models.collections import Entity, EntityType
from flowport.models.reconciliation import (
    ConflictAction,
    ConflictResolutionStrategy,
    WriteOutcome,
)


@dataclass
class MergeResult:
    """Merged collection plus the counters and writes that produced it.

    `writes` lists, in order, the entities that differ from live state and
    must be persisted, tagged with the counter each write belongs to.
    """

    merged: list[Entity]
    imported: int = 0
    skipped: int = 0
    overwritten: int = 0
    writes: list[tuple[WriteOutcome, Entity]] = field(default_factory=list)


def generate_new_id() -> str:
    """Generate a fresh entity identifier."""
    return str(uuid.uuid4())


def merge_collection(
    archive_items: list[Entity],
    live_items: list[Entity],
    entity_type: EntityType,
    strategy: ConflictResolutionStrategy,
) -> MergeResult:
    """Merge archived entities into a live collection using a strategy.

    Entities without a live counterpart are always appended. Colliding
    entities are skipped, overwritten in place, or appended under a new id
    (keepBoth), per item override or the strategy's default action.

    Args:
        archive_items: Entities from the archive
        live_items: Current entities of the same collection
        entity_type: Type tag matched against item overrides
        strategy: Conflict resolution strategy

    Returns:
        MergeResult whose `merged` keeps every id unique
    """
    merged = list(live_items)
    positions = {item["id"]: index for index, item in enumerate(merged)}
    result = MergeResult(merged=merged)

    for item in archive_items:
        item_id = item["id"]
        position = positions.get(item_id)

        if position is None:
            positions[item_id] = len(merged)
            merged.append(item)
            result.imported += 1
            result.writes.append((WriteOutcome.IMPORTED, item))
            continue

        action = strategy.action_for(item_id, entity_type)
        if action is ConflictAction.SKIP:
            result.skipped += 1
        elif action is ConflictAction.OVERWRITE:
            merged[position] = item
            result.overwritten += 1
            result.writes.append((WriteOutcome.OVERWRITTEN, item))
        elif action is ConflictAction.KEEP_BOTH:
            new_id = generate_new_id()
            while new_id in positions:
                new_id = generate_new_id()
            copy = {**item, "id": new_id}
            positions[new_id] = len(merged)
            merged.append(copy)
            result.imported += 1
            result.writes.append((WriteOutcome.IMPORTED, copy))

    return result


def merge_absent_only(
    archive_items: list[Entity],
    live_items: list[Entity],
) -> MergeResult:
    """Add archived entities whose id is not live; skip the rest.

    Used for collections referenced by id from other entities (providers,
    prompt templates, CLI tools, automation actions and permissions), where
    overwriting or renaming would silently break those references.

    Args:
        archive_items: Entities from the archive
        live_items: Current entities of the same collection

    Returns:
        MergeResult with imported and skipped counts only
    """
    merged = list(live_items)
    known = {item["id"] for item in merged}
    result = MergeResult(merged=merged)

    for item in archive_items:
        if item["id"] in known:
            result.skipped += 1
            continue
        known.add(item["id"])
        merged.append(item)
        result.imported += 1
        result.writes.append((WriteOutcome.IMPORTED, item))

    return result
