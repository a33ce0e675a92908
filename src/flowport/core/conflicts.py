"""Conflict detection between an archive and live collections."""

from collections.abc import Mapping

from flowport.models.archive import Archive
from flowport.models.collections import (
    CollectionKind,
    CollectionSpec,
    Entity,
    EntityType,
    collections_of,
)
from flowport.models.reconciliation import ConflictItem


def detect_conflicts(
    archive: Archive,
    live: Mapping[EntityType, list[Entity]],
) -> list[ConflictItem]:
    """Find archived entities whose id already exists in live data.

    Pure and read-only. Each collection is checked independently using an
    id lookup, so the cost is linear in the number of entities.

    Args:
        archive: Validated archive
        live: Live snapshot per entity type; missing types count as empty

    Returns:
        One ConflictItem per colliding archived entity, in archive order
    """
    conflicts: list[ConflictItem] = []

    for spec in collections_of(CollectionKind.FULL, CollectionKind.RESTRICTED):
        incoming = archive.items(spec.archive_key)
        if not incoming:
            continue

        existing = {entity.get("id"): entity for entity in live.get(spec.entity_type, [])}

        for item in incoming:
            if spec.skip_builtin and item.get("isBuiltin"):
                continue
            current = existing.get(item.get("id"))
            if current is None:
                continue
            conflicts.append(
                ConflictItem(
                    type=spec.entity_type,
                    id=item["id"],
                    name=str(item.get("name") or item["id"]),
                    existing_updated_at=_timestamp(current, spec),
                    importing_updated_at=_timestamp(item, spec),
                )
            )

    return conflicts


def _timestamp(entity: Entity, spec: CollectionSpec) -> str | None:
    """First populated comparison timestamp, e.g. updatedAt then createdAt."""
    for field in spec.timestamp_fields:
        value = entity.get(field)
        if value:
            return str(value)
    return None
