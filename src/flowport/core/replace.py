"""Destructive whole-collection replacement."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from flowport.db.repositories.base import EntityRepository
from flowport.models.collections import CollectionSpec, Entity

logger = logging.getLogger(__name__)


@dataclass
class ReplaceResult:
    """Counts of a collection replacement."""

    deleted: int = 0
    inserted: int = 0


def _is_builtin(spec: CollectionSpec, entity: Entity) -> bool:
    return spec.skip_builtin and bool(entity.get("isBuiltin"))


async def replace_collection(
    spec: CollectionSpec,
    archive_items: list[Entity] | None,
    repository: EntityRepository,
    on_inserted: Callable[[Entity], None] | None = None,
) -> ReplaceResult:
    """Replace a live collection with the archived one.

    Every live entity is deleted one by one, then every archived entity is
    saved verbatim with its original id. An absent collection (None) still
    clears the live one. Writes are strictly sequential.

    Args:
        spec: Collection being replaced
        archive_items: Archived entities, or None when the key is absent
        repository: Store holding the live collection
        on_inserted: Called after each successful insert

    Returns:
        ReplaceResult with deleted and inserted counts

    Raises:
        ValueError: If called for a collection that must not be replaced
    """
    if not spec.replaceable:
        raise ValueError(f"Collection {spec.archive_key} cannot be replaced")

    result = ReplaceResult()

    for entity in await repository.list_all():
        if _is_builtin(spec, entity):
            continue
        await repository.delete(entity[spec.key_field])
        result.deleted += 1

    for entity in archive_items or []:
        if _is_builtin(spec, entity):
            continue
        await repository.save(entity)
        result.inserted += 1
        if on_inserted is not None:
            on_inserted(entity)

    logger.debug(
        "Replaced %s: deleted %d, inserted %d",
        spec.archive_key,
        result.deleted,
        result.inserted,
    )
    return result
