"""Conflict resolution and import summary models."""

from enum import Enum

from pydantic import Field

from flowport.models.archive import CamelModel
from flowport.models.collections import CollectionKind, EntityType, collections_of


class ImportMode(str, Enum):
    """How existing data is handled on import.

    - merge: add new items and resolve conflicts per strategy (default)
    - replace: substitute every collection with the archived one
    """

    MERGE = "merge"
    REPLACE = "replace"


class ConflictAction(str, Enum):
    """Resolution applied to an archived entity whose id already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    KEEP_BOTH = "keepBoth"


class WriteOutcome(str, Enum):
    """Counter an applied write is folded into."""

    IMPORTED = "imported"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"


class ConflictItem(CamelModel):
    """An archived entity sharing its id with a live entity."""

    type: EntityType
    id: str
    name: str
    existing_updated_at: str | None = None
    importing_updated_at: str | None = None


class ConflictResolutionItem(CamelModel):
    """Per-entity override of the default action."""

    id: str
    type: EntityType
    action: ConflictAction


class ConflictResolutionStrategy(CamelModel):
    """Caller-supplied policy for an import."""

    mode: ImportMode = ImportMode.MERGE
    default_action: ConflictAction = ConflictAction.SKIP
    item_overrides: list[ConflictResolutionItem] = Field(default_factory=list)

    def action_for(self, entity_id: str, entity_type: EntityType) -> ConflictAction:
        """Resolve the action for one entity, honouring overrides."""
        for override in self.item_overrides:
            if override.id == entity_id and override.type == entity_type:
                return override.action
        return self.default_action


class CollectionCounts(CamelModel):
    """Per-collection import counters."""

    imported: int = 0
    skipped: int = 0
    overwritten: int = 0


def _empty_counts() -> dict[str, CollectionCounts]:
    kinds = (
        CollectionKind.FULL,
        CollectionKind.RESTRICTED,
        CollectionKind.UPSERT,
        CollectionKind.PROJECT_SCOPED,
        CollectionKind.SANITIZED,
    )
    return {spec.entity_type.value: CollectionCounts() for spec in collections_of(*kinds)}


class ImportSummary(CamelModel):
    """What an import actually applied."""

    collections: dict[str, CollectionCounts] = Field(default_factory=_empty_counts)
    settings: bool = False
    mcp_config: bool = False
    deploy_preferences: bool = False

    def counts(self, entity_type: EntityType) -> CollectionCounts:
        """Counters for one entity type."""
        return self.collections.setdefault(entity_type.value, CollectionCounts())

    def record(self, entity_type: EntityType, outcome: WriteOutcome, amount: int = 1) -> None:
        """Fold applied work into the counters."""
        counts = self.counts(entity_type)
        setattr(counts, outcome.value, getattr(counts, outcome.value) + amount)

    def mark_singleton(self, store: str) -> None:
        """Flag a singleton config as written."""
        setattr(self, store, True)
