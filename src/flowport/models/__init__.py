"""Data models for flowport."""

from flowport.models.archive import (
    CURRENT_FORMAT_VERSION,
    MIN_SUPPORTED_VERSION,
    Archive,
    ExportMetadata,
    NodeExportData,
    WorkflowExportData,
)
from flowport.models.collections import (
    COLLECTIONS,
    CollectionKind,
    CollectionSpec,
    Entity,
    EntityType,
    get_collection,
)
from flowport.models.reconciliation import (
    CollectionCounts,
    ConflictAction,
    ConflictItem,
    ConflictResolutionItem,
    ConflictResolutionStrategy,
    ImportMode,
    ImportSummary,
    WriteOutcome,
)
from flowport.models.results import (
    ExportCounts,
    ExportResult,
    ImportFileResult,
    ImportPreview,
    ImportResult,
    NodeImportResult,
    ResultCode,
    ShareExportResult,
    ValidationResult,
    WorkflowImportResult,
)

__all__ = [
    # Archive models
    "Archive",
    "ExportMetadata",
    "WorkflowExportData",
    "NodeExportData",
    "CURRENT_FORMAT_VERSION",
    "MIN_SUPPORTED_VERSION",
    # Collection registry
    "COLLECTIONS",
    "CollectionKind",
    "CollectionSpec",
    "Entity",
    "EntityType",
    "get_collection",
    # Reconciliation models
    "CollectionCounts",
    "ConflictAction",
    "ConflictItem",
    "ConflictResolutionItem",
    "ConflictResolutionStrategy",
    "ImportMode",
    "ImportSummary",
    "WriteOutcome",
    # Results
    "ExportCounts",
    "ExportResult",
    "ImportFileResult",
    "ImportPreview",
    "ImportResult",
    "NodeImportResult",
    "ResultCode",
    "ShareExportResult",
    "ValidationResult",
    "WorkflowImportResult",
]
