"""Result models returned by public export/import operations."""

from enum import Enum

from pydantic import Field

from flowport.models.archive import Archive, CamelModel, ExportMetadata
from flowport.models.collections import CollectionKind, Entity, collections_of
from flowport.models.reconciliation import ConflictItem, ImportSummary


class ResultCode(str, Enum):
    """String tags carried in the `error` field of failed results."""

    USER_CANCELLED = "USER_CANCELLED"
    INVALID_FORMAT = "INVALID_FORMAT"
    READ_ERROR = "READ_ERROR"
    WRITE_ERROR = "WRITE_ERROR"
    IMPORT_ERROR = "IMPORT_ERROR"
    EXPORT_ERROR = "EXPORT_ERROR"
    NOT_A_WORKFLOW_FILE = "NOT_A_WORKFLOW_FILE"
    NOT_A_STEP_FILE = "NOT_A_STEP_FILE"


class ValidationResult(CamelModel):
    """Outcome of archive validation."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ExportCounts(CamelModel):
    """Item counts of an archive."""

    collections: dict[str, int] = Field(default_factory=dict)
    has_settings: bool = False
    has_mcp_config: bool = False
    has_deploy_preferences: bool = False

    @classmethod
    def from_archive(cls, archive: Archive) -> "ExportCounts":
        """Count the entities carried by an archive."""
        kinds = (
            CollectionKind.FULL,
            CollectionKind.RESTRICTED,
            CollectionKind.UPSERT,
            CollectionKind.PROJECT_SCOPED,
            CollectionKind.SANITIZED,
        )
        return cls(
            collections={
                spec.archive_key: len(archive.items(spec.archive_key) or [])
                for spec in collections_of(*kinds)
            },
            has_settings=archive.data.get("settings") is not None,
            has_mcp_config=archive.data.get("mcpConfig") is not None,
            has_deploy_preferences=archive.data.get("deployPreferences") is not None,
        )


class ExportResult(CamelModel):
    """Result of a full export."""

    success: bool
    file_path: str | None = None
    error: str | None = None
    counts: ExportCounts | None = None


class ImportPreview(CamelModel):
    """Read-only analysis of an archive against live data."""

    metadata: ExportMetadata
    counts: ExportCounts
    conflicts: list[ConflictItem] = Field(default_factory=list)
    version_warning: str | None = None


class ImportFileResult(CamelModel):
    """Result of loading an archive for preview."""

    success: bool
    file_path: str | None = None
    error: str | None = None
    preview: ImportPreview | None = None


class ImportResult(CamelModel):
    """Result of executing an import."""

    success: bool
    error: str | None = None
    summary: ImportSummary = Field(default_factory=ImportSummary)


class ShareExportResult(CamelModel):
    """Result of writing a workflow or node share file."""

    success: bool
    file_path: str | None = None
    error: str | None = None


class WorkflowImportResult(CamelModel):
    """Workflow read from a share file, re-identified and ready to save."""

    success: bool
    workflow: Entity | None = None
    error: str | None = None


class NodeImportResult(CamelModel):
    """Node read from a share file, re-identified and ready to insert."""

    success: bool
    node: Entity | None = None
    error: str | None = None
