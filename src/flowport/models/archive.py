"""Archive file models."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flowport.models.collections import Entity

# Version 2.0.0 added AI services, AI templates, MCP config, deploy accounts/configs
CURRENT_FORMAT_VERSION = "2.0.0"
MIN_SUPPORTED_VERSION = "1.0.0"

EXPORT_FILE_EXTENSION = "flowport"
DEFAULT_EXPORT_FILENAME = f"flowport-backup.{EXPORT_FILE_EXTENSION}"
WORKFLOW_FILE_EXTENSION = "workflow.json"
STEP_FILE_EXTENSION = "step.json"


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExportMetadata(CamelModel):
    """Archive metadata block."""

    version: str = CURRENT_FORMAT_VERSION
    app_version: str | None = None
    exported_at: str = Field(default_factory=utc_now_iso)
    export_type: Literal["full", "partial"] = "full"
    included_types: list[str] | None = None


class Archive(BaseModel):
    """Full-archive envelope: metadata plus collection data."""

    metadata: ExportMetadata
    data: dict[str, Any] = Field(default_factory=dict)

    def items(self, archive_key: str) -> list[Entity] | None:
        """Return an array-valued collection, or None when absent."""
        value = self.data.get(archive_key)
        return value if isinstance(value, list) else None

    def singleton(self, archive_key: str) -> Entity | None:
        """Return a singleton config, or None when absent."""
        value = self.data.get(archive_key)
        return value if isinstance(value, dict) else None

    def to_document(self) -> dict[str, Any]:
        """Build the JSON document written to disk."""
        return {
            "metadata": self.metadata.model_dump(by_alias=True, exclude_none=True),
            "data": self.data,
        }


class WorkflowExportData(CamelModel):
    """Single-workflow share file."""

    version: str = CURRENT_FORMAT_VERSION
    exported_at: str = Field(default_factory=utc_now_iso)
    type: Literal["workflow"] = "workflow"
    workflow: Entity


class NodeExportData(CamelModel):
    """Single-node share file."""

    version: str = CURRENT_FORMAT_VERSION
    exported_at: str = Field(default_factory=utc_now_iso)
    type: Literal["node"] = "node"
    node: Entity
