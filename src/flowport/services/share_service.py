"""Service for single-workflow and single-node share files."""

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from flowport.core.merge import generate_new_id
from flowport.exceptions import ArchiveFormatError, UnsafePathError
from flowport.models.archive import (
    STEP_FILE_EXTENSION,
    WORKFLOW_FILE_EXTENSION,
    NodeExportData,
    WorkflowExportData,
    utc_now_iso,
)
from flowport.models.collections import Entity
from flowport.models.results import (
    NodeImportResult,
    ResultCode,
    ShareExportResult,
    WorkflowImportResult,
)
from flowport.utils.files import read_json, write_json
from flowport.utils.paths import suggest_filename, validate_safe_path

logger = logging.getLogger(__name__)

# Creates a fresh incoming webhook config (new token and URL)
WebhookFactory = Callable[[], Awaitable[Entity]]


class ShareService:
    """Service writing and reading share files for one workflow or node.

    Imported entities are returned with fresh identifiers; the caller is
    responsible for saving them.
    """

    def __init__(
        self,
        allowed_paths: list[Path] | None = None,
        webhook_factory: WebhookFactory | None = None,
    ) -> None:
        """Initialize share service.

        Args:
            allowed_paths: Additional allowed base directories for share files
            webhook_factory: Creates incoming webhook configs for imported workflows
        """
        self.allowed_paths = [p.resolve() for p in (allowed_paths or [])]
        self.webhook_factory = webhook_factory

    async def export_workflow(
        self, workflow: Entity, output_path: str | None
    ) -> ShareExportResult:
        """Write a workflow share file.

        Args:
            workflow: Workflow to share
            output_path: Destination file or directory, or None if cancelled

        Returns:
            ShareExportResult with the written file path
        """
        document = WorkflowExportData(workflow=workflow)
        return await self._export(
            document.model_dump(by_alias=True),
            output_path,
            suggest_filename(str(workflow.get("name") or "workflow"), WORKFLOW_FILE_EXTENSION),
        )

    async def export_node(self, node: Entity, output_path: str | None) -> ShareExportResult:
        """Write a node share file.

        Args:
            node: Workflow node to share
            output_path: Destination file or directory, or None if cancelled

        Returns:
            ShareExportResult with the written file path
        """
        document = NodeExportData(node=node)
        return await self._export(
            document.model_dump(by_alias=True),
            output_path,
            suggest_filename(str(node.get("name") or "step"), STEP_FILE_EXTENSION),
        )

    async def import_workflow(self, file_path: str | None) -> WorkflowImportResult:
        """Read a workflow share file and re-identify its contents.

        The workflow and each of its nodes get new ids, and both timestamps
        are reset. A carried incoming webhook is replaced by a freshly
        created, disabled one, or dropped if none can be created.

        Args:
            file_path: Share file to read, or None if the user cancelled

        Returns:
            WorkflowImportResult with the workflow ready to save
        """
        document, error = await self._load(file_path)
        if error:
            return WorkflowImportResult(success=False, error=error)

        source = document.get("workflow")
        if document.get("type") != "workflow" or not isinstance(source, dict):
            return WorkflowImportResult(
                success=False, error=ResultCode.NOT_A_WORKFLOW_FILE.value
            )

        now = utc_now_iso()
        workflow = {
            **source,
            "id": generate_new_id(),
            "createdAt": now,
            "updatedAt": now,
            "nodes": [
                {**node, "id": generate_new_id()}
                for node in source.get("nodes") or []
                if isinstance(node, dict)
            ],
        }

        if source.get("incomingWebhook"):
            webhook = await self._create_webhook()
            if webhook is None:
                workflow.pop("incomingWebhook", None)
            else:
                workflow["incomingWebhook"] = {**webhook, "enabled": False}

        logger.info("Imported workflow %s as %s", source.get("id"), workflow["id"])
        return WorkflowImportResult(success=True, workflow=workflow)

    async def import_node(self, file_path: str | None) -> NodeImportResult:
        """Read a node share file and give the node a new id.

        Args:
            file_path: Share file to read, or None if the user cancelled

        Returns:
            NodeImportResult with the node ready to insert
        """
        document, error = await self._load(file_path)
        if error:
            return NodeImportResult(success=False, error=error)

        source = document.get("node")
        if document.get("type") != "node" or not isinstance(source, dict):
            return NodeImportResult(success=False, error=ResultCode.NOT_A_STEP_FILE.value)

        return NodeImportResult(success=True, node={**source, "id": generate_new_id()})

    async def _export(
        self,
        document: dict[str, Any],
        output_path: str | None,
        default_filename: str,
    ) -> ShareExportResult:
        if not output_path:
            return ShareExportResult(success=False, error=ResultCode.USER_CANCELLED.value)

        try:
            path = validate_safe_path(output_path, self.allowed_paths)
            if path.is_dir():
                path = path / default_filename
            await write_json(path, document)
        except UnsafePathError as e:
            logger.warning("Share export rejected: %s", e)
            return ShareExportResult(success=False, error=str(e))
        except OSError as e:
            logger.error("Failed to write share file %s: %s", output_path, e)
            return ShareExportResult(
                success=False, error=f"{ResultCode.WRITE_ERROR.value}: {e}"
            )
        except Exception as e:
            logger.exception("Share export failed: %s", e)
            return ShareExportResult(
                success=False, error=str(e) or ResultCode.EXPORT_ERROR.value
            )

        logger.info("Wrote share file %s", path)
        return ShareExportResult(success=True, file_path=str(path))

    async def _load(self, file_path: str | None) -> tuple[dict[str, Any], str | None]:
        """Read a share file as a JSON object.

        Returns:
            Tuple of (document, error); error is None on success
        """
        if not file_path:
            return {}, ResultCode.USER_CANCELLED.value

        try:
            path = validate_safe_path(file_path, self.allowed_paths)
            document = await read_json(path)
        except UnsafePathError as e:
            logger.warning("Share import rejected: %s", e)
            return {}, str(e)
        except ArchiveFormatError as e:
            logger.warning("Share import rejected: %s", e)
            return {}, ResultCode.INVALID_FORMAT.value
        except OSError as e:
            logger.error("Failed to read share file %s: %s", file_path, e)
            return {}, f"{ResultCode.READ_ERROR.value}: {e}"
        except Exception as e:
            logger.exception("Share import failed: %s", e)
            return {}, str(e) or ResultCode.IMPORT_ERROR.value

        if not isinstance(document, dict):
            return {}, ResultCode.INVALID_FORMAT.value
        return document, None

    async def _create_webhook(self) -> Entity | None:
        if self.webhook_factory is None:
            return None
        try:
            return await self.webhook_factory()
        except Exception as e:
            logger.error("Failed to create incoming webhook config for import: %s", e)
            return None
