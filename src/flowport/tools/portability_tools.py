"""Export/import MCP tools."""

from typing import Any

from pydantic import ValidationError

from flowport.models.reconciliation import ConflictResolutionStrategy
from flowport.models.results import ResultCode
from flowport.services.export_service import ExportService
from flowport.services.import_service import ImportService
from flowport.services.share_service import ShareService
from flowport.tools import create_error_response

_ERROR_TYPES = {
    ResultCode.USER_CANCELLED: "CancelledError",
    ResultCode.INVALID_FORMAT: "ValidationError",
    ResultCode.READ_ERROR: "IOError",
    ResultCode.WRITE_ERROR: "IOError",
    ResultCode.IMPORT_ERROR: "ImportError",
    ResultCode.EXPORT_ERROR: "ExportError",
    ResultCode.NOT_A_WORKFLOW_FILE: "ValidationError",
    ResultCode.NOT_A_STEP_FILE: "ValidationError",
}


def _failure(
    error: str | None,
    default_type: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Convert a failed result into an error response.

    The error type is taken from a leading result code such as
    "WRITE_ERROR: ..." when present.
    """
    message = error or default_type
    code = message.split(":", 1)[0]
    try:
        error_type = _ERROR_TYPES[ResultCode(code)]
    except ValueError:
        error_type = default_type
    return create_error_response(message=message, error_type=error_type, details=details)


async def data_export(service: ExportService, output_path: str | None = None) -> dict[str, Any]:
    """Export every collection to an archive file.

    Args:
        service: Export service instance
        output_path: Output file path (required)

    Returns:
        Written file path and per-collection counts
    """
    if not output_path:
        return create_error_response(
            message="output_path is required",
            error_type="ValidationError",
        )

    result = await service.export_all(output_path)
    if not result.success:
        return _failure(result.error, "ExportError")

    return {
        "file_path": result.file_path,
        "counts": result.counts.model_dump(mode="json") if result.counts else None,
    }


async def import_preview(service: ImportService, input_path: str | None = None) -> dict[str, Any]:
    """Preview an archive file without modifying any data.

    Args:
        service: Import service instance
        input_path: Archive file path (required)

    Returns:
        Archive metadata, counts, conflicts and version warning
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    result = await service.preview(input_path)
    if not result.success or result.preview is None:
        return _failure(result.error, "ValidationError")

    return {
        "file_path": result.file_path,
        **result.preview.model_dump(mode="json"),
    }


async def import_execute(
    service: ImportService,
    input_path: str | None = None,
    mode: str = "merge",
    default_action: str = "skip",
    item_overrides: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Import an archive file.

    Args:
        service: Import service instance
        input_path: Archive file path (required)
        mode: Import mode (merge/replace)
        default_action: Conflict action (skip/overwrite/keepBoth)
        item_overrides: Per-entity actions as {"id", "type", "action"} dicts

    Returns:
        Import summary with per-collection counters
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    try:
        strategy = ConflictResolutionStrategy.model_validate(
            {
                "mode": mode,
                "defaultAction": default_action,
                "itemOverrides": item_overrides or [],
            }
        )
    except ValidationError as e:
        return create_error_response(
            message=f"Invalid conflict resolution strategy: {e.error_count()} error(s)",
            error_type="ValidationError",
            details={"errors": e.errors(include_url=False, include_context=False)},
        )

    result = await service.execute(input_path, strategy)
    summary = result.summary.model_dump(mode="json")
    if not result.success:
        return _failure(result.error, "ImportError", details={"summary": summary})

    return {"mode": strategy.mode.value, "summary": summary}


async def workflow_export(
    service: ShareService,
    workflow: dict[str, Any],
    output_path: str | None = None,
) -> dict[str, Any]:
    """Export a single workflow to a share file.

    Args:
        service: Share service instance
        workflow: Workflow object to share
        output_path: Output file or directory (required)

    Returns:
        Written file path
    """
    if not workflow or not workflow.get("id"):
        return create_error_response(
            message="workflow must be an object with an id",
            error_type="ValidationError",
        )
    if not output_path:
        return create_error_response(
            message="output_path is required",
            error_type="ValidationError",
        )

    result = await service.export_workflow(workflow, output_path)
    if not result.success:
        return _failure(result.error, "ExportError")
    return {"file_path": result.file_path}


async def workflow_import(service: ShareService, input_path: str | None = None) -> dict[str, Any]:
    """Read a workflow share file.

    Args:
        service: Share service instance
        input_path: Share file path (required)

    Returns:
        The workflow with new ids, ready to save
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    result = await service.import_workflow(input_path)
    if not result.success:
        return _failure(result.error, "ImportError")
    return {"workflow": result.workflow}


async def node_export(
    service: ShareService,
    node: dict[str, Any],
    output_path: str | None = None,
) -> dict[str, Any]:
    """Export a single workflow node to a share file.

    Args:
        service: Share service instance
        node: Node object to share
        output_path: Output file or directory (required)

    Returns:
        Written file path
    """
    if not node or not node.get("id"):
        return create_error_response(
            message="node must be an object with an id",
            error_type="ValidationError",
        )
    if not output_path:
        return create_error_response(
            message="output_path is required",
            error_type="ValidationError",
        )

    result = await service.export_node(node, output_path)
    if not result.success:
        return _failure(result.error, "ExportError")
    return {"file_path": result.file_path}


async def node_import(service: ShareService, input_path: str | None = None) -> dict[str, Any]:
    """Read a node share file.

    Args:
        service: Share service instance
        input_path: Share file path (required)

    Returns:
        The node with a new id, ready to insert
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    result = await service.import_node(input_path)
    if not result.success:
        return _failure(result.error, "ImportError")
    return {"node": result.node}
