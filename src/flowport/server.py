"""MCP server implementation for flowport."""

from typing import Any

from mcp.server.fastmcp import FastMCP

from flowport.config.settings import Settings
from flowport.db.database import Database
from flowport.db.stores import create_sqlite_stores
from flowport.services.export_service import ExportService
from flowport.services.import_service import ImportService
from flowport.services.share_service import ShareService
from flowport.tools import portability_tools

# Initialize FastMCP server
mcp = FastMCP("flowport")

# Global service instances (initialized in main)
export_service: ExportService | None = None
import_service: ImportService | None = None
share_service: ShareService | None = None
db: Database | None = None


async def initialize_services(settings: Settings) -> None:
    """Initialize all services and database.

    Args:
        settings: Application settings
    """
    global export_service, import_service, share_service, db

    # Initialize database
    db = Database(settings.database_path)
    await db.connect()
    await db.migrate()

    stores = create_sqlite_stores(db)
    allowed_paths = settings.allowed_base_paths()

    export_service = ExportService(stores, settings, allowed_paths)
    import_service = ImportService(stores, settings, allowed_paths)
    share_service = ShareService(allowed_paths)


async def shutdown_services() -> None:
    """Shutdown all services and close database."""
    global db
    if db:
        await db.close()
        db = None


# Archive Tools
@mcp.tool()
async def data_export(output_path: str) -> dict[str, Any]:
    """Export all projects, workflows, templates and settings to an archive file.

    Credentials are never exported: deploy account tokens and provider API
    keys are stripped.

    Args:
        output_path: Output file path (e.g. ./flowport-backup.flowport)

    Returns:
        Written file path and per-collection counts
    """
    if not export_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.data_export(export_service, output_path)


@mcp.tool()
async def import_preview(input_path: str) -> dict[str, Any]:
    """Preview an archive file: metadata, counts and id conflicts. Writes nothing.

    Args:
        input_path: Archive file path

    Returns:
        Metadata, counts, conflicts and an optional version warning
    """
    if not import_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.import_preview(import_service, input_path)


@mcp.tool()
async def import_execute(
    input_path: str,
    mode: str = "merge",
    default_action: str = "skip",
    item_overrides: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Import an archive file into the live collections.

    Args:
        input_path: Archive file path
        mode: Import mode (merge/replace). Replace deletes existing data first
        default_action: Action for id conflicts in merge mode (skip/overwrite/keepBoth)
        item_overrides: Per-entity actions, e.g. [{"id": "w1", "type": "workflows", "action": "overwrite"}]

    Returns:
        Import summary with per-collection counters
    """
    if not import_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.import_execute(
        import_service, input_path, mode, default_action, item_overrides
    )


# Share File Tools
@mcp.tool()
async def workflow_export(workflow: dict[str, Any], output_path: str) -> dict[str, Any]:
    """Export a single workflow to a share file.

    Args:
        workflow: Workflow object
        output_path: Output file, or a directory to use a name derived from the workflow

    Returns:
        Written file path
    """
    if not share_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.workflow_export(share_service, workflow, output_path)


@mcp.tool()
async def workflow_import(input_path: str) -> dict[str, Any]:
    """Read a workflow share file. The returned workflow has fresh ids and is not saved.

    Args:
        input_path: Share file path

    Returns:
        The workflow ready to save
    """
    if not share_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.workflow_import(share_service, input_path)


@mcp.tool()
async def node_export(node: dict[str, Any], output_path: str) -> dict[str, Any]:
    """Export a single workflow node to a share file.

    Args:
        node: Node object
        output_path: Output file, or a directory to use a name derived from the node

    Returns:
        Written file path
    """
    if not share_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.node_export(share_service, node, output_path)


@mcp.tool()
async def node_import(input_path: str) -> dict[str, Any]:
    """Read a node share file. The returned node has a fresh id and is not saved.

    Args:
        input_path: Share file path

    Returns:
        The node ready to insert into a workflow
    """
    if not share_service:
        raise RuntimeError("Services not initialized")
    return await portability_tools.node_import(share_service, input_path)


def create_server() -> FastMCP:
    """Create and return MCP server instance.

    Returns:
        FastMCP server instance
    """
    return mcp
