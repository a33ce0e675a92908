"""Service layer for export, import and share files."""

from flowport.services.export_service import ExportService
from flowport.services.import_service import ImportService
from flowport.services.import_session import ImportSession, ImportState
from flowport.services.share_service import ShareService

__all__ = ["ExportService", "ImportService", "ImportSession", "ImportState", "ShareService"]
