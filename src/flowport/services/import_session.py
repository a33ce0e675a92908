"""Stateful driver for one interactive import."""

import logging
from enum import Enum

from flowport.exceptions import ImportStateError
from flowport.models.reconciliation import ConflictResolutionStrategy, ImportMode
from flowport.models.results import ImportFileResult, ImportPreview, ImportResult
from flowport.services.import_service import ImportService

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    """Import session states.

    IDLE -> FILE_SELECTED -> PREVIEWED -> MERGING | REPLACING
    -> COMPLETED | FAILED
    """

    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PREVIEWED = "previewed"
    MERGING = "merging"
    REPLACING = "replacing"
    COMPLETED = "completed"
    FAILED = "failed"


_IN_FLIGHT = (ImportState.MERGING, ImportState.REPLACING)


class ImportSession:
    """One import, from file selection to completion.

    COMPLETED is terminal. A FAILED session may only restart from file
    selection. Driving the session out of order raises ImportStateError.
    """

    def __init__(self, service: ImportService) -> None:
        self.service = service
        self.state = ImportState.IDLE
        self.file_path: str | None = None
        self.preview: ImportPreview | None = None
        self.result: ImportResult | None = None
        self.error: str | None = None

    def _require(self, *allowed: ImportState) -> None:
        if self.state not in allowed:
            raise ImportStateError(
                f"Cannot do this while import is {self.state.value}; "
                f"expected one of: {', '.join(s.value for s in allowed)}"
            )

    def select_file(self, file_path: str | None) -> bool:
        """Choose the archive to import.

        Args:
            file_path: Archive path, or None if the user cancelled

        Returns:
            True if a file was selected
        """
        self._require(
            ImportState.IDLE,
            ImportState.FILE_SELECTED,
            ImportState.PREVIEWED,
            ImportState.FAILED,
        )
        if not file_path:
            return False

        self.file_path = file_path
        self.preview = None
        self.result = None
        self.error = None
        self.state = ImportState.FILE_SELECTED
        return True

    async def load_preview(self) -> ImportFileResult:
        """Preview the selected archive."""
        self._require(ImportState.FILE_SELECTED)

        loaded = await self.service.preview(self.file_path)
        if loaded.success:
            self.preview = loaded.preview
            self.state = ImportState.PREVIEWED
        else:
            self.error = loaded.error
            self.state = ImportState.FAILED
        return loaded

    async def execute(self, strategy: ConflictResolutionStrategy) -> ImportResult:
        """Apply the previewed archive with the chosen strategy.

        Any exception escaping the import moves the session to FAILED
        before it propagates.

        Raises:
            ImportStateError: If no preview was loaded or an import is already running
        """
        self._require(ImportState.PREVIEWED)

        self.state = (
            ImportState.REPLACING if strategy.mode is ImportMode.REPLACE else ImportState.MERGING
        )
        try:
            result = await self.service.execute(self.file_path, strategy)
        except BaseException as e:
            # Includes cancellation; the session must not stay in flight
            self.error = str(e) or type(e).__name__
            self.state = ImportState.FAILED
            logger.error("Import session aborted: %s", self.error)
            raise

        self.result = result
        self.error = result.error
        self.state = ImportState.COMPLETED if result.success else ImportState.FAILED
        logger.info("Import session finished: %s", self.state.value)
        return result

    def reset(self) -> None:
        """Return to IDLE, discarding any selection."""
        if self.state in _IN_FLIGHT:
            raise ImportStateError("Cannot reset while an import is running")
        self.state = ImportState.IDLE
        self.file_path = None
        self.preview = None
        self.result = None
        self.error = None
