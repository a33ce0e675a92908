"""Service for previewing and executing archive imports."""

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from flowport.config.settings import Settings
from flowport.core.conflicts import detect_conflicts
from flowport.core.merge import merge_absent_only, merge_collection
from flowport.core.replace import replace_collection
from flowport.core.validation import validate_export_data
from flowport.db.stores import StoreRegistry
from flowport.exceptions import (
    ArchiveFormatError,
    ArchiveValidationError,
    PersistenceError,
    UnsafePathError,
)
from flowport.models.archive import Archive
from flowport.models.collections import (
    COLLECTIONS,
    CollectionKind,
    CollectionSpec,
    Entity,
    EntityType,
    collections_of,
)
from flowport.models.reconciliation import (
    ConflictResolutionStrategy,
    ImportMode,
    ImportSummary,
    WriteOutcome,
)
from flowport.models.results import (
    ExportCounts,
    ImportFileResult,
    ImportPreview,
    ImportResult,
    ResultCode,
)
from flowport.utils.files import read_json
from flowport.utils.paths import validate_safe_path

logger = logging.getLogger(__name__)


@contextmanager
def _persisting(collection: str) -> Iterator[None]:
    """Attribute any store failure inside the block to one collection."""
    try:
        yield
    except PersistenceError:
        raise
    except Exception as e:
        raise PersistenceError(collection, str(e) or type(e).__name__) from e


def _is_builtin(spec: CollectionSpec, entity: Entity) -> bool:
    return spec.skip_builtin and bool(entity.get("isBuiltin"))


class ImportService:
    """Service reconciling an archive file against live collections."""

    def __init__(
        self,
        stores: StoreRegistry,
        settings: Settings,
        allowed_paths: list[Path] | None = None,
    ) -> None:
        """Initialize import service.

        Args:
            stores: Store registry to read from and write to
            settings: Application settings
            allowed_paths: Additional allowed base directories for input files
        """
        self.stores = stores
        self.settings = settings
        self.allowed_paths = [p.resolve() for p in (allowed_paths or [])]

    async def load_archive(self, file_path: str) -> tuple[Archive, list[str]]:
        """Read, parse and validate an archive file.

        Args:
            file_path: Archive to read

        Returns:
            Tuple of (archive, validation warnings)

        Raises:
            UnsafePathError: If the path is outside the allowed directories
            OSError: If the file cannot be read
            ArchiveFormatError: If the file is not valid JSON
            ArchiveValidationError: If the document fails validation
        """
        path = validate_safe_path(file_path, self.allowed_paths)
        document = await read_json(path)

        validation = validate_export_data(document)
        if not validation.valid:
            raise ArchiveValidationError(validation.errors)

        try:
            archive = Archive.model_validate(document)
        except ValidationError as e:
            raise ArchiveValidationError(
                [
                    f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                    for error in e.errors()
                ]
            ) from e
        return archive, validation.warnings

    async def snapshot(self) -> dict[EntityType, list[Entity]]:
        """Read every reconciled collection concurrently."""
        specs = collections_of(CollectionKind.FULL, CollectionKind.RESTRICTED)
        lists = await asyncio.gather(
            *(self.stores.entities(spec).list_all() for spec in specs)
        )
        return {spec.entity_type: items for spec, items in zip(specs, lists)}

    async def preview(self, file_path: str | None) -> ImportFileResult:
        """Analyze an archive against live data without writing anything.

        Args:
            file_path: Archive to read, or None if the user cancelled

        Returns:
            ImportFileResult with metadata, counts, conflicts and any
            version warning, or an error
        """
        if not file_path:
            return ImportFileResult(success=False, error=ResultCode.USER_CANCELLED.value)

        try:
            archive, warnings = await self.load_archive(file_path)
            live = await self.snapshot()
        except (UnsafePathError, ArchiveValidationError) as e:
            logger.warning("Import preview rejected %s: %s", file_path, e)
            return ImportFileResult(success=False, error=str(e))
        except ArchiveFormatError as e:
            logger.warning("Import preview rejected %s: %s", file_path, e)
            return ImportFileResult(success=False, error=ResultCode.INVALID_FORMAT.value)
        except OSError as e:
            logger.error("Failed to read import file %s: %s", file_path, e)
            return ImportFileResult(
                success=False, error=f"{ResultCode.READ_ERROR.value}: {e}"
            )
        except Exception as e:
            logger.exception("Import preview failed: %s", e)
            return ImportFileResult(success=False, error=str(e) or ResultCode.READ_ERROR.value)

        conflicts = detect_conflicts(archive, live)
        logger.info(
            "Previewed %s: %d conflicts, format version %s",
            file_path,
            len(conflicts),
            archive.metadata.version,
        )
        return ImportFileResult(
            success=True,
            file_path=file_path,
            preview=ImportPreview(
                metadata=archive.metadata,
                counts=ExportCounts.from_archive(archive),
                conflicts=conflicts,
                version_warning=warnings[0] if warnings else None,
            ),
        )

    async def execute(
        self,
        file_path: str | None,
        strategy: ConflictResolutionStrategy | None = None,
    ) -> ImportResult:
        """Apply an archive to live collections.

        Collections are persisted one after another. The first failing
        collection stops the import; the returned summary still reports
        every write applied before it.

        Args:
            file_path: Archive to read, or None if the user cancelled
            strategy: Conflict resolution strategy (default: merge, skip)

        Returns:
            ImportResult with the applied summary
        """
        if not file_path:
            return ImportResult(success=False, error=ResultCode.USER_CANCELLED.value)

        strategy = strategy or ConflictResolutionStrategy()
        summary = ImportSummary()

        try:
            archive, _ = await self.load_archive(file_path)
        except (UnsafePathError, ArchiveValidationError) as e:
            logger.warning("Import rejected %s: %s", file_path, e)
            return ImportResult(success=False, error=str(e), summary=summary)
        except ArchiveFormatError as e:
            logger.warning("Import rejected %s: %s", file_path, e)
            return ImportResult(
                success=False, error=ResultCode.INVALID_FORMAT.value, summary=summary
            )
        except OSError as e:
            logger.error("Failed to read import file %s: %s", file_path, e)
            return ImportResult(
                success=False, error=f"{ResultCode.READ_ERROR.value}: {e}", summary=summary
            )
        except Exception as e:
            logger.exception("Import failed while loading %s: %s", file_path, e)
            return ImportResult(
                success=False, error=str(e) or ResultCode.IMPORT_ERROR.value, summary=summary
            )

        logger.info("Importing %s in %s mode", file_path, strategy.mode.value)
        try:
            for spec in COLLECTIONS:
                await self._apply(spec, archive, strategy, summary)
        except PersistenceError as e:
            logger.error("Import halted at %s: %s", e.collection, e)
            return ImportResult(
                success=False,
                error=f"{ResultCode.WRITE_ERROR.value}: {e}",
                summary=summary,
            )
        except Exception as e:
            logger.exception("Import failed: %s", e)
            return ImportResult(
                success=False, error=str(e) or ResultCode.IMPORT_ERROR.value, summary=summary
            )

        logger.info("Import of %s completed", file_path)
        return ImportResult(success=True, summary=summary)

    async def _apply(
        self,
        spec: CollectionSpec,
        archive: Archive,
        strategy: ConflictResolutionStrategy,
        summary: ImportSummary,
    ) -> None:
        """Persist one collection according to its kind and the import mode."""
        if spec.kind is CollectionKind.SANITIZED:
            # Account records hold no tokens, so they are never written back
            return

        with _persisting(spec.archive_key):
            if spec.kind is CollectionKind.SINGLETON:
                await self._apply_singleton(spec, archive, strategy.mode, summary)
            elif spec.kind is CollectionKind.PROJECT_SCOPED:
                await self._upsert_project_scoped(spec, archive, summary)
            elif strategy.mode is ImportMode.REPLACE:
                await replace_collection(
                    spec,
                    archive.items(spec.archive_key),
                    self.stores.entities(spec),
                    on_inserted=lambda _: summary.record(
                        spec.entity_type, WriteOutcome.IMPORTED
                    ),
                )
            elif spec.kind is CollectionKind.FULL:
                await self._merge_full(spec, archive, strategy, summary)
            elif spec.kind is CollectionKind.RESTRICTED:
                await self._merge_restricted(spec, archive, summary)
            else:
                await self._upsert(spec, archive, summary)

    async def _merge_full(
        self,
        spec: CollectionSpec,
        archive: Archive,
        strategy: ConflictResolutionStrategy,
        summary: ImportSummary,
    ) -> None:
        items = archive.items(spec.archive_key)
        if not items:
            return

        repository = self.stores.entities(spec)
        result = merge_collection(items, await repository.list_all(), spec.entity_type, strategy)
        for outcome, entity in result.writes:
            await repository.save(entity)
            summary.record(spec.entity_type, outcome)
        summary.record(spec.entity_type, WriteOutcome.SKIPPED, result.skipped)

    async def _merge_restricted(
        self,
        spec: CollectionSpec,
        archive: Archive,
        summary: ImportSummary,
    ) -> None:
        items = [
            item
            for item in archive.items(spec.archive_key) or []
            if not _is_builtin(spec, item)
        ]
        if not items:
            return

        repository = self.stores.entities(spec)
        result = merge_absent_only(items, await repository.list_all())
        for outcome, entity in result.writes:
            await repository.save(entity)
            summary.record(spec.entity_type, outcome)
        summary.record(spec.entity_type, WriteOutcome.SKIPPED, result.skipped)

    async def _upsert(
        self,
        spec: CollectionSpec,
        archive: Archive,
        summary: ImportSummary,
    ) -> None:
        """Save each archived entity, counting existing ids as overwritten."""
        items = archive.items(spec.archive_key)
        if not items:
            return

        repository = self.stores.entities(spec)
        known = {entity[spec.key_field] for entity in await repository.list_all()}
        for entity in items:
            key = entity[spec.key_field]
            await repository.save(entity)
            summary.record(
                spec.entity_type,
                WriteOutcome.OVERWRITTEN if key in known else WriteOutcome.IMPORTED,
            )
            known.add(key)

    async def _upsert_project_scoped(
        self,
        spec: CollectionSpec,
        archive: Archive,
        summary: ImportSummary,
    ) -> None:
        repository = self.stores.entities(spec)
        for record in archive.items(spec.archive_key) or []:
            await repository.save(record)
            summary.record(spec.entity_type, WriteOutcome.IMPORTED)

    async def _apply_singleton(
        self,
        spec: CollectionSpec,
        archive: Archive,
        mode: ImportMode,
        summary: ImportSummary,
    ) -> None:
        """Save a present singleton; absent ones are left untouched."""
        config = archive.singleton(spec.archive_key)
        if config is None:
            return

        repository = self.stores.singleton(spec)
        if (
            mode is ImportMode.MERGE
            and self.settings.singleton_merge_policy == "preserve"
            and await repository.load() is not None
        ):
            logger.debug("Keeping existing %s", spec.archive_key)
            return

        if spec.entity_type is EntityType.SETTINGS:
            config = dict(config)
            shortcuts = config.pop("keyboardShortcuts", None)
            await repository.save(config)
            if shortcuts is not None:
                await self.stores.shortcuts.save(shortcuts)
        else:
            await repository.save(config)

        summary.mark_singleton(spec.store)
