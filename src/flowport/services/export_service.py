"""Service for full-archive export."""

import asyncio
import logging
from pathlib import Path

from flowport.config.settings import Settings
from flowport.db.repositories.base import ProjectScopedRepository
from flowport.db.stores import StoreRegistry
from flowport.exceptions import NotFoundError, UnsafePathError
from flowport.models.archive import CURRENT_FORMAT_VERSION, Archive, ExportMetadata
from flowport.models.collections import (
    CollectionKind,
    Entity,
    EntityType,
    collections_of,
)
from flowport.models.results import ExportCounts, ExportResult, ResultCode
from flowport.utils.files import write_json
from flowport.utils.paths import validate_safe_path

logger = logging.getLogger(__name__)

# Fields that describe a deploy account; tokens and secrets are never exported
DEPLOY_ACCOUNT_FIELDS = (
    "id",
    "platform",
    "platformUserId",
    "username",
    "displayName",
    "avatarUrl",
    "connectedAt",
    "expiresAt",
)
# Archive field -> live preference field
DEPLOY_PREFERENCE_FIELDS = {
    "defaultGithubPagesAccountId": "defaultGithubPagesAccountId",
    "defaultNetlifyAccountId": "defaultNetlifyAccountId",
    "defaultCloudflareAccountId": "defaultCloudflarePagesAccountId",
}
PROJECT_AI_SETTING_FIELDS = ("projectPath", "preferredProviderId", "preferredTemplateId")


def _pick(entity: Entity, fields: tuple[str, ...]) -> Entity:
    return {name: entity[name] for name in fields if entity.get(name) is not None}


def sanitize_cli_tool(tool: Entity) -> Entity:
    """Drop the reference to a locally stored API key provider."""
    return {k: v for k, v in tool.items() if k != "apiKeyProviderId"}


def sanitize_ai_provider(provider: Entity) -> Entity:
    """Drop any inline API key; keys live in the local keychain."""
    return {k: v for k, v in provider.items() if k != "apiKey"}


def sanitize_deploy_account(account: Entity) -> Entity:
    """Keep descriptive account fields only, never tokens."""
    return _pick(account, DEPLOY_ACCOUNT_FIELDS)


def sanitize_deploy_preferences(preferences: Entity) -> Entity:
    """Keep the default account ids only, under their archive names.

    The Cloudflare default is stored live as `defaultCloudflarePagesAccountId`;
    a record already using the archive name is accepted as well.
    """
    sanitized = {}
    for archive_field, live_field in DEPLOY_PREFERENCE_FIELDS.items():
        value = preferences.get(live_field)
        if value is None:
            value = preferences.get(archive_field)
        if value is not None:
            sanitized[archive_field] = value
    return sanitized


class ExportService:
    """Service assembling live collections into an archive."""

    def __init__(
        self,
        stores: StoreRegistry,
        settings: Settings,
        allowed_paths: list[Path] | None = None,
    ) -> None:
        """Initialize export service.

        Args:
            stores: Store registry to read from
            settings: Application settings
            allowed_paths: Additional allowed base directories for output files
        """
        self.stores = stores
        self.settings = settings
        self.allowed_paths = [p.resolve() for p in (allowed_paths or [])]

    async def assemble(self) -> Archive:
        """Gather every collection into a new archive.

        Independent stores are read concurrently. Per-project data is then
        looked up for each fetched project.

        Returns:
            Archive with full metadata and sanitized data
        """
        listed = collections_of(
            CollectionKind.FULL,
            CollectionKind.RESTRICTED,
            CollectionKind.SANITIZED,
        )
        singletons = collections_of(CollectionKind.SINGLETON)

        fetched = await asyncio.gather(
            *(self.stores.entities(spec).list_all() for spec in listed),
            *(self.stores.singleton(spec).load() for spec in singletons),
            self.stores.shortcuts.load(),
        )
        lists = dict(zip((spec.entity_type for spec in listed), fetched[: len(listed)]))
        configs = dict(
            zip((spec.entity_type for spec in singletons), fetched[len(listed) : -1])
        )
        shortcuts = fetched[-1]

        projects = lists[EntityType.PROJECTS]
        project_ai_settings = [
            _pick(record, PROJECT_AI_SETTING_FIELDS)
            for record in await self._collect_per_project(
                self.stores.project_ai_settings,
                [p["path"] for p in projects if p.get("path")],
            )
            if record.get("preferredProviderId") or record.get("preferredTemplateId")
        ]
        deployment_configs = await self._collect_per_project(
            self.stores.deployment_configs,
            [p["id"] for p in projects],
        )

        data: dict[str, object] = {
            "projects": projects,
            "workflows": lists[EntityType.WORKFLOWS],
            "worktreeTemplates": lists[EntityType.TEMPLATES],
            "customStepTemplates": lists[EntityType.STEP_TEMPLATES],
        }

        # Emitted even when both stores are empty
        data["settings"] = {
            **(configs[EntityType.SETTINGS] or {}),
            "keyboardShortcuts": shortcuts,
        }

        data["aiProviders"] = [sanitize_ai_provider(p) for p in lists[EntityType.AI_PROVIDERS]]
        data["aiTemplates"] = lists[EntityType.AI_TEMPLATES]
        data["projectAiSettings"] = project_ai_settings
        data["cliTools"] = [sanitize_cli_tool(t) for t in lists[EntityType.CLI_TOOLS]]
        if configs[EntityType.MCP_CONFIG] is not None:
            data["mcpConfig"] = configs[EntityType.MCP_CONFIG]
        data["mcpActions"] = lists[EntityType.MCP_ACTIONS]
        data["mcpActionPermissions"] = lists[EntityType.MCP_ACTION_PERMISSIONS]
        data["deployAccounts"] = [
            sanitize_deploy_account(a) for a in lists[EntityType.DEPLOY_ACCOUNTS]
        ]
        if configs[EntityType.DEPLOY_PREFERENCES] is not None:
            data["deployPreferences"] = sanitize_deploy_preferences(
                configs[EntityType.DEPLOY_PREFERENCES]
            )
        data["deploymentConfigs"] = deployment_configs

        metadata = ExportMetadata(
            version=CURRENT_FORMAT_VERSION,
            app_version=self.settings.app_version,
            export_type="full",
        )
        return Archive(metadata=metadata, data=data)

    async def export_all(self, output_path: str | None) -> ExportResult:
        """Export all collections to an archive file.

        Args:
            output_path: Destination file, or None if the user cancelled

        Returns:
            ExportResult with file path and counts, or an error
        """
        if not output_path:
            return ExportResult(success=False, error=ResultCode.USER_CANCELLED.value)

        try:
            path = validate_safe_path(output_path, self.allowed_paths)
            archive = await self.assemble()
        except UnsafePathError as e:
            logger.warning("Export rejected: %s", e)
            return ExportResult(success=False, error=str(e))
        except Exception as e:
            logger.exception("Export failed while reading stores: %s", e)
            return ExportResult(success=False, error=str(e) or ResultCode.EXPORT_ERROR.value)

        logger.info("Writing export file to: %s", path)
        try:
            await write_json(path, archive.to_document())
        except OSError as e:
            logger.error("Failed to write export file %s: %s", path, e)
            return ExportResult(
                success=False,
                error=f"{ResultCode.WRITE_ERROR.value}: {e}",
            )

        return ExportResult(
            success=True,
            file_path=str(path),
            counts=ExportCounts.from_archive(archive),
        )

    async def _collect_per_project(
        self,
        repository: ProjectScopedRepository,
        project_keys: list[str],
    ) -> list[Entity]:
        """Look up one record per project, silently skipping missing ones.

        Stores declaring `single_reader` are queried one project at a time;
        others are queried with bounded concurrency.
        """
        limit = self.settings.per_project_fetch_concurrency

        if repository.single_reader or limit <= 1:
            records = []
            for key in project_keys:
                records.append(await self._find_optional(repository, key))
        else:
            semaphore = asyncio.Semaphore(limit)

            async def fetch(key: str) -> Entity | None:
                async with semaphore:
                    return await self._find_optional(repository, key)

            records = await asyncio.gather(*(fetch(key) for key in project_keys))

        return [record for record in records if record is not None]

    @staticmethod
    async def _find_optional(
        repository: ProjectScopedRepository, project_key: str
    ) -> Entity | None:
        try:
            return await repository.find_for_project(project_key)
        except NotFoundError:
            logger.debug("No %s record for project %s", repository.scope_field, project_key)
            return None


__all__ = [
    "ExportService",
    "sanitize_ai_provider",
    "sanitize_cli_tool",
    "sanitize_deploy_account",
    "sanitize_deploy_preferences",
]
