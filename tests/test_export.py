"""Tests for full-archive export."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from flowport.db.repositories.memory_repository import InMemoryProjectScopedRepository
from flowport.db.stores import StoreRegistry
from flowport.exceptions import NotFoundError
from flowport.services.export_service import (
    ExportService,
    sanitize_cli_tool,
    sanitize_deploy_account,
    sanitize_deploy_preferences,
)
from flowport.services.import_service import ImportService


class TestSanitizers:
    """Test credential stripping helpers."""

    def test_cli_tool_loses_key_provider(self):
        assert sanitize_cli_tool({"id": "c", "apiKeyProviderId": "k"}) == {"id": "c"}

    def test_deploy_account_whitelist(self):
        account = {"id": "a", "platform": "netlify", "accessToken": "t", "avatarUrl": None}

        assert sanitize_deploy_account(account) == {"id": "a", "platform": "netlify"}

    def test_deploy_preferences_use_archive_field_names(self):
        preferences = {
            "defaultCloudflarePagesAccountId": "cf1",
            "defaultGithubPagesAccountId": "gh1",
            "lastUsedPlatform": "cloudflare",
        }

        assert sanitize_deploy_preferences(preferences) == {
            "defaultGithubPagesAccountId": "gh1",
            "defaultCloudflareAccountId": "cf1",
        }

    def test_deploy_preferences_accept_archive_cloudflare_name(self):
        assert sanitize_deploy_preferences({"defaultCloudflareAccountId": "cf1"}) == {
            "defaultCloudflareAccountId": "cf1"
        }


class TestAssemble:
    """Test ExportService.assemble."""

    async def test_metadata(self, export_service: ExportService, populated_stores: StoreRegistry):
        archive = await export_service.assemble()

        assert archive.metadata.version == "2.0.0"
        assert archive.metadata.app_version == "1.4.2"
        assert archive.metadata.export_type == "full"
        assert archive.metadata.exported_at.endswith("Z")

    async def test_collections_present(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        archive = await export_service.assemble()

        assert [p["id"] for p in archive.data["projects"]] == ["p1", "p2"]
        assert archive.data["workflows"][0]["id"] == "w1"
        assert archive.data["worktreeTemplates"][0]["id"] == "t1"
        assert archive.data["customStepTemplates"][0]["id"] == "s1"
        assert archive.data["mcpActions"] == [{"id": "act1", "name": "Run tests"}]
        assert archive.data["mcpActionPermissions"] == [{"id": "perm1", "actionId": "act1"}]
        assert archive.data["deploymentConfigs"] == [
            {"id": "dc1", "projectId": "p1", "platform": "netlify", "accountId": "acc1"}
        ]
        assert archive.data["mcpConfig"] == {"enabled": True, "port": 7777}

    async def test_credentials_stripped(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        """Test that no token, key or key reference reaches the archive."""
        archive = await export_service.assemble()

        assert "apiKeyProviderId" not in archive.data["cliTools"][0]
        assert "apiKey" not in archive.data["aiProviders"][0]
        assert archive.data["deployAccounts"] == [
            {
                "id": "acc1",
                "platform": "netlify",
                "platformUserId": "u-1",
                "username": "dev",
                "connectedAt": "2026-01-01T00:00:00Z",
            }
        ]
        assert archive.data["deployPreferences"] == {"defaultNetlifyAccountId": "acc1"}
        assert "secret" not in json.dumps(archive.to_document())

    async def test_settings_carry_shortcuts(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        archive = await export_service.assemble()

        assert archive.data["settings"] == {
            "theme": "dark",
            "keyboardShortcuts": {"runWorkflow": "Ctrl+R"},
        }

    async def test_project_ai_settings_without_preference_skipped(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        """Test that per-project AI settings keep only preferred ids."""
        archive = await export_service.assemble()

        assert archive.data["projectAiSettings"] == [
            {"projectPath": "/work/alpha", "preferredProviderId": "ai1"}
        ]

    async def test_empty_stores(self, export_service: ExportService):
        archive = await export_service.assemble()

        assert archive.data["projects"] == []
        assert archive.data["settings"] == {"keyboardShortcuts": None}
        assert "mcpConfig" not in archive.data
        assert "deployPreferences" not in archive.data

    async def test_missing_per_project_record_is_skipped(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        """Test that stores raising NotFoundError for a project are tolerated."""
        scoped = AsyncMock(spec=InMemoryProjectScopedRepository)
        scoped.single_reader = False
        scoped.scope_field = "projectId"
        scoped.find_for_project.side_effect = [
            NotFoundError("p1"),
            {"id": "dc2", "projectId": "p2"},
        ]
        populated_stores.deployment_configs = scoped

        archive = await export_service.assemble()

        assert archive.data["deploymentConfigs"] == [{"id": "dc2", "projectId": "p2"}]
        assert scoped.find_for_project.await_count == 2

    async def test_single_reader_store_fetched_sequentially(
        self, export_service: ExportService, populated_stores: StoreRegistry
    ):
        calls = []

        class RecordingRepository(InMemoryProjectScopedRepository):
            single_reader = True

            async def find_for_project(self, project_key):
                calls.append(project_key)
                return await super().find_for_project(project_key)

        populated_stores.deployment_configs = RecordingRepository(
            [{"id": "dc1", "projectId": "p1"}]
        )

        archive = await export_service.assemble()

        assert calls == ["p1", "p2"]
        assert archive.data["deploymentConfigs"] == [{"id": "dc1", "projectId": "p1"}]


class TestExportAll:
    """Test ExportService.export_all."""

    async def test_writes_archive_file(
        self, export_service: ExportService, populated_stores: StoreRegistry, tmp_path: Path
    ):
        output = tmp_path / "out" / "backup.flowport"

        result = await export_service.export_all(str(output))

        assert result.success
        assert result.file_path == str(output.resolve())
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["metadata"]["version"] == "2.0.0"
        assert document["metadata"]["appVersion"] == "1.4.2"
        assert document["metadata"]["exportType"] == "full"
        assert "includedTypes" not in document["metadata"]
        assert len(document["data"]["projects"]) == 2
        assert result.counts.collections["projects"] == 2
        assert result.counts.collections["aiTemplates"] == 2
        assert result.counts.has_settings
        assert result.counts.has_mcp_config

    async def test_cancelled(self, export_service: ExportService):
        result = await export_service.export_all(None)

        assert not result.success
        assert result.error == "USER_CANCELLED"

    async def test_path_outside_allowed_dirs(self, export_service: ExportService):
        result = await export_service.export_all("/definitely/not/allowed/backup.flowport")

        assert not result.success
        assert "outside allowed directory" in result.error

    async def test_write_failure(self, export_service: ExportService, tmp_path: Path):
        """Test that an unwritable destination becomes a WRITE_ERROR result."""
        target = tmp_path / "is-a-directory.flowport"
        target.mkdir()
        (target / "child").write_text("x")

        result = await export_service.export_all(str(target / "child" / "backup.flowport"))

        assert not result.success
        assert result.error.startswith("WRITE_ERROR: ")

    async def test_store_failure_is_reported(
        self, export_service: ExportService, stores: StoreRegistry
    ):
        stores.workflows = AsyncMock(spec=type(stores.workflows))
        stores.workflows.list_all.side_effect = RuntimeError("store offline")

        result = await export_service.export_all("backup.flowport")

        assert not result.success
        assert result.error == "store offline"

    async def test_empty_stores_export_can_be_previewed(
        self, export_service: ExportService, import_service: ImportService, tmp_path: Path
    ):
        """Test that a fresh install produces an archive the importer accepts."""
        path = str(tmp_path / "fresh.flowport")

        exported = await export_service.export_all(path)
        loaded = await import_service.preview(path)

        assert exported.success
        assert exported.counts.has_settings
        assert loaded.success, loaded.error
        assert loaded.preview.conflicts == []


@pytest.mark.parametrize("concurrency", [1, 8])
async def test_concurrency_setting_does_not_change_output(
    populated_stores: StoreRegistry, test_settings, tmp_path: Path, concurrency: int
):
    settings = test_settings.model_copy(update={"per_project_fetch_concurrency": concurrency})
    service = ExportService(populated_stores, settings, allowed_paths=[tmp_path])

    archive = await service.assemble()

    assert [c["id"] for c in archive.data["deploymentConfigs"]] == ["dc1"]
