"""Pytest configuration and fixtures for flowport tests."""

import json
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from flowport.config.settings import Settings
from flowport.db.database import Database
from flowport.db.stores import StoreRegistry, create_memory_stores, create_sqlite_stores
from flowport.services.export_service import ExportService
from flowport.services.import_service import ImportService
from flowport.services.share_service import ShareService

ArchiveWriter = Callable[..., str]


@pytest.fixture
def test_settings() -> Settings:
    """Test configuration settings."""
    return Settings(
        database_path=":memory:",
        app_version="1.4.2",
        per_project_fetch_concurrency=4,
        singleton_merge_policy="overwrite",
        log_level="DEBUG",
    )


@pytest.fixture
def stores() -> StoreRegistry:
    """Empty in-memory store registry."""
    return create_memory_stores()


@pytest_asyncio.fixture
async def memory_db() -> AsyncIterator[Database]:
    """In-memory SQLite database, migrated."""
    db = Database(":memory:")
    await db.connect()
    await db.migrate()
    yield db
    await db.close()


@pytest.fixture
def sqlite_stores(memory_db: Database) -> StoreRegistry:
    """Store registry backed by the in-memory SQLite database."""
    return create_sqlite_stores(memory_db)


@pytest.fixture
def export_service(stores: StoreRegistry, test_settings: Settings, tmp_path: Path) -> ExportService:
    """Export service fixture."""
    return ExportService(stores, test_settings, allowed_paths=[tmp_path])


@pytest.fixture
def import_service(stores: StoreRegistry, test_settings: Settings, tmp_path: Path) -> ImportService:
    """Import service fixture."""
    return ImportService(stores, test_settings, allowed_paths=[tmp_path])


@pytest.fixture
def share_service(tmp_path: Path) -> ShareService:
    """Share service fixture without a webhook factory."""
    return ShareService(allowed_paths=[tmp_path])


def make_archive(
    data: dict[str, Any],
    version: str = "2.0.0",
    export_type: str = "full",
) -> dict[str, Any]:
    """Build an archive document."""
    return {
        "metadata": {
            "version": version,
            "appVersion": "1.0.0",
            "exportedAt": "2026-01-15T10:00:00.000Z",
            "exportType": export_type,
        },
        "data": data,
    }


@pytest.fixture
def write_archive(tmp_path: Path) -> ArchiveWriter:
    """Factory writing an archive document to a temp file and returning its path."""

    def _write(data: dict[str, Any], version: str = "2.0.0", name: str = "backup.flowport") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(make_archive(data, version)), encoding="utf-8")
        return str(path)

    return _write


async def seed(stores: StoreRegistry, store: str, *entities: dict[str, Any]) -> None:
    """Save entities into one store of a registry."""
    repository = getattr(stores, store)
    for entity in entities:
        await repository.save(entity)


@pytest_asyncio.fixture
async def populated_stores(stores: StoreRegistry) -> StoreRegistry:
    """Registry holding one or two entities in every collection."""
    await seed(
        stores,
        "projects",
        {"id": "p1", "name": "Alpha", "path": "/work/alpha", "lastOpenedAt": "2026-01-01T00:00:00Z"},
        {"id": "p2", "name": "Beta", "path": "/work/beta", "lastOpenedAt": "2026-01-02T00:00:00Z"},
    )
    await seed(
        stores,
        "workflows",
        {
            "id": "w1",
            "name": "Build",
            "nodes": [{"id": "n1", "type": "script", "name": "Compile", "order": 0}],
            "createdAt": "2026-01-01T00:00:00Z",
            "updatedAt": "2026-01-03T00:00:00Z",
        },
    )
    await seed(
        stores,
        "worktree_templates",
        {"id": "t1", "name": "Feature", "createdAt": "2026-01-01T00:00:00Z"},
    )
    await seed(
        stores,
        "step_templates",
        {"id": "s1", "name": "Lint", "createdAt": "2026-01-01T00:00:00Z"},
    )
    await seed(
        stores,
        "ai_providers",
        {"id": "ai1", "name": "Local", "apiKey": "sk-secret", "updatedAt": "2026-01-01T00:00:00Z"},
    )
    await seed(
        stores,
        "ai_templates",
        {"id": "builtin-review", "name": "Review", "isBuiltin": True},
        {"id": "tpl1", "name": "Summarize", "isBuiltin": False},
    )
    await seed(
        stores,
        "cli_tools",
        {"id": "cli1", "name": "gh", "apiKeyProviderId": "keychain-1"},
    )
    await seed(stores, "mcp_actions", {"id": "act1", "name": "Run tests"})
    await seed(stores, "mcp_permissions", {"id": "perm1", "actionId": "act1"})
    await seed(
        stores,
        "deploy_accounts",
        {
            "id": "acc1",
            "platform": "netlify",
            "platformUserId": "u-1",
            "username": "dev",
            "accessToken": "token-secret",
            "refreshToken": "refresh-secret",
            "connectedAt": "2026-01-01T00:00:00Z",
        },
    )
    await seed(
        stores,
        "deployment_configs",
        {"id": "dc1", "projectId": "p1", "platform": "netlify", "accountId": "acc1"},
    )
    await seed(
        stores,
        "project_ai_settings",
        {"projectPath": "/work/alpha", "preferredProviderId": "ai1", "localOnly": True},
        {"projectPath": "/work/beta"},
    )
    await stores.settings.save({"theme": "dark"})
    await stores.shortcuts.save({"runWorkflow": "Ctrl+R"})
    await stores.mcp_config.save({"enabled": True, "port": 7777})
    await stores.deploy_preferences.save(
        {"defaultNetlifyAccountId": "acc1", "lastUsedPlatform": "netlify"}
    )
    return stores
