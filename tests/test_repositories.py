"""Tests for SQLite and in-memory stores."""

from pathlib import Path

import pytest

from flowport.config.settings import Settings
from flowport.db.database import Database
from flowport.db.repositories.memory_repository import (
    InMemoryEntityRepository,
    InMemorySingletonRepository,
)
from flowport.db.repositories.sqlite_repository import (
    SqliteEntityRepository,
    SqliteProjectScopedRepository,
    SqliteSingletonRepository,
)
from flowport.db.stores import StoreRegistry
from flowport.models.collections import EntityType, get_collection
from flowport.services.export_service import ExportService
from flowport.services.import_service import ImportService


class TestSqliteEntityRepository:
    """Test SqliteEntityRepository."""

    async def test_save_and_list_in_insertion_order(self, memory_db: Database):
        repository = SqliteEntityRepository(memory_db, "workflows")

        await repository.save({"id": "w2", "name": "Second"})
        await repository.save({"id": "w1", "name": "First"})

        assert await repository.list_all() == [
            {"id": "w2", "name": "Second"},
            {"id": "w1", "name": "First"},
        ]

    async def test_save_existing_updates_in_place(self, memory_db: Database):
        repository = SqliteEntityRepository(memory_db, "workflows")
        await repository.save({"id": "w1", "name": "Old"})
        await repository.save({"id": "w2", "name": "Other"})

        await repository.save({"id": "w1", "name": "New"})

        assert [w["name"] for w in await repository.list_all()] == ["New", "Other"]

    async def test_delete(self, memory_db: Database):
        repository = SqliteEntityRepository(memory_db, "workflows")
        await repository.save({"id": "w1"})

        await repository.delete("w1")
        await repository.delete("unknown")

        assert await repository.list_all() == []

    async def test_collections_are_isolated(self, memory_db: Database):
        workflows = SqliteEntityRepository(memory_db, "workflows")
        projects = SqliteEntityRepository(memory_db, "projects")

        await workflows.save({"id": "x"})

        assert await projects.list_all() == []

    async def test_single_reader(self, memory_db: Database):
        assert SqliteEntityRepository(memory_db, "workflows").single_reader
        assert not InMemoryEntityRepository().single_reader


class TestSqliteProjectScopedRepository:
    """Test per-project lookups."""

    async def test_find_by_project_id(self, memory_db: Database):
        repository = SqliteProjectScopedRepository(memory_db, "deployment_configs")
        await repository.save({"id": "dc1", "projectId": "p1"})
        await repository.save({"id": "dc2", "projectId": "p2"})

        assert await repository.find_for_project("p2") == {"id": "dc2", "projectId": "p2"}
        assert await repository.find_for_project("p3") is None

    async def test_keyed_by_project_path(self, memory_db: Database):
        repository = SqliteProjectScopedRepository(
            memory_db, "project_ai_settings", key_field="projectPath", scope_field="projectPath"
        )
        await repository.save({"projectPath": "/a", "preferredProviderId": "x"})
        await repository.save({"projectPath": "/a", "preferredProviderId": "y"})

        assert await repository.list_all() == [{"projectPath": "/a", "preferredProviderId": "y"}]
        assert (await repository.find_for_project("/a"))["preferredProviderId"] == "y"


class TestSingletonRepositories:
    """Test singleton stores."""

    async def test_sqlite_load_and_save(self, memory_db: Database):
        repository = SqliteSingletonRepository(memory_db, "settings")

        assert await repository.load() is None
        await repository.save({"theme": "dark"})
        await repository.save({"theme": "light"})

        assert await repository.load() == {"theme": "light"}

    async def test_memory_returns_copies(self):
        repository = InMemorySingletonRepository({"theme": "dark"})

        loaded = await repository.load()
        loaded["theme"] = "light"

        assert await repository.load() == {"theme": "dark"}


class TestStoreRegistry:
    """Test StoreRegistry lookups."""

    def test_lookup_by_collection(self, stores: StoreRegistry):
        assert stores.entities(get_collection(EntityType.TEMPLATES)) is stores.worktree_templates
        assert stores.singleton(get_collection(EntityType.MCP_CONFIG)) is stores.mcp_config

    def test_kind_mismatch(self, stores: StoreRegistry):
        with pytest.raises(TypeError):
            stores.entities(get_collection(EntityType.SETTINGS))
        with pytest.raises(TypeError):
            stores.singleton(get_collection(EntityType.PROJECTS))


async def test_database_file_created(tmp_path: Path):
    db = Database(str(tmp_path / "nested" / "flowport.db"))
    await db.connect()
    await db.migrate()
    await db.close()

    assert (tmp_path / "nested" / "flowport.db").exists()


async def test_unconnected_database_raises():
    with pytest.raises(RuntimeError, match="not connected"):
        await Database(":memory:").execute("SELECT 1")


async def test_export_import_through_sqlite(
    sqlite_stores: StoreRegistry, test_settings: Settings, tmp_path: Path
):
    """Test a full export and merge import against SQLite stores."""
    await sqlite_stores.projects.save({"id": "p1", "name": "Alpha", "path": "/a"})
    await sqlite_stores.deployment_configs.save({"id": "dc1", "projectId": "p1"})
    await sqlite_stores.project_ai_settings.save(
        {"projectPath": "/a", "preferredTemplateId": "tpl1"}
    )
    await sqlite_stores.settings.save({"theme": "dark"})
    exporter = ExportService(sqlite_stores, test_settings, allowed_paths=[tmp_path])
    importer = ImportService(sqlite_stores, test_settings, allowed_paths=[tmp_path])
    path = str(tmp_path / "backup.flowport")

    exported = await exporter.export_all(path)
    await sqlite_stores.projects.delete("p1")
    imported = await importer.execute(path)

    assert exported.success
    assert exported.counts.collections["deploymentConfigs"] == 1
    assert exported.counts.collections["projectAiSettings"] == 1
    assert imported.success
    assert await sqlite_stores.projects.list_all() == [{"id": "p1", "name": "Alpha", "path": "/a"}]
    assert imported.summary.counts(EntityType.PROJECTS).imported == 1
    assert imported.summary.counts(EntityType.DEPLOYMENT_CONFIGS).overwritten == 1
