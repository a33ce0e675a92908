"""Registry of the stores an archive is exported from and imported into."""

from dataclasses import dataclass

from flowport.db.database import Database
from flowport.db.repositories.base import (
    EntityRepository,
    ProjectScopedRepository,
    SingletonRepository,
)
from flowport.db.repositories.memory_repository import (
    InMemoryEntityRepository,
    InMemoryProjectScopedRepository,
    InMemorySingletonRepository,
)
from flowport.db.repositories.sqlite_repository import (
    SqliteEntityRepository,
    SqliteProjectScopedRepository,
    SqliteSingletonRepository,
)
from flowport.models.collections import CollectionSpec


@dataclass
class StoreRegistry:
    """One store per collection, plus the keyboard shortcuts store.

    Attribute names match `CollectionSpec.store`.
    """

    projects: EntityRepository
    workflows: EntityRepository
    worktree_templates: EntityRepository
    step_templates: EntityRepository
    ai_providers: EntityRepository
    ai_templates: EntityRepository
    cli_tools: EntityRepository
    mcp_actions: EntityRepository
    mcp_permissions: EntityRepository
    deploy_accounts: EntityRepository
    deployment_configs: ProjectScopedRepository
    project_ai_settings: ProjectScopedRepository
    settings: SingletonRepository
    shortcuts: SingletonRepository
    mcp_config: SingletonRepository
    deploy_preferences: SingletonRepository

    def entities(self, spec: CollectionSpec) -> EntityRepository:
        """Store backing an array-valued collection."""
        repository = getattr(self, spec.store)
        if not isinstance(repository, EntityRepository):
            raise TypeError(f"{spec.store} is not an entity store")
        return repository

    def singleton(self, spec: CollectionSpec) -> SingletonRepository:
        """Store backing a singleton collection."""
        repository = getattr(self, spec.store)
        if not isinstance(repository, SingletonRepository):
            raise TypeError(f"{spec.store} is not a singleton store")
        return repository


_ENTITY_STORES = (
    "projects",
    "workflows",
    "worktree_templates",
    "step_templates",
    "ai_providers",
    "ai_templates",
    "cli_tools",
    "mcp_actions",
    "mcp_permissions",
    "deploy_accounts",
)
_SINGLETON_STORES = ("settings", "shortcuts", "mcp_config", "deploy_preferences")


def create_memory_stores() -> StoreRegistry:
    """Create a registry of empty in-memory stores."""
    return StoreRegistry(
        **{name: InMemoryEntityRepository() for name in _ENTITY_STORES},
        deployment_configs=InMemoryProjectScopedRepository(scope_field="projectId"),
        project_ai_settings=InMemoryProjectScopedRepository(
            key_field="projectPath", scope_field="projectPath"
        ),
        **{name: InMemorySingletonRepository() for name in _SINGLETON_STORES},
    )


def create_sqlite_stores(db: Database) -> StoreRegistry:
    """Create a registry of stores sharing one SQLite database.

    Args:
        db: Connected and migrated database

    Returns:
        StoreRegistry backed by `db`
    """
    return StoreRegistry(
        **{name: SqliteEntityRepository(db, name) for name in _ENTITY_STORES},
        deployment_configs=SqliteProjectScopedRepository(
            db, "deployment_configs", scope_field="projectId"
        ),
        project_ai_settings=SqliteProjectScopedRepository(
            db, "project_ai_settings", key_field="projectPath", scope_field="projectPath"
        ),
        **{name: SqliteSingletonRepository(db, name) for name in _SINGLETON_STORES},
    )
