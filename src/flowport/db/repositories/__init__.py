"""Repository modules for data access."""

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

__all__ = [
    "EntityRepository",
    "ProjectScopedRepository",
    "SingletonRepository",
    "InMemoryEntityRepository",
    "InMemoryProjectScopedRepository",
    "InMemorySingletonRepository",
    "SqliteEntityRepository",
    "SqliteProjectScopedRepository",
    "SqliteSingletonRepository",
]
