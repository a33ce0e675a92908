"""Abstract store collaborators for exported collections."""

from abc import ABC, abstractmethod

from flowport.models.collections import Entity


class EntityRepository(ABC):
    """Store for one collection of keyed entities.

    Stores follow a "read the collection, write one entity" contract, so
    callers must never issue concurrent writes to the same store.

    Attributes:
        key_field: Field that uniquely identifies an entity
        single_reader: True when the store must not serve concurrent reads.
            Export falls back to sequential per-project lookups for such
            stores; otherwise it fans out with bounded concurrency.
    """

    key_field: str = "id"
    single_reader: bool = True

    @abstractmethod
    async def list_all(self) -> list[Entity]:
        """Return a snapshot of every entity, in insertion order.

        Returns:
            List of entities
        """
        pass

    @abstractmethod
    async def save(self, entity: Entity) -> None:
        """Insert or update an entity by its key.

        Args:
            entity: Entity to store
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an entity by its key; unknown keys are ignored.

        Args:
            key: Entity key
        """
        pass


class ProjectScopedRepository(EntityRepository):
    """Store whose entities each belong to a single project."""

    scope_field: str = "projectId"

    @abstractmethod
    async def find_for_project(self, project_key: str) -> Entity | None:
        """Find the entity attached to a project.

        Args:
            project_key: Project id or path, matched against `scope_field`

        Returns:
            Entity or None if the project has none

        Raises:
            NotFoundError: Stores may raise instead of returning None
        """
        pass


class SingletonRepository(ABC):
    """Store holding exactly one configuration object."""

    @abstractmethod
    async def load(self) -> Entity | None:
        """Load the config, or None if never saved."""
        pass

    @abstractmethod
    async def save(self, config: Entity) -> None:
        """Overwrite the config.

        Args:
            config: New configuration object
        """
        pass
