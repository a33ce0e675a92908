"""In-process stores, used for tests and embedding without a database."""

import copy

from flowport.db.repositories.base import (
    EntityRepository,
    ProjectScopedRepository,
    SingletonRepository,
)
from flowport.models.collections import Entity


class InMemoryEntityRepository(EntityRepository):
    """Entity store backed by an ordered dict."""

    single_reader = False

    def __init__(self, items: list[Entity] | None = None, key_field: str = "id") -> None:
        """Initialize repository.

        Args:
            items: Initial entities
            key_field: Field used as the entity key
        """
        self.key_field = key_field
        self._items: dict[str, Entity] = {}
        for item in items or []:
            self._items[item[key_field]] = copy.deepcopy(item)

    async def list_all(self) -> list[Entity]:
        return [copy.deepcopy(item) for item in self._items.values()]

    async def save(self, entity: Entity) -> None:
        self._items[entity[self.key_field]] = copy.deepcopy(entity)

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)


class InMemoryProjectScopedRepository(InMemoryEntityRepository, ProjectScopedRepository):
    """Project-scoped store backed by an ordered dict."""

    def __init__(
        self,
        items: list[Entity] | None = None,
        key_field: str = "id",
        scope_field: str = "projectId",
    ) -> None:
        super().__init__(items, key_field)
        self.scope_field = scope_field

    async def find_for_project(self, project_key: str) -> Entity | None:
        for item in self._items.values():
            if item.get(self.scope_field) == project_key:
                return copy.deepcopy(item)
        return None


class InMemorySingletonRepository(SingletonRepository):
    """Singleton store holding one dict."""

    def __init__(self, value: Entity | None = None) -> None:
        self._value = copy.deepcopy(value)

    async def load(self) -> Entity | None:
        return copy.deepcopy(self._value)

    async def save(self, config: Entity) -> None:
        self._value = copy.deepcopy(config)
