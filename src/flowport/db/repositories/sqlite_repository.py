"""SQLite-backed stores for exported collections."""

import json

from flowport.db.database import Database
from flowport.db.repositories.base import (
    EntityRepository,
    ProjectScopedRepository,
    SingletonRepository,
)
from flowport.models.collections import Entity


class SqliteEntityRepository(EntityRepository):
    """Entity store keeping JSON bodies in the `entities` table."""

    # aiosqlite serializes every call on one connection thread
    single_reader = True

    def __init__(self, db: Database, collection: str, key_field: str = "id") -> None:
        """Initialize repository.

        Args:
            db: Database instance
            collection: Collection name stored alongside each row
            key_field: Field used as the entity key
        """
        self.db = db
        self.collection = collection
        self.key_field = key_field

    async def list_all(self) -> list[Entity]:
        cursor = await self.db.execute(
            "SELECT body FROM entities WHERE collection = ? ORDER BY position",
            (self.collection,),
        )
        rows = await cursor.fetchall()
        return [json.loads(row["body"]) for row in rows]

    async def save(self, entity: Entity) -> None:
        # Existing rows keep their position so list order is stable
        await self.db.write(
            """
            INSERT INTO entities (collection, entity_key, position, body)
            VALUES (
                ?,
                ?,
                (SELECT COALESCE(MAX(position), -1) + 1 FROM entities WHERE collection = ?),
                ?
            )
            ON CONFLICT (collection, entity_key) DO UPDATE SET body = excluded.body
            """,
            (
                self.collection,
                entity[self.key_field],
                self.collection,
                json.dumps(entity),
            ),
        )

    async def delete(self, key: str) -> None:
        await self.db.write(
            "DELETE FROM entities WHERE collection = ? AND entity_key = ?",
            (self.collection, key),
        )


class SqliteProjectScopedRepository(SqliteEntityRepository, ProjectScopedRepository):
    """Project-scoped store looked up through JSON1 `json_extract`."""

    def __init__(
        self,
        db: Database,
        collection: str,
        key_field: str = "id",
        scope_field: str = "projectId",
    ) -> None:
        super().__init__(db, collection, key_field)
        self.scope_field = scope_field

    async def find_for_project(self, project_key: str) -> Entity | None:
        cursor = await self.db.execute(
            """
            SELECT body FROM entities
            WHERE collection = ? AND json_extract(body, ?) = ?
            ORDER BY position
            LIMIT 1
            """,
            (self.collection, f"$.{self.scope_field}", project_key),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return json.loads(row["body"])


class SqliteSingletonRepository(SingletonRepository):
    """Singleton store keeping one JSON body in the `singletons` table."""

    def __init__(self, db: Database, name: str) -> None:
        """Initialize repository.

        Args:
            db: Database instance
            name: Singleton name
        """
        self.db = db
        self.name = name

    async def load(self) -> Entity | None:
        cursor = await self.db.execute(
            "SELECT body FROM singletons WHERE name = ?", (self.name,)
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return json.loads(row["body"])

    async def save(self, config: Entity) -> None:
        await self.db.write(
            """
            INSERT INTO singletons (name, body) VALUES (?, ?)
            ON CONFLICT (name) DO UPDATE SET body = excluded.body
            """,
            (self.name, json.dumps(config)),
        )
