"""Database connection and migration management."""

import asyncio
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS entities (
        collection TEXT NOT NULL,
        entity_key TEXT NOT NULL,
        position INTEGER NOT NULL,
        body TEXT NOT NULL,
        PRIMARY KEY (collection, entity_key)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_entities_position
    ON entities (collection, position)
    """,
    """
    CREATE TABLE IF NOT EXISTS singletons (
        name TEXT PRIMARY KEY,
        body TEXT NOT NULL
    )
    """,
)


class Database:
    """Database connection and operations manager."""

    def __init__(self, database_path: str) -> None:
        """Initialize database manager.

        Args:
            database_path: Path to SQLite database file, or ":memory:"
        """
        self.database_path = database_path
        self.conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Connect to the database."""
        if self.database_path != ":memory:":
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = await aiosqlite.connect(self.database_path)
        self.conn.row_factory = sqlite3.Row

    async def close(self) -> None:
        """Close database connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None

    async def migrate(self) -> None:
        """Create tables if they do not exist."""
        for statement in SCHEMA:
            await self.execute(statement)
        await self.commit()

    async def execute(
        self, sql: str, parameters: tuple[Any, ...] | dict[str, Any] = ()
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement.

        Args:
            sql: SQL statement
            parameters: Query parameters

        Returns:
            Database cursor
        """
        if not self.conn:
            raise RuntimeError("Database not connected")
        return await self.conn.execute(sql, parameters)

    async def commit(self) -> None:
        """Commit current transaction."""
        if not self.conn:
            raise RuntimeError("Database not connected")
        await self.conn.commit()

    async def write(
        self, sql: str, parameters: tuple[Any, ...] | dict[str, Any] = ()
    ) -> None:
        """Execute a single statement and commit it under the write lock.

        Args:
            sql: SQL statement
            parameters: Query parameters
        """
        async with self._write_lock:
            await self.execute(sql, parameters)
            await self.commit()
