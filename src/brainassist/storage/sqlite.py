"""SQLite key-value backend.

Provides persistent state storage using a single SQLite table.
Uses aiosqlite for async access.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from .base import KeyValueStore

DEFAULT_DB_PATH = Path.home() / ".brainassist" / "state.db"


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store.

    Stores each key as one row of the ``kv`` table.
    Supports persistent storage across sessions.
    """

    def __init__(self, path: str | Path = DEFAULT_DB_PATH):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    @property
    def path(self) -> Path:
        return self._db_path

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create the key-value table."""
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._conn.commit()

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite store is not connected. Call connect() first.")
        return self._connection

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, key: str) -> str | None:
        async with self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self._conn.execute("""
            INSERT INTO kv (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, value, now))
        await self._conn.commit()

    async def delete(self, key: str) -> None:
        await self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        await self._conn.commit()

    async def keys(self) -> list[str]:
        async with self._conn.execute("SELECT key FROM kv ORDER BY key") as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    @property
    def backend_type(self) -> str:
        return "sqlite"
