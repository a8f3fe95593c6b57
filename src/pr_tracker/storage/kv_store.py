"""Key-value stores backing the internal storage backend."""

from pathlib import Path

import aiosqlite

from ..config import get_db_path


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the key-value schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await db.commit()


class SqliteKeyValueStore:
    """Key-value store kept in a single SQLite table."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._initialized = False

    async def _ensure_schema(self) -> None:
        if not self._initialized:
            await init_db(self.db_path)
            self._initialized = True

    async def get(self, key: str) -> str | None:
        """Get the value stored under a key."""
        await self._ensure_schema()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return row[0]

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        await self._ensure_schema()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            await db.commit()

    async def remove(self, key: str) -> None:
        """Delete a key."""
        await self._ensure_schema()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await db.commit()

    async def keys(self) -> list[str]:
        """List all stored keys."""
        await self._ensure_schema()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT key FROM kv_store ORDER BY key")
            rows = await cursor.fetchall()
            return [row[0] for row in rows]


class MemoryKeyValueStore:
    """Non-persistent key-value store, for tests and dry runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)

    async def keys(self) -> list[str]:
        return sorted(self.data)
