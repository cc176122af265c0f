"""SQLite-backed key-value store.

Persists the cache records to a local SQLite database (``data/hosuto_kv.db``
by default) so that the image directory survives restarts.  Uses
``aiosqlite`` for async I/O; each call opens its own connection.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import structlog

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/hosuto_kv.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO kv (key, value)
VALUES (?, ?)
ON CONFLICT(key)
DO UPDATE SET value      = excluded.value,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT value FROM kv WHERE key = ?;"


class SQLiteCacheProvider(ICacheProvider):
    """SQLite key-value persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the ``kv`` table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            await db.commit()
        logger.info("kv_db_initialized", path=str(self._db_path))

    async def get(self, key: str) -> str | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            async with db.execute(_SELECT_SQL, (key,)) as cursor:
                row = await cursor.fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_UPSERT_SQL, (key, value))
            await db.commit()
        logger.debug("kv_put", key=key, size=len(value))

    def get_provider_name(self) -> str:
        return "sqlite_kv"
