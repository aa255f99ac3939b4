"""
Boxtal Connect — Database helpers
Handles connection, table creation, the option/transient store and purge of
expired transients.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import aiosqlite

from config import DATABASE_PATH

logger = logging.getLogger(__name__)


# ── Connection ────────────────────────────────────────────────────────────────

async def get_db(path: str | None = None) -> aiosqlite.Connection:
    db = await aiosqlite.connect(path or DATABASE_PATH)
    db.row_factory = aiosqlite.Row
    await db.execute("""
        CREATE TABLE IF NOT EXISTS options (
            name        TEXT PRIMARY KEY,
            value       TEXT NOT NULL,
            updated_at  TEXT NOT NULL
        )
    """)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS transients (
            name        TEXT PRIMARY KEY,
            value       TEXT NOT NULL,
            expires_at  TEXT NOT NULL
        )
    """)
    await db.execute("CREATE INDEX IF NOT EXISTS idx_transient_expiry ON transients(expires_at)")
    await db.commit()
    return db


# ── Utilities ─────────────────────────────────────────────────────────────────

def now_utc() -> str:
    return datetime.now(timezone.utc).isoformat()


def expiry_utc(ttl_seconds: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)).isoformat()


# ── Store ─────────────────────────────────────────────────────────────────────

class OptionStore:
    """
    Key/value persistence shared by every component.

    Options are durable; transients carry an expiry and read as missing once
    it has passed. Writes stay uncommitted until ``commit()`` so a request
    handler either applies all of its changes or none of them.
    """

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def get_option(self, name: str, default: Any = None) -> Any:
        async with self.db.execute("SELECT value FROM options WHERE name = ?", (name,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    async def update_option(self, name: str, value: Any) -> None:
        await self.db.execute(
            """
            INSERT INTO options (name, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                value      = excluded.value,
                updated_at = excluded.updated_at
            """,
            (name, json.dumps(value), now_utc()),
        )

    async def delete_option(self, name: str) -> None:
        await self.db.execute("DELETE FROM options WHERE name = ?", (name,))

    async def set_transient(self, name: str, value: Any, ttl_seconds: int) -> None:
        await self.db.execute(
            """
            INSERT INTO transients (name, value, expires_at) VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                value      = excluded.value,
                expires_at = excluded.expires_at
            """,
            (name, json.dumps(value), expiry_utc(ttl_seconds)),
        )

    async def get_transient(self, name: str) -> Any:
        """Return the transient value, or None if it is missing or expired."""
        async with self.db.execute(
            "SELECT value, expires_at FROM transients WHERE name = ?", (name,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        if row[1] <= now_utc():
            await self.delete_transient(name)
            return None
        return json.loads(row[0])

    async def delete_transient(self, name: str) -> None:
        await self.db.execute("DELETE FROM transients WHERE name = ?", (name,))

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


async def get_store():
    """FastAPI dependency: one store per request, rolled back unless committed."""
    db = await get_db()
    store = OptionStore(db)
    try:
        yield store
    finally:
        await store.rollback()
        await db.close()


# ── Purge ─────────────────────────────────────────────────────────────────────

async def purge_expired_transients(db: aiosqlite.Connection) -> int:
    """Remove all expired transients. Returns number of rows deleted."""
    cursor = await db.execute(
        "DELETE FROM transients WHERE expires_at < ?", (now_utc(),)
    )
    await db.commit()
    return cursor.rowcount
