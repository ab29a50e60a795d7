"""
Nash Cards — Key-Value Storage

Two interchangeable string stores behind one async interface:

- SqlStorage: durable, one row per key in `storage_entries`. Holds the
  account list and the active session so both survive restarts.
- MemoryStorage: transient, lives as long as the process. Holds the card
  being searched and the current/previous screen names.

Values are opaque strings; callers serialize JSON themselves.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from sqlalchemy import delete, func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from nashcards.models.base import Base
from nashcards.models.storage_entry import StorageEntry

logger = structlog.get_logger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class KeyValueStorage(Protocol):
    """Protocol shared by durable and transient stores."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...

    async def clear(self) -> None:
        ...


class MemoryStorage:
    """Dict-backed store, discarded with the process."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()


class SqlStorage:
    """
    Durable store on top of an async SQLAlchemy session factory.

    Usage:
        storage = SqlStorage(session_factory)
        await storage.set("nashCards_session", payload)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await session.get(StorageEntry, key)
            return entry.value if entry is not None else None

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            insert = _UPSERT_INSERTS[session.bind.dialect.name]
            stmt = insert(StorageEntry).values(key=key, value=value)
            stmt = stmt.on_conflict_do_update(
                index_elements=[StorageEntry.key],
                set_={"value": stmt.excluded.value, "updated_at": func.now()},
            )
            await session.execute(stmt)
            await session.commit()

        logger.debug("storage_set", key=key, size=len(value))

    async def remove(self, key: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(StorageEntry).where(StorageEntry.key == key))
            await session.commit()

        logger.debug("storage_remove", key=key)

    async def clear(self) -> None:
        async with self._session_factory() as session:
            result: Any = await session.execute(delete(StorageEntry))
            await session.commit()

        logger.info("storage_cleared", rows=result.rowcount)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the storage table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("storage_schema_ready", tables=sorted(Base.metadata.tables))
