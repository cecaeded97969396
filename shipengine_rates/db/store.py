# shipengine_rates/db/store.py
import logging
import time
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shipengine_rates.models.cache_entry import CacheEntry

logger = logging.getLogger(__name__)


class SqlAlchemyStore:
    """Key-value store persisted in the ``cache_entries`` table.

    Every process pointed at the same database sees the same entries, which
    is what lets the carrier catalog placeholder keep other instances from
    fetching at the same time. Writes are last-writer-wins.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[Any]:
        async with self.session_factory() as session:
            entry = await session.get(CacheEntry, key)
            if entry is None:
                return None

            if entry.expires_at is not None and entry.expires_at <= time.time():
                await session.execute(
                    delete(CacheEntry).where(
                        CacheEntry.key == key,
                        CacheEntry.expires_at <= time.time(),
                    )
                )
                await session.commit()
                return None

            return entry.value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires_at = time.time() + ttl if ttl else None
        async with self.session_factory() as session:
            insert = _dialect_insert(session.bind.dialect.name)
            statement = insert(CacheEntry).values(key=key, value=value, expires_at=expires_at)
            # single statement upsert, concurrent writers of one key never collide
            statement = statement.on_conflict_do_update(
                index_elements=[CacheEntry.key],
                set_={
                    "value": statement.excluded.value,
                    "expires_at": statement.excluded.expires_at,
                },
            )
            await session.execute(statement)
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(CacheEntry).where(CacheEntry.key == key))
            await session.commit()

    async def purge_expired(self) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(CacheEntry).where(
                    CacheEntry.expires_at.is_not(None),
                    CacheEntry.expires_at <= time.time(),
                )
            )
            await session.commit()
            logger.debug("Purged %s expired cache entries", result.rowcount)
            return result.rowcount


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise ValueError(f"Unsupported database dialect for the cache store: {dialect_name}")
