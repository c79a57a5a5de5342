import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select, col

from shelterfinder.models.storage import StorageEntry

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}

class KeyValueStore(ABC):
    """Abstract async string key-value store. Each call is atomic per key."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        pass

    @abstractmethod
    async def list_keys(self) -> List[str]:
        pass

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            await self.remove(key)

class MemoryKeyValueStore(KeyValueStore):
    """Dictionary backed store for tests and throwaway sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)

    async def list_keys(self) -> List[str]:
        return list(self.data.keys())

class SQLKeyValueStore(KeyValueStore):
    """Store backed by the StorageEntry table, one transaction per call"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            entry = await session.get(StorageEntry, key)
            return entry.value if entry else None

    async def set(self, key: str, value: str) -> None:
        """Single-statement upsert, atomic per key"""
        async with self.session_factory() as session:
            insert = UPSERT_INSERTS[session.get_bind().dialect.name]
            statement = insert(StorageEntry).values(
                key=key,
                value=value,
                updated_at=datetime.now(timezone.utc)
            )
            statement = statement.on_conflict_do_update(
                index_elements=["key"],
                set_={
                    "value": statement.excluded.value,
                    "updated_at": statement.excluded.updated_at
                }
            )
            await session.execute(statement)
            await session.commit()

    async def remove(self, key: str) -> None:
        await self.multi_remove([key])

    async def list_keys(self) -> List[str]:
        async with self.session_factory() as session:
            result = await session.execute(select(StorageEntry.key))
            return list(result.scalars().all())

    async def multi_remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return

        async with self.session_factory() as session:
            await session.execute(
                delete(StorageEntry).where(col(StorageEntry.key).in_(keys))
            )
            await session.commit()
        logger.debug(f"Removed {len(keys)} storage keys")
