"""
SQL-backed key-value store.

Persists every entry as one row of a two-column table, the same shape as the
hosted key-value table the service was first deployed on:

    kv_store(key TEXT PRIMARY KEY, value JSON)

The store runs on SQLAlchemy's asyncio extension so any async driver works:
'sqlite+aiosqlite:///chat.db' for a single node, 'postgresql+asyncpg://...'
for a shared database. Each call opens its own short session and commits
immediately; no call ever spans more than one key, matching the
non-transactional contract of 'KeyValueStore'.
"""

from typing import Any

from loguru import logger
from sqlalchemy import JSON, String, delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from messaging_toolkit.kv_store.base import KeyValueStore


class Base(DeclarativeBase):
    pass


class KeyValueEntry(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)


class SQLKeyValueStore(KeyValueStore):
    """
    'KeyValueStore' on top of any SQLAlchemy async engine.

    Attributes:
        engine: The async engine; created from 'url' unless one is passed in.
    """

    def __init__(self, url: str | None = None, engine: AsyncEngine | None = None) -> None:
        if engine is None:
            if url is None:
                raise ValueError("Either 'url' or 'engine' must be provided")
            engine = create_async_engine(url, pool_pre_ping=True)
        self.engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def initialize(self) -> None:
        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info(f"Key-value table ready on {self.engine.url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        await self.engine.dispose()

    async def get(self, key: str) -> dict[str, Any] | None:
        async with self._sessions() as session:
            entry = await session.get(KeyValueEntry, key)
            return dict(entry.value) if entry is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        async with self._sessions() as session:
            await session.merge(KeyValueEntry(key=key, value=value))
            await session.commit()

    async def delete(self, key: str) -> bool:
        async with self._sessions() as session:
            result = await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
            await session.commit()
            return bool(result.rowcount)

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        statement = select(KeyValueEntry.value).where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        async with self._sessions() as session:
            result = await session.execute(statement)
            return [dict(value) for value in result.scalars()]
