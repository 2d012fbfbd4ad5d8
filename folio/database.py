"""Async SQLAlchemy engine and session helpers."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from folio.config import settings
from folio.db_events import attach_sqlite_listeners


class Base(DeclarativeBase):
    """Declarative base class for ORM models."""


_async_url = settings.resolved_async_database_url
engine_kwargs: dict[str, object] = {"echo": settings.db_echo, "pool_pre_ping": True}

async_engine = create_async_engine(_async_url, **engine_kwargs)
if async_engine.dialect.name == "sqlite":
    attach_sqlite_listeners(async_engine.sync_engine)

AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session for FastAPI dependencies.

    Work left uncommitted when the request ends is rolled back on close.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_database() -> None:
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
