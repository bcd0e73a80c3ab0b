"""Async engine and session management for the speeches/feedback store."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from speechcoach.config.settings import DatabaseConfig, settings
from speechcoach.models import Base

logger = logging.getLogger(__name__)


def build_engine(config: DatabaseConfig, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``config``.

    Serverless databases (and debug runs) get ``NullPool`` so idle instances
    can pause instead of holding pooled connections open.
    """

    options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if config.serverless or echo:
        options["poolclass"] = NullPool
    return create_async_engine(config.url, **options)


engine: AsyncEngine = build_engine(settings.database, echo=settings.debug)

SessionFactory = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield one session; the repository opens a fresh scope per operation."""

    async with SessionFactory() as session:
        yield session


async def init_models() -> None:
    """Create the speeches and feedback tables if they do not exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def dispose_engine() -> None:
    await engine.dispose()
