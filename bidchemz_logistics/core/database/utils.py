"""
Engine and session helpers for the marketplace database.

Functions:
- normalize_database_url: rewrites sync driver URLs to their async drivers
- create_engine: builds the async engine for Postgres (asyncpg) or SQLite (aiosqlite)
- create_sessionmaker: session factory whose objects stay readable after commit
- create_all: creates every marketplace table from the entity metadata
"""

from __future__ import annotations

import re

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

_POSTGRES_PREFIX = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")
_SQLITE_PREFIX = re.compile(r"^sqlite(?:\+pysqlite)?://")


def normalize_database_url(db_url: str) -> str:
    """Point ``db_url`` at an async driver.

    ``postgres://``, ``postgresql://`` and ``postgresql+psycopg2://`` all become
    ``postgresql+asyncpg://``; plain ``sqlite://`` becomes ``sqlite+aiosqlite://``.
    URLs that already name an async driver are returned unchanged.
    """
    url = _POSTGRES_PREFIX.sub("postgresql+asyncpg://", db_url, count=1)
    return _SQLITE_PREFIX.sub("sqlite+aiosqlite://", url, count=1)


def create_engine(db_url: str) -> AsyncEngine:
    """Create the async engine for ``db_url``.

    SQLite connections are shared across the event loop's tasks, so the
    same-thread check is turned off; Postgres pools ping before reuse.
    """
    url = normalize_database_url(db_url)
    if url.startswith("sqlite"):
        return create_async_engine(url, connect_args={"check_same_thread": False})
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services return entities after committing; keep their attributes loaded.
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create any missing marketplace table.

    Used by tests and by the server lifespan; schema changes on a live
    database go through the Alembic revisions.

    Args:
        engine: Async SQLAlchemy engine
    """
    # Registers every table on the shared metadata
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
