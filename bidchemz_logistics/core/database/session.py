"""
Process-wide engine and session factory.

Routers receive a session per request through ``get_session`` and commit
it themselves once the unit of work succeeds; anything left uncommitted is
rolled back when the session closes. Background jobs open their own
sessions from ``async_session_maker``.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Create any missing table from the entity metadata.

    Deployments that run ``alembic upgrade head`` first end up with nothing
    left to create.
    """
    await create_all(engine)
