"""
Centralized database layer for BidChemz Logistics.

Structure:
- entities/: SQLModel table models, one module per table or closely related tables
- repositories/: Data access layer with the queries shared by services and routers
- session.py: Global engine and session factory management
- utils.py: Engine, session factory and schema creation helpers
"""

from .base import Base, UTCDateTime, as_utc, new_id, utc_isoformat, utc_now
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
    normalize_database_url,
)

__all__ = [
    "Base",
    "UTCDateTime",
    "as_utc",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
    "new_id",
    "normalize_database_url",
    "utc_isoformat",
    "utc_now",
]
