# db/database.py

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession

from ..config import DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, SQL_ECHO
from .base import Base

logger = logging.getLogger(__name__)


def build_engine(url: str = DATABASE_URL) -> AsyncEngine:
    """Creates the async engine. Pool sizing only applies to server databases."""
    engine_kwargs: Dict[str, Any] = {"echo": SQL_ECHO}
    if not url.startswith("sqlite"):
        engine_kwargs.update(pool_size=DB_POOL_SIZE, max_overflow=DB_MAX_OVERFLOW, pool_pre_ping=True)
    return create_async_engine(url, **engine_kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False, # Essential for working with ORM objects outside the session
    )


engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


# --- Utility for creating tables (Use this for initial setup/tests) ---

async def create_db_and_tables(bind: AsyncEngine = engine) -> None:
    """
    Creates all defined tables in the database.
    Production schemas should be managed by migrations.
    """
    # Import all model modules so that SQLAlchemy knows about them
    from .. import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
