# zeno_backend/api/dependencies.py

import logging
import secrets
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .. import config
from ..db.database import AsyncSessionLocal

logger = logging.getLogger(__name__)

# --- DATABASE DEPENDENCIES ---

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI Dependency that yields an asynchronous SQLAlchemy Session.
    Commits on success and rolls back on any exception.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used for the concurrent snapshot reads (one session per read)."""
    return AsyncSessionLocal


# --- USER IDENTITY ---

async def get_current_user_id(x_user_id: int = Header(..., alias="X-User-Id")) -> int:
    """Resolves the acting user. Stands in for real authentication."""
    return x_user_id


# --- API KEY VALIDATION ---

def get_expected_api_key() -> str:
    return config.ZENO_API_KEY


def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    expected_key: str = Depends(get_expected_api_key),
) -> str:
    """Guards every /api route; the health check stays open."""
    if not expected_key:
        logger.error("ZENO_API_KEY is not configured; rejecting API request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API key validation is not configured",
        )

    if x_api_key is None or not secrets.compare_digest(x_api_key.encode(), expected_key.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key")

    return x_api_key
