# api/v1/snapshot.py

import logging
from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..dependencies import get_db, get_session_factory, get_current_user_id
from ...services.snapshot_service import SnapshotService
from ...schemas.snapshot import SnapshotResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/snapshot",
    tags=["Financial Snapshot"]
)

@router.get(
    "",
    response_model=SnapshotResponse,
    status_code=status.HTTP_200_OK,
    summary="Compute the current financial snapshot for the user"
)
async def get_snapshot(
    db_session: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    user_id: int = Depends(get_current_user_id)
):
    """
    Reduces accounts, the trailing 30 days of transactions, open debts,
    active bills and active goals into one snapshot.
    """
    try:
        snapshot = await SnapshotService(db_session, user_id, session_factory).compute_snapshot()
    except Exception:
        logger.exception("Error generating snapshot for user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    return SnapshotResponse(snapshot=snapshot)
