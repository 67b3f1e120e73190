# api/v1/insights.py

import logging
from fastapi import APIRouter, Depends, Query, status, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..dependencies import get_db, get_session_factory, get_current_user_id
from ...services.orchestration_service import InsightOrchestrationService
from ...schemas.insight import InsightOut, InsightResponse, InsightListResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/insights",
    tags=["Insights"]
)

@router.get(
    "",
    response_model=InsightListResponse,
    summary="List the user's most recent insights"
)
async def list_insights(
    limit: int = Query(10, ge=1, le=100),
    db_session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    service = InsightOrchestrationService(db_session, user_id)
    insights = await service.list_insights(limit=limit)
    return InsightListResponse(insights=[InsightOut.model_validate(i) for i in insights])


@router.post(
    "",
    response_model=InsightResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate and save a new insight (at most one per cooldown window)"
)
async def create_insight(
    db_session: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    user_id: int = Depends(get_current_user_id)
):
    """
    Computes a fresh snapshot, derives the narrative and ranked actions from it,
    and stores the insight with one PENDING action per suggestion.
    """
    service = InsightOrchestrationService(db_session, user_id, session_factory)
    try:
        insight = await service.generate_and_save_insight()
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error generating insight for user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    return InsightResponse(insight=InsightOut.model_validate(insight))


@router.get(
    "/{insight_id}",
    response_model=InsightResponse,
    summary="Get a single insight with its actions"
)
async def get_insight(
    insight_id: int,
    db_session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    service = InsightOrchestrationService(db_session, user_id)
    insight = await service.get_insight(insight_id)
    return InsightResponse(insight=InsightOut.model_validate(insight))
