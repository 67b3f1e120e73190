# api/v1/actions.py

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_db, get_current_user_id
from ...db.enums import ActionStatus
from ...services.orchestration_service import InsightOrchestrationService
from ...schemas.insight import ActionOut, ActionUpdate, ActionResponse, ActionListResponse

router = APIRouter(
    prefix="/actions",
    tags=["Actions"]
)

@router.get(
    "",
    response_model=ActionListResponse,
    summary="List the user's actions, most urgent first, with per-status counts"
)
async def list_actions(
    action_status: Optional[ActionStatus] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, le=100),
    db_session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    service = InsightOrchestrationService(db_session, user_id)
    result = await service.list_actions(action_status=action_status, limit=limit)
    return ActionListResponse(
        actions=[ActionOut.model_validate(a) for a in result["actions"]],
        counts=result["counts"],
    )


@router.patch(
    "/{action_id}",
    response_model=ActionResponse,
    summary="Update an action's status (e.g., complete or dismiss it)"
)
async def update_action(
    action_id: int,
    update: ActionUpdate,
    db_session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    service = InsightOrchestrationService(db_session, user_id)
    action = await service.update_action(action_id, update.status)
    return ActionResponse(action=ActionOut.model_validate(action))
