# services/orchestration_service.py

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ..config import INSIGHT_COOLDOWN_MINUTES
from ..db.enums import ActionStatus
from ..models.insight import Insight, Action
from ..schemas.snapshot import FinancialSnapshot
from .snapshot_service import SnapshotService
from .insight_service import generate_insight

logger = logging.getLogger(__name__)

UserIdType = int


class InsightOrchestrationService:
    """
    Runs the insight pipeline for one user (snapshot -> insight -> persistence)
    and manages the lifecycle of the actions it creates.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: UserIdType,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        cooldown: timedelta = timedelta(minutes=INSIGHT_COOLDOWN_MINUTES),
    ):
        self.db = db
        self.user_id = user_id
        self.cooldown = cooldown
        self.snapshot_service = SnapshotService(db, user_id, session_factory)

    # ----------------------------------------------------------------------
    # SNAPSHOT
    # ----------------------------------------------------------------------
    async def compute_snapshot(self, now: Optional[datetime] = None) -> FinancialSnapshot:
        return await self.snapshot_service.compute_snapshot(now=now)

    # ----------------------------------------------------------------------
    # INSIGHT GENERATION (rate limited per user)
    # ----------------------------------------------------------------------
    async def _ensure_cooldown_elapsed(self, now: datetime) -> None:
        stmt = select(func.max(Insight.created_at)).where(Insight.user_id == self.user_id)
        last_created_at = (await self.db.execute(stmt)).scalar_one_or_none()

        if last_created_at is not None and last_created_at > now - self.cooldown:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Please wait before generating a new insight",
            )

    async def generate_and_save_insight(self, now: Optional[datetime] = None) -> Insight:
        """
        Computes a fresh snapshot, derives the insight from it and persists the
        insight (with the serialized snapshot) plus one PENDING action per suggestion.
        """
        now = now or datetime.utcnow()
        await self._ensure_cooldown_elapsed(now)

        snapshot = await self.compute_snapshot(now=now)
        output = generate_insight(snapshot)

        insight = Insight(
            user_id=self.user_id,
            summary=output.summary,
            watch_outs=list(output.watch_outs),
            week_plan=[item.model_dump() for item in output.week_plan],
            data_snapshot=snapshot.model_dump(mode="json"),
            confidence=output.confidence,
            created_at=now,
        )
        insight.actions = [
            Action(
                user_id=self.user_id,
                title=suggestion.title,
                description=suggestion.description,
                why_it_matters=suggestion.why_it_matters,
                estimated_impact=suggestion.estimated_impact,
                difficulty=suggestion.difficulty,
                time_to_complete=suggestion.time_to_complete,
                priority=suggestion.priority,
                status=ActionStatus.PENDING,
                created_at=now,
                completed_at=None,
                dismissed_at=None,
            )
            for suggestion in output.actions
        ]
        self.db.add(insight)
        # Flush to get IDs; the request dependency owns the commit
        await self.db.flush()

        logger.info(
            "Generated insight %s for user %s (%d actions, confidence %.2f)",
            insight.id, self.user_id, len(insight.actions), insight.confidence,
        )
        return insight

    # ----------------------------------------------------------------------
    # INSIGHT READS
    # ----------------------------------------------------------------------
    async def list_insights(self, limit: int = 10) -> List[Insight]:
        stmt = (
            select(Insight)
            .where(Insight.user_id == self.user_id)
            .options(selectinload(Insight.actions))
            .order_by(Insight.created_at.desc(), Insight.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_insight(self, insight_id: int) -> Insight:
        stmt = (
            select(Insight)
            .where(Insight.id == insight_id, Insight.user_id == self.user_id)
            .options(selectinload(Insight.actions))
        )
        insight = (await self.db.execute(stmt)).scalar_one_or_none()
        if insight is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Insight not found")
        return insight

    # ----------------------------------------------------------------------
    # ACTION LIFECYCLE
    # ----------------------------------------------------------------------
    async def list_actions(self, action_status: Optional[ActionStatus] = None, limit: int = 10) -> Dict[str, Any]:
        """Returns the user's actions (most urgent first) and a count per status."""
        stmt = select(Action).where(Action.user_id == self.user_id)
        if action_status is not None:
            stmt = stmt.where(Action.status == action_status)
        stmt = stmt.order_by(Action.priority.asc(), Action.created_at.desc(), Action.id.desc()).limit(limit)
        actions = list((await self.db.execute(stmt)).scalars().all())

        counts_stmt = (
            select(Action.status, func.count(Action.id))
            .where(Action.user_id == self.user_id)
            .group_by(Action.status)
        )
        counts = {row_status.value: count for row_status, count in (await self.db.execute(counts_stmt)).all()}

        return {"actions": actions, "counts": counts}

    async def update_action(self, action_id: int, new_status: ActionStatus, now: Optional[datetime] = None) -> Action:
        now = now or datetime.utcnow()
        stmt = select(Action).where(Action.id == action_id, Action.user_id == self.user_id)
        action = (await self.db.execute(stmt)).scalar_one_or_none()
        if action is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Action not found")

        # Timestamps only mark the first transition into a terminal state
        if new_status == ActionStatus.COMPLETED and action.status != ActionStatus.COMPLETED:
            action.completed_at = now
        if new_status == ActionStatus.DISMISSED and action.status != ActionStatus.DISMISSED:
            action.dismissed_at = now

        action.status = new_status
        await self.db.flush()
        logger.debug("Action %s for user %s moved to %s", action_id, self.user_id, new_status.value)
        return action
