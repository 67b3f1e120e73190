# models/insight.py

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Float, DateTime, ForeignKey, JSON

from ..db.base import Base
from ..db.enums import ActionStatus, ActionImpact, ActionDifficulty, EnumString

class Insight(Base):
    """A generated insight plus the snapshot it was derived from."""
    __tablename__ = "insights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    summary: Mapped[str] = mapped_column(Text)
    watch_outs: Mapped[List[str]] = mapped_column(JSON, default=list)
    week_plan: Mapped[List[Dict[str, str]]] = mapped_column(JSON, default=list)

    # Serialized FinancialSnapshot used for this insight (audit trail)
    data_snapshot: Mapped[Dict[str, Any]] = mapped_column(JSON)
    confidence: Mapped[float] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    actions: Mapped[List["Action"]] = relationship(
        back_populates="insight",
        order_by="Action.priority",
        cascade="all, delete-orphan",
    )


class Action(Base):
    """A suggested next step, tracked through its lifecycle by the user."""
    __tablename__ = "actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    insight_id: Mapped[Optional[int]] = mapped_column(ForeignKey("insights.id"), nullable=True)

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    why_it_matters: Mapped[str] = mapped_column(Text)
    estimated_impact: Mapped[ActionImpact] = mapped_column(EnumString(ActionImpact, 20))
    difficulty: Mapped[ActionDifficulty] = mapped_column(EnumString(ActionDifficulty, 20))
    time_to_complete: Mapped[str] = mapped_column(String(50))
    priority: Mapped[int] = mapped_column(Integer)

    status: Mapped[ActionStatus] = mapped_column(EnumString(ActionStatus, 20), default=ActionStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    dismissed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    insight: Mapped[Optional["Insight"]] = relationship(back_populates="actions")
