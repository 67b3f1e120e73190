# models/goal.py

from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Numeric, DateTime, ForeignKey

from ..db.base import Base
from ..db.enums import GoalType, GoalStatus, EnumString

class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[GoalType] = mapped_column(EnumString(GoalType, 30), default=GoalType.SAVINGS)
    status: Mapped[GoalStatus] = mapped_column(EnumString(GoalStatus, 20), default=GoalStatus.ACTIVE)

    # 1 is the most important goal
    priority: Mapped[int] = mapped_column(Integer, default=1)

    current_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0.0)
    target_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
