# models/account.py

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Numeric, DateTime, ForeignKey

from ..db.base import Base
from ..db.enums import AccountType, EnumString

class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[AccountType] = mapped_column(EnumString(AccountType, 30), default=AccountType.CHECKING)
    institution: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Credit cards and loans carry negative balances
    current_balance: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0.0)

    # Excluded accounts are still listed in the snapshot but skip the net-worth sums
    include_in_net_worth: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
