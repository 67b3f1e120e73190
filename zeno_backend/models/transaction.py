# models/transaction.py

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Numeric, DateTime, ForeignKey

from ..db.base import Base

class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("accounts.id"), nullable=True)

    # Positive = money in, negative = money out
    amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False))
    date: Mapped[datetime] = mapped_column(DateTime, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), default="UNCATEGORIZED")
