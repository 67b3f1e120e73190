# models/debt.py

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Numeric, ForeignKey

from ..db.base import Base
from ..db.enums import DebtType, EnumString

class Debt(Base):
    __tablename__ = "debts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[DebtType] = mapped_column(EnumString(DebtType, 30), default=DebtType.OTHER)

    current_balance: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0.0)
    minimum_payment: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0.0)

    # APR as a fraction (0.1999 == 19.99%)
    interest_rate: Mapped[float] = mapped_column(Numeric(6, 4, asdecimal=False), default=0.0)

    is_paid_off: Mapped[bool] = mapped_column(default=False)
