# schemas/snapshot.py

from pydantic import BaseModel, Field
from typing import List, Optional


class FrozenModel(BaseModel):
    """Snapshot values are computed once and never mutated."""

    class Config:
        frozen = True


class AccountSummary(FrozenModel):
    id: int
    name: str
    type: str = Field(..., description="Account type (e.g., CHECKING, CREDIT_CARD).")
    balance: float
    institution: Optional[str] = None


class BillSummary(FrozenModel):
    id: int
    name: str
    amount: float
    due_in: int = Field(..., ge=0, le=30, description="Whole days until the next due date.")
    is_paid: bool = False


class DebtItem(FrozenModel):
    id: int
    name: str
    balance: float
    rate: float = Field(..., description="APR as a fraction (0.1999 == 19.99%).")


class DebtSummary(FrozenModel):
    total_debt: float = 0.0
    total_minimum_payment: float = 0.0
    highest_interest_rate: float = 0.0
    debts: List[DebtItem] = Field(default_factory=list)


class GoalSummary(FrozenModel):
    id: int
    name: str
    type: str = Field(..., description="Goal type (e.g., EMERGENCY_FUND).")
    current: float
    target: float
    progress: float = Field(..., description="Percent of target reached (0-100+).")


class CashFlow(FrozenModel):
    income: float = 0.0
    expenses: float = 0.0
    savings: float = 0.0
    savings_rate: float = Field(0.0, description="savings / income, 0 when there is no income.")


class FinancialSnapshot(FrozenModel):
    """
    Point-in-time reduction of a user's accounts, trailing transactions,
    open debts, active bills and active goals.
    """

    net_worth: float
    total_assets: float
    total_liabilities: float
    cash_flow: CashFlow
    accounts: List[AccountSummary] = Field(default_factory=list)
    upcoming_bills: List[BillSummary] = Field(default_factory=list, max_length=10)
    debt_summary: DebtSummary = Field(default_factory=DebtSummary)
    goal_progress: List[GoalSummary] = Field(default_factory=list)


class SnapshotResponse(BaseModel):
    snapshot: FinancialSnapshot
