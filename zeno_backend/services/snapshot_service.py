# services/snapshot_service.py

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import TRANSACTION_WINDOW_DAYS
from ..db.enums import GoalStatus, enum_value
from ..models.account import Account
from ..models.transaction import Transaction
from ..models.debt import Debt
from ..models.bill import Bill
from ..models.goal import Goal
from ..schemas.snapshot import (
    AccountSummary,
    BillSummary,
    CashFlow,
    DebtItem,
    DebtSummary,
    FinancialSnapshot,
    GoalSummary,
)

logger = logging.getLogger(__name__)

# --- SNAPSHOT CONSTANTS ---
BILL_WINDOW_DAYS = 30
MAX_UPCOMING_BILLS = 10
SECONDS_PER_DAY = 60 * 60 * 24


# ----------------------------------------------------------------------
# PURE REDUCTIONS (records in, summary values out)
# ----------------------------------------------------------------------

def summarize_accounts(accounts: Sequence[Any]) -> List[AccountSummary]:
    return [
        AccountSummary(
            id=a.id,
            name=a.name,
            type=enum_value(a.type),
            balance=float(a.current_balance),
            institution=a.institution or None,
        )
        for a in accounts
    ]


def calculate_net_worth(accounts: Sequence[Any]) -> tuple[float, float]:
    """Returns (total_assets, total_liabilities) over accounts included in net worth."""
    included = [float(a.current_balance) for a in accounts if a.include_in_net_worth]
    total_assets = sum(b for b in included if b > 0)
    total_liabilities = sum(abs(b) for b in included if b < 0)
    return total_assets, total_liabilities


def calculate_cash_flow(transactions: Sequence[Any]) -> CashFlow:
    amounts = [float(t.amount) for t in transactions]
    income = sum(a for a in amounts if a > 0)
    expenses = sum(abs(a) for a in amounts if a < 0)
    savings = income - expenses
    savings_rate = savings / income if income > 0 else 0.0
    return CashFlow(income=income, expenses=expenses, savings=savings, savings_rate=savings_rate)


def summarize_debts(debts: Sequence[Any]) -> DebtSummary:
    return DebtSummary(
        total_debt=sum(float(d.current_balance) for d in debts),
        total_minimum_payment=sum(float(d.minimum_payment) for d in debts),
        highest_interest_rate=max((float(d.interest_rate) for d in debts), default=0.0),
        debts=[
            DebtItem(id=d.id, name=d.name, balance=float(d.current_balance), rate=float(d.interest_rate))
            for d in debts
        ],
    )


def days_until(due: datetime, now: datetime) -> int:
    """Whole days until `due`, rounded up (a bill due in 1.2 days is due in 2)."""
    return math.ceil((due - now).total_seconds() / SECONDS_PER_DAY)


def summarize_bills(bills: Sequence[Any], now: datetime) -> List[BillSummary]:
    """Bills due within the next 30 days, soonest first, at most 10."""
    upcoming = []
    for b in bills:
        # No due date means nothing to schedule; it is dropped, not defaulted
        if b.next_due_date is None:
            continue
        due_in = days_until(b.next_due_date, now)
        if 0 <= due_in <= BILL_WINDOW_DAYS:
            upcoming.append(BillSummary(id=b.id, name=b.name, amount=float(b.amount), due_in=due_in))

    upcoming.sort(key=lambda bill: bill.due_in)
    return upcoming[:MAX_UPCOMING_BILLS]


def summarize_goals(goals: Sequence[Any]) -> List[GoalSummary]:
    # Keeps the storage order: insight rules look at the first goal
    summaries = []
    for g in goals:
        current = float(g.current_amount)
        target = float(g.target_amount)
        summaries.append(GoalSummary(
            id=g.id,
            name=g.name,
            type=enum_value(g.type),
            current=current,
            target=target,
            progress=current / target * 100 if target > 0 else 0.0,
        ))
    return summaries


def build_snapshot(
    accounts: Sequence[Any],
    transactions: Sequence[Any],
    debts: Sequence[Any],
    bills: Sequence[Any],
    goals: Sequence[Any],
    now: Optional[datetime] = None,
) -> FinancialSnapshot:
    """Reduces already-fetched records into one FinancialSnapshot."""
    now = now or datetime.utcnow()
    total_assets, total_liabilities = calculate_net_worth(accounts)

    return FinancialSnapshot(
        net_worth=total_assets - total_liabilities,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        cash_flow=calculate_cash_flow(transactions),
        accounts=summarize_accounts(accounts),
        upcoming_bills=summarize_bills(bills, now),
        debt_summary=summarize_debts(debts),
        goal_progress=summarize_goals(goals),
    )


# ----------------------------------------------------------------------
# STORAGE READS (one query per collection)
# ----------------------------------------------------------------------

async def fetch_accounts(db: AsyncSession, user_id: int, now: datetime) -> List[Account]:
    result = await db.execute(select(Account).where(Account.user_id == user_id).order_by(Account.id))
    return list(result.scalars().all())


async def fetch_recent_transactions(db: AsyncSession, user_id: int, now: datetime) -> List[Transaction]:
    window_start = now - timedelta(days=TRANSACTION_WINDOW_DAYS)
    stmt = select(Transaction).where(
        Transaction.user_id == user_id,
        Transaction.date >= window_start,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def fetch_open_debts(db: AsyncSession, user_id: int, now: datetime) -> List[Debt]:
    stmt = select(Debt).where(Debt.user_id == user_id, Debt.is_paid_off == False).order_by(Debt.id)  # noqa: E712
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def fetch_active_bills(db: AsyncSession, user_id: int, now: datetime) -> List[Bill]:
    stmt = select(Bill).where(Bill.user_id == user_id, Bill.is_active == True).order_by(Bill.id)  # noqa: E712
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def fetch_active_goals(db: AsyncSession, user_id: int, now: datetime) -> List[Goal]:
    # Sort contract relied upon by the insight generator's "first goal" rule
    stmt = select(Goal).where(
        Goal.user_id == user_id,
        Goal.status == GoalStatus.ACTIVE,
    ).order_by(Goal.status.asc(), Goal.priority.asc(), Goal.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


Reader = Callable[[AsyncSession, int, datetime], Awaitable[List[Any]]]

SNAPSHOT_READERS: List[Reader] = [
    fetch_accounts,
    fetch_recent_transactions,
    fetch_open_debts,
    fetch_active_bills,
    fetch_active_goals,
]


class SnapshotService:
    """
    Service responsible for computing a user's FinancialSnapshot.

    With a `session_factory` the five reads run concurrently, each on its own
    session. Without one they run in sequence on `db` (an AsyncSession cannot
    multiplex queries).
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: int,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.db = db
        self.user_id = user_id
        self.session_factory = session_factory

    async def _read(self, reader: Reader, now: datetime) -> List[Any]:
        if self.session_factory is None:
            return await reader(self.db, self.user_id, now)
        async with self.session_factory() as session:
            return await reader(session, self.user_id, now)

    async def _load_records(self, now: datetime) -> List[List[Any]]:
        if self.session_factory is None:
            return [await self._read(reader, now) for reader in SNAPSHOT_READERS]

        tasks = [asyncio.ensure_future(self._read(reader, now)) for reader in SNAPSHOT_READERS]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            # All-or-nothing: drop the sibling reads and surface the original error
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def compute_snapshot(self, now: Optional[datetime] = None) -> FinancialSnapshot:
        now = now or datetime.utcnow()
        accounts, transactions, debts, bills, goals = await self._load_records(now)

        logger.debug(
            "Snapshot inputs for user %s: %d accounts, %d transactions, %d debts, %d bills, %d goals",
            self.user_id, len(accounts), len(transactions), len(debts), len(bills), len(goals),
        )
        return build_snapshot(accounts, transactions, debts, bills, goals, now=now)


async def compute_snapshot(
    db: AsyncSession,
    user_id: int,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    now: Optional[datetime] = None,
) -> FinancialSnapshot:
    """Helper function to compute the snapshot for a user."""
    return await SnapshotService(db, user_id, session_factory).compute_snapshot(now=now)
