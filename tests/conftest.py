"""
Shared test configuration: environment, temporary databases and record factories.
"""
import os

# Configuration must be in place before the application modules are imported
os.environ["ZENO_API_KEY"] = "test-api-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from types import SimpleNamespace

import httpx
import pytest

from zeno_backend.app import app
from zeno_backend.api.dependencies import get_db, get_session_factory
from zeno_backend.db.database import build_engine, build_session_factory, create_db_and_tables
from zeno_backend.db.enums import AccountType, GoalStatus, GoalType
from zeno_backend.models import Account, Bill, Debt, Goal, Transaction, User

API_KEY = "test-api-key"

# Fixed reference time for deterministic due dates and windows
NOW = datetime(2025, 1, 15, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent snapshot reads get separate connections."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'zeno_test.db'}")
    await create_db_and_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user(db_session):
    record = User(email="alex@example.com", name="Alex")
    db_session.add(record)
    await db_session.commit()
    return record


@pytest.fixture
async def other_user(db_session):
    record = User(email="sam@example.com", name="Sam")
    db_session.add(record)
    await db_session.commit()
    return record


# ============================================================================
# RECORD FACTORIES
# ============================================================================

def make_account(user_id, balance, name="Checking", type=AccountType.CHECKING, include_in_net_worth=True, institution=None):
    return Account(
        user_id=user_id,
        name=name,
        type=type,
        current_balance=balance,
        include_in_net_worth=include_in_net_worth,
        institution=institution,
    )


def make_transaction(user_id, amount, date, description=None):
    return Transaction(user_id=user_id, amount=amount, date=date, description=description)


def make_debt(user_id, name, balance, rate, minimum_payment=0.0, is_paid_off=False):
    return Debt(
        user_id=user_id,
        name=name,
        current_balance=balance,
        minimum_payment=minimum_payment,
        interest_rate=rate,
        is_paid_off=is_paid_off,
    )


def make_bill(user_id, name, amount, next_due_date, is_active=True):
    return Bill(user_id=user_id, name=name, amount=amount, next_due_date=next_due_date, is_active=is_active)


def make_goal(user_id, name, current, target, type=GoalType.SAVINGS, status=GoalStatus.ACTIVE, priority=1, created_at=None):
    return Goal(
        user_id=user_id,
        name=name,
        type=type,
        status=status,
        priority=priority,
        current_amount=current,
        target_amount=target,
        created_at=created_at or NOW - timedelta(days=10),
    )


async def seed_typical_user(session, user_id, now):
    """Two net-worth accounts, healthy cash flow, one high-interest card, bills and goals."""
    session.add_all([
        make_account(user_id, 3240.50, name="Everyday Checking", institution="First Bank"),
        make_account(user_id, -1290.45, name="Rewards Card", type=AccountType.CREDIT_CARD),
        make_transaction(user_id, 5200.00, now - timedelta(days=3), "Salary"),
        make_transaction(user_id, -3800.00, now - timedelta(days=2), "Rent and living"),
        make_debt(user_id, "Rewards Card", 1290.45, 0.1999, minimum_payment=35.00),
        make_debt(user_id, "Car Loan", 8400.00, 0.055, minimum_payment=250.00),
        make_bill(user_id, "Electric", 120.00, now + timedelta(days=3)),
        make_bill(user_id, "Internet", 60.00, now + timedelta(days=12)),
        make_goal(user_id, "Vacation", 400.00, 1000.00, priority=1),
    ])
    await session.commit()


# ============================================================================
# PLAIN SNAPSHOT INPUT RECORDS (no database)
# ============================================================================

def account_record(id, balance, include=True, type="CHECKING", name=None, institution=None):
    return SimpleNamespace(
        id=id, name=name or f"Account {id}", type=type, current_balance=balance,
        include_in_net_worth=include, institution=institution,
    )


def transaction_record(amount):
    return SimpleNamespace(amount=amount)


def debt_record(id, balance, rate, minimum_payment=0.0, name=None):
    return SimpleNamespace(
        id=id, name=name or f"Debt {id}", current_balance=balance,
        minimum_payment=minimum_payment, interest_rate=rate,
    )


def bill_record(id, amount, next_due_date, name=None):
    return SimpleNamespace(id=id, name=name or f"Bill {id}", amount=amount, next_due_date=next_due_date)


def goal_record(id, current, target, type="SAVINGS", name=None):
    return SimpleNamespace(
        id=id, name=name or f"Goal {id}", type=type, current_amount=current, target_amount=target,
    )


# ============================================================================
# HTTP CLIENT
# ============================================================================

@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", headers={"X-API-Key": API_KEY}) as test_client:
        yield test_client

    app.dependency_overrides.clear()
