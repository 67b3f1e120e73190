# models/__init__.py

from .user import User
from .account import Account
from .transaction import Transaction
from .debt import Debt
from .bill import Bill
from .goal import Goal
from .insight import Insight, Action

__all__ = ["User", "Account", "Transaction", "Debt", "Bill", "Goal", "Insight", "Action"]
