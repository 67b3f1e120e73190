# db/enums.py

import enum
from sqlalchemy import TypeDecorator, String

class AccountType(enum.Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CREDIT_CARD = "CREDIT_CARD"
    INVESTMENT = "INVESTMENT"
    LOAN = "LOAN"
    OTHER = "OTHER"

class DebtType(enum.Enum):
    CREDIT_CARD = "CREDIT_CARD"
    STUDENT_LOAN = "STUDENT_LOAN"
    PERSONAL_LOAN = "PERSONAL_LOAN"
    AUTO_LOAN = "AUTO_LOAN"
    MORTGAGE = "MORTGAGE"
    MEDICAL = "MEDICAL"
    OTHER = "OTHER"

class GoalType(enum.Enum):
    """Goal classification. EMERGENCY_FUND drives several insight rules."""
    EMERGENCY_FUND = "EMERGENCY_FUND"
    DEBT_PAYOFF = "DEBT_PAYOFF"
    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"
    PURCHASE = "PURCHASE"
    RETIREMENT = "RETIREMENT"
    EDUCATION = "EDUCATION"
    TRAVEL = "TRAVEL"
    OTHER = "OTHER"

class GoalStatus(enum.Enum):
    # Stored as text, so ORDER BY on status is alphabetical
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"

class ActionStatus(enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DISMISSED = "DISMISSED"
    EXPIRED = "EXPIRED"

class ActionImpact(enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

class ActionDifficulty(enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

# Enums are kept as plain TEXT columns so Postgres and SQLite behave the same
class EnumString(TypeDecorator):
    """Ensures Enum values are stored as strings."""
    impl = String
    cache_ok = True

    def __init__(self, enum_type, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_type = enum_type

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, self.enum_type):
            return value.value
        # Accept raw strings, but only valid members
        return self.enum_type(value).value

    def process_result_value(self, value, dialect):
        if value is not None:
            return self.enum_type(value)
        return value


def enum_value(value) -> str:
    """Returns the string form of an enum member (or passes a string through)."""
    return value.value if isinstance(value, enum.Enum) else value
