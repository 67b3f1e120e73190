# services/insight_service.py

"""
Rule-based insight generation.

Every step is a pure function of a FinancialSnapshot; `generate_insight`
composes them. Same snapshot in, same InsightOutput out.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional

from ..db.enums import ActionImpact, ActionDifficulty, GoalType
from ..schemas.snapshot import FinancialSnapshot
from ..schemas.insight import ActionSuggestion, InsightOutput, WeekPlanItem

# --- CASH FLOW BANDS ---
EXCELLENT_SAVINGS_RATE = 0.20
GOOD_SAVINGS_RATE = 0.10

# --- DEBT THRESHOLDS (APR as a fraction) ---
HIGH_INTEREST_RATE = 0.15
WATCH_OUT_INTEREST_RATE = 0.20

# --- GOAL PROGRESS BANDS (percent) ---
ALMOST_THERE_PROGRESS = 75
GOOD_PROGRESS = 25

# --- BILLS ---
URGENT_BILL_DAYS = 5
PAY_SOON_BILL_DAYS = 7

EMERGENCY_FUND_FLOOR = 500
SPENDING_ALERT_RATIO = 0.8

MAX_WATCH_OUTS = 2
MAX_ACTIONS = 3

# --- CONFIDENCE ---
BASE_CONFIDENCE = 0.60
MAX_CONFIDENCE = 0.95

WEEK_PLAN = [
    ("Monday", "Review your pending actions"),
    ("Tuesday", "Check account balances"),
    ("Wednesday", "Log any cash transactions"),
    ("Thursday", "Review recent spending"),
    ("Friday", "Check for any upcoming bills"),
    ("Saturday", "Review progress on goals"),
    ("Sunday", "Plan finances for next week"),
]


# ----------------------------------------------------------------------
# FORMATTING
# ----------------------------------------------------------------------

def format_currency(amount: float) -> str:
    """Whole-dollar USD, e.g. 1950.05 -> '$1,950', -1290.45 -> '-$1,290'."""
    rounded = int(Decimal(abs(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 and rounded > 0 else ""
    return f"{sign}${rounded:,}"


def format_percent(value: float) -> str:
    """One decimal place, ties rounded up (0.0025 -> '0.3%')."""
    percent = Decimal(value * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def _round_half_up(value: float) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _has_emergency_fund_goal(snapshot: FinancialSnapshot) -> bool:
    return _emergency_fund_goal(snapshot) is not None


def _emergency_fund_goal(snapshot: FinancialSnapshot):
    return next((g for g in snapshot.goal_progress if g.type == GoalType.EMERGENCY_FUND.value), None)


# ----------------------------------------------------------------------
# SUMMARY CLAUSES (one per category, each optional)
# ----------------------------------------------------------------------

def net_worth_clause(snapshot: FinancialSnapshot) -> Optional[str]:
    amount = format_currency(snapshot.net_worth)
    if snapshot.net_worth > 0:
        return f"Your net worth is {amount}, which is a solid foundation."
    return f"Your current net worth is {amount}. Building positive equity should be a priority."


def cash_flow_clause(snapshot: FinancialSnapshot) -> Optional[str]:
    rate = snapshot.cash_flow.savings_rate
    if rate >= EXCELLENT_SAVINGS_RATE:
        return f"You're saving {format_percent(rate)} of your income, which is excellent."
    if rate >= GOOD_SAVINGS_RATE:
        return f"You're saving {format_percent(rate)} of your income. Consider increasing to 20% if possible."
    if rate > 0:
        return (
            f"You're saving {format_percent(rate)} of your income. "
            "Finding ways to increase this will help build security."
        )
    return (
        "You're currently spending more than you earn. "
        "Identifying areas to cut back will help stabilize your finances."
    )


def debt_clause(snapshot: FinancialSnapshot) -> Optional[str]:
    debt = snapshot.debt_summary
    if debt.total_debt <= 0:
        return None
    if debt.highest_interest_rate > HIGH_INTEREST_RATE:
        return (
            f"You have high-interest debt at {format_percent(debt.highest_interest_rate)} APR. "
            "Prioritizing this can save significant money."
        )
    return f"Your debt levels are manageable with a total of {format_currency(debt.total_debt)}."


def goal_clause(snapshot: FinancialSnapshot) -> Optional[str]:
    if not snapshot.goal_progress:
        return None
    top_goal = snapshot.goal_progress[0]
    progress = _round_half_up(top_goal.progress)
    if top_goal.progress >= ALMOST_THERE_PROGRESS:
        return f'You\'re {progress}% towards your "{top_goal.name}" goal - almost there!'
    if top_goal.progress >= GOOD_PROGRESS:
        return f'Good progress on your "{top_goal.name}" goal at {progress}%.'
    return None


SUMMARY_CLAUSES: List[Callable[[FinancialSnapshot], Optional[str]]] = [
    net_worth_clause,
    cash_flow_clause,
    debt_clause,
    goal_clause,
]


def build_summary(snapshot: FinancialSnapshot) -> str:
    clauses = (clause(snapshot) for clause in SUMMARY_CLAUSES)
    return " ".join(c for c in clauses if c)


# ----------------------------------------------------------------------
# WATCH-OUTS (priority order, capped)
# ----------------------------------------------------------------------

def overspending_watch_out(snapshot: FinancialSnapshot) -> Optional[str]:
    if snapshot.cash_flow.savings_rate < 0:
        return "You spent more than you earned this month. Review recent expenses for opportunities to cut back."
    return None


def high_interest_watch_out(snapshot: FinancialSnapshot) -> Optional[str]:
    rate = snapshot.debt_summary.highest_interest_rate
    if rate > WATCH_OUT_INTEREST_RATE:
        return f"You have debt at {format_percent(rate)} APR. Paying this off quickly should be a priority."
    return None


def urgent_bills_watch_out(snapshot: FinancialSnapshot) -> Optional[str]:
    urgent = [b for b in snapshot.upcoming_bills if b.due_in <= URGENT_BILL_DAYS]
    if not urgent:
        return None
    total = sum(b.amount for b in urgent)
    return f"{len(urgent)} bill(s) totaling {format_currency(total)} due within {URGENT_BILL_DAYS} days."


def emergency_fund_watch_out(snapshot: FinancialSnapshot) -> Optional[str]:
    goal = _emergency_fund_goal(snapshot)
    if goal is None or goal.current < EMERGENCY_FUND_FLOOR:
        return "Consider building an emergency fund to cover unexpected expenses."
    return None


WATCH_OUT_RULES: List[Callable[[FinancialSnapshot], Optional[str]]] = [
    overspending_watch_out,
    high_interest_watch_out,
    urgent_bills_watch_out,
    emergency_fund_watch_out,
]


def identify_watch_outs(snapshot: FinancialSnapshot) -> List[str]:
    watch_outs: List[str] = []
    for rule in WATCH_OUT_RULES:
        if len(watch_outs) >= MAX_WATCH_OUTS:
            break
        warning = rule(snapshot)
        if warning:
            watch_outs.append(warning)
    return watch_outs


# ----------------------------------------------------------------------
# ACTIONS (each rule carries a fixed priority)
# ----------------------------------------------------------------------

def pay_bill_action(snapshot: FinancialSnapshot) -> Optional[ActionSuggestion]:
    # upcoming_bills is sorted by due_in, so the first match is the soonest
    bill = next((b for b in snapshot.upcoming_bills if 0 < b.due_in <= PAY_SOON_BILL_DAYS), None)
    if bill is None:
        return None
    return ActionSuggestion(
        title=f"Pay {bill.name} bill",
        description=f"Due in {bill.due_in} days. Amount: {format_currency(bill.amount)}",
        why_it_matters="Paying on time avoids late fees and maintains good credit.",
        estimated_impact=ActionImpact.HIGH,
        difficulty=ActionDifficulty.EASY,
        time_to_complete="5 min",
        priority=1,
    )


def extra_debt_payment_action(snapshot: FinancialSnapshot) -> Optional[ActionSuggestion]:
    debt = next((d for d in snapshot.debt_summary.debts if d.rate > HIGH_INTEREST_RATE), None)
    if debt is None:
        return None
    return ActionSuggestion(
        title=f"Make extra payment on {debt.name}",
        description=f"Balance: {format_currency(debt.balance)} at {format_percent(debt.rate)} APR",
        why_it_matters="Extra payments save money on interest and accelerate payoff.",
        estimated_impact=ActionImpact.HIGH,
        difficulty=ActionDifficulty.MEDIUM,
        time_to_complete="10 min",
        priority=2,
    )


def emergency_fund_action(snapshot: FinancialSnapshot) -> Optional[ActionSuggestion]:
    if _has_emergency_fund_goal(snapshot):
        return None
    return ActionSuggestion(
        title="Create an emergency fund goal",
        description="Start with a goal of $1,000 to cover unexpected expenses.",
        why_it_matters="An emergency fund prevents debt when surprises happen.",
        estimated_impact=ActionImpact.HIGH,
        difficulty=ActionDifficulty.EASY,
        time_to_complete="2 min",
        priority=3,
    )


def review_subscriptions_action(snapshot: FinancialSnapshot) -> Optional[ActionSuggestion]:
    cash_flow = snapshot.cash_flow
    if cash_flow.expenses <= cash_flow.income * SPENDING_ALERT_RATIO:
        return None
    return ActionSuggestion(
        title="Review recurring subscriptions",
        description="Look for subscriptions you may not be using regularly.",
        why_it_matters="Cutting unused subscriptions frees up money for goals.",
        estimated_impact=ActionImpact.MEDIUM,
        difficulty=ActionDifficulty.EASY,
        time_to_complete="15 min",
        priority=4,
    )


def automate_savings_action(snapshot: FinancialSnapshot) -> Optional[ActionSuggestion]:
    if not 0 <= snapshot.cash_flow.savings_rate < GOOD_SAVINGS_RATE:
        return None
    return ActionSuggestion(
        title="Set up automatic savings transfer",
        description="Automate a weekly transfer to savings, even $25 helps.",
        why_it_matters="Automating savings makes it consistent and effortless.",
        estimated_impact=ActionImpact.MEDIUM,
        difficulty=ActionDifficulty.EASY,
        time_to_complete="10 min",
        priority=5,
    )


ACTION_RULES: List[Callable[[FinancialSnapshot], Optional[ActionSuggestion]]] = [
    pay_bill_action,
    extra_debt_payment_action,
    emergency_fund_action,
    review_subscriptions_action,
    automate_savings_action,
]


def generate_actions(snapshot: FinancialSnapshot) -> List[ActionSuggestion]:
    candidates = [action for action in (rule(snapshot) for rule in ACTION_RULES) if action is not None]
    candidates.sort(key=lambda action: action.priority)
    return candidates[:MAX_ACTIONS]


# ----------------------------------------------------------------------
# WEEK PLAN & CONFIDENCE
# ----------------------------------------------------------------------

def build_week_plan(snapshot: FinancialSnapshot) -> List[WeekPlanItem]:
    # TODO: derive the daily actions from the snapshot once the plan content is agreed on
    return [WeekPlanItem(day=day, action=action) for day, action in WEEK_PLAN]


def calculate_confidence(snapshot: FinancialSnapshot) -> float:
    confidence = BASE_CONFIDENCE

    # More linked accounts = fuller picture
    if len(snapshot.accounts) >= 2:
        confidence += 0.10
    if len(snapshot.accounts) >= 4:
        confidence += 0.05

    if snapshot.goal_progress:
        confidence += 0.10

    # Recent transaction data (always credited)
    confidence += 0.10

    # Rounded so repeated float additions compare cleanly (0.8, not 0.7999...)
    return round(min(confidence, MAX_CONFIDENCE), 2)


# ----------------------------------------------------------------------
# PIPELINE
# ----------------------------------------------------------------------

def generate_insight(snapshot: FinancialSnapshot) -> InsightOutput:
    """Derives the narrative, warnings, ranked actions, week plan and confidence."""
    return InsightOutput(
        summary=build_summary(snapshot),
        watch_outs=identify_watch_outs(snapshot),
        week_plan=build_week_plan(snapshot),
        actions=generate_actions(snapshot),
        confidence=calculate_confidence(snapshot),
    )
