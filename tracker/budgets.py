import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from tracker.domain import Budget, Transaction, Window
from tracker.filters import Predicate, all_of, in_budget_scope, in_window
from tracker.periods import resolve_periods

ALERT_OVER = "over"
ALERT_HIGH = "high"
HIGH_USAGE_PCT = 90


@dataclass(frozen=True)
class BudgetStatus:
    budget: Budget
    current: Window
    previous: Window
    spent_previous: float
    carry: float
    spent_current: float
    limit: float
    used_pct: int
    alert: Optional[str]   # "over" | "high" | None


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def spent_where(trans: Iterable[Transaction], pred: Predicate) -> float:
    return sum(abs(t.amount) for t in trans if pred(t))


def used_percent(spent: float, limit: float) -> int:
    if limit <= 0:
        return 0
    return min(100, round_half_up(spent / limit * 100))


def alert_level(spent: float, limit: float, used_pct: int) -> Optional[str]:
    if spent > limit:
        return ALERT_OVER
    if used_pct >= HIGH_USAGE_PCT:
        return ALERT_HIGH
    return None


def evaluate_budget(
    budget: Budget,
    trans: Iterable[Transaction],
    now: datetime,
    starts_on_monday: bool = True,
) -> BudgetStatus:
    """Spend, carryover and alert state of `budget` for the period containing `now`.

    Carryover only looks at the immediately preceding period; leftovers do
    not compound across several periods.
    """
    trans = tuple(trans)
    current, previous = resolve_periods(budget, now, starts_on_monday)
    scope = in_budget_scope(budget)

    spent_previous = spent_where(trans, all_of(scope, in_window(previous)))
    carry = max(0.0, budget.amount - spent_previous) if budget.carryover else 0.0
    spent_current = spent_where(trans, all_of(scope, in_window(current)))

    limit = budget.amount + carry
    used_pct = used_percent(spent_current, limit)
    alert = alert_level(spent_current, limit, used_pct) if limit > 0 else None

    return BudgetStatus(
        budget=budget,
        current=current,
        previous=previous,
        spent_previous=spent_previous,
        carry=carry,
        spent_current=spent_current,
        limit=limit,
        used_pct=used_pct,
        alert=alert,
    )


def evaluate_budgets(
    budgets: Iterable[Budget],
    trans: Iterable[Transaction],
    now: datetime,
    starts_on_monday: bool = True,
) -> Tuple[BudgetStatus, ...]:
    trans = tuple(trans)
    return tuple(evaluate_budget(b, trans, now, starts_on_monday) for b in budgets)
