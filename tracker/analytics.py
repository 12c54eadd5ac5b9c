from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from tracker.budgets import round_half_up
from tracker.dates import add_months, end_of_month, month_window, parse_ts, start_of_month
from tracker.domain import EXPENSE, INCOME, Budget, Category, Transaction, Window
from tracker.filters import all_of, by_account, by_type, in_window
from tracker.lazy import iter_transactions, lazy_top_categories

RANGE_MONTH = "month"
RANGE_QUARTER = "quarter"
RANGE_YTD = "ytd"
RANGES = (RANGE_MONTH, RANGE_QUARTER, RANGE_YTD)


@dataclass(frozen=True)
class RangeSummary:
    window: Window
    income: float
    expense: float
    savings: float
    budget_pct: int
    by_category: Tuple[Tuple[str, float], ...]
    top_category: Optional[str]
    avg_daily_spend: float


def range_window(range_name: str, now: datetime) -> Window:
    if range_name == RANGE_MONTH:
        start = start_of_month(now)
    elif range_name == RANGE_QUARTER:
        start = add_months(now, -2)
    elif range_name == RANGE_YTD:
        start = datetime(now.year, 1, 1)
    else:
        raise ValueError(f"unknown range {range_name!r}, expected one of {RANGES}")
    return Window(start, end_of_month(now))


def avg_daily_spend(trans: Iterable[Transaction]) -> float:
    per_day: dict = defaultdict(float)
    for t in trans:
        moment = parse_ts(t.ts)
        if t.type == EXPENSE and moment is not None:
            per_day[moment.date()] += abs(t.amount)
    if not per_day:
        return 0.0
    return sum(per_day.values()) / len(per_day)


def month_budget_pct(
    trans: Iterable[Transaction], budgets: Iterable[Budget], now: datetime
) -> int:
    """Current-month spend against the sum of every budget amount."""
    total_budget = sum(b.amount for b in budgets)
    if total_budget <= 0:
        return 0
    spent = sum(
        abs(t.amount)
        for t in iter_transactions(trans, all_of(by_type(EXPENSE), in_window(month_window(now))))
    )
    return min(100, round_half_up(spent / total_budget * 100))


def summarize_range(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    budgets: Iterable[Budget],
    now: datetime,
    range_name: str = RANGE_MONTH,
    account_id: Optional[str] = None,
) -> RangeSummary:
    trans = tuple(trans)
    window = range_window(range_name, now)
    filtered = tuple(iter_transactions(trans, all_of(by_account(account_id), in_window(window))))

    income = sum(t.amount for t in filtered if t.type == INCOME)
    expense = sum(abs(t.amount) for t in filtered if t.type == EXPENSE)
    by_category = tuple(lazy_top_categories(filtered, cats))

    return RangeSummary(
        window=window,
        income=income,
        expense=expense,
        savings=max(0.0, income - expense),
        budget_pct=month_budget_pct(trans, budgets, now),
        by_category=by_category,
        top_category=by_category[0][0] if by_category else None,
        avg_daily_spend=avg_daily_spend(filtered),
    )
