"""Month summaries, the 12-month trend and the dashboard month cursor.

Every function here recomputes from the full transaction list; nothing is
cached between calls.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, NamedTuple, Tuple

from tracker.budgets import round_half_up
from tracker.dates import add_months, month_label, month_window, start_of_month
from tracker.domain import EXPENSE, INCOME, MONTHLY, Budget, Category, Transaction
from tracker.filters import in_window
from tracker.lazy import UNCATEGORIZED, category_name, expense_by_category, iter_transactions

OVERALL = "Overall"
TREND_MONTHS = 12


class Slice(NamedTuple):
    name: str
    value: float


class BudgetUsage(NamedTuple):
    name: str
    spent: float
    remaining: float


class TrendPoint(NamedTuple):
    label: str
    month: datetime
    income: float
    expense: float


@dataclass(frozen=True)
class MonthSummary:
    month: datetime
    income: float
    expense: float
    savings_rate: float
    category_breakdown: Tuple[Slice, ...]
    budget_usage: Tuple[BudgetUsage, ...]


@dataclass(frozen=True)
class Dashboard:
    month_label: str
    can_go_next: bool
    total_balance: float
    summary: MonthSummary
    savings_pct: int
    trend: Tuple[TrendPoint, ...]


def savings_rate(income: float, expense: float) -> float:
    return 1 - expense / income if income > 0 else 0.0


def summarize_month(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    budgets: Iterable[Budget],
    month: datetime,
) -> MonthSummary:
    """Totals for the calendar month containing `month`."""
    cats = tuple(cats)
    in_month = tuple(iter_transactions(trans, in_window(month_window(month))))

    income = sum(t.amount for t in in_month if t.type == INCOME)
    expense = sum(abs(t.amount) for t in in_month if t.type == EXPENSE)

    by_cat = expense_by_category(in_month)
    breakdown = tuple(
        Slice(category_name(cats, None if cid == UNCATEGORIZED else cid), max(0.0, total))
        for cid, total in by_cat.items()
    )

    usage = []
    for b in budgets:
        if b.period != MONTHLY:
            continue
        if b.category_id:
            spent = by_cat.get(b.category_id, 0.0)
            name = category_name(cats, b.category_id)
        else:
            spent = expense
            name = OVERALL
        usage.append(BudgetUsage(name, spent, max(0.0, b.amount - spent)))

    return MonthSummary(
        month=start_of_month(month),
        income=income,
        expense=expense,
        savings_rate=savings_rate(income, expense),
        category_breakdown=breakdown,
        budget_usage=tuple(usage),
    )


def trend(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    budgets: Iterable[Budget],
    cursor: datetime,
    months: int = TREND_MONTHS,
) -> Tuple[TrendPoint, ...]:
    """Income/expense per month, oldest first, ending with the cursor's month."""
    trans, cats, budgets = tuple(trans), tuple(cats), tuple(budgets)
    points = []
    for back in range(months - 1, -1, -1):
        start = add_months(cursor, -back)
        s = summarize_month(trans, cats, budgets, start)
        points.append(TrendPoint(month_label(start), start, s.income, s.expense))
    return tuple(points)


def clamp_cursor(cursor: datetime, now: datetime) -> datetime:
    """Month cursor never moves past the current month."""
    return min(start_of_month(cursor), start_of_month(now))


def can_go_next(cursor: datetime, now: datetime) -> bool:
    return start_of_month(cursor) < start_of_month(now)


def step_cursor(cursor: datetime, months: int, now: datetime) -> datetime:
    return clamp_cursor(add_months(cursor, months), now)


def total_balance(trans: Iterable[Transaction]) -> float:
    trans = tuple(trans)
    income = sum(t.amount for t in trans if t.type == INCOME)
    expense = sum(abs(t.amount) for t in trans if t.type == EXPENSE)
    return income - expense


def build_dashboard(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    budgets: Iterable[Budget],
    cursor: datetime,
    now: datetime,
) -> Dashboard:
    trans, cats, budgets = tuple(trans), tuple(cats), tuple(budgets)
    cursor = clamp_cursor(cursor, now)
    summary = summarize_month(trans, cats, budgets, cursor)
    return Dashboard(
        month_label=month_label(cursor),
        can_go_next=can_go_next(cursor, now),
        total_balance=total_balance(trans),
        summary=summary,
        savings_pct=round_half_up(summary.savings_rate * 100),
        trend=trend(trans, cats, budgets, cursor),
    )
