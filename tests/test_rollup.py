from datetime import datetime

from tracker.domain import Budget, Transaction
from tracker.rollup import (
    OVERALL,
    BudgetUsage,
    Slice,
    build_dashboard,
    can_go_next,
    clamp_cursor,
    savings_rate,
    step_cursor,
    summarize_month,
    total_balance,
    trend,
)


def test_month_summary_totals(trans, cats, budgets, now):
    s = summarize_month(trans, cats, budgets, now)
    assert s.month == datetime(2024, 3, 1)
    assert s.income == 4000
    assert s.expense == 1750
    assert s.savings_rate == 0.5625


def test_category_breakdown_uses_names_and_uncategorized(trans, cats, budgets, now):
    s = summarize_month(trans, cats, budgets, now)
    assert s.category_breakdown == (
        Slice("Groceries", 200),
        Slice("Rent", 1500),
        Slice("Uncategorized", 50),
    )


def test_budget_usage_only_for_monthly_budgets(trans, cats, budgets, now):
    s = summarize_month(trans, cats, budgets, now)
    assert s.budget_usage == (
        BudgetUsage("Groceries", 200, 300),
        BudgetUsage(OVERALL, 1750, 250),
    )


def test_remaining_never_negative(trans, cats, now):
    tight = (Budget("tight", "monthly", 100, "2024-01-01", category_id="rent"),)
    s = summarize_month(trans, cats, tight, now)
    assert s.budget_usage == (BudgetUsage("Rent", 1500, 0),)


def test_unknown_category_id_falls_back_to_id(cats):
    trans = (Transaction("e", "expense", 10, "2024-03-02", category_id="gone"),)
    s = summarize_month(trans, cats, (), datetime(2024, 3, 1))
    assert s.category_breakdown == (Slice("gone", 10),)


def test_zero_income_gives_zero_savings_rate(cats):
    trans = (Transaction("e", "expense", 200, "2024-03-02", category_id="food"),)
    s = summarize_month(trans, cats, (), datetime(2024, 3, 1))
    assert s.income == 0
    assert s.savings_rate == 0.0
    assert savings_rate(0, 0) == 0.0


def test_summary_is_idempotent(trans, cats, budgets, now):
    assert summarize_month(trans, cats, budgets, now) == summarize_month(trans, cats, budgets, now)


def test_trend_has_twelve_months_ending_at_cursor(trans, cats, budgets, now):
    points = trend(trans, cats, budgets, now)
    assert len(points) == 12
    assert points[0].month == datetime(2023, 4, 1)
    assert points[-1].month == datetime(2024, 3, 1)
    assert points[-1].label == "Mar 2024"
    assert [p.month for p in points] == sorted(p.month for p in points)

    march = summarize_month(trans, cats, budgets, now)
    assert (points[-1].income, points[-1].expense) == (march.income, march.expense)
    assert (points[-2].income, points[-2].expense) == (4000, 310)
    assert all(p.income == 0 and p.expense == 0 for p in points[:-2])


def test_trend_crosses_year_boundary(trans, cats, budgets):
    points = trend(trans, cats, budgets, datetime(2024, 1, 20))
    assert points[0].month == datetime(2023, 2, 1)
    assert points[-1].month == datetime(2024, 1, 1)


def test_cursor_never_passes_current_month(now):
    assert clamp_cursor(datetime(2024, 7, 1), now) == datetime(2024, 3, 1)
    assert step_cursor(datetime(2024, 3, 1), 1, now) == datetime(2024, 3, 1)
    assert step_cursor(datetime(2024, 3, 1), -1, now) == datetime(2024, 2, 1)
    assert can_go_next(datetime(2024, 2, 1), now)
    assert not can_go_next(datetime(2024, 3, 1), now)


def test_total_balance_ignores_transfers(trans):
    assert total_balance(trans) == 8000 - 2060


def test_build_dashboard(trans, cats, budgets, now):
    view = build_dashboard(trans, cats, budgets, datetime(2030, 1, 1), now)
    assert view.month_label == "Mar 2024"
    assert view.can_go_next is False
    assert view.total_balance == 5940
    assert view.savings_pct == 56
    assert view.summary.expense == 1750
    assert view.trend[-1].expense == view.summary.expense


def test_dashboard_for_past_month(trans, cats, budgets, now):
    view = build_dashboard(trans, cats, budgets, datetime(2024, 2, 10), now)
    assert view.month_label == "Feb 2024"
    assert view.can_go_next is True
    assert view.summary.budget_usage[0] == BudgetUsage("Groceries", 310, 190)


def test_sub_millisecond_timestamp_lands_in_its_month(cats):
    trans = (Transaction("late", "expense", 10, "2024-03-31T23:59:59.999500"),)
    assert summarize_month(trans, cats, (), datetime(2024, 3, 1)).expense == 10
    assert summarize_month(trans, cats, (), datetime(2024, 4, 1)).expense == 0
