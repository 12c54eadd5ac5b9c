from datetime import datetime

from tracker.budgets import (
    ALERT_HIGH,
    ALERT_OVER,
    evaluate_budget,
    evaluate_budgets,
    round_half_up,
    used_percent,
)
from tracker.domain import Budget, Transaction

NOW = datetime(2024, 3, 15, 12)


def expense(tid, amount, ts, cat=None):
    return Transaction(tid, "expense", amount, ts, category_id=cat)


def monthly(amount, carryover=False, cat=None):
    return Budget("b1", "monthly", amount, "2024-01-01", category_id=cat, carryover=carryover)


def test_carryover_from_underspent_previous_month_and_over_alert():
    trans = (
        expense("t1", 200, "2024-02-05"),
        expense("t2", 100, "2024-02-20"),
        expense("t3", 400, "2024-03-02"),
        expense("t4", 350, "2024-03-10"),
    )
    status = evaluate_budget(monthly(500, carryover=True), trans, NOW)
    assert status.spent_previous == 300
    assert status.carry == 200
    assert status.limit == 700
    assert status.spent_current == 750
    assert status.used_pct == 100
    assert status.alert == ALERT_OVER


def test_high_usage_without_carryover():
    trans = (expense("t1", 460, "2024-03-03"), expense("t0", 10, "2024-02-03"))
    status = evaluate_budget(monthly(500), trans, NOW)
    assert status.carry == 0
    assert status.limit == 500
    assert status.used_pct == 92
    assert status.alert == ALERT_HIGH


def test_no_alert_below_ninety_percent():
    status = evaluate_budget(monthly(500), (expense("t1", 100, "2024-03-03"),), NOW)
    assert status.used_pct == 20
    assert status.alert is None


def test_overspent_previous_period_gives_no_carry():
    trans = (expense("t1", 650, "2024-02-10"), expense("t2", 50, "2024-03-10"))
    status = evaluate_budget(monthly(500, carryover=True), trans, NOW)
    assert status.carry == 0
    assert status.limit == 500


def test_carryover_does_not_compound_across_periods():
    # January left everything unspent; only February matters
    trans = (expense("t1", 450, "2024-02-10"),)
    status = evaluate_budget(monthly(500, carryover=True), trans, NOW)
    assert status.carry == 50
    assert status.limit == 550


def test_zero_limit_has_no_usage_and_no_alert():
    status = evaluate_budget(monthly(0), (expense("t1", 100, "2024-03-03"),), NOW)
    assert status.limit == 0
    assert status.used_pct == 0
    assert status.alert is None


def test_category_scope_and_type_filter():
    trans = (
        expense("t1", 100, "2024-03-03", cat="food"),
        expense("t2", 900, "2024-03-03", cat="rent"),
        Transaction("t3", "income", 5000, "2024-03-01", category_id="food"),
        Transaction("t4", "transfer", 700, "2024-03-04", account_id="a", counterparty_account_id="b"),
    )
    scoped = evaluate_budget(monthly(200, cat="food"), trans, NOW)
    unscoped = evaluate_budget(monthly(2000), trans, NOW)
    assert scoped.spent_current == 100
    assert unscoped.spent_current == 1000


def test_negative_amounts_count_as_magnitudes():
    status = evaluate_budget(monthly(100), (expense("t1", -50, "2024-03-03"),), NOW)
    assert status.spent_current == 50


def test_window_edges_are_inclusive():
    trans = (
        expense("first", 10, "2024-03-01T00:00:00"),
        expense("last", 20, "2024-03-31T23:59:59"),
        expense("after", 40, "2024-04-01T00:00:00"),
        expense("bad", 80, "not-a-date"),
    )
    status = evaluate_budget(monthly(100), trans, NOW)
    assert status.spent_current == 30


def test_weekly_budget_respects_week_start():
    budget = Budget("w", "weekly", 100, "2024-01-01")
    now = datetime(2024, 1, 10)
    trans = (expense("sun", 30, "2024-01-07"), expense("wed", 20, "2024-01-10"))
    monday = evaluate_budget(budget, trans, now, starts_on_monday=True)
    sunday = evaluate_budget(budget, trans, now, starts_on_monday=False)
    assert monday.spent_current == 20
    assert monday.spent_previous == 30
    assert sunday.spent_current == 50
    assert sunday.current.start == datetime(2024, 1, 7)


def test_evaluate_budgets_is_pure_and_accepts_generators():
    budgets = (monthly(100), Budget("b2", "weekly", 50, "2024-01-01"))
    trans = [expense("t1", 30, "2024-03-14")]
    first = evaluate_budgets(budgets, (t for t in trans), NOW)
    second = evaluate_budgets(budgets, trans, NOW)
    assert len(first) == 2
    assert first == second
    assert trans == [expense("t1", 30, "2024-03-14")]


def test_round_half_up_and_used_percent_cap():
    assert round_half_up(88.5) == 89
    assert round_half_up(0.5) == 1
    assert round_half_up(91.49) == 91
    assert used_percent(300, 100) == 100
    assert used_percent(50, 0) == 0


def test_last_instant_of_period_still_counts():
    trans = (expense("late", 10, "2024-03-31T23:59:59.999500"),)
    march = evaluate_budget(monthly(100), trans, NOW)
    april = evaluate_budget(monthly(100, carryover=True), trans, datetime(2024, 4, 10))
    assert march.spent_current == 10
    assert april.spent_previous == 10
