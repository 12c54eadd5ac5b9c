import json
from datetime import datetime
from pathlib import Path

import pytest

from tracker.csv_io import CsvMapping
from tracker.domain import Budget, Transaction
from tracker.events import BUDGET_ALERT, TRANSACTION_ADDED
from tracker.repository import JsonStore
from tracker.services import BudgetTracker

SAMPLE = Path(__file__).parent.parent / "data" / "sample.json"
NOW = datetime(2024, 3, 20, 9)


@pytest.fixture
def tracker(tmp_path):
    t = BudgetTracker(JsonStore(tmp_path / "store.json"))
    t.import_bundle(SAMPLE.read_text(encoding="utf-8"))
    return t


def movie(tid, amount):
    return Transaction(tid, "expense", amount, "2024-03-18", category_id="cat-entertainment", account_id="acc-cash")


def test_sample_budget_statuses(tracker):
    groceries, fun = tracker.budget_statuses(NOW)
    assert groceries.carry == 190
    assert groceries.limit == 690
    assert groceries.spent_current == 120
    assert groceries.used_pct == 17
    assert groceries.alert is None
    assert fun.used_pct == 93
    assert fun.alert == "high"


def test_add_transaction_publishes_events(tracker):
    added, alerts = [], []
    tracker.bus.subscribe(TRANSACTION_ADDED, lambda e, p: added.append(p) or {})
    tracker.bus.subscribe(BUDGET_ALERT, lambda e, p: alerts.append(p) or {})

    result = tracker.add_transaction(movie("t-new", 20), NOW)

    assert result.is_right()
    assert added == [{"id": "t-new", "type": "expense", "amount": 20}]
    assert [(a["label"], a["alert"], a["used_pct"]) for a in alerts] == [("Entertainment", "over", 100)]
    assert tracker.transactions.list_all()[0].id == "t-new"


def test_invalid_transaction_is_not_stored(tracker):
    bad = Transaction("t-bad", "expense", 10, "2024-03-18", category_id="cat-salary")
    result = tracker.add_transaction(bad, NOW)
    assert result.is_left()
    assert result.get_error()["error"] == "category_type_mismatch"
    assert len(tracker.transactions.list_all()) == 8


def test_update_and_delete_transactions(tracker):
    assert tracker.update_transaction(movie("t-007", 10)).is_right()
    assert next(t for t in tracker.transactions.list_all() if t.id == "t-007").amount == 10
    left = tracker.delete_transactions(["t-007", "t-008"])
    assert len(left) == 6


def test_save_budget_adds_then_replaces(tracker):
    overall = Budget("bud-all", "monthly", 3000, "2024-03-01")
    assert tracker.save_budget(overall).is_right()
    assert tracker.save_budget(Budget("bud-all", "weekly", 700, "2024-03-01")).is_right()
    stored = [b for b in tracker.budgets.list_all() if b.id == "bud-all"]
    assert [(b.period, b.amount) for b in stored] == [("weekly", 700)]
    assert tracker.budget_label(stored[0]) == "All expenses"
    assert tracker.save_budget(Budget("bad", "monthly", -5, "2024-03-01")).is_left()
    assert [b.id for b in tracker.delete_budget("bud-all")] == ["bud-groceries", "bud-entertainment"]


def test_dashboard_and_analytics(tracker):
    view = tracker.dashboard(datetime(2024, 3, 1), NOW)
    assert view.summary.income == 4000
    assert view.summary.expense == 1760
    assert view.total_balance == 8000 - 3570
    assert len(view.trend) == 12

    cash = tracker.analytics(NOW, "month", "acc-cash")
    assert cash.expense == 140
    assert cash.top_category == "Entertainment"


def test_next_date_of_recurring_rent(tracker):
    rent = next(t for t in tracker.transactions.list_all() if t.id == "t-006")
    assert tracker.next_date(rent) == datetime(2024, 4, 3)
    assert tracker.next_date(movie("x", 1)) is None


def test_export_bundle_imports_into_fresh_store(tracker, tmp_path):
    exported = tracker.export_bundle(NOW)
    assert exported["version"] == 1
    assert exported["exportedAtISO"] == "2024-03-20T09:00:00"

    fresh = BudgetTracker(JsonStore(tmp_path / "other.json"))
    fresh.import_bundle(json.dumps(exported))
    assert fresh.transactions.list_all() == tracker.transactions.list_all()
    assert fresh.budgets.list_all() == tracker.budgets.list_all()
    assert fresh.settings == tracker.settings


def test_legacy_import_replaces_only_transactions(tracker):
    tracker.import_bundle([{"id": "only", "type": "income", "amount": 1, "dateISO": "2024-03-01"}])
    assert [t.id for t in tracker.transactions.list_all()] == ["only"]
    assert len(tracker.budgets.list_all()) == 2


def test_csv_import_and_export(tracker):
    text = "date,amount,category,account\n2024-03-19,-12,entertainment,cash\n"
    merged = tracker.import_csv(text, CsvMapping("date", "amount", category="category", account="account"))
    assert len(merged) == 9
    first = merged[0]
    assert (first.type, first.category_id, first.account_id) == ("expense", "cat-entertainment", "acc-cash")
    assert "2024-03-19,12.0,expense,Entertainment,Cash," in tracker.export_csv()


def test_account_balances_include_transfers(tracker):
    balances = {account.id: balance for account, balance in tracker.account_balances()}
    assert balances == {
        "acc-checking": 8000 - 310 - 1500 - 120 - 1500 - 200,
        "acc-cash": -140 + 200,
    }
