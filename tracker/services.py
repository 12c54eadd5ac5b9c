"""Facade tying the repositories, validation, the engine and events together.

The engine functions never read the clock; every call that depends on
"now" takes it as an argument.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from tracker.analytics import RANGE_MONTH, RangeSummary, summarize_range
from tracker.budgets import BudgetStatus, evaluate_budgets
from tracker.config import Settings, settings_from_dict
from tracker.csv_io import CsvMapping, export_transactions, import_transactions
from tracker.domain import Account, Budget, Transaction
from tracker.events import BUDGET_ALERT, TRANSACTION_ADDED, EventBus, budget_alert_payload, register_default_handlers
from tracker.functional import Either, Right, validate_budget, validate_transaction
from tracker.lazy import category_name
from tracker.recurrence import next_occurrence
from tracker.repository import (
    AccountRepository,
    BudgetRepository,
    CategoryRepository,
    JsonStore,
    SettingsProvider,
    TransactionRepository,
)
from tracker.rollup import Dashboard, build_dashboard
from tracker.transforms import Bundle, account_balance, bundle_to_dict, parse_bundle

logger = logging.getLogger(__name__)

ALL_EXPENSES = "All expenses"


class BudgetTracker:
    """Single-user budget tracker over a JSON store."""

    def __init__(self, store: JsonStore, bus: Optional[EventBus] = None):
        self.store = store
        self.bus = bus if bus is not None else register_default_handlers(EventBus())
        self.transactions = TransactionRepository(store)
        self.budgets = BudgetRepository(store)
        self.categories = CategoryRepository(store)
        self.accounts = AccountRepository(store)
        self.settings_provider = SettingsProvider(store)

    @property
    def settings(self) -> Settings:
        return self.settings_provider.load()

    # --- transactions

    def add_transaction(self, t: Transaction, now: datetime) -> Either[dict, Transaction]:
        """Validate and store `t`, then publish any budget alerts it causes.

        Returns Left(error dict) without touching the store when `t` is invalid.
        """
        result = validate_transaction(t, self.accounts.list_all(), self.categories.list_all())
        if result.is_left():
            logger.info("Rejected transaction %s: %s", t.id, result.get_error()["message"])
            return result
        self.transactions.add(t)
        logger.debug("Added %s transaction %s of %s", t.type, t.id, t.amount)
        self.bus.publish(TRANSACTION_ADDED, {"id": t.id, "type": t.type, "amount": t.amount})
        self.publish_budget_alerts(now)
        return Right(t)

    def update_transaction(self, t: Transaction) -> Either[dict, Transaction]:
        result = validate_transaction(t, self.accounts.list_all(), self.categories.list_all())
        if result.is_right():
            self.transactions.replace(t)
        return result

    def delete_transactions(self, ids: Iterable[str]) -> Tuple[Transaction, ...]:
        ids = list(ids)
        logger.info("Deleting %d transaction(s)", len(ids))
        return self.transactions.remove_many(ids)

    def next_date(self, t: Transaction) -> Optional[datetime]:
        return next_occurrence(t.ts, t.rule)

    # --- budgets

    def save_budget(self, b: Budget) -> Either[dict, Budget]:
        """Add `b`, or replace the stored budget with the same id."""
        result = validate_budget(b, self.categories.list_all())
        if result.is_left():
            return result
        if any(x.id == b.id for x in self.budgets.list_all()):
            self.budgets.replace(b)
        else:
            self.budgets.add(b)
        return result

    def delete_budget(self, b_id: str) -> Tuple[Budget, ...]:
        return self.budgets.remove(b_id)

    def budget_label(self, b: Budget) -> str:
        if not b.category_id:
            return ALL_EXPENSES
        return category_name(self.categories.list_all(), b.category_id)

    def budget_statuses(self, now: datetime) -> Tuple[BudgetStatus, ...]:
        return evaluate_budgets(
            self.budgets.list_all(), self.transactions.list_all(), now, self.settings.starts_on_monday
        )

    def publish_budget_alerts(self, now: datetime) -> List[dict]:
        results = []
        for status in self.budget_statuses(now):
            if status.alert:
                payload = budget_alert_payload(status, self.budget_label(status.budget))
                results.extend(self.bus.publish(BUDGET_ALERT, payload))
        return results

    # --- dashboard and analytics

    def dashboard(self, cursor: datetime, now: datetime) -> Dashboard:
        return build_dashboard(
            self.transactions.list_all(), self.categories.list_all(), self.budgets.list_all(), cursor, now
        )

    def analytics(self, now: datetime, range_name: str = RANGE_MONTH,
                  account_id: Optional[str] = None) -> RangeSummary:
        return summarize_range(
            self.transactions.list_all(), self.categories.list_all(), self.budgets.list_all(),
            now, range_name, account_id,
        )

    def account_balances(self) -> Tuple[Tuple[Account, float], ...]:
        trans = self.transactions.list_all()
        return tuple((a, account_balance(trans, a)) for a in self.accounts.list_all())

    # --- import / export

    def import_csv(self, text: str, mapping: CsvMapping) -> Tuple[Transaction, ...]:
        merged = import_transactions(
            text, mapping, self.transactions.list_all(), self.categories.list_all(),
            self.accounts.list_all(), currency=self.settings.currency,
        )
        return self.transactions.replace_all(merged)

    def export_csv(self) -> str:
        return export_transactions(
            self.transactions.list_all(), self.categories.list_all(), self.accounts.list_all()
        )

    def export_bundle(self, now: datetime) -> Dict[str, Any]:
        bundle = Bundle(
            settings=self.store.read("settings"),
            categories=self.categories.list_all(),
            accounts=self.accounts.list_all(),
            transactions=self.transactions.list_all(),
            budgets=self.budgets.list_all(),
        )
        return bundle_to_dict(bundle, now.isoformat())

    def import_bundle(self, data: Union[str, Dict[str, Any], List[Dict[str, Any]]]) -> Bundle:
        """Load an export bundle, replacing each collection present in it.

        A bare list is a legacy export holding only transactions.
        """
        if isinstance(data, str):
            data = json.loads(data)
        bundle = parse_bundle(data)
        present = {"transactions"} if isinstance(data, list) else {k for k, v in data.items() if v is not None}
        if "settings" in present:
            self.settings_provider.save(settings_from_dict(bundle.settings))
        if "categories" in present:
            self.categories.save_all(bundle.categories)
        if "accounts" in present:
            self.accounts.save_all(bundle.accounts)
        if "transactions" in present:
            self.transactions.replace_all(bundle.transactions)
        if "budgets" in present:
            self.budgets.save_all(bundle.budgets)
        logger.info(
            "Imported %d transactions, %d budgets, %d categories",
            len(bundle.transactions), len(bundle.budgets), len(bundle.categories),
        )
        return bundle
