from typing import Callable, Optional

from tracker.dates import parse_ts
from tracker.domain import EXPENSE, Budget, Transaction, Window

Predicate = Callable[[Transaction], bool]


def by_type(kind: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == kind

    return _filter


def by_category(cat_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category_id == cat_id

    return _filter


def by_account(account_id: Optional[str]) -> Predicate:
    # None or "all" means no account filter
    def _filter(t: Transaction) -> bool:
        if account_id is None or account_id == "all":
            return True
        return t.account_id == account_id

    return _filter


def in_window(window: Window) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return window.contains(parse_ts(t.ts))

    return _filter


def in_budget_scope(budget: Budget) -> Predicate:
    """Expenses that count against `budget`."""
    if not budget.category_id:
        return by_type(EXPENSE)
    return all_of(by_type(EXPENSE), by_category(budget.category_id))


def all_of(*preds: Predicate) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter
