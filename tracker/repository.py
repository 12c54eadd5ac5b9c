"""JSON-file persistence for settings, categories, accounts, transactions and budgets.

Every write reads the whole collection, computes the next one with a pure
function from ``tracker.transforms`` and writes it back. A single writer
is assumed.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from tracker.config import STORE_PATH, Settings, settings_from_dict, settings_to_dict
from tracker.domain import Account, Category, Transaction
from tracker.transforms import (
    account_from_dict,
    account_to_dict,
    add_item,
    budget_from_dict,
    budget_to_dict,
    category_from_dict,
    category_to_dict,
    remove_items,
    replace_item,
    transaction_from_dict,
    transaction_to_dict,
)

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category("groceries", "Groceries", "expense", icon="🛒"),
    Category("rent", "Rent", "expense", icon="🏠"),
    Category("transport", "Transport", "expense", icon="🚌"),
    Category("utilities", "Utilities", "expense", icon="💡"),
    Category("dining", "Dining", "expense", icon="🍽️"),
    Category("salary", "Salary", "income", icon="💼"),
    Category("freelance", "Freelance", "income", icon="🧰"),
)

DEFAULT_ACCOUNTS: Tuple[Account, ...] = (
    Account("cash", "Cash", "cash"),
    Account("bank1", "Bank-1", "bank"),
    Account("wallet", "Wallet", "wallet"),
    Account("card", "Card", "card"),
)


class JsonStore:
    """A single JSON document keyed by collection name."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or STORE_PATH)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: expected an object, got %s", self.path, type(data).__name__)
            return {}
        return data

    def read(self, key: str, default: Any = None) -> Any:
        value = self._load().get(key)
        return default if value is None else value

    def write(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
        logger.debug("Wrote %s to %s", key, self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Removed store %s", self.path)


class _Collection(ABC):
    key = ""

    def __init__(self, store: JsonStore):
        self.store = store

    @staticmethod
    @abstractmethod
    def from_dict(d: Dict[str, Any]) -> Any:
        pass

    @staticmethod
    @abstractmethod
    def to_dict(item: Any) -> Dict[str, Any]:
        pass

    def list_all(self) -> Tuple[Any, ...]:
        return tuple(self.from_dict(d) for d in self.store.read(self.key, []))

    def save_all(self, items: Iterable[Any]) -> Tuple[Any, ...]:
        items = tuple(items)
        self.store.write(self.key, [self.to_dict(x) for x in items])
        return items


class _Editable(_Collection):
    def add(self, item):
        return self.save_all(add_item(self.list_all(), item))

    def replace(self, item):
        return self.save_all(replace_item(self.list_all(), item))

    def remove(self, item_id: str):
        return self.save_all(remove_items(self.list_all(), [item_id]))


class TransactionRepository(_Editable):
    key = "transactions"
    from_dict = staticmethod(transaction_from_dict)
    to_dict = staticmethod(transaction_to_dict)

    def remove_many(self, ids: Iterable[str]) -> Tuple[Transaction, ...]:
        return self.save_all(remove_items(self.list_all(), ids))

    def replace_all(self, trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
        return self.save_all(trans)


class BudgetRepository(_Editable):
    key = "budgets"
    from_dict = staticmethod(budget_from_dict)
    to_dict = staticmethod(budget_to_dict)


class CategoryRepository(_Collection):
    key = "categories"
    from_dict = staticmethod(category_from_dict)
    to_dict = staticmethod(category_to_dict)

    def list_all(self) -> Tuple[Category, ...]:
        return super().list_all() or DEFAULT_CATEGORIES


class AccountRepository(_Collection):
    key = "accounts"
    from_dict = staticmethod(account_from_dict)
    to_dict = staticmethod(account_to_dict)

    def list_all(self) -> Tuple[Account, ...]:
        return super().list_all() or DEFAULT_ACCOUNTS


class SettingsProvider:
    def __init__(self, store: JsonStore):
        self.store = store

    def load(self) -> Settings:
        return settings_from_dict(self.store.read("settings", {}))

    def save(self, settings: Settings) -> None:
        self.store.write("settings", settings_to_dict(settings))
