from functools import reduce
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple, TypeVar, Union

from tracker.domain import (
    EXPENSE,
    INCOME,
    TRANSFER,
    Account,
    Budget,
    Category,
    RecurrenceRule,
    Transaction,
)

BUNDLE_VERSION = 1

Item = TypeVar("Item", Transaction, Budget, Category, Account)


class Bundle(NamedTuple):
    settings: Optional[Dict[str, Any]]
    categories: Tuple[Category, ...]
    accounts: Tuple[Account, ...]
    transactions: Tuple[Transaction, ...]
    budgets: Tuple[Budget, ...]


# --- wire format (camelCase JSON as written by the web app)

def rule_from_dict(d: Optional[Dict[str, Any]]) -> Optional[RecurrenceRule]:
    if not d:
        return None
    return RecurrenceRule(
        freq=d["freq"],
        interval=int(d.get("interval") or 1),
        by_month_day=tuple(int(x) for x in d.get("byMonthDay") or ()),
        end_date=d.get("endDateISO") or None,
    )


def rule_to_dict(r: RecurrenceRule) -> Dict[str, Any]:
    d: Dict[str, Any] = {"freq": r.freq, "interval": r.interval}
    if r.by_month_day:
        d["byMonthDay"] = list(r.by_month_day)
    if r.end_date:
        d["endDateISO"] = r.end_date
    return d


def transaction_from_dict(d: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=d["id"],
        type=d["type"],
        amount=float(d["amount"]),
        ts=d["dateISO"],
        currency=d.get("currency") or "USD",
        category_id=d.get("categoryId") or None,
        account_id=d.get("accountId") or None,
        counterparty_account_id=d.get("counterpartyAccountId") or None,
        notes=d.get("notes") or d.get("note") or "",
        tags=tuple(d.get("tags") or ()),
        rule=rule_from_dict(d.get("recurringRule")),
        category_name=d.get("categoryName") or None,
        account_name=d.get("accountName") or None,
    )


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": t.id,
        "type": t.type,
        "amount": t.amount,
        "currency": t.currency,
        "dateISO": t.ts,
    }
    optional = {
        "categoryId": t.category_id,
        "accountId": t.account_id,
        "counterpartyAccountId": t.counterparty_account_id,
        "notes": t.notes,
        "tags": list(t.tags),
        "recurringRule": rule_to_dict(t.rule) if t.rule else None,
        "categoryName": t.category_name,
        "accountName": t.account_name,
    }
    d.update({k: v for k, v in optional.items() if v})
    return d


def budget_from_dict(d: Dict[str, Any]) -> Budget:
    return Budget(
        id=d["id"],
        period=d["period"],
        amount=float(d["amount"]),
        start_date=d.get("startDateISO") or "",
        category_id=d.get("categoryId") or None,
        carryover=bool(d.get("carryover", False)),
    )


def budget_to_dict(b: Budget) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": b.id,
        "period": b.period,
        "amount": b.amount,
        "startDateISO": b.start_date,
        "carryover": b.carryover,
    }
    if b.category_id:
        d["categoryId"] = b.category_id
    return d


def category_from_dict(d: Dict[str, Any]) -> Category:
    return Category(id=d["id"], name=d["name"], type=d["type"], color=d.get("color"), icon=d.get("icon"))


def category_to_dict(c: Category) -> Dict[str, Any]:
    d = {"id": c.id, "name": c.name, "type": c.type}
    d.update({k: v for k, v in (("color", c.color), ("icon", c.icon)) if v})
    return d


def account_from_dict(d: Dict[str, Any]) -> Account:
    return Account(
        id=d["id"],
        name=d["name"],
        type=d.get("type") or "bank",
        opening_balance=float(d.get("openingBalance") or 0),
    )


def account_to_dict(a: Account) -> Dict[str, Any]:
    return {"id": a.id, "name": a.name, "type": a.type, "openingBalance": a.opening_balance}


# --- export bundles

def parse_bundle(data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> Bundle:
    """Accept a full export bundle or a bare list of transactions (legacy export)."""
    if isinstance(data, list):
        return Bundle(None, (), (), tuple(transaction_from_dict(t) for t in data), ())
    return Bundle(
        settings=data.get("settings"),
        categories=tuple(category_from_dict(c) for c in data.get("categories") or ()),
        accounts=tuple(account_from_dict(a) for a in data.get("accounts") or ()),
        transactions=tuple(transaction_from_dict(t) for t in data.get("transactions") or ()),
        budgets=tuple(budget_from_dict(b) for b in data.get("budgets") or ()),
    )


def bundle_to_dict(bundle: Bundle, exported_at: str) -> Dict[str, Any]:
    return {
        "version": BUNDLE_VERSION,
        "exportedAtISO": exported_at,
        "settings": bundle.settings,
        "categories": [category_to_dict(c) for c in bundle.categories],
        "accounts": [account_to_dict(a) for a in bundle.accounts],
        "transactions": [transaction_to_dict(t) for t in bundle.transactions],
        "budgets": [budget_to_dict(b) for b in bundle.budgets],
    }


# --- immutable collection updates: each returns the next collection

def add_item(items: Tuple[Item, ...], item: Item) -> Tuple[Item, ...]:
    """Newest first."""
    return (item,) + items


def replace_item(items: Tuple[Item, ...], item: Item) -> Tuple[Item, ...]:
    return tuple(item if x.id == item.id else x for x in items)


def remove_items(items: Tuple[Item, ...], ids: Iterable[str]) -> Tuple[Item, ...]:
    ids = set(ids)
    return tuple(x for x in items if x.id not in ids)


# --- balances

def _balance_delta(acc_id: str, t: Transaction) -> float:
    if t.type == TRANSFER:
        if t.account_id == acc_id:
            return -abs(t.amount)
        if t.counterparty_account_id == acc_id:
            return abs(t.amount)
        return 0.0
    if t.account_id != acc_id:
        return 0.0
    if t.type == INCOME:
        return t.amount
    if t.type == EXPENSE:
        return -abs(t.amount)
    return 0.0


def account_balance(trans: Iterable[Transaction], account: Account) -> float:
    return reduce(lambda acc, t: acc + _balance_delta(account.id, t), trans, account.opening_balance)
