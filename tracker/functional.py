from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from tracker.dates import parse_ts
from tracker.domain import (
    EXPENSE,
    FREQUENCIES,
    PERIODS,
    TRANSACTION_TYPES,
    TRANSFER,
    Account,
    Budget,
    Category,
    RecurrenceRule,
    Transaction,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _error(code: str, message: str, **extra) -> Left:
    return Left({"error": code, "message": message, **extra})


def validate_rule(rule: RecurrenceRule) -> Either[dict, RecurrenceRule]:
    if rule.freq not in FREQUENCIES:
        return _error("invalid_frequency", f"Unknown frequency {rule.freq!r}", freq=rule.freq)
    if rule.interval < 1:
        return _error("invalid_interval", "Interval must be at least 1", interval=rule.interval)
    bad_days = [d for d in rule.by_month_day if not 1 <= d <= 31]
    if bad_days:
        return _error("invalid_month_day", f"Month days must be within 1-31: {bad_days}", days=bad_days)
    if rule.end_date and parse_ts(rule.end_date) is None:
        return _error("invalid_end_date", f"Cannot parse end date {rule.end_date!r}")
    return Right(rule)


def validate_transaction(
    t: Transaction,
    accs: Iterable[Account],
    cats: Iterable[Category],
) -> Either[dict, Transaction]:
    account_ids = {a.id for a in accs}
    cats = tuple(cats)

    if t.type not in TRANSACTION_TYPES:
        return _error("invalid_type", f"Unknown transaction type {t.type!r}", type=t.type)
    if t.amount < 0:
        return _error("negative_amount", "Amount must not be negative", amount=t.amount)
    if parse_ts(t.ts) is None:
        return _error("invalid_date", f"Cannot parse date {t.ts!r}", ts=t.ts)

    if t.type == TRANSFER:
        if not t.account_id or not t.counterparty_account_id:
            return _error("transfer_accounts", "Transfer needs both a source and a target account")
        if t.account_id == t.counterparty_account_id:
            return _error("transfer_accounts", "Transfer source and target must differ",
                          account_id=t.account_id)

    for acc_id in (t.account_id, t.counterparty_account_id):
        if acc_id and acc_id not in account_ids:
            return _error("account_not_found", f"Account with ID {acc_id} does not exist",
                          account_id=acc_id)

    if t.category_id and t.type != TRANSFER:
        category = next((c for c in cats if c.id == t.category_id), None)
        if category is None:
            return _error("category_not_found", f"Category with ID {t.category_id} does not exist",
                          category_id=t.category_id)
        if category.type != t.type:
            return _error("category_type_mismatch",
                          f"{category.type.capitalize()} category {category.name} cannot be used for {t.type}",
                          category_type=category.type)

    if t.rule is not None:
        return validate_rule(t.rule).map(lambda _: t)
    return Right(t)


def validate_budget(b: Budget, cats: Iterable[Category]) -> Either[dict, Budget]:
    if b.period not in PERIODS:
        return _error("invalid_period", f"Unknown budget period {b.period!r}", period=b.period)
    if b.amount <= 0:
        return _error("invalid_amount", "Budget amount must be positive", amount=b.amount)
    if parse_ts(b.start_date) is None:
        return _error("invalid_date", f"Cannot parse start date {b.start_date!r}")
    if b.category_id:
        category = next((c for c in cats if c.id == b.category_id), None)
        if category is None:
            return _error("category_not_found", f"Category with ID {b.category_id} does not exist",
                          category_id=b.category_id)
        if category.type != EXPENSE:
            return _error("category_type_mismatch",
                          f"Budgets only track expense categories, {category.name} is {category.type}",
                          category_type=category.type)
    return Right(b)
