from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional, Tuple

INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"
TRANSACTION_TYPES = (INCOME, EXPENSE, TRANSFER)

WEEKLY = "weekly"
MONTHLY = "monthly"
PERIODS = (WEEKLY, MONTHLY)

DAILY = "daily"
CUSTOM = "custom"
FREQUENCIES = (DAILY, WEEKLY, MONTHLY, CUSTOM)


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str = "bank"          # cash | bank | wallet | card
    opening_balance: float = 0.0


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str                   # income | expense
    color: Optional[str] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class RecurrenceRule:
    freq: str                   # daily | weekly | monthly | custom
    interval: int = 1
    by_month_day: Tuple[int, ...] = ()
    end_date: Optional[str] = None   # inclusive


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str
    amount: float               # magnitude, sign lives in `type`
    ts: str                     # ISO timestamp, only the calendar date matters
    currency: str = "USD"
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    counterparty_account_id: Optional[str] = None
    notes: str = ""
    tags: Tuple[str, ...] = ()
    rule: Optional[RecurrenceRule] = None
    # literal names kept when an import could not link a category/account
    category_name: Optional[str] = None
    account_name: Optional[str] = None


# A budget (limit for a category, or all expenses when category_id is None)
@dataclass(frozen=True)
class Budget:
    id: str
    period: str                 # weekly | monthly
    amount: float
    start_date: str
    category_id: Optional[str] = None
    carryover: bool = False


class Window(NamedTuple):
    """Inclusive calendar window, start at 00:00:00.000 and end at 23:59:59.999.

    Membership is decided by calendar date; the time of day never matters.
    """

    start: datetime
    end: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start.date() <= moment.date() <= self.end.date()
