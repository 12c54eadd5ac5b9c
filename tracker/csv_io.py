"""CSV import and export of transactions.

Category and account columns carry names, not ids. On import they are
joined against the current tables by case-insensitive name; a name with
no match is kept on the transaction as a literal, unlinked value.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

import pandas as pd

from tracker.dates import parse_ts
from tracker.domain import EXPENSE, INCOME, TRANSACTION_TYPES, Account, Category, Transaction

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ["date", "amount", "type", "category", "account", "note"]
SAMPLE_ROWS = 5


@dataclass(frozen=True)
class CsvMapping:
    """Header names for each field; optional fields may be None."""

    date: str
    amount: str
    type: Optional[str] = None
    category: Optional[str] = None
    account: Optional[str] = None
    note: Optional[str] = None


def read_csv(text: str) -> pd.DataFrame:
    if not text.strip():
        return pd.DataFrame()
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


def analyze_csv(text: str) -> Tuple[List[str], List[List[str]]]:
    """Headers and the first few rows, for building a column mapping."""
    df = read_csv(text)
    return list(df.columns), df.head(SAMPLE_ROWS).values.tolist()


def infer_type(value: Optional[str], amount: float) -> str:
    if value in TRANSACTION_TYPES:
        return value
    return INCOME if amount >= 0 else EXPENSE


def parse_date(value: str) -> Optional[datetime]:
    """ISO dates and timestamps, or anything pandas can read such as 03/15/2024."""
    moment = parse_ts(value)
    if moment is not None:
        return moment
    stamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(stamp):
        return None
    return parse_ts(stamp.to_pydatetime())


def _by_name(items: Iterable, name: str):
    wanted = name.lower()
    return next((x for x in items if x.name.lower() == wanted), None)


def _column(df: pd.DataFrame, header: Optional[str], required: bool = False) -> Optional[pd.Series]:
    if header is None:
        return None
    if header not in df.columns:
        if required:
            raise ValueError(f"CSV has no column {header!r}; columns are {list(df.columns)}")
        logger.warning("Mapped column %r not found, ignoring it", header)
        return None
    return df[header]


def parse_transactions(
    text: str,
    mapping: CsvMapping,
    cats: Iterable[Category],
    accs: Iterable[Account],
    currency: str = "USD",
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> Tuple[Transaction, ...]:
    df = read_csv(text)
    if df.empty:
        return ()
    cats, accs = tuple(cats), tuple(accs)

    dates = _column(df, mapping.date, required=True)
    amounts = pd.to_numeric(_column(df, mapping.amount, required=True), errors="coerce").fillna(0.0)
    types = _column(df, mapping.type)
    cat_names = _column(df, mapping.category)
    acc_names = _column(df, mapping.account)
    notes = _column(df, mapping.note)

    moments = [parse_date(v) for v in dates]

    imported = []
    for i in range(len(df)):
        moment = moments[i]
        if moment is None:
            logger.warning("Skipping CSV row %d: cannot parse date %r", i + 1, dates.iloc[i])
            continue
        amount = float(amounts.iloc[i])
        cat_name = cat_names.iloc[i].strip() if cat_names is not None else ""
        acc_name = acc_names.iloc[i].strip() if acc_names is not None else ""
        category = _by_name(cats, cat_name) if cat_name else None
        account = _by_name(accs, acc_name) if acc_name else None

        imported.append(Transaction(
            id=id_factory(),
            type=infer_type(types.iloc[i].strip() if types is not None else None, amount),
            amount=abs(amount),
            ts=moment.isoformat(),
            currency=currency,
            category_id=category.id if category else None,
            account_id=account.id if account else None,
            notes=notes.iloc[i] if notes is not None else "",
            category_name=category.name if category else (cat_name or None),
            account_name=account.name if account else (acc_name or None),
        ))

    logger.info("Parsed %d of %d CSV rows", len(imported), len(df))
    return tuple(imported)


def import_transactions(
    text: str,
    mapping: CsvMapping,
    existing: Iterable[Transaction],
    cats: Iterable[Category],
    accs: Iterable[Account],
    currency: str = "USD",
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> Tuple[Transaction, ...]:
    """Imported rows first, followed by the existing transactions."""
    return parse_transactions(text, mapping, cats, accs, currency, id_factory) + tuple(existing)


def _day(ts: str) -> str:
    moment = parse_ts(ts)
    return moment.date().isoformat() if moment else ts[:10]


def export_transactions(
    trans: Iterable[Transaction], cats: Iterable[Category], accs: Iterable[Account]
) -> str:
    cat_names: Dict[str, str] = {c.id: c.name for c in cats}
    acc_names: Dict[str, str] = {a.id: a.name for a in accs}
    rows = [
        {
            "date": _day(t.ts),
            "amount": t.amount,
            "type": t.type,
            "category": cat_names.get(t.category_id or "", t.category_name or ""),
            "account": acc_names.get(t.account_id or "", t.account_name or ""),
            "note": t.notes,
        }
        for t in trans
    ]
    return pd.DataFrame(rows, columns=EXPORT_HEADERS).to_csv(index=False, lineterminator="\n")
