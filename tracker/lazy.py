from collections import defaultdict
from typing import Callable, Iterable, Iterator, Optional, Tuple

from tracker.domain import EXPENSE, Category, Transaction

UNCATEGORIZED = "Uncategorized"


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def category_name(cats: Iterable[Category], cat_id: Optional[str]) -> str:
    if not cat_id:
        return UNCATEGORIZED
    return next((c.name for c in cats if c.id == cat_id), cat_id)


def expense_by_category(trans: Iterable[Transaction]) -> dict[str, float]:
    """Expense totals keyed by category id, in first-seen order."""
    totals: dict[str, float] = defaultdict(float)
    for t in trans:
        if t.type == EXPENSE:
            totals[t.category_id or UNCATEGORIZED] += abs(t.amount)
    return dict(totals)


def lazy_top_categories(
    trans: Iterable[Transaction], cats: Iterable[Category], k: Optional[int] = None
) -> Iterator[Tuple[str, float]]:
    """Yield (category name, expense total) largest first; all of them when k is None."""
    cats = tuple(cats)
    ordered = sorted(
        ((category_name(cats, None if cid == UNCATEGORIZED else cid), total)
         for cid, total in expense_by_category(trans).items()),
        key=lambda item: item[1],
        reverse=True,
    )
    limit = len(ordered) if k is None else max(0, k)
    for name, total in ordered[:limit]:
        yield name, total
