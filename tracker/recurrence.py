"""Next-occurrence calculation for recurring transactions.

Monthly steps keep the anchor's day-of-month and let it overflow: the
31st advanced into a 30-day month lands on the 1st of the month after.
Explicit month-days overflow the same way.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

from tracker.dates import midnight, normalize_date, parse_ts
from tracker.domain import CUSTOM, DAILY, MONTHLY, WEEKLY, RecurrenceRule


def _monthly(anchor: datetime, rule: RecurrenceRule, step: int) -> datetime:
    if rule.by_month_day:
        days = sorted(rule.by_month_day)
        later = [d for d in days if d > anchor.day]
        if later:
            return normalize_date(anchor.year, anchor.month, later[0])
        return normalize_date(anchor.year, anchor.month + step, days[0])
    return normalize_date(anchor.year, anchor.month + step, anchor.day)


def next_occurrence(
    anchor: Union[str, datetime], rule: Optional[RecurrenceRule]
) -> Optional[datetime]:
    """Date of the occurrence after `anchor`, or None.

    None when there is no rule, the anchor does not parse, the frequency
    is unknown, or the next date falls after the rule's end date.
    """
    if rule is None:
        return None
    start = parse_ts(anchor)
    if start is None:
        return None
    start = midnight(start)
    step = max(1, rule.interval)

    if rule.freq == DAILY:
        nxt = start + timedelta(days=step)
    elif rule.freq == WEEKLY:
        nxt = start + timedelta(days=7 * step)
    elif rule.freq == MONTHLY:
        nxt = _monthly(start, rule, step)
    elif rule.freq == CUSTOM:
        nxt = normalize_date(start.year, start.month + step, start.day)
    else:
        return None

    end = parse_ts(rule.end_date)
    if end is not None and nxt > end:
        return None
    return nxt


def parse_month_days(text: str) -> Tuple[int, ...]:
    """'5, 20' -> (5, 20); blanks and non-numbers are dropped."""
    days = []
    for part in text.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            days.append(int(part))
    return tuple(days)
