from datetime import datetime, timedelta
from typing import Tuple

from tracker.dates import add_months, month_window, start_of_week, week_window
from tracker.domain import WEEKLY, Budget, Window


def current_window(period: str, now: datetime, starts_on_monday: bool = True) -> Window:
    if period == WEEKLY:
        return week_window(now, starts_on_monday)
    return month_window(now)


def previous_window(period: str, now: datetime, starts_on_monday: bool = True) -> Window:
    """The period immediately before the one containing `now`."""
    if period == WEEKLY:
        day_before = start_of_week(now, starts_on_monday) - timedelta(days=1)
        return week_window(day_before, starts_on_monday)
    return month_window(add_months(now, -1))


def resolve_periods(
    budget: Budget, now: datetime, starts_on_monday: bool = True
) -> Tuple[Window, Window]:
    """Return (current, previous) windows for the budget's period type."""
    return (
        current_window(budget.period, now, starts_on_monday),
        previous_window(budget.period, now, starts_on_monday),
    )
