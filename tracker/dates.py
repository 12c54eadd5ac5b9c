"""Calendar arithmetic for period windows.

All values are naive local datetimes. Month and day overflow follow the
usual calendar normalization: day 32 of January is February 1, day 0 of
March is the last day of February.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from tracker.domain import Window

_END_OF_DAY = dict(hour=23, minute=59, second=59, microsecond=999000)


def midnight(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(d: datetime) -> datetime:
    return d.replace(**_END_OF_DAY)


def normalize_date(year: int, month: int, day: int) -> datetime:
    """Build a date letting `month` and `day` run past their ranges."""
    index = year * 12 + (month - 1)
    first = datetime(index // 12, index % 12 + 1, 1)
    return first + timedelta(days=day - 1)


def start_of_week(d: datetime, starts_on_monday: bool = True) -> datetime:
    if starts_on_monday:
        back = d.weekday()
    else:
        back = (d.weekday() + 1) % 7
    return midnight(d - timedelta(days=back))


def end_of_week(d: datetime, starts_on_monday: bool = True) -> datetime:
    return end_of_day(start_of_week(d, starts_on_monday) + timedelta(days=6))


def start_of_month(d: datetime) -> datetime:
    return datetime(d.year, d.month, 1)


def end_of_month(d: datetime) -> datetime:
    # day 0 of the next month
    return end_of_day(normalize_date(d.year, d.month + 1, 0))


def add_months(d: datetime, n: int) -> datetime:
    """Shift by `n` calendar months, landing on day 1 of the result."""
    return normalize_date(d.year, d.month + n, 1)


def week_window(d: datetime, starts_on_monday: bool = True) -> Window:
    return Window(start_of_week(d, starts_on_monday), end_of_week(d, starts_on_monday))


def month_window(d: datetime) -> Window:
    return Window(start_of_month(d), end_of_month(d))


def parse_ts(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse an ISO date or timestamp into a naive local datetime.

    Offsets are converted to local time first so that the calendar date
    matches what the user entered. Anything unparseable gives None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def month_label(d: datetime) -> str:
    return d.strftime("%b %Y")
