"""Date manipulation utilities"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from bill_planner.domain.exceptions import InvalidMonthKeyError

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_month_key(key: str) -> Tuple[int, int]:
    """Split a "YYYY-MM" key into (year, month)"""
    match = _MONTH_KEY.match(key or "")
    if not match:
        raise InvalidMonthKeyError(f"Invalid month key: {key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidMonthKeyError(f"Invalid month key: {key!r}")
    return year, month


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_key_of(value: Union[date, datetime]) -> str:
    return format_month_key(value.year, value.month)


def current_month_key(today: Optional[date] = None) -> str:
    return month_key_of(today or date.today())


def _shift(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def add_months(from_date: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Add calendar months, clamping to the last valid day of the target month.

    Jan 31 + 1 month is Feb 28 (or 29), never Mar 3. When anchor_day is given
    it replaces the source day-of-month, so a bill anchored on the 31st
    returns to the 31st after passing through a short month.
    """
    year, month = _shift(from_date.year, from_date.month, months)
    day = anchor_day or from_date.day
    return date(year, month, min(day, days_in_month(year, month)))


def add_months_to_month(key: str, months: int) -> str:
    year, month = parse_month_key(key)
    return format_month_key(*_shift(year, month, months))


def compare_months(a: str, b: str) -> int:
    """Order two month keys: -1 if a is earlier, 0 if equal, 1 if later"""
    left, right = parse_month_key(a), parse_month_key(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def date_in_month(key: str, day: int) -> date:
    """Date in the given month on `day`, clamped to the month's length"""
    year, month = parse_month_key(key)
    return date(year, month, min(day, days_in_month(year, month)))


def to_date(value: Union[date, datetime]) -> date:
    """Drop time of day so comparisons are date-only"""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_within_days(target: Union[date, datetime], days: int, today: Optional[date] = None) -> bool:
    """True when today <= target <= today + days (inclusive, date-only)"""
    start = to_date(today or date.today())
    return start <= to_date(target) <= start + timedelta(days=days)


def days_until(target: Union[date, datetime], today: Optional[date] = None) -> int:
    return (to_date(target) - to_date(today or date.today())).days


def parse_date(value: Union[str, date, datetime]) -> date:
    """Accept "YYYY-MM-DD" or a full ISO timestamp and return the calendar date"""
    if isinstance(value, (date, datetime)):
        return to_date(value)
    if not isinstance(value, str):
        raise ValueError(f"Not a date: {value!r}")
    text = value.strip()
    if len(text) > 10:
        text = text[:10]
    return date.fromisoformat(text)
