"""Date, month and trimester utilities."""

import calendar
import re
from datetime import date, timedelta
from typing import Iterator, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "15/01/2024", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Day-first parsing is used for ambiguous numeric dates, as in France.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)

    # ISO dates are never ambiguous, keep them out of dayfirst handling
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        dt = date_parser.parse(date_str, dayfirst=True)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str) -> date:
    """Parse a "YYYY-MM" period string into the first day of that month.

    Raises:
        ValueError: If the string is not a valid year-month
    """
    match = _MONTH_RE.match(month_str.strip())
    if match is None:
        raise ValueError(f"Invalid month '{month_str}' (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{month_str}' (expected YYYY-MM)")
    return date(year, month, 1)


def month_key(value: date) -> str:
    """Return the "YYYY-MM" period identifier for a date."""
    return f"{value.year:04d}-{value.month:02d}"


def month_start(value: date) -> date:
    """First day of the month containing ``value``."""
    return value.replace(day=1)


def month_end(value: date) -> date:
    """Last day of the month containing ``value``."""
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


def iter_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month from ``start`` to ``end`` inclusive."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = current + relativedelta(months=1)


def trimester_of(month: int) -> int:
    """Trimester (1-4) of a calendar month (1-12)."""
    return (month - 1) // 3 + 1


def trimester_range(year: int, trimester: int) -> tuple[date, date]:
    """Get start and end dates for a trimester.

    Months ``(t-1)*3+1`` to ``t*3`` of ``year``.
    """
    first_month = (trimester - 1) * 3 + 1
    last_month = trimester * 3
    return date(year, first_month, 1), month_end(date(year, last_month, 1))


def vat_due_date(period: date) -> date:
    """Due date of a monthly VAT return.

    The 19th of the following month, moved to Monday when it falls on a
    weekend.
    """
    due = month_start(period) + relativedelta(months=1, day=19)
    if due.weekday() == 5:
        due += timedelta(days=2)
    elif due.weekday() == 6:
        due += timedelta(days=1)
    return due


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: Period string (this-month, last-month, this-quarter,
            last-quarter, this-year, last-year)
        today: Reference date, defaults to the current date

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return month_start(today), month_end(today)

    elif period == "last-month":
        previous = today - relativedelta(months=1)
        return month_start(previous), month_end(previous)

    elif period == "this-quarter":
        return trimester_range(today.year, trimester_of(today.month))

    elif period == "last-quarter":
        previous = today - relativedelta(months=3)
        return trimester_range(previous.year, trimester_of(previous.month))

    elif period == "this-year":
        return date(today.year, 1, 1), date(today.year, 12, 31)

    elif period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, last-month, "
            "this-quarter, last-quarter, this-year, last-year"
        )
