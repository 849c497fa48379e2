"""Date parsing and calendar utilities."""

from collections.abc import Iterator
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "this-month",
    "last-month",
    "last-3-months",
    "last-12-months",
    "this-year",
    "last-year",
    "this-week",
    "last-week",
)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative words "today", "yesterday" and "tomorrow", plus "this month",
    "last month" and "next month" (first day of that month).

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": month_start(today),
        "last month": month_start(today - relativedelta(months=1)),
        "next month": month_start(today + relativedelta(months=1)),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str, yearfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Month-based periods cover whole calendar months, so the cash-flow views
    built on them always include every day of the current month.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return month_start(today), month_end(today)

    elif period == "last-month":
        last = today - relativedelta(months=1)
        return month_start(last), month_end(last)

    elif period == "last-3-months":
        return month_start(today - relativedelta(months=3)), month_end(today)

    elif period == "last-12-months":
        return month_start(today - relativedelta(months=12)), month_end(today)

    elif period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)

    elif period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    elif period == "this-week":
        start_date = today - timedelta(days=today.weekday())
        return start_date, start_date + timedelta(days=6)

    elif period == "last-week":
        start_date = today - timedelta(days=today.weekday() + 7)
        return start_date, start_date + timedelta(days=6)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")


def month_start(day: date) -> date:
    """First day of the month containing ``day``."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the month containing ``day``."""
    return month_start(day) + relativedelta(months=1, days=-1)


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every day from start_date to end_date inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def iter_months(start_date: date, end_date: date) -> Iterator[date]:
    """Yield the first day of every month touching [start_date, end_date]."""
    current = month_start(start_date)
    while current <= end_date:
        yield current
        current += relativedelta(months=1)
