"""Date parsing utilities for command-line filters."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2019-03-01", "01/03/2019" read day first,
    "March 1, 2019") and a few relative forms: "today", "yesterday",
    "this month", "last month", "this year", "last year".

    Args:
        date_str: Date string
        today: Reference date for relative forms (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        # Slash dates are Brazilian (day first); ISO dates are unaffected.
        return date_parser.parse(date_str, dayfirst="/" in date_str).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
