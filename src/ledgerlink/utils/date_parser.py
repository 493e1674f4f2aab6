"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports "today", "yesterday", "N days ago" and any absolute format
    dateutil understands ("2024-01-15", "Jan 15 2024", ...).

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text.endswith(" days ago"):
        count = text[: -len(" days ago")].strip()
        if count.isdigit():
            return today - timedelta(days=int(count))

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_period(period_str: str) -> tuple[date, date]:
    """Parse a statement month like "2024-03" into its first and last day.

    Raises:
        ValueError: If the period is not in YYYY-MM form
    """
    try:
        year, month = (int(part) for part in period_str.strip().split("-"))
        start = date(year, month, 1)
    except ValueError:
        raise ValueError(f"Invalid period '{period_str}', expected YYYY-MM")
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end
