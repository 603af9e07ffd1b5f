"""
Month key arithmetic.

A month key is a `YYYY-MM` string. Keys sort lexicographically in
chronological order, which the aggregation code relies on.
"""

import calendar
from datetime import date, datetime

from congregation_accounts.models.ledger import MONTH_KEY_PATTERN


def today_local_date() -> str:
    """Today's local date in ISO format (YYYY-MM-DD)."""
    return date.today().isoformat()


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def parse_month(month_key: str) -> tuple[int, int]:
    """Split a month key into (year, month), rejecting malformed keys."""
    if not isinstance(month_key, str) or not MONTH_KEY_PATTERN.match(month_key):
        raise ValueError(f"Invalid month: {month_key!r}")
    year, month = month_key.split("-")
    return int(year), int(month)


def _format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def next_month(month_key: str) -> str:
    year, month = parse_month(month_key)
    if month == 12:
        return _format_month(year + 1, 1)
    return _format_month(year, month + 1)


def previous_month(month_key: str) -> str:
    year, month = parse_month(month_key)
    if month == 1:
        return _format_month(year - 1, 12)
    return _format_month(year, month - 1)


def month_range(month_key: str) -> tuple[str, str]:
    """Return (first_day, last_day) ISO strings for a month."""
    year, month = parse_month(month_key)
    last_day = calendar.monthrange(year, month)[1]
    return (
        date(year, month, 1).isoformat(),
        date(year, month, last_day).isoformat(),
    )


def months_between(start_month: str, end_month: str) -> list[str]:
    """All month keys from start to end, inclusive. Empty if start > end."""
    parse_month(start_month)
    parse_month(end_month)
    months = []
    current = start_month
    while current <= end_month:
        months.append(current)
        current = next_month(current)
    return months


def is_month_in_future(month_key: str) -> bool:
    return month_key > current_month()


def is_valid_date(value: str) -> bool:
    """True when value is a real calendar day in YYYY-MM-DD form."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        return False
    # strptime also accepts unpadded fields such as 2024-1-5
    return parsed.strftime("%Y-%m-%d") == value
