"""Formatting and date helpers."""

from congregation_accounts.utils.dates import (
    current_month,
    is_month_in_future,
    is_valid_date,
    month_range,
    months_between,
    next_month,
    parse_month,
    previous_month,
    today_local_date,
)
from congregation_accounts.utils.formatting import (
    format_category_name,
    format_currency,
    format_currency_whole,
    format_date,
    format_month_year,
    format_plain_amount,
    parse_currency,
    to_decimal,
)

__all__ = [
    "current_month",
    "format_category_name",
    "format_currency",
    "format_currency_whole",
    "format_date",
    "format_month_year",
    "format_plain_amount",
    "is_month_in_future",
    "is_valid_date",
    "month_range",
    "months_between",
    "next_month",
    "parse_currency",
    "parse_month",
    "previous_month",
    "to_decimal",
    "today_local_date",
]
