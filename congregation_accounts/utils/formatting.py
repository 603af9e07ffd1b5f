"""
Display formatting for money, dates and categories.

All functions are pure. Amounts are handled as Decimal; floats and
strings are converted through `to_decimal` first.
"""

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from congregation_accounts.utils.dates import parse_month


DEFAULT_CURRENCY_SYMBOL = "₱"

CATEGORY_SHORTCUTS: dict[str, str] = {
    "Local Congregation Donations": "Local Donations",
    "Worldwide Work Donations": "Worldwide Donations",
    "Local Congregation Expenses": "Local Expenses",
    "Worldwide Work Expenses": "Worldwide Expenses",
}

_CENTS = Decimal("0.01")
_WHOLE = Decimal("1")
_NON_NUMERIC = re.compile(r"[^0-9.\-]+")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _with_symbol(magnitude: str, negative: bool, symbol: str) -> str:
    return f"-{symbol}{magnitude}" if negative else f"{symbol}{magnitude}"


def format_currency(amount: Number, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Format with thousands separators and two fractional digits, e.g. ₱1,234.50."""
    value = to_decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return _with_symbol(f"{abs(value):,.2f}", value < 0, symbol)


def format_currency_whole(amount: Number, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Format without fractional digits, e.g. ₱1,235. Used on printed reports."""
    value = to_decimal(amount).quantize(_WHOLE, rounding=ROUND_HALF_UP)
    return _with_symbol(f"{abs(value):,.0f}", value < 0, symbol)


def format_plain_amount(amount: Number) -> str:
    """Plain decimal string with two fractional digits and no separators."""
    value = to_decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{value:.2f}"


def parse_currency(text: str) -> Decimal:
    """Parse a formatted amount back to a Decimal. Unparseable text gives 0."""
    cleaned = _NON_NUMERIC.sub("", text or "")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def format_date(value: Union[date, str]) -> str:
    """Format a calendar day as e.g. 'Jan 15, 2024'."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return f"{value:%b} {value.day}, {value.year}"


def format_month_year(month_key: str) -> str:
    """Format a month key as e.g. 'January 2024'."""
    year, month = parse_month(month_key)
    return date(year, month, 1).strftime("%B %Y")


def format_category_name(category: str) -> str:
    """Shorten the long category names for on-screen lists."""
    return CATEGORY_SHORTCUTS.get(category, category)
