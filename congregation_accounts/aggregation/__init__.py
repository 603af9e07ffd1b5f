"""Monthly aggregation package."""

from congregation_accounts.aggregation.engine import (
    available_months,
    build_monthly_report,
    category_income_total,
    ending_balance,
    find_opening_balance,
    format_monthly_report_text,
    group_by_category,
    monthly_data,
    most_recent_month,
    percentage_change,
    recent_transactions,
    should_suggest_next_month_balance,
    sort_transactions,
    summarize,
    transactions_for_month,
)
from congregation_accounts.utils.dates import next_month, previous_month

__all__ = [
    "available_months",
    "build_monthly_report",
    "category_income_total",
    "ending_balance",
    "find_opening_balance",
    "format_monthly_report_text",
    "group_by_category",
    "monthly_data",
    "most_recent_month",
    "next_month",
    "percentage_change",
    "previous_month",
    "recent_transactions",
    "should_suggest_next_month_balance",
    "sort_transactions",
    "summarize",
    "transactions_for_month",
]
