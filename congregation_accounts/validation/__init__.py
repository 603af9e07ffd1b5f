"""Form validation package."""

from congregation_accounts.validation.validator import (
    summarize_issues,
    validate_amount,
    validate_category,
    validate_description,
    validate_kind,
    validate_month,
    validate_note,
    validate_opening_balance,
    validate_transaction,
)

__all__ = [
    "summarize_issues",
    "validate_amount",
    "validate_category",
    "validate_description",
    "validate_kind",
    "validate_month",
    "validate_note",
    "validate_opening_balance",
    "validate_transaction",
]
