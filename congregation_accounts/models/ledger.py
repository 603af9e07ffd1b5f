"""
Core Ledger Models for Congregation Accounts

These models define the schemas for the records kept in each ledger.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Money is always a Decimal with two fractional digits.
A transaction amount is a positive magnitude; whether it adds to or
subtracts from the balance is decided only by its kind.
"""

import re
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999.99")
MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 200
MAX_NOTE_LENGTH = 500


# =============================================================================
# ENUMS AND CATEGORY SETS
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


INCOME_CATEGORIES: tuple[str, ...] = (
    "Worldwide Work Donations",
    "Local Congregation Donations",
    "Other Income",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Worldwide Work Expenses",
    "Local Congregation Expenses",
    "Other Expenses",
)

ALL_CATEGORIES: tuple[str, ...] = INCOME_CATEGORIES + EXPENSE_CATEGORIES


class Ledger(BaseModel):
    """
    A namespace of transactions and opening balances.

    The congregation keeps two structurally identical ledgers. Each one
    lives in its own pair of collections and carries its own category set.
    Notes are shared and are not part of a ledger.
    """
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., pattern="^[a-z_]+$")
    label: str
    transactions_collection: str
    opening_balances_collection: str
    income_categories: tuple[str, ...] = INCOME_CATEGORIES
    expense_categories: tuple[str, ...] = EXPENSE_CATEGORIES

    @property
    def categories(self) -> tuple[str, ...]:
        return self.income_categories + self.expense_categories

    def categories_for(self, kind: TransactionKind) -> tuple[str, ...]:
        if kind == TransactionKind.INCOME:
            return self.income_categories
        return self.expense_categories


DEFAULT_LEDGER = Ledger(
    key="default",
    label="Congregation",
    transactions_collection="transactions",
    opening_balances_collection="opening_balances",
)

KHOC_LEDGER = Ledger(
    key="khoc",
    label="KHOC",
    transactions_collection="khoc_transactions",
    opening_balances_collection="khoc_opening_balances",
)

LEDGERS: dict[str, Ledger] = {
    DEFAULT_LEDGER.key: DEFAULT_LEDGER,
    KHOC_LEDGER.key: KHOC_LEDGER,
}


# =============================================================================
# RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    `id`, `created_at` and `updated_at` are assigned by the storage layer
    and are absent until the transaction has been saved.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: Optional[str] = None
    date: dt.date = Field(
        ...,
        description="Calendar day of the transaction"
    )
    description: str = Field(
        ...,
        min_length=MIN_DESCRIPTION_LENGTH,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="What the money was for"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="One of the ledger's categories"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, le=MAX_AMOUNT, decimal_places=2, description="Positive magnitude")
    ]
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="Income or expense"
    )
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def month(self) -> str:
        """Month key (YYYY-MM) the transaction belongs to."""
        return self.date.isoformat()[:7]

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the kind."""
        return self.amount if self.is_income else -self.amount


class OpeningBalance(BaseModel):
    """
    The balance a ledger starts a month with.

    At most one record exists per (ledger, month); the storage layer
    enforces this on write.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    month: str = Field(
        ...,
        description="Month key in YYYY-MM format"
    )
    balance: Annotated[
        Decimal,
        Field(ge=-MAX_AMOUNT, le=MAX_AMOUNT, decimal_places=2, description="Signed balance")
    ]
    note: Optional[str] = Field(
        default=None,
        max_length=MAX_NOTE_LENGTH,
    )
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_validator('month')
    @classmethod
    def validate_month(cls, v: str) -> str:
        if not MONTH_KEY_PATTERN.match(v):
            raise ValueError(f"Month must be in YYYY-MM format, got {v!r}")
        return v
