"""
Derived Report Models

Nothing in this module is persisted. These values are computed on demand
from the current transactions and opening balances and thrown away after
use.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from congregation_accounts.models.ledger import OpeningBalance, Transaction


class TransactionSummary(BaseModel):
    """Totals over a list of transactions."""

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)


class MonthlyData(BaseModel):
    """Everything the dashboard shows for one month of one ledger."""

    month: str
    transactions: list[Transaction] = Field(default_factory=list)
    opening_balance: Optional[OpeningBalance] = None
    summary: TransactionSummary = Field(default_factory=TransactionSummary)
    ending_balance: Decimal = Decimal("0")


class MonthlyReport(BaseModel):
    """
    The structured monthly report value.

    Both PDF renderers and the plain-text report are produced from this.
    """

    month: str
    month_name: str
    opening_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    ending_balance: Decimal
    transaction_count: int = Field(ge=0)
    income_transaction_count: int = Field(ge=0)
    expense_transaction_count: int = Field(ge=0)


class ReportInput(BaseModel):
    """What a caller hands to the report assembler."""

    month: str
    transactions: list[Transaction] = Field(default_factory=list)
    opening_balance: Optional[OpeningBalance] = None
    congregation_name: Optional[str] = None
    report_date: Optional[str] = Field(
        default=None,
        description="Preformatted generation date; today when omitted"
    )

    @property
    def opening_amount(self) -> Decimal:
        if self.opening_balance is None:
            return Decimal("0")
        return self.opening_balance.balance
