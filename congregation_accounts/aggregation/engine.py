"""
Monthly Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and works on explicit data.
Callers load transactions and opening balances from storage first and
pass the lists in. Nothing here touches storage, caches results or knows
which ledger the data came from.

The monthly balance is always:

    opening balance + income - expenses
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from congregation_accounts.models.ledger import (
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.report import (
    MonthlyData,
    MonthlyReport,
    TransactionSummary,
)
from congregation_accounts.utils.dates import next_month
from congregation_accounts.utils.formatting import (
    Number,
    format_currency,
    format_month_year,
    to_decimal,
)


SORT_FIELDS = ("date", "amount", "description", "category", "type")
SORT_ORDERS = ("asc", "desc")


def summarize(transactions: Iterable[Transaction]) -> TransactionSummary:
    """Total income, total expenses, net and count. Empty input gives zeros."""
    total_income = Decimal("0")
    total_expenses = Decimal("0")
    count = 0

    for transaction in transactions:
        count += 1
        if transaction.kind == TransactionKind.INCOME:
            total_income += transaction.amount
        else:
            total_expenses += transaction.amount

    return TransactionSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net=total_income - total_expenses,
        count=count,
    )


def ending_balance(opening_amount: Number, transactions: Iterable[Transaction]) -> Decimal:
    return to_decimal(opening_amount) + summarize(transactions).net


def transactions_for_month(
    transactions: Iterable[Transaction],
    month_key: str,
) -> list[Transaction]:
    """Transactions whose ISO date starts with the month key, in input order."""
    return [t for t in transactions if t.date.isoformat().startswith(month_key)]


def available_months(
    transactions: Iterable[Transaction],
    opening_balances: Iterable[OpeningBalance],
) -> list[str]:
    """Every month that has a transaction or an opening balance, newest first."""
    months = {t.date.isoformat()[:7] for t in transactions}
    months.update(balance.month for balance in opening_balances)
    return sorted(months, reverse=True)


def most_recent_month(
    transactions: Iterable[Transaction],
    opening_balances: Iterable[OpeningBalance],
) -> Optional[str]:
    months = available_months(transactions, opening_balances)
    return months[0] if months else None


def group_by_category(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """Group by category, keeping first-seen category order and input order within groups."""
    groups: dict[str, list[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(transaction.category, []).append(transaction)
    return groups


def category_income_total(transactions: Iterable[Transaction], category_substring: str) -> Decimal:
    """Sum of income whose category name contains the given text."""
    return sum(
        (
            t.amount
            for t in transactions
            if t.kind == TransactionKind.INCOME and category_substring in t.category
        ),
        Decimal("0"),
    )


def find_opening_balance(
    opening_balances: Iterable[OpeningBalance],
    month_key: str,
) -> Optional[OpeningBalance]:
    return next((b for b in opening_balances if b.month == month_key), None)


def monthly_data(
    month_key: str,
    transactions: Iterable[Transaction],
    opening_balances: Iterable[OpeningBalance],
) -> MonthlyData:
    """Assemble the month's transactions, opening balance, summary and ending balance."""
    monthly_transactions = transactions_for_month(transactions, month_key)
    opening = find_opening_balance(opening_balances, month_key)
    opening_amount = opening.balance if opening else Decimal("0")

    return MonthlyData(
        month=month_key,
        transactions=monthly_transactions,
        opening_balance=opening,
        summary=summarize(monthly_transactions),
        ending_balance=ending_balance(opening_amount, monthly_transactions),
    )


def recent_transactions(transactions: Iterable[Transaction], limit: int = 5) -> list[Transaction]:
    """Newest transactions first. The input is not reordered."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)[:limit]


def should_suggest_next_month_balance(
    month_key: str,
    monthly_transactions: Sequence[Transaction],
    opening_balances: Iterable[OpeningBalance],
) -> bool:
    """True when the month has activity but next month has no opening balance yet."""
    if not monthly_transactions:
        return False
    return find_opening_balance(opening_balances, next_month(month_key)) is None


def percentage_change(old_value: Number, new_value: Number) -> Decimal:
    old = to_decimal(old_value)
    new = to_decimal(new_value)
    if old == 0:
        return Decimal("0") if new == 0 else Decimal("100")
    return (new - old) / old * 100


def sort_transactions(
    transactions: Iterable[Transaction],
    field: str = "date",
    order: str = "desc",
) -> list[Transaction]:
    """Sort by one of SORT_FIELDS. Ties keep their input order."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}; expected one of {SORT_FIELDS}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Sort order must be 'asc' or 'desc', got {order!r}")

    keys = {
        "date": lambda t: t.date,
        "amount": lambda t: t.amount,
        "description": lambda t: t.description.lower(),
        "category": lambda t: t.category.lower(),
        "type": lambda t: t.kind.value,
    }
    return sorted(transactions, key=keys[field], reverse=(order == "desc"))


def build_monthly_report(
    month_key: str,
    transactions: Sequence[Transaction],
    opening_balance: Optional[OpeningBalance],
) -> MonthlyReport:
    """Build the structured report value for one month's transactions."""
    summary = summarize(transactions)
    opening_amount = opening_balance.balance if opening_balance else Decimal("0")
    income_count = sum(1 for t in transactions if t.kind == TransactionKind.INCOME)

    return MonthlyReport(
        month=month_key,
        month_name=format_month_year(month_key),
        opening_balance=opening_amount,
        total_income=summary.total_income,
        total_expenses=summary.total_expenses,
        ending_balance=opening_amount + summary.net,
        transaction_count=summary.count,
        income_transaction_count=income_count,
        expense_transaction_count=summary.count - income_count,
    )


def format_monthly_report_text(report: MonthlyReport, symbol: str = "₱") -> str:
    """Plain-text rendering of a monthly report, for copying into messages."""
    def money(amount: Decimal) -> str:
        return format_currency(amount, symbol)

    return "\n".join([
        f"MONTHLY REPORT - {report.month_name}",
        "",
        "=== MONTHLY BALANCE CALCULATION ===",
        f"Starting Balance: {money(report.opening_balance)}",
        f"Total Income: {money(report.total_income)}",
        f"Total Expenses: {money(report.total_expenses)}",
        f"End of Month Balance: {money(report.ending_balance)}",
        "",
        "=== TRANSACTION COUNT ===",
        f"Total Transactions: {report.transaction_count}",
        f"Income Transactions: {report.income_transaction_count}",
        f"Expense Transactions: {report.expense_transaction_count}",
        "",
        "=== CALCULATION BREAKDOWN ===",
        (
            f"{money(report.opening_balance)} + {money(report.total_income)} - "
            f"{money(report.total_expenses)} = {money(report.ending_balance)}"
        ),
    ])
