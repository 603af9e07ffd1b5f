"""
Data Models Package

This package contains all Pydantic models used in Congregation Accounts.
All data flowing through the system must conform to these schemas.
"""

from congregation_accounts.models.ledger import (
    ALL_CATEGORIES,
    DEFAULT_LEDGER,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    KHOC_LEDGER,
    LEDGERS,
    Ledger,
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.note import Note
from congregation_accounts.models.report import (
    MonthlyData,
    MonthlyReport,
    ReportInput,
    TransactionSummary,
)
from congregation_accounts.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from congregation_accounts.models.forms import (
    OpeningBalanceForm,
    TransactionForm,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger models
    "ALL_CATEGORIES",
    "DEFAULT_LEDGER",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "KHOC_LEDGER",
    "LEDGERS",
    "Ledger",
    "OpeningBalance",
    "Transaction",
    "TransactionKind",
    # Notes
    "Note",
    # Derived report models
    "MonthlyData",
    "MonthlyReport",
    "ReportInput",
    "TransactionSummary",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Forms and validation
    "OpeningBalanceForm",
    "TransactionForm",
    "ValidationIssue",
    "ValidationResult",
]
