"""
Tests for Congregation Accounts models

Test strategy:
1. Unit tests for individual components (models, validators, aggregation)
2. Store and storage tests against the in-memory backend
3. No real Firestore or network calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from congregation_accounts.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from congregation_accounts.models.forms import ValidationIssue, ValidationResult
from congregation_accounts.models.ledger import (
    ALL_CATEGORIES,
    DEFAULT_LEDGER,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    KHOC_LEDGER,
    LEDGERS,
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.note import Note
from congregation_accounts.models.report import ReportInput, TransactionSummary


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction creation from form-like values."""
        txn = Transaction(
            date="2024-01-15",
            description="Contributions to Worldwide Work",
            category="Worldwide Work Donations",
            amount="500.00",
            type="income",
        )
        assert txn.date == date(2024, 1, 15)
        assert txn.amount == Decimal("500.00")
        assert txn.kind == TransactionKind.INCOME
        assert txn.id is None

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        txn = Transaction(
            date="2024-01-15",
            description="  Electricity Bill  ",
            category="Local Congregation Expenses",
            amount=Decimal("150"),
            type="expense",
        )
        assert txn.description == "Electricity Bill"

    def test_transaction_rejects_zero_amount(self):
        """Test that amounts must be positive."""
        with pytest.raises(ValidationError):
            Transaction(
                date="2024-01-15",
                description="Nothing",
                category="Other Income",
                amount=Decimal("0"),
                type="income",
            )

    def test_transaction_rejects_amount_over_limit(self):
        """Test the 999,999.99 ceiling."""
        with pytest.raises(ValidationError):
            Transaction(
                date="2024-01-15",
                description="Too much",
                category="Other Income",
                amount=Decimal("1000000"),
                type="income",
            )

    def test_transaction_rejects_short_description(self):
        """Test the three character minimum."""
        with pytest.raises(ValidationError):
            Transaction(
                date="2024-01-15",
                description="ab",
                category="Other Income",
                amount=Decimal("1"),
                type="income",
            )

    def test_transaction_month_and_signed_amount(self):
        """Test the derived month key and signed amount."""
        expense = Transaction(
            date="2024-02-29",
            description="Cleaning supplies",
            category="Local Congregation Expenses",
            amount=Decimal("20.50"),
            type="expense",
        )
        assert expense.month == "2024-02"
        assert expense.is_income is False
        assert expense.signed_amount == Decimal("-20.50")

    def test_transaction_dump_uses_type_alias(self):
        """Test that serialization keeps the stored field name `type`."""
        txn = Transaction(
            date="2024-01-15",
            description="Offering",
            category="Other Income",
            amount=Decimal("5"),
            kind=TransactionKind.INCOME,
        )
        dumped = txn.model_dump(by_alias=True)
        assert dumped["type"] == TransactionKind.INCOME
        assert "kind" not in dumped


class TestOpeningBalanceModel:
    """Tests for the OpeningBalance model."""

    def test_negative_balance_allowed(self):
        """Test that a month may start overdrawn."""
        balance = OpeningBalance(month="2024-03", balance=Decimal("-250.00"))
        assert balance.balance == Decimal("-250.00")

    def test_zero_balance_allowed(self):
        balance = OpeningBalance(month="2024-03", balance=Decimal("0"))
        assert balance.balance == Decimal("0")

    @pytest.mark.parametrize("month", ["2024-13", "2024-00", "2024-1", "24-01", "January"])
    def test_invalid_month_rejected(self, month):
        """Test that malformed month keys are rejected."""
        with pytest.raises(ValidationError):
            OpeningBalance(month=month, balance=Decimal("1"))

    def test_note_length_limit(self):
        with pytest.raises(ValidationError):
            OpeningBalance(month="2024-01", balance=Decimal("1"), note="x" * 501)


class TestLedgers:
    """Tests for the two ledgers and their categories."""

    def test_all_categories_exist(self):
        """Test that the six categories are defined."""
        assert INCOME_CATEGORIES == (
            "Worldwide Work Donations",
            "Local Congregation Donations",
            "Other Income",
        )
        assert EXPENSE_CATEGORIES == (
            "Worldwide Work Expenses",
            "Local Congregation Expenses",
            "Other Expenses",
        )
        assert len(ALL_CATEGORIES) == 6

    def test_ledgers_use_separate_collections(self):
        assert DEFAULT_LEDGER.transactions_collection == "transactions"
        assert DEFAULT_LEDGER.opening_balances_collection == "opening_balances"
        assert KHOC_LEDGER.transactions_collection == "khoc_transactions"
        assert KHOC_LEDGER.opening_balances_collection == "khoc_opening_balances"
        assert set(LEDGERS) == {"default", "khoc"}

    def test_categories_for_kind(self):
        assert DEFAULT_LEDGER.categories_for(TransactionKind.INCOME) == INCOME_CATEGORIES
        assert DEFAULT_LEDGER.categories_for(TransactionKind.EXPENSE) == EXPENSE_CATEGORIES


class TestDerivedModels:
    """Tests for notes and derived report values."""

    def test_empty_summary_is_zero(self):
        summary = TransactionSummary()
        assert summary.total_income == Decimal("0")
        assert summary.net == Decimal("0")
        assert summary.count == 0

    def test_report_input_opening_amount_defaults_to_zero(self):
        assert ReportInput(month="2024-01").opening_amount == Decimal("0")

    def test_report_input_opening_amount(self):
        report_input = ReportInput(
            month="2024-01",
            opening_balance=OpeningBalance(month="2024-01", balance=Decimal("5000.00")),
        )
        assert report_input.opening_amount == Decimal("5000.00")

    def test_note_defaults(self):
        note = Note(content="Remember the circuit visit")
        assert note.title == ""
        assert note.id is None


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added: Offering",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to a structured log dict."""
        event = AuditEventBuilder.opening_balance_set("default", "2024-01", "5000.00", "abc")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "opening_balance_set"
        assert log_dict["ledger"] == "default"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["details"]["month"] == "2024-01"

    def test_audit_event_builder_storage_error(self):
        """Test storage errors are logged at error severity."""
        event = AuditEventBuilder.storage_error("load ledger", "timeout", ledger="khoc")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "timeout"
        assert event.ledger == "khoc"

    def test_note_event_description(self):
        event = AuditEventBuilder.note_changed(AuditEventType.NOTE_DELETED, "n1")
        assert event.description == "Note deleted"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_from_issues(self):
        """Test that any issue makes the result invalid."""
        result = ValidationResult.from_issues([
            ValidationIssue(field="amount", message="Amount is required"),
            ValidationIssue(field="description", message="Description is required"),
        ])
        assert result.is_valid is False
        assert result.error_count == 2
        assert result.pairs[0] == ("amount", "Amount is required")
        assert result.messages_for("description") == ["Description is required"]

    def test_no_issues_is_valid(self):
        result = ValidationResult.from_issues([])
        assert result.is_valid is True
        assert result.errors == []
