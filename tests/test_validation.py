"""Tests for form validation."""

import pytest

from congregation_accounts.models.forms import OpeningBalanceForm, TransactionForm
from congregation_accounts.models.ledger import KHOC_LEDGER, Ledger
from congregation_accounts.validation import (
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


def valid_form(**overrides) -> TransactionForm:
    values = {
        "description": "Electricity Bill",
        "category": "Local Congregation Expenses",
        "amount": "150.00",
        "type": "expense",
        "date": "2024-01-20",
    }
    values.update(overrides)
    return TransactionForm(**values)


class TestFieldValidators:
    """Tests for single-field validators."""

    @pytest.mark.parametrize("value", [0, "0", None, "", "abc", "NaN", True])
    def test_invalid_amounts(self, value):
        assert validate_amount(value).is_valid is False

    @pytest.mark.parametrize("value", [0.01, "0.01", 1, "999999.99"])
    def test_valid_amounts(self, value):
        assert validate_amount(value).is_valid is True

    def test_amount_over_limit(self):
        result = validate_amount(1000000)
        assert result.is_valid is False
        assert result.errors[0].field == "amount"

    def test_description_length(self):
        assert validate_description("ab").is_valid is False
        assert validate_description("abc").is_valid is True
        assert validate_description("   ").is_valid is False
        assert validate_description("x" * 201).is_valid is False

    def test_description_is_trimmed_before_counting(self):
        assert validate_description("  ab  ").is_valid is False

    def test_note_optional_but_bounded(self):
        assert validate_note(None).is_valid is True
        assert validate_note("x" * 500).is_valid is True
        assert validate_note("x" * 501).is_valid is False

    @pytest.mark.parametrize("month,valid", [
        ("2024-01", True),
        ("2024-12", True),
        ("2024-13", False),
        ("2024-00", False),
        ("2024-1", False),
        ("", False),
        (None, False),
    ])
    def test_month(self, month, valid):
        assert validate_month(month).is_valid is valid

    def test_kind(self):
        assert validate_kind("income").is_valid is True
        assert validate_kind("expense").is_valid is True
        assert validate_kind("transfer").is_valid is False

    def test_category(self):
        assert validate_category("Other Income").is_valid is True
        assert validate_category("Groceries").is_valid is False
        assert validate_category("").is_valid is False

    def test_category_for_custom_ledger(self):
        ledger = Ledger(
            key="hall",
            label="Hall",
            transactions_collection="hall_transactions",
            opening_balances_collection="hall_opening_balances",
            income_categories=("Hall Donations",),
            expense_categories=("Hall Repairs",),
        )
        assert validate_category("Hall Repairs", ledger).is_valid is True
        assert validate_category("Other Income", ledger).is_valid is False


class TestTransactionForm:
    """Tests for the whole transaction form."""

    def test_valid_form(self):
        assert validate_transaction(valid_form()).is_valid is True

    def test_valid_form_on_khoc_ledger(self):
        assert validate_transaction(valid_form(), KHOC_LEDGER).is_valid is True

    def test_missing_date_allowed(self):
        assert validate_transaction(valid_form(date=None)).is_valid is True

    def test_bad_date(self):
        result = validate_transaction(valid_form(date="2024-02-30"))
        assert result.messages_for("date")

    def test_all_issues_reported(self):
        """Test that every failing field is reported, not just the first."""
        result = validate_transaction(TransactionForm(description="ab", amount="0"))
        fields = [issue.field for issue in result.errors]
        assert fields == ["description", "category", "amount", "type"]

    def test_category_must_match_kind(self):
        result = validate_transaction(valid_form(type="income"))
        assert result.is_valid is False
        assert result.errors[0].field == "category"


class TestOpeningBalanceForm:
    """Tests for the opening balance form."""

    def test_valid(self):
        form = OpeningBalanceForm(balance="5000.00", month="2024-01", note="Starting balance")
        assert validate_opening_balance(form).is_valid is True

    def test_negative_and_zero_allowed(self):
        assert validate_opening_balance(OpeningBalanceForm(balance="-250", month="2024-01")).is_valid
        assert validate_opening_balance(OpeningBalanceForm(balance=0, month="2024-01")).is_valid

    def test_magnitude_bounded(self):
        result = validate_opening_balance(OpeningBalanceForm(balance="-1000000", month="2024-01"))
        assert result.messages_for("balance")

    def test_issues_accumulate(self):
        result = validate_opening_balance(OpeningBalanceForm(balance="", note="x" * 501, month="bad"))
        assert [issue.field for issue in result.errors] == ["balance", "note", "month"]


class TestSummarizeIssues:
    """Tests for the user-facing summary."""

    def test_valid_summary(self):
        assert summarize_issues(validate_transaction(valid_form())) == "All checks passed."

    def test_invalid_summary_lists_messages(self):
        message = summarize_issues(validate_amount(None))
        assert message.startswith("Please fix the following:")
        assert "Amount is required" in message
