"""
Form Validation

DESIGN DECISION: Validation is a set of pure functions, one per field,
combined by the form-level validators.

- Every check runs; a form with three problems reports three issues
- Results are returned, never raised
- Nothing is corrected on the user's behalf

The model classes in `congregation_accounts.models` enforce the same
rules at construction time. These functions exist so the UI can tell
the user what is wrong before a model is ever built.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from congregation_accounts.models.forms import (
    OpeningBalanceForm,
    TransactionForm,
    ValidationIssue,
    ValidationResult,
)
from congregation_accounts.models.ledger import (
    DEFAULT_LEDGER,
    MAX_AMOUNT,
    MAX_DESCRIPTION_LENGTH,
    MAX_NOTE_LENGTH,
    MIN_AMOUNT,
    MIN_DESCRIPTION_LENGTH,
    MONTH_KEY_PATTERN,
    Ledger,
    TransactionKind,
)
from congregation_accounts.utils.dates import is_valid_date


def _as_decimal(value: Any) -> Optional[Decimal]:
    """Interpret form input as a number, or None if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _amount_issues(value: Any, field: str) -> list[ValidationIssue]:
    number = _as_decimal(value)
    if number is None:
        return [ValidationIssue(field=field, message="Amount is required")]
    if number < MIN_AMOUNT:
        return [ValidationIssue(field=field, message=f"Amount must be at least {MIN_AMOUNT}")]
    if number > MAX_AMOUNT:
        return [ValidationIssue(field=field, message=f"Amount cannot exceed {MAX_AMOUNT}")]
    return []


def _description_issues(text: Optional[str]) -> list[ValidationIssue]:
    stripped = (text or "").strip()
    if not stripped:
        return [ValidationIssue(field="description", message="Description is required")]
    if len(stripped) < MIN_DESCRIPTION_LENGTH:
        return [ValidationIssue(
            field="description",
            message=f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters",
        )]
    if len(stripped) > MAX_DESCRIPTION_LENGTH:
        return [ValidationIssue(
            field="description",
            message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
        )]
    return []


def _note_issues(text: Optional[str]) -> list[ValidationIssue]:
    if text and len(text) > MAX_NOTE_LENGTH:
        return [ValidationIssue(
            field="note",
            message=f"Note must be at most {MAX_NOTE_LENGTH} characters",
        )]
    return []


def _month_issues(month_key: Optional[str]) -> list[ValidationIssue]:
    if not month_key or not MONTH_KEY_PATTERN.match(month_key):
        return [ValidationIssue(field="month", message="Valid month is required (YYYY-MM format)")]
    return []


def _kind_issues(kind: Optional[Union[str, TransactionKind]]) -> list[ValidationIssue]:
    valid = {k.value for k in TransactionKind}
    value = kind.value if isinstance(kind, TransactionKind) else kind
    if value not in valid:
        return [ValidationIssue(field="type", message="Valid transaction type is required")]
    return []


def _category_issues(category: Optional[str], ledger: Ledger) -> list[ValidationIssue]:
    if not (category or "").strip():
        return [ValidationIssue(field="category", message="Category is required")]
    if category not in ledger.categories:
        return [ValidationIssue(
            field="category",
            message=f"'{category}' is not a {ledger.label} category",
        )]
    return []


# =============================================================================
# FIELD VALIDATORS
# =============================================================================

def validate_amount(value: Any) -> ValidationResult:
    """Amount must be present, numeric and within [0.01, 999999.99]."""
    return ValidationResult.from_issues(_amount_issues(value, "amount"))


def validate_description(text: Optional[str]) -> ValidationResult:
    """Description must be 3 to 200 characters once trimmed."""
    return ValidationResult.from_issues(_description_issues(text))


def validate_note(text: Optional[str]) -> ValidationResult:
    """Notes are optional but capped at 500 characters."""
    return ValidationResult.from_issues(_note_issues(text))


def validate_month(month_key: Optional[str]) -> ValidationResult:
    return ValidationResult.from_issues(_month_issues(month_key))


def validate_kind(kind: Optional[Union[str, TransactionKind]]) -> ValidationResult:
    return ValidationResult.from_issues(_kind_issues(kind))


def validate_category(
    category: Optional[str],
    ledger: Ledger = DEFAULT_LEDGER,
) -> ValidationResult:
    return ValidationResult.from_issues(_category_issues(category, ledger))


# =============================================================================
# FORM VALIDATORS
# =============================================================================

def validate_transaction(
    form: TransactionForm,
    ledger: Ledger = DEFAULT_LEDGER,
) -> ValidationResult:
    """
    Validate the add/edit transaction form.

    The date is optional (the form defaults it to today) but must be a
    real day when given.
    """
    issues: list[ValidationIssue] = []
    issues.extend(_description_issues(form.description))
    issues.extend(_category_issues(form.category, ledger))
    issues.extend(_amount_issues(form.amount, "amount"))
    issues.extend(_kind_issues(form.type))

    if form.date and not is_valid_date(form.date):
        issues.append(ValidationIssue(field="date", message="Date must be in YYYY-MM-DD format"))

    if (
        not issues
        and form.category not in ledger.categories_for(TransactionKind(form.type))
    ):
        issues.append(ValidationIssue(
            field="category",
            message=f"'{form.category}' cannot be used for {form.type} transactions",
        ))

    return ValidationResult.from_issues(issues)


def validate_opening_balance(form: OpeningBalanceForm) -> ValidationResult:
    """
    Validate the opening balance form.

    An opening balance is signed: a month may start overdrawn. Only the
    magnitude is bounded.
    """
    issues: list[ValidationIssue] = []

    number = _as_decimal(form.balance)
    if number is None:
        issues.append(ValidationIssue(field="balance", message="Balance is required"))
    elif abs(number) > MAX_AMOUNT:
        issues.append(ValidationIssue(
            field="balance",
            message=f"Balance cannot exceed {MAX_AMOUNT} in either direction",
        ))

    issues.extend(_note_issues(form.note))
    issues.extend(_month_issues(form.month))

    return ValidationResult.from_issues(issues)


def summarize_issues(result: ValidationResult) -> str:
    """
    Render a validation result as a message for the user.

    This is what we show next to the form.
    """
    if result.is_valid:
        return "All checks passed."

    lines = ["Please fix the following:"]
    for issue in result.errors:
        lines.append(f"   • {issue.message}")
    return "\n".join(lines)
