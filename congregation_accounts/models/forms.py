"""
Form and Validation Models

Form models carry raw user input exactly as typed, so every field is
loosely typed. Validation results are returned, never raised.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class TransactionForm(BaseModel):
    """Raw input from the add/edit transaction form."""

    description: Optional[str] = None
    category: Optional[str] = None
    amount: Any = None
    type: Optional[str] = None
    date: Optional[str] = None


class OpeningBalanceForm(BaseModel):
    """Raw input from the opening balance form."""

    balance: Any = None
    note: Optional[str] = None
    month: Optional[str] = None


class ValidationIssue(BaseModel):
    """A single problem with one form field."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """
    Outcome of validating a field or a whole form.

    Issues accumulate in the order the checks ran.
    """

    is_valid: bool = True
    errors: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue]) -> "ValidationResult":
        return cls(is_valid=not issues, errors=list(issues))

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def pairs(self) -> list[tuple[str, str]]:
        """Issues as ordered (field, message) pairs."""
        return [(issue.field, issue.message) for issue in self.errors]

    def messages_for(self, field: str) -> list[str]:
        return [issue.message for issue in self.errors if issue.field == field]
