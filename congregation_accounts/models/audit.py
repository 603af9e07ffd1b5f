"""
Audit Models for Congregation Accounts

Every change to the books is logged for audit purposes.
This provides:
1. A record of who changed which month and when
2. Debugging information when storage calls fail
3. Accountability when the monthly report is questioned

DESIGN DECISION: Audit events are write-once. They are emitted to the
structured log and never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Opening balances
    OPENING_BALANCE_SET = "opening_balance_set"
    OPENING_BALANCE_DELETED = "opening_balance_deleted"

    # Notes
    NOTE_CREATED = "note_created"
    NOTE_UPDATED = "note_updated"
    NOTE_DELETED = "note_deleted"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_FAILED = "report_failed"

    # Failures
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    ledger: Optional[str] = Field(
        default=None,
        description="Ledger key for transaction and opening balance events"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'opening_balance', 'note')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "ledger": self.ledger,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added("default", txn_id, "Offering", "income", "500.00")
        event = AuditEventBuilder.storage_error("load transactions", "timeout")
    """

    @staticmethod
    def transaction_added(
        ledger: str,
        transaction_id: str,
        description: str,
        kind: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            ledger=ledger,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {description}",
            details={"type": kind, "amount": amount},
        )

    @staticmethod
    def transaction_updated(
        ledger: str,
        transaction_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            ledger=ledger,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction updated: {', '.join(sorted(fields))}",
            details={"fields": sorted(fields)},
        )

    @staticmethod
    def transaction_deleted(ledger: str, transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            ledger=ledger,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )

    @staticmethod
    def opening_balance_set(
        ledger: str,
        month: str,
        balance: str,
        balance_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPENING_BALANCE_SET,
            ledger=ledger,
            entity_type="opening_balance",
            entity_id=balance_id,
            description=f"Opening balance for {month} set to {balance}",
            details={"month": month, "balance": balance},
        )

    @staticmethod
    def opening_balance_deleted(ledger: str, month: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPENING_BALANCE_DELETED,
            ledger=ledger,
            entity_type="opening_balance",
            description=f"Opening balance for {month} deleted",
            details={"month": month},
        )

    @staticmethod
    def note_changed(event_type: AuditEventType, note_id: str) -> AuditEvent:
        action = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            entity_type="note",
            entity_id=note_id,
            description=f"Note {action}",
        )

    @staticmethod
    def report_generated(
        month: str,
        strategy: str,
        size_bytes: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            description=f"Monthly report generated for {month}",
            details={"strategy": strategy, "size_bytes": size_bytes},
        )

    @staticmethod
    def report_failed(month: str, strategy: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="report",
            description=f"Monthly report failed for {month}",
            details={"strategy": strategy},
            error_message=error_message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        ledger: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            ledger=ledger,
            description=f"Storage error: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
