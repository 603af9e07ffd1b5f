"""
Audit Logger

DESIGN DECISION: Every change to the books is logged.
This provides:
1. Traceability of who changed which month
2. Debugging capability when Firestore calls fail

The audit logger:
- Writes structured JSON lines through structlog
- Never raises; a logging problem must not break a save
"""

import logging
from collections import deque
from typing import Optional

import structlog

from congregation_accounts.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


MAX_RECENT_EVENTS = 1000


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Keeps the most recent `max_events` events in memory; older ones are
    only in the structured log.
    """

    def __init__(
        self,
        name: str = "congregation_accounts.audit",
        max_events: int = MAX_RECENT_EVENTS,
    ):
        self._logger = structlog.get_logger(name)
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    @property
    def events(self) -> list[AuditEvent]:
        """Recent events logged by this instance, oldest first."""
        return list(self._events)

    def log(self, event: AuditEvent) -> None:
        self._events.append(event)
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_transaction_added(
        self,
        ledger: str,
        transaction_id: str,
        description: str,
        kind: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            ledger=ledger,
            transaction_id=transaction_id,
            description=description,
            kind=kind,
            amount=amount,
        ))

    def log_transaction_updated(self, ledger: str, transaction_id: str, fields: list[str]) -> None:
        self.log(AuditEventBuilder.transaction_updated(ledger, transaction_id, fields))

    def log_transaction_deleted(self, ledger: str, transaction_id: str) -> None:
        self.log(AuditEventBuilder.transaction_deleted(ledger, transaction_id))

    def log_opening_balance_set(
        self,
        ledger: str,
        month: str,
        balance: str,
        balance_id: str,
    ) -> None:
        self.log(AuditEventBuilder.opening_balance_set(ledger, month, balance, balance_id))

    def log_opening_balance_deleted(self, ledger: str, month: str) -> None:
        self.log(AuditEventBuilder.opening_balance_deleted(ledger, month))

    def log_note_created(self, note_id: str) -> None:
        self.log(AuditEventBuilder.note_changed(AuditEventType.NOTE_CREATED, note_id))

    def log_note_updated(self, note_id: str) -> None:
        self.log(AuditEventBuilder.note_changed(AuditEventType.NOTE_UPDATED, note_id))

    def log_note_deleted(self, note_id: str) -> None:
        self.log(AuditEventBuilder.note_changed(AuditEventType.NOTE_DELETED, note_id))

    def log_report_generated(self, month: str, strategy: str, size_bytes: int) -> None:
        self.log(AuditEventBuilder.report_generated(month, strategy, size_bytes))

    def log_report_failed(self, month: str, strategy: str, error_message: str) -> None:
        self.log(AuditEventBuilder.report_failed(month, strategy, error_message))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        ledger: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_error(operation, error_message, ledger))
