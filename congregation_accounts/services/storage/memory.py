"""
In-Memory Storage Implementation

Used by the test suite and when Firestore isn't configured. Behaves like
the Firestore implementation: storage assigns ids and timestamps, lists
come back newest first, and there is one opening balance per month.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from congregation_accounts.models.ledger import (
    Ledger,
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.note import Note
from congregation_accounts.services.storage.interface import (
    UPDATABLE_TRANSACTION_FIELDS,
    ErrorCallback,
    NoteStorageInterface,
    NotesCallback,
    NotFoundError,
    OpeningBalanceStorageInterface,
    StorageError,
    TransactionStorageInterface,
    Unsubscribe,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


def _as_iso(value: Union[date, str]) -> str:
    return value.isoformat() if isinstance(value, date) else value


def recorded_on_timestamp(recorded_on: Union[date, str]) -> datetime:
    """Midnight UTC of the given day."""
    day = date.fromisoformat(recorded_on) if isinstance(recorded_on, str) else recorded_on
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Transactions of one ledger kept in a dict."""

    def __init__(self, ledger: Ledger):
        super().__init__(ledger)
        self._records: dict[str, Transaction] = {}

    def _newest_first(self, transactions) -> list[Transaction]:
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    async def add(self, transaction: Transaction) -> str:
        transaction_id = _new_id()
        now = _now()
        self._records[transaction_id] = transaction.model_copy(
            update={"id": transaction_id, "created_at": now, "updated_at": now}
        )
        return transaction_id

    async def get_all(self) -> list[Transaction]:
        return self._newest_first(self._records.values())

    async def get_by_date_range(
        self,
        start: Union[date, str],
        end: Union[date, str],
    ) -> list[Transaction]:
        start_iso, end_iso = _as_iso(start), _as_iso(end)
        return self._newest_first(
            t for t in self._records.values()
            if start_iso <= t.date.isoformat() <= end_iso
        )

    async def get_by_type(self, kind: TransactionKind) -> list[Transaction]:
        return self._newest_first(t for t in self._records.values() if t.kind == kind)

    async def get_by_category(self, category: str) -> list[Transaction]:
        return self._newest_first(t for t in self._records.values() if t.category == category)

    async def update(self, transaction_id: str, fields: dict[str, Any]) -> None:
        existing = self._records.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        unknown = set(fields) - UPDATABLE_TRANSACTION_FIELDS
        if unknown:
            raise StorageError(f"Cannot update fields: {sorted(unknown)}")

        data = existing.model_dump(by_alias=True)
        data.update(fields)
        data["updated_at"] = _now()
        try:
            self._records[transaction_id] = Transaction.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to update transaction: {e}")

    async def delete(self, transaction_id: str) -> None:
        self._records.pop(transaction_id, None)

    async def get_unique_categories(self) -> list[str]:
        return sorted({t.category for t in self._records.values()})


class InMemoryOpeningBalanceStorage(OpeningBalanceStorageInterface):
    """Opening balances of one ledger, keyed by record id."""

    def __init__(self, ledger: Ledger):
        super().__init__(ledger)
        self._records: dict[str, OpeningBalance] = {}

    def _find(self, month: str) -> Optional[OpeningBalance]:
        return next((b for b in self._records.values() if b.month == month), None)

    async def set_for_month(
        self,
        month: str,
        amount: Union[Decimal, int, float, str],
        note: Optional[str] = None,
        recorded_on: Optional[Union[date, str]] = None,
    ) -> str:
        # No await between the lookup and the write, so this is atomic on the event loop
        now = _now()
        created_at = recorded_on_timestamp(recorded_on) if recorded_on else None
        existing = self._find(month)

        try:
            if existing is not None:
                updated = OpeningBalance(
                    id=existing.id,
                    month=month,
                    balance=amount,
                    note=note or None,
                    created_at=created_at or existing.created_at,
                    updated_at=now,
                )
                self._records[existing.id] = updated
                return existing.id

            balance_id = _new_id()
            self._records[balance_id] = OpeningBalance(
                id=balance_id,
                month=month,
                balance=amount,
                note=note or None,
                created_at=created_at or now,
                updated_at=now,
            )
            return balance_id
        except ValidationError as e:
            raise StorageError(f"Failed to set opening balance: {e}")

    async def get_for_month(self, month: str) -> Optional[OpeningBalance]:
        return self._find(month)

    async def get_all(self) -> list[OpeningBalance]:
        return sorted(self._records.values(), key=lambda b: b.month, reverse=True)

    async def delete_for_month(self, month: str) -> None:
        existing = self._find(month)
        if existing is not None:
            del self._records[existing.id]


class InMemoryNoteStorage(NoteStorageInterface):
    """Notes with synchronous change notification."""

    def __init__(self):
        self._records: dict[str, Note] = {}
        self._listeners: list[NotesCallback] = []

    def _snapshot(self) -> list[Note]:
        return sorted(
            self._records.values(),
            key=lambda n: n.updated_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    def _notify(self) -> None:
        notes = self._snapshot()
        for listener in list(self._listeners):
            listener(notes)

    async def create(self, title: str, content: str) -> str:
        note_id = _new_id()
        now = _now()
        self._records[note_id] = Note(
            id=note_id, title=title, content=content, created_at=now, updated_at=now
        )
        self._notify()
        return note_id

    async def update(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> None:
        existing = self._records.get(note_id)
        if existing is None:
            raise NotFoundError(f"Note not found: {note_id}")

        changes: dict[str, Any] = {"updated_at": _now()}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        self._records[note_id] = existing.model_copy(update=changes)
        self._notify()

    async def delete(self, note_id: str) -> None:
        if self._records.pop(note_id, None) is not None:
            self._notify()

    def subscribe(
        self,
        callback: NotesCallback,
        error_callback: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        self._listeners.append(callback)
        callback(self._snapshot())

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe
