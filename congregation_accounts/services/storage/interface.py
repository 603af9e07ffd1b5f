"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep Firestore details out of the stores and the UI
2. Use in-memory storage for testing
3. Run the same code against either ledger

One set of interfaces serves both ledgers. An implementation is bound to
a `Ledger` when constructed and only ever touches that ledger's
collections.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from congregation_accounts.models.ledger import (
    Ledger,
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.note import Note


NotesCallback = Callable[[list[Note]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]

# Fields a caller may change on an existing transaction
UPDATABLE_TRANSACTION_FIELDS = frozenset({"date", "description", "category", "amount", "type"})


class TransactionStorageInterface(ABC):
    """
    Abstract interface for one ledger's transactions.

    Every list returned is ordered by date, newest first.
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @abstractmethod
    async def add(self, transaction: Transaction) -> str:
        """
        Save a new transaction.

        Returns:
            The identifier assigned by storage

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[Transaction]:
        pass

    @abstractmethod
    async def get_by_date_range(
        self,
        start: Union[date, str],
        end: Union[date, str],
    ) -> list[Transaction]:
        """Transactions dated between start and end, both inclusive."""
        pass

    @abstractmethod
    async def get_by_type(self, kind: TransactionKind) -> list[Transaction]:
        pass

    @abstractmethod
    async def get_by_category(self, category: str) -> list[Transaction]:
        pass

    @abstractmethod
    async def update(self, transaction_id: str, fields: dict[str, Any]) -> None:
        """
        Change some fields of an existing transaction.

        Args:
            transaction_id: The transaction to change
            fields: Subset of UPDATABLE_TRANSACTION_FIELDS

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the update fails or the result is invalid
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: str) -> None:
        pass

    @abstractmethod
    async def get_unique_categories(self) -> list[str]:
        """Every category used by a stored transaction, sorted."""
        pass


class OpeningBalanceStorageInterface(ABC):
    """
    Abstract interface for one ledger's opening balances.

    There is at most one opening balance per month.
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @abstractmethod
    async def set_for_month(
        self,
        month: str,
        amount: Union[Decimal, int, float, str],
        note: Optional[str] = None,
        recorded_on: Optional[Union[date, str]] = None,
    ) -> str:
        """
        Create or replace the opening balance for a month.

        Args:
            month: Month key (YYYY-MM)
            amount: Signed balance
            note: Optional free text
            recorded_on: When given, becomes the record's creation
                timestamp whether the record is new or already existed

        Returns:
            Identifier of the single record for that month
        """
        pass

    @abstractmethod
    async def get_for_month(self, month: str) -> Optional[OpeningBalance]:
        pass

    @abstractmethod
    async def get_all(self) -> list[OpeningBalance]:
        """All opening balances, newest month first."""
        pass

    @abstractmethod
    async def delete_for_month(self, month: str) -> None:
        """Remove the month's opening balance. Missing months are ignored."""
        pass


class NoteStorageInterface(ABC):
    """
    Abstract interface for notes.

    Notes are read through a live subscription rather than queries.
    """

    @abstractmethod
    async def create(self, title: str, content: str) -> str:
        pass

    @abstractmethod
    async def update(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    async def delete(self, note_id: str) -> None:
        pass

    @abstractmethod
    def subscribe(
        self,
        callback: NotesCallback,
        error_callback: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """
        Push the full note list (most recently updated first) on every change.

        Returns:
            A function that stops the subscription
        """
        pass


def search_notes(notes: list[Note], term: str) -> list[Note]:
    """Case-insensitive match on title or content."""
    needle = term.lower()
    return [
        note for note in notes
        if needle in note.title.lower() or needle in note.content.lower()
    ]


def sort_notes(notes: list[Note], sort_by: str = "updated_at", order: str = "asc") -> list[Note]:
    if sort_by not in ("title", "created_at", "updated_at"):
        raise ValueError(f"Cannot sort notes by {sort_by!r}")

    def key(note: Note):
        if sort_by == "title":
            return note.title.lower()
        value = getattr(note, sort_by)
        return value.timestamp() if value else 0.0

    return sorted(notes, key=key, reverse=(order == "desc"))


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
