"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Firestore is the production backend; the in-memory backend serves tests and
runs without credentials.
"""

from congregation_accounts.services.storage.interface import (
    ConnectionError,
    NoteStorageInterface,
    NotFoundError,
    OpeningBalanceStorageInterface,
    StorageError,
    TransactionStorageInterface,
    search_notes,
    sort_notes,
)
from congregation_accounts.services.storage.memory import (
    InMemoryNoteStorage,
    InMemoryOpeningBalanceStorage,
    InMemoryTransactionStorage,
)
from congregation_accounts.services.storage.firestore import (
    FirestoreClient,
    FirestoreNoteStorage,
    FirestoreOpeningBalanceStorage,
    FirestoreTransactionStorage,
)

__all__ = [
    # Interfaces
    "NoteStorageInterface",
    "OpeningBalanceStorageInterface",
    "TransactionStorageInterface",
    "search_notes",
    "sort_notes",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryNoteStorage",
    "InMemoryOpeningBalanceStorage",
    "InMemoryTransactionStorage",
    # Firestore implementation
    "FirestoreClient",
    "FirestoreNoteStorage",
    "FirestoreOpeningBalanceStorage",
    "FirestoreTransactionStorage",
]
