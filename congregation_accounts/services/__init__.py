"""Services package."""

from congregation_accounts.services.storage import (
    ConnectionError,
    FirestoreClient,
    FirestoreNoteStorage,
    FirestoreOpeningBalanceStorage,
    FirestoreTransactionStorage,
    InMemoryNoteStorage,
    InMemoryOpeningBalanceStorage,
    InMemoryTransactionStorage,
    NoteStorageInterface,
    NotFoundError,
    OpeningBalanceStorageInterface,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "ConnectionError",
    "FirestoreClient",
    "FirestoreNoteStorage",
    "FirestoreOpeningBalanceStorage",
    "FirestoreTransactionStorage",
    "InMemoryNoteStorage",
    "InMemoryOpeningBalanceStorage",
    "InMemoryTransactionStorage",
    "NoteStorageInterface",
    "NotFoundError",
    "OpeningBalanceStorageInterface",
    "StorageError",
    "TransactionStorageInterface",
]
