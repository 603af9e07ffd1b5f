"""
Google Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the production backend because:
1. The congregation's existing web app already keeps its data there
2. Real-time listeners push note changes without polling
3. No database server to run

Documents keep the field names the web app writes (`type`, `createdAt`,
`updatedAt`) so both clients can share one database. Amounts are stored as
numbers and read back into two-place Decimals.

TRADEOFFS:
- Queries filtering on one field and ordering by another need a
  composite index in the Firebase console
- Operations are not retried; a failed call surfaces as StorageError
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from congregation_accounts.config import FirestoreSettings, get_settings
from congregation_accounts.models.ledger import (
    Ledger,
    OpeningBalance,
    Transaction,
    TransactionKind,
)
from congregation_accounts.models.note import Note
from congregation_accounts.services.storage.interface import (
    UPDATABLE_TRANSACTION_FIELDS,
    ConnectionError,
    ErrorCallback,
    NoteStorageInterface,
    NotesCallback,
    NotFoundError,
    OpeningBalanceStorageInterface,
    StorageError,
    TransactionStorageInterface,
    Unsubscribe,
)
from congregation_accounts.services.storage.memory import recorded_on_timestamp


CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

_CENTS = Decimal("0.01")


def _to_datetime(value: Any) -> Optional[datetime]:
    """Firestore timestamps arrive as datetimes; older documents hold ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS)


def _as_iso(value: Union[date, str]) -> str:
    return value.isoformat() if isinstance(value, date) else value


def transaction_to_document(transaction: Transaction) -> dict:
    """Serialize the user-editable part of a transaction."""
    return {
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "category": transaction.category,
        "amount": float(transaction.amount),
        "type": transaction.kind.value,
    }


def document_to_transaction(doc_id: str, data: dict) -> Transaction:
    return Transaction(
        id=doc_id,
        date=data["date"],
        description=data["description"],
        category=data["category"],
        amount=_to_money(data["amount"]),
        type=data["type"],
        created_at=_to_datetime(data.get(CREATED_AT)),
        updated_at=_to_datetime(data.get(UPDATED_AT)),
    )


def document_to_opening_balance(doc_id: str, data: dict) -> OpeningBalance:
    # Older seeded documents store `amount` instead of `balance`
    raw_balance = data.get("balance", data.get("amount", 0))
    return OpeningBalance(
        id=doc_id,
        month=data["month"],
        balance=_to_money(raw_balance),
        note=data.get("note") or None,
        created_at=_to_datetime(data.get(CREATED_AT)),
        updated_at=_to_datetime(data.get(UPDATED_AT)),
    )


def document_to_note(doc_id: str, data: dict) -> Note:
    return Note(
        id=doc_id,
        title=data.get("title", ""),
        content=data.get("content", ""),
        created_at=_to_datetime(data.get(CREATED_AT)),
        updated_at=_to_datetime(data.get(UPDATED_AT)),
    )


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles authentication and retries establishing the connection.
    """

    def __init__(self, settings: Optional[FirestoreSettings] = None):
        self._client: Optional[firestore.Client] = None
        self._settings = settings or get_settings().firestore

    @property
    def settings(self) -> FirestoreSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> firestore.Client:
        """
        Establish connection to Firestore.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=["https://www.googleapis.com/auth/datastore"],
                )
                self._client = firestore.Client(
                    project=self._settings.project_id,
                    credentials=credentials,
                )
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Firestore: {e}")

        return self._client

    def collection(self, name: str) -> firestore.CollectionReference:
        return self.connect().collection(name)


class FirestoreTransactionStorage(TransactionStorageInterface):
    """
    Firestore implementation of transaction storage.

    One document per transaction in the ledger's transactions collection.
    """

    def __init__(self, ledger: Ledger, client: Optional[FirestoreClient] = None):
        super().__init__(ledger)
        self._client = client or FirestoreClient()

    def _collection(self) -> firestore.CollectionReference:
        return self._client.collection(self._ledger.transactions_collection)

    def _run(self, query) -> list[Transaction]:
        ordered = query.order_by("date", direction=firestore.Query.DESCENDING)
        return [document_to_transaction(doc.id, doc.to_dict()) for doc in ordered.stream()]

    async def add(self, transaction: Transaction) -> str:
        """Save a new transaction to Firestore."""
        try:
            document = transaction_to_document(transaction)
            document[CREATED_AT] = firestore.SERVER_TIMESTAMP
            document[UPDATED_AT] = firestore.SERVER_TIMESTAMP
            _, ref = self._collection().add(document)
            return ref.id
        except Exception as e:
            raise StorageError(f"Failed to add transaction: {e}")

    async def get_all(self) -> list[Transaction]:
        try:
            return self._run(self._collection())
        except Exception as e:
            raise StorageError(f"Failed to get transactions: {e}")

    async def get_by_date_range(
        self,
        start: Union[date, str],
        end: Union[date, str],
    ) -> list[Transaction]:
        try:
            query = (
                self._collection()
                .where(filter=FieldFilter("date", ">=", _as_iso(start)))
                .where(filter=FieldFilter("date", "<=", _as_iso(end)))
            )
            return self._run(query)
        except Exception as e:
            raise StorageError(f"Failed to get transactions by date range: {e}")

    async def get_by_type(self, kind: TransactionKind) -> list[Transaction]:
        try:
            query = self._collection().where(filter=FieldFilter("type", "==", kind.value))
            return self._run(query)
        except Exception as e:
            raise StorageError(f"Failed to get transactions by type: {e}")

    async def get_by_category(self, category: str) -> list[Transaction]:
        try:
            query = self._collection().where(filter=FieldFilter("category", "==", category))
            return self._run(query)
        except Exception as e:
            raise StorageError(f"Failed to get transactions by category: {e}")

    async def update(self, transaction_id: str, fields: dict[str, Any]) -> None:
        """Validate the merged record, then write only the changed fields."""
        unknown = set(fields) - UPDATABLE_TRANSACTION_FIELDS
        if unknown:
            raise StorageError(f"Cannot update fields: {sorted(unknown)}")

        try:
            ref = self._collection().document(transaction_id)
            snapshot = ref.get()
            if not snapshot.exists:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

            current = document_to_transaction(snapshot.id, snapshot.to_dict())
            merged = current.model_dump(by_alias=True)
            merged.update(fields)
            updated = Transaction.model_validate(merged)

            document = transaction_to_document(updated)
            changes = {name: document[name] for name in fields}
            changes[UPDATED_AT] = firestore.SERVER_TIMESTAMP
            ref.update(changes)
        except NotFoundError:
            raise
        except ValidationError as e:
            raise StorageError(f"Invalid transaction update: {e}")
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")

    async def delete(self, transaction_id: str) -> None:
        try:
            self._collection().document(transaction_id).delete()
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")

    async def get_unique_categories(self) -> list[str]:
        try:
            categories = set()
            for doc in self._collection().stream():
                category = (doc.to_dict() or {}).get("category")
                if category:
                    categories.add(category)
            return sorted(categories)
        except Exception as e:
            raise StorageError(f"Failed to get unique categories: {e}")


class FirestoreOpeningBalanceStorage(OpeningBalanceStorageInterface):
    """
    Firestore implementation of opening balance storage.

    The month lookup and the insert-or-update run inside one Firestore
    transaction, so two writers for the same month cannot both insert.
    """

    def __init__(self, ledger: Ledger, client: Optional[FirestoreClient] = None):
        super().__init__(ledger)
        self._client = client or FirestoreClient()

    def _collection(self) -> firestore.CollectionReference:
        return self._client.collection(self._ledger.opening_balances_collection)

    def _month_query(self, month: str):
        return self._collection().where(filter=FieldFilter("month", "==", month)).limit(1)

    async def set_for_month(
        self,
        month: str,
        amount: Union[Decimal, int, float, str],
        note: Optional[str] = None,
        recorded_on: Optional[Union[date, str]] = None,
    ) -> str:
        try:
            balance = OpeningBalance(month=month, balance=amount, note=note)
        except ValidationError as e:
            raise StorageError(f"Invalid opening balance: {e}")

        collection = self._collection()
        query = self._month_query(month)
        now = datetime.now(timezone.utc)

        fields: dict[str, Any] = {
            "balance": float(balance.balance),
            "note": balance.note or "",
            UPDATED_AT: now,
        }
        if recorded_on:
            fields[CREATED_AT] = recorded_on_timestamp(recorded_on)

        @firestore.transactional
        def upsert(transaction) -> str:
            existing = next(iter(transaction.get(query)), None)
            if existing is not None:
                transaction.update(existing.reference, fields)
                return existing.id

            ref = collection.document()
            transaction.set(ref, {"month": month, CREATED_AT: now, **fields})
            return ref.id

        try:
            return upsert(self._client.connect().transaction())
        except Exception as e:
            raise StorageError(f"Failed to set opening balance: {e}")

    async def get_for_month(self, month: str) -> Optional[OpeningBalance]:
        try:
            for doc in self._month_query(month).stream():
                return document_to_opening_balance(doc.id, doc.to_dict())
            return None
        except Exception as e:
            raise StorageError(f"Failed to get opening balance: {e}")

    async def get_all(self) -> list[OpeningBalance]:
        try:
            query = self._collection().order_by("month", direction=firestore.Query.DESCENDING)
            return [document_to_opening_balance(doc.id, doc.to_dict()) for doc in query.stream()]
        except Exception as e:
            raise StorageError(f"Failed to get opening balances: {e}")

    async def delete_for_month(self, month: str) -> None:
        try:
            for doc in self._month_query(month).stream():
                doc.reference.delete()
        except Exception as e:
            raise StorageError(f"Failed to delete opening balance: {e}")


class FirestoreNoteStorage(NoteStorageInterface):
    """
    Firestore implementation of note storage.

    Snapshot callbacks run on the Firestore listener thread.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    def _collection(self) -> firestore.CollectionReference:
        return self._client.collection(self._client.settings.notes_collection)

    async def create(self, title: str, content: str) -> str:
        try:
            _, ref = self._collection().add({
                "title": title,
                "content": content,
                CREATED_AT: firestore.SERVER_TIMESTAMP,
                UPDATED_AT: firestore.SERVER_TIMESTAMP,
            })
            return ref.id
        except Exception as e:
            raise StorageError(f"Failed to create note: {e}")

    async def update(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> None:
        changes: dict[str, Any] = {UPDATED_AT: firestore.SERVER_TIMESTAMP}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        try:
            self._collection().document(note_id).update(changes)
        except Exception as e:
            raise StorageError(f"Failed to update note: {e}")

    async def delete(self, note_id: str) -> None:
        try:
            self._collection().document(note_id).delete()
        except Exception as e:
            raise StorageError(f"Failed to delete note: {e}")

    def subscribe(
        self,
        callback: NotesCallback,
        error_callback: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        def report(error: Exception) -> None:
            if error_callback is not None:
                error_callback(error)

        def on_snapshot(snapshots, changes, read_time) -> None:
            try:
                notes = [document_to_note(doc.id, doc.to_dict()) for doc in snapshots]
            except Exception as e:
                report(StorageError(f"Failed to read notes: {e}"))
                return
            callback(notes)

        try:
            query = self._collection().order_by(UPDATED_AT, direction=firestore.Query.DESCENDING)
            watch = query.on_snapshot(on_snapshot)
        except Exception as e:
            report(StorageError(f"Failed to subscribe to notes: {e}"))
            return lambda: None

        return watch.unsubscribe
