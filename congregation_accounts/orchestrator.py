"""
Main Orchestrator for Congregation Accounts

This module ties together storage, aggregation and reporting and holds
the application state the UI reads:
1. One LedgerStore per ledger (transactions and opening balances)
2. One NotesStore (live note list with search and sorting)

DESIGN DECISION: Stores are the error boundary.
- Storage errors are caught here, never in the UI
- A failed operation sets `error` to a readable message, is audited,
  and returns a failure value (None or False)
- Nothing is retried

Listeners registered with `subscribe` are called after every state change.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional, Union

import structlog

from congregation_accounts.aggregation import engine
from congregation_accounts.audit import AuditLogger
from congregation_accounts.models.forms import (
    OpeningBalanceForm,
    TransactionForm,
    ValidationResult,
)
from congregation_accounts.models.ledger import (
    DEFAULT_LEDGER,
    KHOC_LEDGER,
    Ledger,
    OpeningBalance,
    Transaction,
)
from congregation_accounts.models.note import Note
from congregation_accounts.models.report import MonthlyData, MonthlyReport, ReportInput
from congregation_accounts.reports import ReportAssembler, create_renderer
from congregation_accounts.services.storage import (
    FirestoreClient,
    FirestoreNoteStorage,
    FirestoreOpeningBalanceStorage,
    FirestoreTransactionStorage,
    InMemoryNoteStorage,
    InMemoryOpeningBalanceStorage,
    InMemoryTransactionStorage,
    NoteStorageInterface,
    OpeningBalanceStorageInterface,
    StorageError,
    TransactionStorageInterface,
    search_notes,
    sort_notes,
)
from congregation_accounts.utils.dates import today_local_date
from congregation_accounts.validation import validate_opening_balance, validate_transaction


logger = structlog.get_logger(__name__)

Listener = Callable[[], None]

_CENTS = Decimal("0.01")


def _form_amount(value: Any) -> Decimal:
    return Decimal(str(value).strip()).quantize(_CENTS, rounding=ROUND_HALF_UP)


class _ObservableStore:
    """Keeps a list of change listeners."""

    def __init__(self):
        self._listeners: list[Listener] = []
        self.loading = False
        self.error: Optional[str] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def clear_error(self) -> None:
        self.error = None
        self._notify()


class LedgerStore(_ObservableStore):
    """
    Cached transactions and opening balances of one ledger.

    Every mutation reloads the affected list from storage, so the cache
    always reflects what storage returned last.
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        balance_storage: OpeningBalanceStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__()
        self._transactions_db = transaction_storage
        self._balances_db = balance_storage
        self._audit = audit_logger or AuditLogger()

        self.transactions: list[Transaction] = []
        self.opening_balances: list[OpeningBalance] = []
        self.categories: list[str] = []

    @property
    def ledger(self) -> Ledger:
        return self._transactions_db.ledger

    def _fail(self, operation: str, message: str, error: Exception) -> None:
        self.error = message
        self._audit.log_storage_error(operation, str(error), ledger=self.ledger.key)

    async def _reload_transactions(self) -> None:
        self.transactions = await self._transactions_db.get_all()
        self.categories = await self._transactions_db.get_unique_categories()

    async def _reload_balances(self) -> None:
        self.opening_balances = await self._balances_db.get_all()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """Load transactions, categories and opening balances."""
        self.loading = True
        self.error = None
        self._notify()
        try:
            await self._reload_transactions()
            await self._reload_balances()
            return True
        except StorageError as e:
            self._fail("load ledger", "Failed to load transactions", e)
            return False
        finally:
            self.loading = False
            self._notify()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(self, transaction: Transaction) -> Optional[str]:
        self.loading = True
        self.error = None
        try:
            transaction_id = await self._transactions_db.add(transaction)
            await self._reload_transactions()
        except StorageError as e:
            self._fail("add transaction", "Failed to add transaction", e)
            return None
        finally:
            self.loading = False
            self._notify()

        self._audit.log_transaction_added(
            ledger=self.ledger.key,
            transaction_id=transaction_id,
            description=transaction.description,
            kind=transaction.kind.value,
            amount=str(transaction.amount),
        )
        return transaction_id

    async def submit_transaction(
        self,
        form: TransactionForm,
    ) -> tuple[Optional[str], ValidationResult]:
        """
        Validate a form and save it when valid.

        A missing date defaults to today.

        Returns:
            (transaction_id, validation_result); the id is None when
            validation or saving failed
        """
        result = validate_transaction(form, self.ledger)
        if not result.is_valid:
            return None, result

        transaction = Transaction(
            date=form.date or today_local_date(),
            description=form.description,
            category=form.category,
            amount=_form_amount(form.amount),
            type=form.type,
        )
        return await self.add_transaction(transaction), result

    async def update_transaction(self, transaction_id: str, fields: dict[str, Any]) -> bool:
        self.loading = True
        self.error = None
        try:
            await self._transactions_db.update(transaction_id, fields)
            await self._reload_transactions()
        except StorageError as e:
            self._fail("update transaction", "Failed to update transaction", e)
            return False
        finally:
            self.loading = False
            self._notify()

        self._audit.log_transaction_updated(self.ledger.key, transaction_id, list(fields))
        return True

    async def delete_transaction(self, transaction_id: str) -> bool:
        self.loading = True
        self.error = None
        try:
            await self._transactions_db.delete(transaction_id)
            await self._reload_transactions()
        except StorageError as e:
            self._fail("delete transaction", "Failed to delete transaction", e)
            return False
        finally:
            self.loading = False
            self._notify()

        self._audit.log_transaction_deleted(self.ledger.key, transaction_id)
        return True

    # -------------------------------------------------------------------------
    # Opening balances
    # -------------------------------------------------------------------------

    async def get_opening_balance(self, month: str) -> Optional[OpeningBalance]:
        try:
            return await self._balances_db.get_for_month(month)
        except StorageError as e:
            self._fail("get opening balance", "Failed to get opening balance", e)
            self._notify()
            return None

    async def set_opening_balance(
        self,
        month: str,
        amount: Union[Decimal, int, float, str],
        note: Optional[str] = None,
        recorded_on: Optional[Union[date, str]] = None,
    ) -> bool:
        self.loading = True
        self.error = None
        try:
            balance_id = await self._balances_db.set_for_month(month, amount, note, recorded_on)
            await self._reload_balances()
        except StorageError as e:
            self._fail("set opening balance", "Failed to save opening balance", e)
            return False
        finally:
            self.loading = False
            self._notify()

        self._audit.log_opening_balance_set(self.ledger.key, month, str(amount), balance_id)
        return True

    async def submit_opening_balance(
        self,
        form: OpeningBalanceForm,
        recorded_on: Optional[Union[date, str]] = None,
    ) -> tuple[bool, ValidationResult]:
        result = validate_opening_balance(form)
        if not result.is_valid:
            return False, result
        amount = _form_amount(form.balance)
        saved = await self.set_opening_balance(form.month, amount, form.note, recorded_on)
        return saved, result

    async def delete_opening_balance(self, month: str) -> bool:
        self.loading = True
        self.error = None
        try:
            await self._balances_db.delete_for_month(month)
            await self._reload_balances()
        except StorageError as e:
            self._fail("delete opening balance", "Failed to delete opening balance", e)
            return False
        finally:
            self.loading = False
            self._notify()

        self._audit.log_opening_balance_deleted(self.ledger.key, month)
        return True

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def available_months(self) -> list[str]:
        return engine.available_months(self.transactions, self.opening_balances)

    def most_recent_month(self) -> Optional[str]:
        return engine.most_recent_month(self.transactions, self.opening_balances)

    def monthly_data(self, month: str) -> MonthlyData:
        return engine.monthly_data(month, self.transactions, self.opening_balances)

    def monthly_report(self, month: str) -> MonthlyReport:
        data = self.monthly_data(month)
        return engine.build_monthly_report(month, data.transactions, data.opening_balance)

    def should_suggest_next_month_balance(self, month: str) -> bool:
        data = self.monthly_data(month)
        return engine.should_suggest_next_month_balance(
            month, data.transactions, self.opening_balances
        )

    def report_input(
        self,
        month: str,
        congregation_name: Optional[str] = None,
        report_date: Optional[str] = None,
    ) -> ReportInput:
        data = self.monthly_data(month)
        return ReportInput(
            month=month,
            transactions=data.transactions,
            opening_balance=data.opening_balance,
            congregation_name=congregation_name,
            report_date=report_date,
        )


class NotesStore(_ObservableStore):
    """Live list of notes with search and sort settings."""

    def __init__(
        self,
        storage: NoteStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__()
        self._db = storage
        self._audit = audit_logger or AuditLogger()
        self._unsubscribe: Optional[Callable[[], None]] = None

        self.notes: list[Note] = []
        self.search_term = ""
        self.sort_by = "updated_at"
        self.sort_order = "desc"

    @property
    def filtered_notes(self) -> list[Note]:
        notes = self.notes
        if self.search_term:
            notes = search_notes(notes, self.search_term)
        return sort_notes(notes, self.sort_by, self.sort_order)

    def _on_notes(self, notes: list[Note]) -> None:
        self.notes = notes
        self.loading = False
        self._notify()

    def _on_error(self, error: Exception) -> None:
        self.error = f"Failed to load notes: {error}"
        self.loading = False
        self._audit.log_storage_error("subscribe notes", str(error))
        self._notify()

    def load(self) -> None:
        """(Re)start the live subscription."""
        self.close()
        self.loading = True
        self.error = None
        self._unsubscribe = self._db.subscribe(self._on_notes, self._on_error)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def add_note(self, title: str, content: str) -> Optional[str]:
        self.error = None
        try:
            note_id = await self._db.create(title, content)
        except StorageError as e:
            self.error = f"Failed to add note: {e}"
            self._audit.log_storage_error("add note", str(e))
            self._notify()
            return None
        self._audit.log_note_created(note_id)
        return note_id

    async def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> bool:
        self.error = None
        try:
            await self._db.update(note_id, title=title, content=content)
        except StorageError as e:
            self.error = f"Failed to update note: {e}"
            self._audit.log_storage_error("update note", str(e))
            self._notify()
            return False
        self._audit.log_note_updated(note_id)
        return True

    async def delete_note(self, note_id: str) -> bool:
        self.error = None
        try:
            await self._db.delete(note_id)
        except StorageError as e:
            self.error = f"Failed to delete note: {e}"
            self._audit.log_storage_error("delete note", str(e))
            self._notify()
            return False
        self._audit.log_note_deleted(note_id)
        return True


def create_app_components(
    use_storage: bool = True,
) -> tuple[dict[str, LedgerStore], NotesStore, ReportAssembler]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use Firestore.
                    Set to False to run against in-memory storage.

    Returns:
        (ledger_stores keyed by ledger key, notes_store, report_assembler)
    """
    audit_logger = AuditLogger()
    ledgers = (DEFAULT_LEDGER, KHOC_LEDGER)
    client = None

    if use_storage:
        try:
            client = FirestoreClient()
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))

    if client is not None:
        ledger_stores = {
            ledger.key: LedgerStore(
                FirestoreTransactionStorage(ledger, client),
                FirestoreOpeningBalanceStorage(ledger, client),
                audit_logger,
            )
            for ledger in ledgers
        }
        note_storage: NoteStorageInterface = FirestoreNoteStorage(client)
    else:
        ledger_stores = {
            ledger.key: LedgerStore(
                InMemoryTransactionStorage(ledger),
                InMemoryOpeningBalanceStorage(ledger),
                audit_logger,
            )
            for ledger in ledgers
        }
        note_storage = InMemoryNoteStorage()

    notes_store = NotesStore(note_storage, audit_logger)
    assembler = ReportAssembler(create_renderer(), audit_logger)

    return ledger_stores, notes_store, assembler
