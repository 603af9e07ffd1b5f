"""
Streamlit Frontend for Congregation Accounts

The screens the accounts servant uses every month:
1. Dashboard - balance for the selected month and recent activity
2. Transactions - record, edit and delete income and expenses
3. Opening Balances - set the balance each month starts with
4. Reports - monthly PDF report and a plain-text summary
5. Notes - free-form notes shared by both ledgers

DESIGN PRINCIPLES:
- The UI never talks to storage directly; it goes through the stores
- Form errors are shown next to the form and nothing is saved
- Storage errors come from the store's `error` and are shown as-is
"""

import asyncio
from datetime import date

import streamlit as st

from congregation_accounts.aggregation import (
    format_monthly_report_text,
    recent_transactions,
    sort_transactions,
)
from congregation_accounts.audit import configure_logging
from congregation_accounts.config import get_settings, validate_all_settings
from congregation_accounts.models.forms import OpeningBalanceForm, TransactionForm
from congregation_accounts.models.ledger import LEDGERS, TransactionKind
from congregation_accounts.orchestrator import LedgerStore, NotesStore, create_app_components
from congregation_accounts.reports import ReportAssembler
from congregation_accounts.utils.dates import current_month, next_month
from congregation_accounts.utils.formatting import (
    format_category_name,
    format_currency,
    format_date,
    format_month_year,
)
from congregation_accounts.validation import summarize_issues


# Page configuration
st.set_page_config(
    page_title="Congregation Accounts",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.log_level)
    ledger_stores, notes_store, assembler = create_app_components(use_storage=True)
    for store in ledger_stores.values():
        run_async(store.load())
    notes_store.load()
    return ledger_stores, notes_store, assembler


def money(amount) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def show_store_error(store) -> None:
    if store.error:
        st.error(store.error)


def main():
    """Main application entry point."""
    ledger_stores, notes_store, assembler = get_components()

    st.sidebar.title("📒 Congregation Accounts")
    ledger_key = st.sidebar.selectbox(
        "Ledger",
        list(LEDGERS),
        format_func=lambda key: LEDGERS[key].label,
    )
    store = ledger_stores[ledger_key]

    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💸 Transactions", "🏦 Opening Balances", "📄 Reports", "📝 Notes"],
        index=0,
    )

    if st.sidebar.button("Reload"):
        run_async(store.load())

    status = validate_all_settings()
    if not status.get("firestore"):
        st.sidebar.warning("Firestore is not configured. Changes are kept in memory only.")

    if page == "📊 Dashboard":
        render_dashboard(store)
    elif page == "💸 Transactions":
        render_transactions_page(store)
    elif page == "🏦 Opening Balances":
        render_opening_balances_page(store)
    elif page == "📄 Reports":
        render_reports_page(store, assembler)
    else:
        render_notes_page(notes_store)


def select_month(store: LedgerStore, key: str) -> str:
    months = store.available_months() or [current_month()]
    return st.selectbox("Month", months, format_func=format_month_year, key=key)


def render_dashboard(store: LedgerStore):
    st.title(f"📊 {store.ledger.label} Dashboard")
    show_store_error(store)

    month = select_month(store, "dashboard_month")
    data = store.monthly_data(month)
    opening = data.opening_balance.balance if data.opening_balance else 0

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Opening Balance", money(opening))
    col2.metric("Income", money(data.summary.total_income))
    col3.metric("Expenses", money(data.summary.total_expenses))
    col4.metric("Ending Balance", money(data.ending_balance))

    if store.should_suggest_next_month_balance(month):
        st.info(
            f"No opening balance set for {format_month_year(next_month(month))} yet. "
            f"Carry forward {money(data.ending_balance)}?"
        )
        if st.button("Set next month's opening balance"):
            run_async(store.set_opening_balance(next_month(month), data.ending_balance))
            st.rerun()

    st.subheader("Recent Transactions")
    limit = get_settings().app.recent_transactions_limit
    for txn in recent_transactions(store.transactions, limit):
        sign = "+" if txn.is_income else "-"
        st.write(
            f"{format_date(txn.date)} · {txn.description} · "
            f"{format_category_name(txn.category)} · {sign}{money(txn.amount)}"
        )


def render_transactions_page(store: LedgerStore):
    st.title("💸 Transactions")
    show_store_error(store)

    with st.form("add_transaction", clear_on_submit=True):
        kind = st.radio("Type", [k.value for k in TransactionKind], horizontal=True)
        category = st.selectbox("Category", store.ledger.categories)
        description = st.text_input("Description")
        amount = st.text_input("Amount")
        txn_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Save Transaction")

    if submitted:
        form = TransactionForm(
            description=description,
            category=category,
            amount=amount,
            type=kind,
            date=txn_date.isoformat(),
        )
        transaction_id, result = run_async(store.submit_transaction(form))
        if not result.is_valid:
            st.warning(summarize_issues(result))
        elif transaction_id:
            st.success("Transaction saved.")
        else:
            show_store_error(store)

    st.subheader("All Transactions")
    col1, col2 = st.columns(2)
    field = col1.selectbox("Sort by", ["date", "amount", "description", "category", "type"])
    order = col2.selectbox("Order", ["desc", "asc"])

    for txn in sort_transactions(store.transactions, field, order):
        with st.expander(f"{format_date(txn.date)} · {txn.description} · {money(txn.amount)}"):
            st.write(f"**Category:** {txn.category}")
            st.write(f"**Type:** {txn.kind.value}")
            new_amount = st.text_input("Amount", value=str(txn.amount), key=f"amount_{txn.id}")
            col1, col2 = st.columns(2)
            if col1.button("Update amount", key=f"update_{txn.id}"):
                if run_async(store.update_transaction(txn.id, {"amount": new_amount})):
                    st.rerun()
                show_store_error(store)
            if col2.button("Delete", key=f"delete_{txn.id}"):
                if run_async(store.delete_transaction(txn.id)):
                    st.rerun()
                show_store_error(store)


def render_opening_balances_page(store: LedgerStore):
    st.title("🏦 Opening Balances")
    show_store_error(store)

    with st.form("opening_balance"):
        month = st.text_input("Month (YYYY-MM)", value=current_month())
        balance = st.text_input("Balance")
        note = st.text_area("Note")
        submitted = st.form_submit_button("Save Opening Balance")

    if submitted:
        form = OpeningBalanceForm(balance=balance, note=note or None, month=month)
        saved, result = run_async(store.submit_opening_balance(form))
        if not result.is_valid:
            st.warning(summarize_issues(result))
        elif saved:
            st.success(f"Opening balance for {format_month_year(month)} saved.")
        else:
            show_store_error(store)

    for balance in store.opening_balances:
        col1, col2, col3 = st.columns([2, 2, 1])
        col1.write(format_month_year(balance.month))
        col2.write(money(balance.balance))
        if col3.button("Delete", key=f"delete_balance_{balance.month}"):
            if run_async(store.delete_opening_balance(balance.month)):
                st.rerun()


def render_reports_page(store: LedgerStore, assembler: ReportAssembler):
    st.title("📄 Monthly Report")
    show_store_error(store)

    month = select_month(store, "report_month")
    report = store.monthly_report(month)
    st.code(format_monthly_report_text(report, get_settings().app.currency_symbol))

    report_input = store.report_input(month, congregation_name=get_settings().report.congregation_name)
    if st.button("Generate PDF"):
        try:
            download = assembler.download(report_input)
        except Exception as e:
            st.error(f"Could not generate the report: {e}")
            return
        st.download_button(
            "Download PDF",
            data=download.content,
            file_name=download.filename,
            mime=download.mime_type,
        )


def render_notes_page(notes_store: NotesStore):
    st.title("📝 Notes")
    show_store_error(notes_store)

    with st.form("add_note", clear_on_submit=True):
        title = st.text_input("Title")
        content = st.text_area("Content")
        if st.form_submit_button("Add Note"):
            run_async(notes_store.add_note(title, content))

    col1, col2, col3 = st.columns(3)
    notes_store.search_term = col1.text_input("Search")
    notes_store.sort_by = col2.selectbox("Sort by", ["updated_at", "created_at", "title"])
    notes_store.sort_order = col3.selectbox("Order", ["desc", "asc"], key="notes_order")

    for note in notes_store.filtered_notes:
        with st.expander(note.title or "(untitled)"):
            st.write(note.content)
            if st.button("Delete", key=f"delete_note_{note.id}"):
                run_async(notes_store.delete_note(note.id))
                st.rerun()


if __name__ == "__main__":
    main()
