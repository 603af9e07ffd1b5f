"""
Seed a fresh Firestore project with a test user and sample data.

Creates:
- A Firebase Auth user (reused if the email is already registered)
- Four January 2024 transactions in the default ledger
- Three notes
- The 2024-01 opening balance of 5000.00

Usage:
    python -m scripts.seed_firestore

Reads the FIRESTORE_* settings plus SEED_USER_EMAIL / SEED_USER_PASSWORD.
"""

import asyncio
import sys
from decimal import Decimal

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from congregation_accounts.config import get_settings
from congregation_accounts.models.ledger import DEFAULT_LEDGER, Transaction
from congregation_accounts.services.storage import (
    FirestoreClient,
    FirestoreNoteStorage,
    FirestoreOpeningBalanceStorage,
    FirestoreTransactionStorage,
    StorageError,
)


class SeedSettings(BaseSettings):
    """Test user created by the seeding script."""

    model_config = SettingsConfigDict(
        env_prefix="SEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    user_email: str = Field(default="test@congregation.org")
    user_password: str = Field(default="TestPassword123!", min_length=6)


SAMPLE_TRANSACTIONS = [
    Transaction(
        date="2024-01-15",
        description="Contributions to Worldwide Work",
        category="Worldwide Work Donations",
        amount=Decimal("500.00"),
        type="income",
    ),
    Transaction(
        date="2024-01-15",
        description="Contributions - Local Congregation Expenses",
        category="Local Congregation Donations",
        amount=Decimal("300.00"),
        type="income",
    ),
    Transaction(
        date="2024-01-20",
        description="Electricity Bill",
        category="Local Congregation Expenses",
        amount=Decimal("150.00"),
        type="expense",
    ),
    Transaction(
        date="2024-01-25",
        description="Internet Service",
        category="Local Congregation Expenses",
        amount=Decimal("50.00"),
        type="expense",
    ),
]

SAMPLE_NOTES = [
    (
        "Monthly Accounts Review",
        "Review completed for January 2024. All receipts have been verified and filed. "
        "Total donations: ₱800. Total expenses: ₱200. Net balance: ₱600.",
    ),
    (
        "Upcoming Expenses",
        "Expected expenses for next month:\n- Electricity: ₱150\n- Internet: ₱50\n"
        "- Office Supplies: ₱30\n- Cleaning Supplies: ₱20\nTotal Expected: ₱250",
    ),
    (
        "Circuit Overseer Visit",
        "CO visit scheduled for March 2024. Need to prepare:\n- Accommodation arrangements\n"
        "- Transportation budget\n- Meal arrangements\nEstimated budget needed: ₱2000",
    ),
]

SAMPLE_OPENING_MONTH = "2024-01"
SAMPLE_OPENING_BALANCE = Decimal("5000.00")


def ensure_test_user(seed: SeedSettings, credentials_path: str) -> str:
    """Create the test user, or look it up if it already exists. Returns the uid."""
    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app(credentials.Certificate(credentials_path))

    try:
        user = auth.create_user(email=seed.user_email, password=seed.user_password)
        print(f"✓ Test user created: {seed.user_email}")
    except auth.EmailAlreadyExistsError:
        user = auth.get_user_by_email(seed.user_email)
        print(f"Test user already exists: {seed.user_email}")
    return user.uid


async def seed_data(client: FirestoreClient) -> None:
    transactions = FirestoreTransactionStorage(DEFAULT_LEDGER, client)
    for transaction in SAMPLE_TRANSACTIONS:
        await transactions.add(transaction)
    print(f"✓ Created {len(SAMPLE_TRANSACTIONS)} sample transactions")

    notes = FirestoreNoteStorage(client)
    for title, content in SAMPLE_NOTES:
        await notes.create(title, content)
    print(f"✓ Created {len(SAMPLE_NOTES)} sample notes")

    balances = FirestoreOpeningBalanceStorage(DEFAULT_LEDGER, client)
    await balances.set_for_month(
        SAMPLE_OPENING_MONTH,
        SAMPLE_OPENING_BALANCE,
        note="Starting balance for January 2024",
        recorded_on="2024-01-01",
    )
    print("✓ Created sample opening balance")


def main() -> int:
    try:
        firestore_settings = get_settings().firestore
    except Exception as e:
        print(f"✗ Firestore is not configured: {e}")
        return 1

    seed = SeedSettings()
    print(f"Firestore project: {firestore_settings.project_id}")

    try:
        ensure_test_user(seed, firestore_settings.credentials_path)
        asyncio.run(seed_data(FirestoreClient(firestore_settings)))
    except (StorageError, FirebaseError, ValueError) as e:
        print(f"✗ Initialization failed: {e}")
        print("Check the credentials file, and that Firestore and Email/Password sign-in are enabled.")
        return 1

    print("✓ Initialization complete")
    print(f"Sign in as {seed.user_email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
