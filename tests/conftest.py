"""Shared pytest fixtures for finvesta tests."""

import os
import tempfile
from datetime import date, timedelta

import pytest

from finvesta.database.factories import create_sqlite_database
from finvesta.domain.account import AccountService
from finvesta.domain.category import CategoryService
from finvesta.domain.summary import DashboardService
from finvesta.domain.transaction import TransactionService

USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db.accounts, temp_db.transactions)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db.categories)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db.transactions, temp_db.accounts, temp_db.categories)


@pytest.fixture
def dashboard_service(temp_db):
    """Create a DashboardService with a temporary database."""
    return DashboardService(temp_db.accounts, temp_db.transactions)


@pytest.fixture
def sample_account(account_service, user_id):
    """Create a sample account for testing."""
    return account_service.create_account(
        user_id=user_id,
        name="Main Checking",
        account_type="bank",
        balance=1500,
        currency="EUR",
        provider="Test Bank",
    )


@pytest.fixture
def sample_categories(category_service, user_id):
    """Create one category per type, keyed by type."""
    return {
        "income": category_service.create_category(user_id, "Salary", "income", color="#22C55E"),
        "expense": category_service.create_category(user_id, "Groceries", "expense", color="#EF4444"),
        "investment": category_service.create_category(user_id, "Index Funds", "investment", color="#3B82F6"),
        "transfer": category_service.create_category(user_id, "Internal Transfer", "transfer", color="#6B7280"),
    }


@pytest.fixture
def sample_transactions(transaction_service, sample_account, sample_categories, user_id):
    """Create a few transactions dated within the last week."""
    today = date.today()
    return [
        transaction_service.create_transaction(
            user_id=user_id,
            account_id=sample_account.id,
            category_id=sample_categories["income"].id,
            amount=3000,
            description="Monthly salary",
            transaction_type="income",
            transaction_date=today - timedelta(days=3),
        ),
        transaction_service.create_transaction(
            user_id=user_id,
            account_id=sample_account.id,
            category_id=sample_categories["expense"].id,
            amount=54.2,
            description="Weekly shop",
            transaction_type="expense",
            transaction_date=today - timedelta(days=1),
        ),
        transaction_service.create_transaction(
            user_id=user_id,
            account_id=sample_account.id,
            category_id=sample_categories["expense"].id,
            amount=12.5,
            description="Bakery",
            transaction_type="expense",
            transaction_date=today,
        ),
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_args(temp_db, user_id):
    """Global CLI options pointing at the temporary database as the sample user."""
    return ["--db-path", temp_db.database_path, "--user", user_id]
