"""Abstract repository interfaces.

Any row store that can create, read, update and delete by filter with
equality and ordering predicates can implement these. All business logic
should prefer the ``*_and_user_id`` lookups, which enforce ownership.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finvesta.domain.entities import Account, Category, Transaction, TransactionPage
from finvesta.domain.value_objects import (
    AccountBalance,
    AccountName,
    AccountType,
    CategoryColor,
    CategoryDescription,
    CategoryName,
    CategoryType,
    Currency,
    TransactionAmount,
    TransactionDate,
    TransactionDescription,
    TransactionType,
)


class AccountRepository(ABC):
    """Data access contract for the Accounts context."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> list[Account]:
        """Find all accounts for a user, ordered by name."""
        pass

    @abstractmethod
    def find_by_id(self, account_id: str) -> Optional[Account]:
        """Find account by ID without ownership check."""
        pass

    @abstractmethod
    def find_by_id_and_user_id(self, account_id: str, user_id: str) -> Optional[Account]:
        """Find account by ID if it belongs to the user."""
        pass

    @abstractmethod
    def find_by_name_and_user_id(self, name: AccountName, user_id: str) -> Optional[Account]:
        """Find a user's account by exact name."""
        pass

    @abstractmethod
    def create(
        self,
        *,
        user_id: str,
        name: AccountName,
        account_type: AccountType,
        balance: AccountBalance,
        currency: Currency,
        provider: Optional[str] = None,
        is_active: bool = True,
    ) -> Account:
        """Create an account. The store assigns id and timestamps."""
        pass

    @abstractmethod
    def update(self, account_id: str, **changes: Any) -> Account:
        """Apply a partial update. id, user_id and timestamps cannot change."""
        pass

    @abstractmethod
    def deactivate(self, account_id: str) -> None:
        """Soft delete: set is_active to False."""
        pass

    @abstractmethod
    def delete(self, account_id: str) -> None:
        """Hard delete an account."""
        pass

    @abstractmethod
    def exists(self, account_id: str, user_id: str) -> bool:
        """Check if account exists and belongs to user."""
        pass

    @abstractmethod
    def name_exists(
        self, name: AccountName, user_id: str, exclude_id: Optional[str] = None
    ) -> bool:
        """Check if the user already has an account with this name."""
        pass


class CategoryRepository(ABC):
    """Data access contract for the Category context."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> list[Category]:
        """Find all categories for a user, ordered by type and name."""
        pass

    @abstractmethod
    def find_by_type_and_user_id(self, category_type: CategoryType, user_id: str) -> list[Category]:
        """Find a user's categories of one type."""
        pass

    @abstractmethod
    def find_by_id(self, category_id: str) -> Optional[Category]:
        """Find category by ID without ownership check."""
        pass

    @abstractmethod
    def find_by_id_and_user_id(self, category_id: str, user_id: str) -> Optional[Category]:
        """Find category by ID if it belongs to the user."""
        pass

    @abstractmethod
    def find_by_name_and_user_id(self, name: CategoryName, user_id: str) -> Optional[Category]:
        """Find a user's category by name, ignoring case."""
        pass

    @abstractmethod
    def find_default_by_type(self, category_type: CategoryType) -> list[Category]:
        """Find default categories of one type. Not scoped to a user."""
        pass

    @abstractmethod
    def create(
        self,
        *,
        user_id: str,
        name: CategoryName,
        category_type: CategoryType,
        color: CategoryColor,
        description: Optional[CategoryDescription] = None,
        is_default: bool = False,
    ) -> Category:
        """Create a category. The store assigns id and timestamps."""
        pass

    @abstractmethod
    def update(self, category_id: str, **changes: Any) -> Category:
        """Apply a partial update. id, user_id and timestamps cannot change."""
        pass

    @abstractmethod
    def deactivate(self, category_id: str) -> None:
        """Soft delete: clear the is_default flag."""
        pass

    @abstractmethod
    def delete(self, category_id: str) -> None:
        """Hard delete a category."""
        pass

    @abstractmethod
    def exists(self, category_id: str, user_id: str) -> bool:
        """Check if category exists and belongs to user."""
        pass

    @abstractmethod
    def name_exists(
        self, name: CategoryName, user_id: str, exclude_id: Optional[str] = None
    ) -> bool:
        """Check if the user already has a category with this name (any case)."""
        pass

    @abstractmethod
    def is_in_use(self, category_id: str) -> bool:
        """Check if any transaction references the category."""
        pass

    @abstractmethod
    def get_usage_count(self, category_id: str) -> int:
        """Count transactions referencing the category."""
        pass


class TransactionRepository(ABC):
    """Data access contract for the Transaction context."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> list[Transaction]:
        """Find all transactions for a user, newest first."""
        pass

    @abstractmethod
    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Find transaction by ID without ownership check."""
        pass

    @abstractmethod
    def find_by_id_and_user_id(self, transaction_id: str, user_id: str) -> Optional[Transaction]:
        """Find transaction by ID if it belongs to the user."""
        pass

    @abstractmethod
    def find_by_account_id_and_user_id(self, account_id: str, user_id: str) -> list[Transaction]:
        """Find a user's transactions for one account."""
        pass

    @abstractmethod
    def find_by_category_id_and_user_id(self, category_id: str, user_id: str) -> list[Transaction]:
        """Find a user's transactions for one category."""
        pass

    @abstractmethod
    def find_by_type_and_user_id(
        self, transaction_type: TransactionType, user_id: str
    ) -> list[Transaction]:
        """Find a user's transactions of one type."""
        pass

    @abstractmethod
    def find_by_date_range_and_user_id(
        self, start_date: date, end_date: date, user_id: str
    ) -> list[Transaction]:
        """Find a user's transactions dated within [start_date, end_date]."""
        pass

    @abstractmethod
    def find_recent_by_user_id(self, user_id: str, limit: int) -> list[Transaction]:
        """Find a user's most recent transactions."""
        pass

    @abstractmethod
    def find_by_user_id_with_pagination(self, user_id: str, page: int, limit: int) -> TransactionPage:
        """Find one page of a user's transactions, newest first.

        Pages are numbered from 1. A page past the end has no transactions.
        """
        pass

    @abstractmethod
    def search_by_description_and_user_id(self, user_id: str, term: str, limit: int) -> list[Transaction]:
        """Find a user's transactions whose description contains term, ignoring case."""
        pass

    @abstractmethod
    def create(
        self,
        *,
        user_id: str,
        account_id: str,
        category_id: str,
        amount: TransactionAmount,
        description: TransactionDescription,
        transaction_type: TransactionType,
        transaction_date: TransactionDate,
        is_reconciled: bool = False,
    ) -> Transaction:
        """Create a transaction. The store assigns id and timestamps."""
        pass

    @abstractmethod
    def update(self, transaction_id: str, **changes: Any) -> Transaction:
        """Apply a partial update. id, user_id and timestamps cannot change."""
        pass

    @abstractmethod
    def delete(self, transaction_id: str) -> None:
        """Delete a transaction permanently."""
        pass

    @abstractmethod
    def mark_as_reconciled(self, transaction_id: str) -> None:
        pass

    @abstractmethod
    def mark_as_unreconciled(self, transaction_id: str) -> None:
        pass

    @abstractmethod
    def exists(self, transaction_id: str, user_id: str) -> bool:
        """Check if transaction exists and belongs to user."""
        pass

    @abstractmethod
    def get_count_by_user_id(self, user_id: str) -> int:
        pass

    @abstractmethod
    def get_count_by_account_id_and_user_id(self, account_id: str, user_id: str) -> int:
        pass

    @abstractmethod
    def get_count_by_category_id_and_user_id(self, category_id: str, user_id: str) -> int:
        pass

    @abstractmethod
    def get_total_amount_by_type_and_user_id(self, transaction_type: TransactionType, user_id: str) -> Decimal:
        """Sum the amounts of a user's transactions of one type; 0.00 when there are none."""
        pass

    @abstractmethod
    def get_total_amount_by_account_id_and_user_id(self, account_id: str, user_id: str) -> Decimal:
        """Sum the amounts of a user's transactions on one account, whatever their type."""
        pass

    @abstractmethod
    def get_total_amount_by_category_id_and_user_id(self, category_id: str, user_id: str) -> Decimal:
        """Sum the amounts of a user's transactions in one category."""
        pass


class Database(ABC):
    """Abstract database interface for Finvesta.

    Groups the three repositories behind one connection lifecycle.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @property
    @abstractmethod
    def accounts(self) -> AccountRepository:
        pass

    @property
    @abstractmethod
    def categories(self) -> CategoryRepository:
        pass

    @property
    @abstractmethod
    def transactions(self) -> TransactionRepository:
        pass
