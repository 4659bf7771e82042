"""Domain model entities for Finvesta.

These are pure data classes composed of value objects, independent of the
database schema. Every entity is owned by exactly one user.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

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


@dataclass(frozen=True)
class Account:
    """Financial account domain entity."""

    id: str
    user_id: str
    name: AccountName
    account_type: AccountType
    balance: AccountBalance
    currency: Currency
    is_active: bool
    created_at: datetime
    provider: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    """Category domain entity.

    ``is_default`` marks categories seeded for the user rather than created by them.
    """

    id: str
    user_id: Optional[str]
    name: CategoryName
    category_type: CategoryType
    color: CategoryColor
    is_default: bool
    created_at: datetime
    description: CategoryDescription = field(default_factory=CategoryDescription.create)
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    user_id: str
    account_id: str
    category_id: str
    amount: TransactionAmount
    description: TransactionDescription
    transaction_type: TransactionType
    transaction_date: TransactionDate
    is_reconciled: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryUsage:
    """How many transactions reference a category."""

    id: str
    name: str
    usage_count: int


@dataclass(frozen=True)
class CategoryUsageStats:
    """Category counts for a user."""

    total_categories: int
    categories_by_type: dict[str, int]
    most_used_categories: tuple[CategoryUsage, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a dry-run validation: every failed rule's message."""

    is_valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class MonthlyTotal:
    """Income and expense totals for one calendar month."""

    month: int
    month_name: str
    income: Decimal
    expense: Decimal
    net: Decimal
    transaction_count: int


@dataclass(frozen=True)
class TransactionStats:
    """Aggregate transaction figures for a user."""

    total_transactions: int
    total_income: Decimal
    total_expense: Decimal
    net_amount: Decimal
    transactions_by_type: dict[str, int]
    transactions_by_account: dict[str, int]
    transactions_by_category: dict[str, int]


@dataclass(frozen=True)
class TransactionPage:
    """One page of a user's transactions, newest first."""

    transactions: tuple[Transaction, ...]
    total: int
    page: int
    total_pages: int


@dataclass(frozen=True)
class GroupTotal:
    """Summed amount and count of the transactions on one account or category."""

    id: str
    amount: Decimal
    count: int


@dataclass(frozen=True)
class PeriodSummary:
    """Income, expense and the busiest categories and accounts of one period.

    start_date and end_date are both inclusive.
    """

    period: str
    start_date: date
    end_date: date
    income: Decimal
    expense: Decimal
    net: Decimal
    transaction_count: int
    top_categories: tuple[GroupTotal, ...] = ()
    top_accounts: tuple[GroupTotal, ...] = ()


@dataclass(frozen=True)
class DashboardSummary:
    """Figures shown on the dashboard overview."""

    total_balance: Decimal
    active_accounts: int
    month_income: Decimal
    month_expense: Decimal
    month_net: Decimal
    recent_transactions: tuple[Transaction, ...] = ()
