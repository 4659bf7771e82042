"""Mapper functions between storage rows, SQLAlchemy models and domain entities.

Three shapes meet here:

- SQLAlchemy models (``finvesta.database.models``)
- storage rows: plain dicts keyed by snake_case column name, including ``user_id``
- application payloads: camelCase dicts handed to presentation code, without
  ``user_id`` (the requesting user is implicit)

Rows read from storage were validated when written, so entities are rebuilt
from them through the value objects' ``restore`` constructors.
"""

from typing import Any, Callable, Optional

from finvesta.domain import entities as domain
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

Row = dict[str, Any]


def model_to_row(model: Any) -> Row:
    """Convert a SQLAlchemy model instance to a storage row."""
    return {column.key: getattr(model, column.key) for column in model.__table__.columns}


# Rows to entities


def account_from_row(row: Row) -> domain.Account:
    """Convert a storage row to a domain Account entity."""
    return domain.Account(
        id=row["id"],
        user_id=row["user_id"],
        name=AccountName.restore(row["name"]),
        account_type=AccountType(row["type"]),
        provider=row.get("provider"),
        balance=AccountBalance.restore(row["balance"]),
        currency=Currency.restore(row["currency"]),
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


def category_from_row(row: Row) -> domain.Category:
    """Convert a storage row to a domain Category entity."""
    return domain.Category(
        id=row["id"],
        user_id=row.get("user_id"),
        name=CategoryName.restore(row["name"]),
        description=CategoryDescription.restore(row.get("description")),
        category_type=CategoryType(row["type"]),
        color=CategoryColor.restore(row["color"]),
        is_default=bool(row["is_default"]),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


def transaction_from_row(row: Row) -> domain.Transaction:
    """Convert a storage row to a domain Transaction entity."""
    return domain.Transaction(
        id=row["id"],
        user_id=row["user_id"],
        account_id=row["account_id"],
        category_id=row["category_id"],
        amount=TransactionAmount.restore(row["amount"]),
        description=TransactionDescription.restore(row["description"]),
        transaction_type=TransactionType(row["type"]),
        transaction_date=TransactionDate.restore(row["transaction_date"]),
        is_reconciled=bool(row["is_reconciled"]),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


def account_to_domain(orm_account: Any) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return account_from_row(model_to_row(orm_account))


def category_to_domain(orm_category: Any) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return category_from_row(model_to_row(orm_category))


def transaction_to_domain(orm_transaction: Any) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return transaction_from_row(model_to_row(orm_transaction))


# Entities to rows


def account_to_row(account: domain.Account) -> Row:
    return {
        "id": account.id,
        "user_id": account.user_id,
        "name": account.name.value,
        "type": account.account_type.value,
        "provider": account.provider,
        "balance": account.balance.value,
        "currency": account.currency.code,
        "is_active": account.is_active,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def category_to_row(category: domain.Category) -> Row:
    return {
        "id": category.id,
        "user_id": category.user_id,
        "name": category.name.value,
        "description": category.description.value,
        "type": category.category_type.value,
        "color": category.color.value,
        "is_default": category.is_default,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def transaction_to_row(transaction: domain.Transaction) -> Row:
    return {
        "id": transaction.id,
        "user_id": transaction.user_id,
        "account_id": transaction.account_id,
        "category_id": transaction.category_id,
        "amount": transaction.amount.value,
        "description": transaction.description.value,
        "type": transaction.transaction_type.value,
        "transaction_date": transaction.transaction_date.value,
        "is_reconciled": transaction.is_reconciled,
        "created_at": transaction.created_at,
        "updated_at": transaction.updated_at,
    }


# Partial updates: entity field -> (column, value converter)

FieldMap = dict[str, tuple[str, Callable[[Any], Any]]]


def _identity(value: Any) -> Any:
    return value


def _optional_description(value: Optional[CategoryDescription]) -> Optional[str]:
    return value.value if value is not None else None


ACCOUNT_UPDATE_FIELDS: FieldMap = {
    "name": ("name", lambda v: v.value),
    "account_type": ("type", lambda v: v.value),
    "provider": ("provider", _identity),
    "balance": ("balance", lambda v: v.value),
    "currency": ("currency", lambda v: v.code),
    "is_active": ("is_active", bool),
}

CATEGORY_UPDATE_FIELDS: FieldMap = {
    "name": ("name", lambda v: v.value),
    "description": ("description", _optional_description),
    "category_type": ("type", lambda v: v.value),
    "color": ("color", lambda v: v.value),
    "is_default": ("is_default", bool),
}

TRANSACTION_UPDATE_FIELDS: FieldMap = {
    "account_id": ("account_id", _identity),
    "category_id": ("category_id", _identity),
    "amount": ("amount", lambda v: v.value),
    "description": ("description", lambda v: v.value),
    "transaction_type": ("type", lambda v: v.value),
    "transaction_date": ("transaction_date", lambda v: v.value),
    "is_reconciled": ("is_reconciled", bool),
}


# Rows to application payloads


class _RowMapper:
    """Rename keys between storage rows and camelCase application payloads.

    Pure and total: missing keys map to None, nothing is validated.
    """

    fields: tuple[tuple[str, str], ...] = ()

    @classmethod
    def to_domain(cls, row: Row) -> dict[str, Any]:
        """Convert a storage row to an application payload, dropping user_id."""
        return {payload_key: row.get(row_key) for row_key, payload_key in cls.fields}

    @classmethod
    def to_database(cls, payload: dict[str, Any], user_id: str) -> Row:
        """Convert an application payload to a storage row owned by ``user_id``."""
        row = {row_key: payload.get(payload_key) for row_key, payload_key in cls.fields}
        row["user_id"] = user_id
        return row


class AccountMapper(_RowMapper):
    fields = (
        ("id", "id"),
        ("name", "name"),
        ("type", "type"),
        ("provider", "provider"),
        ("balance", "balance"),
        ("currency", "currency"),
        ("is_active", "isActive"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )


class CategoryMapper(_RowMapper):
    fields = (
        ("id", "id"),
        ("name", "name"),
        ("description", "description"),
        ("type", "type"),
        ("color", "color"),
        ("is_default", "isDefault"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )


class TransactionMapper(_RowMapper):
    fields = (
        ("id", "id"),
        ("account_id", "accountId"),
        ("category_id", "categoryId"),
        ("amount", "amount"),
        ("description", "description"),
        ("type", "transactionType"),
        ("transaction_date", "transactionDate"),
        ("is_reconciled", "isReconciled"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )
