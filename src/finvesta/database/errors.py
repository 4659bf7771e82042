"""Infrastructure errors raised by the storage adapter.

These form a separate taxonomy from the domain errors. A missing row for a
specific entity is reported with that entity's domain NotFound error, so
callers only need to branch on domain error kinds.
"""

from typing import Optional

from finvesta.domain.errors import (
    AccountNotFoundError,
    CategoryNotFoundError,
    TransactionNotFoundError,
)


class InfrastructureError(Exception):
    """Base class for storage adapter failures."""


class DatabaseConnectionError(InfrastructureError):
    """The database could not be reached or opened."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"Database connection error: {message}")
        self.__cause__ = cause


class DatabaseOperationError(InfrastructureError):
    """A statement failed while operating on an entity."""

    def __init__(self, operation: str, entity: str, cause: Optional[BaseException] = None):
        super().__init__(f"Database operation '{operation}' failed for {entity}")
        self.operation = operation
        self.entity = entity
        self.__cause__ = cause


class DuplicateEntityError(InfrastructureError):
    """A uniqueness constraint rejected the write."""

    def __init__(self, entity: str, field: str, value: str):
        super().__init__(f"{entity} with {field} '{value}' already exists")


class EntityValidationError(InfrastructureError):
    """A write was rejected before reaching the database."""

    def __init__(self, entity: str, field: str, message: str):
        super().__init__(f"Validation error for {entity}.{field}: {message}")


class AccountNotFoundInDatabaseError(AccountNotFoundError):
    def __init__(self, account_id: str):
        super().__init__(f"Account with id '{account_id}' not found in database")


class CategoryNotFoundInDatabaseError(CategoryNotFoundError):
    def __init__(self, category_id: str):
        super().__init__(f"Category with id '{category_id}' not found in database")


class TransactionNotFoundInDatabaseError(TransactionNotFoundError):
    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction with id '{transaction_id}' not found in database")
