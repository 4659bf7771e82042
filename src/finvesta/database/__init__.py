"""Database layer for the Finvesta application."""

from finvesta.database.base import (
    AccountRepository,
    CategoryRepository,
    Database,
    TransactionRepository,
)
from finvesta.database.factories import create_sqlite_database

__all__ = [
    "AccountRepository",
    "CategoryRepository",
    "Database",
    "TransactionRepository",
    "create_sqlite_database",
]
