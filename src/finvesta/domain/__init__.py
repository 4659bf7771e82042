"""Domain layer for the Finvesta application."""

from finvesta.domain.account import AccountService
from finvesta.domain.category import CategoryService
from finvesta.domain.summary import DashboardService
from finvesta.domain.transaction import TransactionService

__all__ = [
    "AccountService",
    "CategoryService",
    "DashboardService",
    "TransactionService",
]
