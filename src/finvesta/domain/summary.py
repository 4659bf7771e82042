"""Dashboard summary domain service."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from finvesta.domain.entities import DashboardSummary
from finvesta.domain.value_objects import TransactionType, round_money

if TYPE_CHECKING:
    from finvesta.database.base import AccountRepository, TransactionRepository

logger = logging.getLogger(__name__)

DASHBOARD_RECENT_LIMIT = 5


class DashboardService:
    """Service for building the dashboard overview of a user."""

    def __init__(self, accounts: AccountRepository, transactions: TransactionRepository):
        """Initialize dashboard service.

        Args:
            accounts: Account repository
            transactions: Transaction repository
        """
        self.accounts = accounts
        self.transactions = transactions

    def get_summary(
        self,
        user_id: str,
        today: Optional[date] = None,
        recent_limit: int = DASHBOARD_RECENT_LIMIT,
    ) -> DashboardSummary:
        """Build the dashboard summary.

        Args:
            user_id: Requesting user
            today: Day whose calendar month is summarized (defaults to date.today())
            recent_limit: Number of recent transactions to include

        Returns:
            DashboardSummary with balances of active accounts, the current
            month's income and expense, and the latest transactions
        """
        today = today or date.today()

        active = [account for account in self.accounts.find_by_user_id(user_id) if account.is_active]
        total_balance = sum((account.balance.value for account in active), Decimal("0"))

        month_start = today.replace(day=1)
        month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
        in_month = self.transactions.find_by_date_range_and_user_id(month_start, month_end, user_id)

        income = sum(
            (txn.amount.value for txn in in_month if txn.transaction_type == TransactionType.INCOME),
            Decimal("0"),
        )
        expense = sum(
            (txn.amount.value for txn in in_month if txn.transaction_type == TransactionType.EXPENSE),
            Decimal("0"),
        )

        recent = self.transactions.find_recent_by_user_id(user_id, recent_limit)
        logger.debug("Built dashboard for user %s (%d accounts, %d transactions this month)",
                     user_id, len(active), len(in_month))

        return DashboardSummary(
            total_balance=round_money(total_balance),
            active_accounts=len(active),
            month_income=round_money(income),
            month_expense=round_money(expense),
            month_net=round_money(income - expense),
            recent_transactions=tuple(recent),
        )
