"""Account domain service."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from finvesta.domain.entities import Account as AccountEntity
from finvesta.domain.errors import (
    AccountAlreadyDeactivatedError,
    AccountHasTransactionsError,
    AccountNotFoundError,
    CannotDeleteActiveAccountError,
    DuplicateAccountNameError,
)
from finvesta.domain.value_objects import (
    AccountBalance,
    AccountName,
    AccountType,
    Currency,
    Number,
    round_money,
)

if TYPE_CHECKING:
    from finvesta.database.base import AccountRepository, TransactionRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing a user's financial accounts."""

    def __init__(self, accounts: AccountRepository, transactions: Optional[TransactionRepository] = None):
        """Initialize account service.

        Args:
            accounts: Account repository
            transactions: Transaction repository, used to block deleting accounts
                that still have transactions
        """
        self.accounts = accounts
        self.transactions = transactions

    def get_user_accounts(self, user_id: str) -> list[AccountEntity]:
        """List all accounts of a user, ordered by name."""
        return self.accounts.find_by_user_id(user_id)

    def get_account_by_id(self, account_id: str, user_id: str) -> AccountEntity:
        """Get an account owned by the user.

        Args:
            account_id: Account ID
            user_id: Requesting user

        Returns:
            Account entity

        Raises:
            AccountNotFoundError: If no account with this ID belongs to the user
        """
        account = self.accounts.find_by_id_and_user_id(account_id, user_id)
        if account is None:
            logger.debug("Account %s not found for user %s", account_id, user_id)
            raise AccountNotFoundError()
        return account

    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: str,
        balance: Number,
        currency: str,
        provider: Optional[str] = None,
    ) -> AccountEntity:
        """Create a new account.

        Args:
            user_id: Owner of the account
            name: Account name
            account_type: One of bank, crypto, investment, cash, savings
            balance: Opening balance
            currency: ISO currency code (EUR or USD)
            provider: Optional bank or provider name

        Returns:
            The stored account

        Raises:
            ValidationError: If any field is invalid
            DuplicateAccountNameError: If the user already has an account with this name
        """
        account_name = AccountName.create(name)
        kind = AccountType.from_string(account_type)
        opening_balance = AccountBalance.create(balance)
        account_currency = Currency.create(currency)

        if self.accounts.name_exists(account_name, user_id):
            logger.debug("Rejected duplicate account name %r for user %s", account_name.value, user_id)
            raise DuplicateAccountNameError()

        account = self.accounts.create(
            user_id=user_id,
            name=account_name,
            account_type=kind,
            balance=opening_balance,
            currency=account_currency,
            provider=_clean_provider(provider),
        )
        logger.info("Created account %s for user %s", account.id, user_id)
        return account

    def update_account(
        self,
        account_id: str,
        user_id: str,
        name: Optional[str] = None,
        account_type: Optional[str] = None,
        provider: Optional[str] = None,
        balance: Optional[Number] = None,
        currency: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> AccountEntity:
        """Update selected fields of an account.

        Fields left as None are not changed.

        Raises:
            AccountNotFoundError: If the account does not belong to the user
            ValidationError: If a new value is invalid
            DuplicateAccountNameError: If another account of the user has the new name
        """
        account = self.get_account_by_id(account_id, user_id)

        changes: dict[str, Any] = {}
        if name is not None:
            account_name = AccountName.create(name)
            if account_name != account.name and self.accounts.name_exists(
                account_name, user_id, exclude_id=account_id
            ):
                logger.debug("Rejected duplicate account name %r for user %s", account_name.value, user_id)
                raise DuplicateAccountNameError()
            changes["name"] = account_name
        if account_type is not None:
            changes["account_type"] = AccountType.from_string(account_type)
        if provider is not None:
            changes["provider"] = _clean_provider(provider)
        if balance is not None:
            changes["balance"] = AccountBalance.create(balance)
        if currency is not None:
            changes["currency"] = Currency.create(currency)
        if is_active is not None:
            changes["is_active"] = is_active

        if not changes:
            return account

        updated = self.accounts.update(account_id, **changes)
        logger.info("Updated account %s (%s)", account_id, ", ".join(sorted(changes)))
        return updated

    def deactivate_account(self, account_id: str, user_id: str) -> None:
        """Deactivate an account (soft delete).

        Raises:
            AccountNotFoundError: If the account does not belong to the user
            AccountAlreadyDeactivatedError: If the account is already inactive
        """
        account = self.get_account_by_id(account_id, user_id)
        if not account.is_active:
            raise AccountAlreadyDeactivatedError()

        self.accounts.deactivate(account_id)
        logger.info("Deactivated account %s", account_id)

    def delete_account(self, account_id: str, user_id: str) -> None:
        """Delete an account permanently.

        Only inactive accounts without transactions can be deleted.

        Raises:
            AccountNotFoundError: If the account does not belong to the user
            CannotDeleteActiveAccountError: If the account is still active
            AccountHasTransactionsError: If transactions still reference the account
        """
        account = self.get_account_by_id(account_id, user_id)
        if account.is_active:
            logger.debug("Refused to delete active account %s", account_id)
            raise CannotDeleteActiveAccountError()

        if self.transactions is not None:
            count = self.transactions.get_count_by_account_id_and_user_id(account_id, user_id)
            if count > 0:
                logger.debug("Refused to delete account %s with %d transactions", account_id, count)
                raise AccountHasTransactionsError()

        self.accounts.delete(account_id)
        logger.info("Deleted account %s", account_id)

    def get_total_balance(self, user_id: str) -> Decimal:
        """Sum the balances of the user's active accounts."""
        total = sum(
            (account.balance.value for account in self.accounts.find_by_user_id(user_id) if account.is_active),
            Decimal("0"),
        )
        return round_money(total)

    def get_accounts_by_type(self, user_id: str, account_type: str) -> list[AccountEntity]:
        """List the user's accounts of one type.

        Raises:
            InvalidAccountTypeError: If the type is not recognized
        """
        kind = AccountType.from_string(account_type)
        return [account for account in self.accounts.find_by_user_id(user_id) if account.account_type == kind]


def _clean_provider(provider: Optional[str]) -> Optional[str]:
    if provider is None:
        return None
    return provider.strip() or None
