"""Domain error types for the Accounts, Category and Transaction contexts.

Every concrete error carries a fixed message from the context's message table
in ``finvesta.domain.constants``. Subclasses may be raised with a more
specific message (the storage adapter does this for missing rows).
"""

from typing import Optional

from finvesta.domain.constants import (
    ACCOUNT_MESSAGES,
    CATEGORY_MESSAGES,
    TRANSACTION_MESSAGES,
)


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    default_message = "Domain error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist for the requesting user."""


class AccessDeniedError(DomainError):
    """Entity exists but belongs to another user."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data or state."""


# Accounts


class AccountNameTooShortError(ValidationError):
    default_message = ACCOUNT_MESSAGES["name_too_short"]


class AccountNameTooLongError(ValidationError):
    default_message = ACCOUNT_MESSAGES["name_too_long"]


class AccountNameInvalidCharactersError(ValidationError):
    default_message = ACCOUNT_MESSAGES["name_invalid_chars"]


class InvalidBalanceError(ValidationError):
    default_message = ACCOUNT_MESSAGES["balance_invalid"]


class BalanceInvalidError(InvalidBalanceError):
    default_message = ACCOUNT_MESSAGES["balance_invalid"]


class BalanceTooLowError(InvalidBalanceError):
    default_message = ACCOUNT_MESSAGES["balance_too_low"]


class BalanceTooHighError(InvalidBalanceError):
    default_message = ACCOUNT_MESSAGES["balance_too_high"]


class InvalidCurrencyError(ValidationError):
    default_message = ACCOUNT_MESSAGES["currency_invalid"]


class CurrencyInvalidError(InvalidCurrencyError):
    default_message = ACCOUNT_MESSAGES["currency_invalid"]


class CurrencyNotSupportedError(InvalidCurrencyError):
    default_message = ACCOUNT_MESSAGES["currency_not_supported"]


class InvalidAccountTypeError(ValidationError):
    default_message = ACCOUNT_MESSAGES["account_type_invalid"]


class AccountNotFoundError(NotFoundError):
    default_message = ACCOUNT_MESSAGES["not_found"]


class AccountAccessDeniedError(AccessDeniedError):
    default_message = ACCOUNT_MESSAGES["access_denied"]


class DuplicateAccountNameError(ConflictError):
    default_message = ACCOUNT_MESSAGES["duplicate_name"]


class AccountAlreadyDeactivatedError(ConflictError):
    default_message = ACCOUNT_MESSAGES["already_deactivated"]


class CannotDeleteActiveAccountError(DependencyError):
    default_message = ACCOUNT_MESSAGES["cannot_delete_active"]


class AccountHasTransactionsError(DependencyError):
    default_message = ACCOUNT_MESSAGES["has_transactions"]


# Category


class CategoryNameTooShortError(ValidationError):
    default_message = CATEGORY_MESSAGES["name_too_short"]


class CategoryNameTooLongError(ValidationError):
    default_message = CATEGORY_MESSAGES["name_too_long"]


class CategoryNameInvalidCharactersError(ValidationError):
    default_message = CATEGORY_MESSAGES["name_invalid_chars"]


class CategoryDescriptionTooLongError(ValidationError):
    default_message = CATEGORY_MESSAGES["description_too_long"]


class InvalidCategoryColorError(ValidationError):
    default_message = CATEGORY_MESSAGES["color_invalid"]


class InvalidCategoryTypeError(ValidationError):
    default_message = CATEGORY_MESSAGES["type_invalid"]


class CategoryNotFoundError(NotFoundError):
    default_message = CATEGORY_MESSAGES["not_found"]


class CategoryAccessDeniedError(AccessDeniedError):
    default_message = CATEGORY_MESSAGES["access_denied"]


class DuplicateCategoryNameError(ConflictError):
    default_message = CATEGORY_MESSAGES["duplicate_name"]


class CannotDeleteDefaultCategoryError(DependencyError):
    default_message = CATEGORY_MESSAGES["cannot_delete_default"]


class CannotDeleteCategoryInUseError(DependencyError):
    default_message = CATEGORY_MESSAGES["cannot_delete_in_use"]


# Transaction


class TransactionDescriptionRequiredError(ValidationError):
    default_message = TRANSACTION_MESSAGES["description_required"]


class TransactionDescriptionTooShortError(ValidationError):
    default_message = TRANSACTION_MESSAGES["description_too_short"]


class TransactionDescriptionTooLongError(ValidationError):
    default_message = TRANSACTION_MESSAGES["description_too_long"]


class TransactionDescriptionInvalidCharactersError(ValidationError):
    default_message = TRANSACTION_MESSAGES["description_invalid_chars"]


class InvalidTransactionAmountError(ValidationError):
    default_message = TRANSACTION_MESSAGES["amount_invalid"]


class TransactionAmountInvalidError(InvalidTransactionAmountError):
    default_message = TRANSACTION_MESSAGES["amount_invalid"]


class TransactionAmountNotPositiveError(InvalidTransactionAmountError):
    default_message = TRANSACTION_MESSAGES["amount_not_positive"]


class TransactionAmountTooHighError(InvalidTransactionAmountError):
    default_message = TRANSACTION_MESSAGES["amount_too_high"]


class InvalidTransactionTypeError(ValidationError):
    default_message = TRANSACTION_MESSAGES["type_invalid"]


class InvalidTransactionDateError(ValidationError):
    default_message = TRANSACTION_MESSAGES["date_invalid"]


class TransactionDateInFutureError(InvalidTransactionDateError):
    default_message = TRANSACTION_MESSAGES["date_in_future"]


class TransactionDateTooOldError(InvalidTransactionDateError):
    default_message = TRANSACTION_MESSAGES["date_too_old"]


class TransactionNotFoundError(NotFoundError):
    default_message = TRANSACTION_MESSAGES["not_found"]


class TransactionAccessDeniedError(AccessDeniedError):
    default_message = TRANSACTION_MESSAGES["access_denied"]


class CategoryTypeMismatchError(ValidationError):
    default_message = TRANSACTION_MESSAGES["category_type_mismatch"]


class CannotDeleteReconciledTransactionError(DependencyError):
    default_message = TRANSACTION_MESSAGES["cannot_delete_reconciled"]


class InvalidSummaryPeriodError(ValidationError):
    default_message = TRANSACTION_MESSAGES["period_invalid"]


class InvalidPageError(ValidationError):
    default_message = TRANSACTION_MESSAGES["page_invalid"]
