"""Transaction domain service."""

from __future__ import annotations

import calendar
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Union

from finvesta.domain.entities import (
    Category as CategoryEntity,
    GroupTotal,
    MonthlyTotal,
    PeriodSummary,
    Transaction as TransactionEntity,
    TransactionPage,
    TransactionStats,
    ValidationResult,
)
from finvesta.domain.errors import (
    AccountNotFoundError,
    CannotDeleteReconciledTransactionError,
    CategoryNotFoundError,
    CategoryTypeMismatchError,
    DomainError,
    InvalidPageError,
    InvalidSummaryPeriodError,
    InvalidTransactionDateError,
    TransactionNotFoundError,
)
from finvesta.domain.value_objects import (
    Number,
    TransactionAmount,
    TransactionDate,
    TransactionDescription,
    TransactionType,
    round_money,
)

if TYPE_CHECKING:
    from finvesta.database.base import AccountRepository, CategoryRepository, TransactionRepository

logger = logging.getLogger(__name__)

DateInput = Union[date, datetime, str]

RECENT_TRANSACTIONS_LIMIT = 10
PAGE_SIZE = 20
SEARCH_LIMIT = 20
TOP_GROUPS_LIMIT = 5
DUPLICATE_WINDOW_DAYS = 3

SUMMARY_PERIODS = ("day", "week", "month", "quarter", "year")


class TransactionService:
    """Service for recording and querying transactions."""

    def __init__(
        self,
        transactions: TransactionRepository,
        accounts: AccountRepository,
        categories: CategoryRepository,
    ):
        """Initialize transaction service.

        Args:
            transactions: Transaction repository
            accounts: Account repository, for ownership checks
            categories: Category repository, for ownership and type checks
        """
        self.transactions = transactions
        self.accounts = accounts
        self.categories = categories

    def _require_account(self, account_id: str, user_id: str) -> None:
        if self.accounts.find_by_id_and_user_id(account_id, user_id) is None:
            logger.debug("Account %s not found for user %s", account_id, user_id)
            raise AccountNotFoundError()

    def _require_category(self, category_id: str, user_id: str) -> CategoryEntity:
        category = self.categories.find_by_id_and_user_id(category_id, user_id)
        if category is None:
            logger.debug("Category %s not found for user %s", category_id, user_id)
            raise CategoryNotFoundError()
        return category

    @staticmethod
    def _check_category_type(category: CategoryEntity, transaction_type: TransactionType) -> None:
        if category.category_type.value != transaction_type.value:
            raise CategoryTypeMismatchError()

    # Queries

    def get_user_transactions(self, user_id: str) -> list[TransactionEntity]:
        """List all transactions of a user, newest first."""
        return self.transactions.find_by_user_id(user_id)

    def get_transactions_by_type(self, user_id: str, transaction_type: str) -> list[TransactionEntity]:
        """List the user's transactions of one type.

        Raises:
            InvalidTransactionTypeError: If the type is not recognized
        """
        return self.transactions.find_by_type_and_user_id(TransactionType.from_string(transaction_type), user_id)

    def get_transactions_by_account(self, user_id: str, account_id: str) -> list[TransactionEntity]:
        """List the user's transactions on one of their accounts.

        Raises:
            AccountNotFoundError: If the account does not belong to the user
        """
        self._require_account(account_id, user_id)
        return self.transactions.find_by_account_id_and_user_id(account_id, user_id)

    def get_transactions_by_category(self, user_id: str, category_id: str) -> list[TransactionEntity]:
        """List the user's transactions in one of their categories.

        Raises:
            CategoryNotFoundError: If the category does not belong to the user
        """
        self._require_category(category_id, user_id)
        return self.transactions.find_by_category_id_and_user_id(category_id, user_id)

    def get_transactions_by_date_range(
        self, user_id: str, start_date: DateInput, end_date: DateInput
    ) -> list[TransactionEntity]:
        """List the user's transactions dated between start_date and end_date, inclusive.

        Raises:
            InvalidTransactionDateError: If a date cannot be read or the range is reversed
        """
        start = TransactionDate.restore(start_date).value
        end = TransactionDate.restore(end_date).value
        if start > end:
            raise InvalidTransactionDateError("Start date must not be after end date")
        return self.transactions.find_by_date_range_and_user_id(start, end, user_id)

    def get_transactions_by_month(self, user_id: str, month: int, year: int) -> list[TransactionEntity]:
        """List the user's transactions in one calendar month.

        Raises:
            InvalidTransactionDateError: If month is not between 1 and 12 or the
                year is outside the supported calendar
        """
        _check_year(year)
        if not 1 <= month <= 12:
            raise InvalidTransactionDateError()
        last_day = calendar.monthrange(year, month)[1]
        return self.transactions.find_by_date_range_and_user_id(
            date(year, month, 1), date(year, month, last_day), user_id
        )

    def get_transaction_by_id(self, transaction_id: str, user_id: str) -> TransactionEntity:
        """Get a transaction owned by the user.

        Raises:
            TransactionNotFoundError: If no transaction with this ID belongs to the user
        """
        transaction = self.transactions.find_by_id_and_user_id(transaction_id, user_id)
        if transaction is None:
            logger.debug("Transaction %s not found for user %s", transaction_id, user_id)
            raise TransactionNotFoundError()
        return transaction

    def get_recent_transactions(
        self, user_id: str, limit: int = RECENT_TRANSACTIONS_LIMIT
    ) -> list[TransactionEntity]:
        """List the user's most recent transactions."""
        return self.transactions.find_recent_by_user_id(user_id, limit)

    def get_transactions_with_pagination(
        self, user_id: str, page: int = 1, limit: int = PAGE_SIZE
    ) -> TransactionPage:
        """Get one page of the user's transactions, newest first.

        Args:
            user_id: Owner of the transactions
            page: Page number, starting at 1
            limit: Transactions per page

        Returns:
            The page with the total count and number of pages. Pages past the
            last one are empty.

        Raises:
            InvalidPageError: If page or limit is less than 1
        """
        if page < 1 or limit < 1:
            raise InvalidPageError()
        return self.transactions.find_by_user_id_with_pagination(user_id, page, limit)

    def search_transactions_by_description(
        self, user_id: str, search_term: str, limit: int = SEARCH_LIMIT
    ) -> list[TransactionEntity]:
        """Find the user's transactions whose description contains search_term.

        Matching ignores case. A blank search term finds nothing.

        Raises:
            InvalidPageError: If limit is less than 1
        """
        if limit < 1:
            raise InvalidPageError()
        term = (search_term or "").strip()
        if not term:
            return []
        return self.transactions.search_by_description_and_user_id(user_id, term, limit)

    def get_account_totals(self, user_id: str, account_id: str) -> GroupTotal:
        """Summed amount and count of all transactions on one of the user's accounts.

        Raises:
            AccountNotFoundError: If the account does not belong to the user
        """
        self._require_account(account_id, user_id)
        return GroupTotal(
            id=account_id,
            amount=self.transactions.get_total_amount_by_account_id_and_user_id(account_id, user_id),
            count=self.transactions.get_count_by_account_id_and_user_id(account_id, user_id),
        )

    def get_category_totals(self, user_id: str, category_id: str) -> GroupTotal:
        """Summed amount and count of all transactions in one of the user's categories.

        Raises:
            CategoryNotFoundError: If the category does not belong to the user
        """
        self._require_category(category_id, user_id)
        return GroupTotal(
            id=category_id,
            amount=self.transactions.get_total_amount_by_category_id_and_user_id(category_id, user_id),
            count=self.transactions.get_count_by_category_id_and_user_id(category_id, user_id),
        )

    def get_duplicate_transaction_suggestions(
        self,
        user_id: str,
        account_id: str,
        amount: Number,
        description: str,
        transaction_type: str,
        transaction_date: DateInput,
        window_days: int = DUPLICATE_WINDOW_DAYS,
    ) -> list[TransactionEntity]:
        """Find stored transactions that look like the one described.

        A stored transaction is a likely duplicate when it is on the same
        account with the same type and amount, is dated at most window_days
        away, and one description contains the other, ignoring case.

        Raises:
            ValidationError: If any field is invalid
            AccountNotFoundError: If the account does not belong to the user
        """
        txn_amount = TransactionAmount.create(amount)
        txn_description = TransactionDescription.create(description)
        txn_type = TransactionType.from_string(transaction_type)
        day = TransactionDate.restore(transaction_date).value
        self._require_account(account_id, user_id)

        candidates = self.transactions.find_by_date_range_and_user_id(
            _shift(day, -window_days), _shift(day, window_days), user_id
        )
        needle = txn_description.value.casefold()
        return [
            txn
            for txn in candidates
            if txn.account_id == account_id
            and txn.transaction_type == txn_type
            and txn.amount == txn_amount
            and (needle in txn.description.value.casefold() or txn.description.value.casefold() in needle)
        ]

    # Commands

    def create_transaction(
        self,
        user_id: str,
        account_id: str,
        category_id: str,
        amount: Number,
        description: str,
        transaction_type: str,
        transaction_date: DateInput,
        today: Optional[date] = None,
    ) -> TransactionEntity:
        """Record a transaction.

        Args:
            user_id: Owner of the transaction
            account_id: Account the money moved on; must belong to the user
            category_id: Category; must belong to the user and have the same type
            amount: Positive amount
            description: Short description
            transaction_type: One of income, expense, transfer, investment
            transaction_date: Date within the last year
            today: Reference day for the date window (defaults to date.today())

        Returns:
            The stored transaction

        Raises:
            ValidationError: If any field is invalid
            AccountNotFoundError: If the account does not belong to the user
            CategoryNotFoundError: If the category does not belong to the user
            CategoryTypeMismatchError: If the category type differs from the transaction type
        """
        fields = self._prepare(
            user_id, account_id, category_id, amount, description, transaction_type, transaction_date, today
        )
        transaction = self.transactions.create(user_id=user_id, **fields)
        logger.info("Created transaction %s for user %s", transaction.id, user_id)
        return transaction

    def bulk_create_transactions(
        self, user_id: str, transactions: list[dict[str, Any]], today: Optional[date] = None
    ) -> list[TransactionEntity]:
        """Record several transactions for one user.

        Every item is checked like create_transaction before the first one
        is stored, so an invalid item leaves nothing written.

        Args:
            user_id: Owner of the transactions
            transactions: Dicts with the create_transaction keywords account_id,
                category_id, amount, description, transaction_type and
                transaction_date
            today: Reference day for the date window (defaults to date.today())

        Returns:
            The stored transactions, in input order

        Raises:
            The error create_transaction raises for the first invalid item
        """
        prepared = []
        for index, item in enumerate(transactions, start=1):
            try:
                prepared.append(self._prepare(user_id, today=today, **item))
            except DomainError:
                logger.warning("Rejected item %d of bulk create for user %s", index, user_id)
                raise

        created = [self.transactions.create(user_id=user_id, **fields) for fields in prepared]
        logger.info("Created %d transactions for user %s", len(created), user_id)
        return created

    def _prepare(
        self,
        user_id: str,
        account_id: str,
        category_id: str,
        amount: Number,
        description: str,
        transaction_type: str,
        transaction_date: DateInput,
        today: Optional[date] = None,
    ) -> dict[str, Any]:
        txn_amount = TransactionAmount.create(amount)
        txn_description = TransactionDescription.create(description)
        txn_type = TransactionType.from_string(transaction_type)
        txn_date = TransactionDate.create(transaction_date, today=today)

        self._require_account(account_id, user_id)
        category = self._require_category(category_id, user_id)
        self._check_category_type(category, txn_type)

        return dict(
            account_id=account_id,
            category_id=category_id,
            amount=txn_amount,
            description=txn_description,
            transaction_type=txn_type,
            transaction_date=txn_date,
        )

    def update_transaction(
        self,
        transaction_id: str,
        user_id: str,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        amount: Optional[Number] = None,
        description: Optional[str] = None,
        transaction_type: Optional[str] = None,
        transaction_date: Optional[DateInput] = None,
        is_reconciled: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> TransactionEntity:
        """Update selected fields of a transaction.

        Fields left as None are not changed. The resulting category and
        transaction type must still match.

        Raises:
            TransactionNotFoundError: If the transaction does not belong to the user
            ValidationError: If a new value is invalid
            AccountNotFoundError: If a new account does not belong to the user
            CategoryNotFoundError: If a new category does not belong to the user
            CategoryTypeMismatchError: If the category type differs from the transaction type
        """
        transaction = self.get_transaction_by_id(transaction_id, user_id)

        changes: dict[str, Any] = {}
        if amount is not None:
            changes["amount"] = TransactionAmount.create(amount)
        if description is not None:
            changes["description"] = TransactionDescription.create(description)
        if transaction_type is not None:
            changes["transaction_type"] = TransactionType.from_string(transaction_type)
        if transaction_date is not None:
            changes["transaction_date"] = TransactionDate.create(transaction_date, today=today)
        if is_reconciled is not None:
            changes["is_reconciled"] = is_reconciled
        if account_id is not None:
            self._require_account(account_id, user_id)
            changes["account_id"] = account_id
        if category_id is not None:
            changes["category_id"] = category_id

        if "category_id" in changes or "transaction_type" in changes:
            category = self._require_category(changes.get("category_id", transaction.category_id), user_id)
            self._check_category_type(category, changes.get("transaction_type", transaction.transaction_type))

        if not changes:
            return transaction

        updated = self.transactions.update(transaction_id, **changes)
        logger.info("Updated transaction %s (%s)", transaction_id, ", ".join(sorted(changes)))
        return updated

    def delete_transaction(self, transaction_id: str, user_id: str) -> None:
        """Delete a transaction permanently.

        Raises:
            TransactionNotFoundError: If the transaction or its account does not belong to the user
            CannotDeleteReconciledTransactionError: If the transaction is reconciled
        """
        transaction = self.get_transaction_by_id(transaction_id, user_id)

        if self.accounts.find_by_id_and_user_id(transaction.account_id, user_id) is None:
            logger.debug("Account of transaction %s not owned by user %s", transaction_id, user_id)
            raise TransactionNotFoundError()
        if transaction.is_reconciled:
            logger.debug("Refused to delete reconciled transaction %s", transaction_id)
            raise CannotDeleteReconciledTransactionError()

        self.transactions.delete(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)

    def mark_transaction_as_reconciled(self, transaction_id: str, user_id: str) -> None:
        """Mark a transaction as reconciled.

        Raises:
            TransactionNotFoundError: If the transaction does not belong to the user
        """
        self.get_transaction_by_id(transaction_id, user_id)
        self.transactions.mark_as_reconciled(transaction_id)
        logger.info("Reconciled transaction %s", transaction_id)

    def mark_transaction_as_unreconciled(self, transaction_id: str, user_id: str) -> None:
        """Clear the reconciled flag of a transaction.

        Raises:
            TransactionNotFoundError: If the transaction does not belong to the user
        """
        self.get_transaction_by_id(transaction_id, user_id)
        self.transactions.mark_as_unreconciled(transaction_id)
        logger.info("Unreconciled transaction %s", transaction_id)

    # Aggregates

    def get_transaction_stats(self, user_id: str) -> TransactionStats:
        """Summarize all of the user's transactions.

        Net amount is income minus expense; transfers and investments are
        only counted.
        """
        transactions = self.transactions.find_by_user_id(user_id)

        income = self.transactions.get_total_amount_by_type_and_user_id(TransactionType.INCOME, user_id)
        expense = self.transactions.get_total_amount_by_type_and_user_id(TransactionType.EXPENSE, user_id)

        by_type = {kind.value: 0 for kind in TransactionType}
        by_type.update(Counter(txn.transaction_type.value for txn in transactions))

        return TransactionStats(
            total_transactions=len(transactions),
            total_income=income,
            total_expense=expense,
            net_amount=round_money(income - expense),
            transactions_by_type=by_type,
            transactions_by_account=dict(Counter(txn.account_id for txn in transactions)),
            transactions_by_category=dict(Counter(txn.category_id for txn in transactions)),
        )

    def get_monthly_totals(self, user_id: str, year: int) -> list[MonthlyTotal]:
        """Income, expense and net for each month of a year, January first.

        Raises:
            InvalidTransactionDateError: If the year is outside the supported calendar
        """
        _check_year(year)
        transactions = self.transactions.find_by_date_range_and_user_id(
            date(year, 1, 1), date(year, 12, 31), user_id
        )

        totals = []
        for month in range(1, 13):
            in_month = [txn for txn in transactions if txn.transaction_date.month == month]
            income = _sum_of(in_month, TransactionType.INCOME)
            expense = _sum_of(in_month, TransactionType.EXPENSE)
            totals.append(
                MonthlyTotal(
                    month=month,
                    month_name=calendar.month_name[month],
                    income=income,
                    expense=expense,
                    net=round_money(income - expense),
                    transaction_count=len(in_month),
                )
            )
        return totals

    def get_transaction_summary_by_period(
        self,
        user_id: str,
        period: str,
        start_date: Optional[DateInput] = None,
        today: Optional[date] = None,
    ) -> PeriodSummary:
        """Summarize the calendar period that contains start_date.

        Weeks run Monday to Sunday and quarters start in January, April, July
        and October. Categories and accounts are ranked by the summed amount
        of their transactions, then by count, and the top five of each kept.

        Args:
            user_id: Owner of the transactions
            period: One of day, week, month, quarter, year
            start_date: Any day inside the period (defaults to today)
            today: Stand-in for date.today()

        Raises:
            InvalidSummaryPeriodError: If period is not recognized
            InvalidTransactionDateError: If start_date cannot be read
        """
        if not isinstance(period, str) or period.strip().lower() not in SUMMARY_PERIODS:
            raise InvalidSummaryPeriodError()
        period = period.strip().lower()

        anchor = TransactionDate.restore(start_date).value if start_date is not None else today or date.today()
        start, end = _period_bounds(period, anchor)
        transactions = self.transactions.find_by_date_range_and_user_id(start, end, user_id)

        income = _sum_of(transactions, TransactionType.INCOME)
        expense = _sum_of(transactions, TransactionType.EXPENSE)
        return PeriodSummary(
            period=period,
            start_date=start,
            end_date=end,
            income=income,
            expense=expense,
            net=round_money(income - expense),
            transaction_count=len(transactions),
            top_categories=_top_groups(transactions, "category_id"),
            top_accounts=_top_groups(transactions, "account_id"),
        )

    def validate_transaction_data(
        self,
        account_id: str,
        category_id: str,
        amount: Number,
        description: str,
        transaction_type: str,
        transaction_date: DateInput,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Validate transaction fields without storing anything.

        Checks every field and reports all failures. Ownership of the account
        and category is not checked.
        """
        errors = []
        if not account_id:
            errors.append("Account is required")
        if not category_id:
            errors.append("Category is required")

        checks = [
            lambda: TransactionAmount.create(amount),
            lambda: TransactionDescription.create(description),
            lambda: TransactionType.from_string(transaction_type),
            lambda: TransactionDate.create(transaction_date, today=today),
        ]
        for check in checks:
            try:
                check()
            except DomainError as e:
                errors.append(e.message)
        return ValidationResult(is_valid=not errors, errors=tuple(errors))


def _check_year(year: int) -> None:
    if not date.min.year <= year <= date.max.year:
        raise InvalidTransactionDateError(f"Year must be between {date.min.year} and {date.max.year}")


def _sum_of(transactions: list[TransactionEntity], transaction_type: TransactionType) -> Decimal:
    total = sum(
        (txn.amount.value for txn in transactions if txn.transaction_type == transaction_type),
        Decimal("0"),
    )
    return round_money(total)


def _shift(day: date, days: int) -> date:
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def _period_bounds(period: str, anchor: date) -> tuple[date, date]:
    if period == "day":
        return anchor, anchor
    if period == "week":
        start = _shift(anchor, -anchor.weekday())
        return start, _shift(start, 6)
    if period == "month":
        first_month, last_month = anchor.month, anchor.month
    elif period == "quarter":
        first_month = 3 * ((anchor.month - 1) // 3) + 1
        last_month = first_month + 2
    else:
        first_month, last_month = 1, 12
    last_day = calendar.monthrange(anchor.year, last_month)[1]
    return date(anchor.year, first_month, 1), date(anchor.year, last_month, last_day)


def _top_groups(
    transactions: list[TransactionEntity], key: str, limit: int = TOP_GROUPS_LIMIT
) -> tuple[GroupTotal, ...]:
    amounts: dict[str, Decimal] = {}
    counts: Counter = Counter()
    for txn in transactions:
        group = getattr(txn, key)
        amounts[group] = amounts.get(group, Decimal("0")) + txn.amount.value
        counts[group] += 1

    ranked = sorted(amounts, key=lambda group: (-amounts[group], -counts[group], group))
    return tuple(
        GroupTotal(id=group, amount=round_money(amounts[group]), count=counts[group]) for group in ranked[:limit]
    )
