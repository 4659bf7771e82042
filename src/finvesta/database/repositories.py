"""SQLAlchemy implementations of the repository interfaces.

All three repositories share the session owned by ``SQLAlchemyDatabase``.
"""

import logging
import math
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from finvesta.database.base import AccountRepository, CategoryRepository, TransactionRepository
from finvesta.database.errors import (
    AccountNotFoundInDatabaseError,
    CategoryNotFoundInDatabaseError,
    DatabaseOperationError,
    DuplicateEntityError,
    EntityValidationError,
    TransactionNotFoundInDatabaseError,
)
from finvesta.database.mappers import (
    ACCOUNT_UPDATE_FIELDS,
    CATEGORY_UPDATE_FIELDS,
    TRANSACTION_UPDATE_FIELDS,
    FieldMap,
    account_to_domain,
    category_to_domain,
    transaction_to_domain,
)
from finvesta.database.models import Account, Category, Transaction
from finvesta.domain.entities import (
    Account as DomainAccount,
    Category as DomainCategory,
    Transaction as DomainTransaction,
    TransactionPage,
)
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
    round_money,
)

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})

SessionGetter = Callable[[], Session]


@contextmanager
def database_operation(
    session: Session,
    operation: str,
    entity: str,
    duplicate: Optional[tuple[str, str]] = None,
) -> Iterator[None]:
    """Roll back and translate SQLAlchemy failures into infrastructure errors.

    Args:
        session: Session the statements run in
        operation: Operation name used in the error message
        entity: Entity name used in the error message
        duplicate: (field, value) reported when a uniqueness constraint fails
    """
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        logger.error("Integrity error during %s on %s: %s", operation, entity, e)
        if duplicate is not None:
            raise DuplicateEntityError(entity, *duplicate) from e
        raise DatabaseOperationError(operation, entity, e) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Database error during %s on %s: %s", operation, entity, e)
        raise DatabaseOperationError(operation, entity, e) from e


def apply_changes(model: Any, changes: dict[str, Any], fields: FieldMap, entity: str) -> None:
    """Copy a partial update onto a model.

    Every key is checked before anything is written, so a rejected update
    leaves the model untouched.
    """
    for key in changes:
        if key in IMMUTABLE_FIELDS:
            raise EntityValidationError(entity, key, "field cannot be changed")
        if key not in fields:
            raise EntityValidationError(entity, key, "unknown field")

    for key, value in changes.items():
        column, convert = fields[key]
        setattr(model, column, convert(value))


class SQLAlchemyAccountRepository(AccountRepository):
    """Accounts stored in the ``accounts`` table."""

    def __init__(self, get_session: SessionGetter):
        self._get_session = get_session

    def _require(self, session: Session, account_id: str) -> Account:
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            raise AccountNotFoundInDatabaseError(account_id)
        return account

    def find_by_user_id(self, user_id: str) -> list[DomainAccount]:
        session = self._get_session()
        with database_operation(session, "find_by_user_id", "Account"):
            accounts = session.query(Account).filter(Account.user_id == user_id).order_by(Account.name).all()
        return [account_to_domain(acc) for acc in accounts]

    def find_by_id(self, account_id: str) -> Optional[DomainAccount]:
        session = self._get_session()
        with database_operation(session, "find_by_id", "Account"):
            account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            return None
        return account_to_domain(account)

    def find_by_id_and_user_id(self, account_id: str, user_id: str) -> Optional[DomainAccount]:
        session = self._get_session()
        with database_operation(session, "find_by_id_and_user_id", "Account"):
            account = (
                session.query(Account).filter(Account.id == account_id, Account.user_id == user_id).first()
            )
        if account is None:
            return None
        return account_to_domain(account)

    def find_by_name_and_user_id(self, name: AccountName, user_id: str) -> Optional[DomainAccount]:
        session = self._get_session()
        with database_operation(session, "find_by_name_and_user_id", "Account"):
            account = (
                session.query(Account).filter(Account.name == name.value, Account.user_id == user_id).first()
            )
        if account is None:
            return None
        return account_to_domain(account)

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
    ) -> DomainAccount:
        session = self._get_session()
        with database_operation(session, "create", "Account", duplicate=("name", name.value)):
            account = Account(
                user_id=user_id,
                name=name.value,
                type=account_type.value,
                provider=provider,
                balance=balance.value,
                currency=currency.code,
                is_active=is_active,
            )
            session.add(account)
            session.commit()
        return account_to_domain(account)

    def update(self, account_id: str, **changes: Any) -> DomainAccount:
        session = self._get_session()
        account = self._require(session, account_id)
        apply_changes(account, changes, ACCOUNT_UPDATE_FIELDS, "Account")
        duplicate = ("name", changes["name"].value) if "name" in changes else None
        with database_operation(session, "update", "Account", duplicate=duplicate):
            session.commit()
        return account_to_domain(account)

    def deactivate(self, account_id: str) -> None:
        session = self._get_session()
        account = self._require(session, account_id)
        with database_operation(session, "deactivate", "Account"):
            account.is_active = False
            session.commit()

    def delete(self, account_id: str) -> None:
        session = self._get_session()
        account = self._require(session, account_id)
        with database_operation(session, "delete", "Account"):
            session.delete(account)
            session.commit()

    def exists(self, account_id: str, user_id: str) -> bool:
        session = self._get_session()
        with database_operation(session, "exists", "Account"):
            count = session.query(Account).filter(Account.id == account_id, Account.user_id == user_id).count()
        return count > 0

    def name_exists(self, name: AccountName, user_id: str, exclude_id: Optional[str] = None) -> bool:
        session = self._get_session()
        with database_operation(session, "name_exists", "Account"):
            query = session.query(Account).filter(Account.name == name.value, Account.user_id == user_id)
            if exclude_id is not None:
                query = query.filter(Account.id != exclude_id)
            count = query.count()
        return count > 0


class SQLAlchemyCategoryRepository(CategoryRepository):
    """Categories stored in the ``categories`` table.

    Names are compared case-insensitively.
    """

    def __init__(self, get_session: SessionGetter):
        self._get_session = get_session

    def _require(self, session: Session, category_id: str) -> Category:
        category = session.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise CategoryNotFoundInDatabaseError(category_id)
        return category

    def find_by_user_id(self, user_id: str) -> list[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_by_user_id", "Category"):
            categories = (
                session.query(Category)
                .filter(Category.user_id == user_id)
                .order_by(Category.type, Category.name)
                .all()
            )
        return [category_to_domain(cat) for cat in categories]

    def find_by_type_and_user_id(self, category_type: CategoryType, user_id: str) -> list[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_by_type_and_user_id", "Category"):
            categories = (
                session.query(Category)
                .filter(Category.type == category_type.value, Category.user_id == user_id)
                .order_by(Category.name)
                .all()
            )
        return [category_to_domain(cat) for cat in categories]

    def find_by_id(self, category_id: str) -> Optional[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_by_id", "Category"):
            category = session.query(Category).filter(Category.id == category_id).first()
        if category is None:
            return None
        return category_to_domain(category)

    def find_by_id_and_user_id(self, category_id: str, user_id: str) -> Optional[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_by_id_and_user_id", "Category"):
            category = (
                session.query(Category).filter(Category.id == category_id, Category.user_id == user_id).first()
            )
        if category is None:
            return None
        return category_to_domain(category)

    def find_by_name_and_user_id(self, name: CategoryName, user_id: str) -> Optional[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_by_name_and_user_id", "Category"):
            category = (
                session.query(Category)
                .filter(func.lower(Category.name) == name.value.lower(), Category.user_id == user_id)
                .first()
            )
        if category is None:
            return None
        return category_to_domain(category)

    def find_default_by_type(self, category_type: CategoryType) -> list[DomainCategory]:
        session = self._get_session()
        with database_operation(session, "find_default_by_type", "Category"):
            categories = (
                session.query(Category)
                .filter(Category.type == category_type.value, Category.is_default.is_(True))
                .order_by(Category.name)
                .all()
            )
        return [category_to_domain(cat) for cat in categories]

    def create(
        self,
        *,
        user_id: str,
        name: CategoryName,
        category_type: CategoryType,
        color: CategoryColor,
        description: Optional[CategoryDescription] = None,
        is_default: bool = False,
    ) -> DomainCategory:
        session = self._get_session()
        with database_operation(session, "create", "Category", duplicate=("name", name.value)):
            category = Category(
                user_id=user_id,
                name=name.value,
                description=description.value if description is not None else None,
                type=category_type.value,
                color=color.value,
                is_default=is_default,
            )
            session.add(category)
            session.commit()
        return category_to_domain(category)

    def update(self, category_id: str, **changes: Any) -> DomainCategory:
        session = self._get_session()
        category = self._require(session, category_id)
        apply_changes(category, changes, CATEGORY_UPDATE_FIELDS, "Category")
        with database_operation(session, "update", "Category"):
            session.commit()
        return category_to_domain(category)

    def deactivate(self, category_id: str) -> None:
        session = self._get_session()
        category = self._require(session, category_id)
        with database_operation(session, "deactivate", "Category"):
            category.is_default = False
            session.commit()

    def delete(self, category_id: str) -> None:
        session = self._get_session()
        category = self._require(session, category_id)
        with database_operation(session, "delete", "Category"):
            session.delete(category)
            session.commit()

    def exists(self, category_id: str, user_id: str) -> bool:
        session = self._get_session()
        with database_operation(session, "exists", "Category"):
            count = (
                session.query(Category).filter(Category.id == category_id, Category.user_id == user_id).count()
            )
        return count > 0

    def name_exists(self, name: CategoryName, user_id: str, exclude_id: Optional[str] = None) -> bool:
        session = self._get_session()
        with database_operation(session, "name_exists", "Category"):
            query = session.query(Category).filter(
                func.lower(Category.name) == name.value.lower(), Category.user_id == user_id
            )
            if exclude_id is not None:
                query = query.filter(Category.id != exclude_id)
            count = query.count()
        return count > 0

    def is_in_use(self, category_id: str) -> bool:
        return self.get_usage_count(category_id) > 0

    def get_usage_count(self, category_id: str) -> int:
        session = self._get_session()
        with database_operation(session, "get_usage_count", "Category"):
            return session.query(Transaction).filter(Transaction.category_id == category_id).count()


class SQLAlchemyTransactionRepository(TransactionRepository):
    """Transactions stored in the ``transactions`` table, newest first."""

    _NEWEST_FIRST = (Transaction.transaction_date.desc(), Transaction.created_at.desc(), Transaction.id.desc())

    def __init__(self, get_session: SessionGetter):
        self._get_session = get_session

    def _require(self, session: Session, transaction_id: str) -> Transaction:
        transaction = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise TransactionNotFoundInDatabaseError(transaction_id)
        return transaction

    def _find(self, operation: str, *criteria: Any, limit: Optional[int] = None) -> list[DomainTransaction]:
        session = self._get_session()
        with database_operation(session, operation, "Transaction"):
            query = (
                session.query(Transaction)
                .filter(*criteria)
                .order_by(*self._NEWEST_FIRST)
            )
            if limit is not None:
                query = query.limit(limit)
            transactions = query.all()
        return [transaction_to_domain(txn) for txn in transactions]

    def find_by_user_id(self, user_id: str) -> list[DomainTransaction]:
        return self._find("find_by_user_id", Transaction.user_id == user_id)

    def find_by_id(self, transaction_id: str) -> Optional[DomainTransaction]:
        session = self._get_session()
        with database_operation(session, "find_by_id", "Transaction"):
            transaction = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            return None
        return transaction_to_domain(transaction)

    def find_by_id_and_user_id(self, transaction_id: str, user_id: str) -> Optional[DomainTransaction]:
        session = self._get_session()
        with database_operation(session, "find_by_id_and_user_id", "Transaction"):
            transaction = (
                session.query(Transaction)
                .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
                .first()
            )
        if transaction is None:
            return None
        return transaction_to_domain(transaction)

    def find_by_account_id_and_user_id(self, account_id: str, user_id: str) -> list[DomainTransaction]:
        return self._find(
            "find_by_account_id_and_user_id",
            Transaction.account_id == account_id,
            Transaction.user_id == user_id,
        )

    def find_by_category_id_and_user_id(self, category_id: str, user_id: str) -> list[DomainTransaction]:
        return self._find(
            "find_by_category_id_and_user_id",
            Transaction.category_id == category_id,
            Transaction.user_id == user_id,
        )

    def find_by_type_and_user_id(
        self, transaction_type: TransactionType, user_id: str
    ) -> list[DomainTransaction]:
        return self._find(
            "find_by_type_and_user_id",
            Transaction.type == transaction_type.value,
            Transaction.user_id == user_id,
        )

    def find_by_date_range_and_user_id(
        self, start_date: date, end_date: date, user_id: str
    ) -> list[DomainTransaction]:
        return self._find(
            "find_by_date_range_and_user_id",
            Transaction.transaction_date >= start_date,
            Transaction.transaction_date <= end_date,
            Transaction.user_id == user_id,
        )

    def find_recent_by_user_id(self, user_id: str, limit: int) -> list[DomainTransaction]:
        return self._find("find_recent_by_user_id", Transaction.user_id == user_id, limit=limit)

    def find_by_user_id_with_pagination(self, user_id: str, page: int, limit: int) -> TransactionPage:
        session = self._get_session()
        with database_operation(session, "find_by_user_id_with_pagination", "Transaction"):
            query = session.query(Transaction).filter(Transaction.user_id == user_id)
            total = query.count()
            rows = query.order_by(*self._NEWEST_FIRST).offset((page - 1) * limit).limit(limit).all()
        return TransactionPage(
            transactions=tuple(transaction_to_domain(txn) for txn in rows),
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def search_by_description_and_user_id(self, user_id: str, term: str, limit: int) -> list[DomainTransaction]:
        return self._find(
            "search_by_description_and_user_id",
            Transaction.user_id == user_id,
            Transaction.description.icontains(term, autoescape=True),
            limit=limit,
        )

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
    ) -> DomainTransaction:
        session = self._get_session()
        with database_operation(session, "create", "Transaction"):
            transaction = Transaction(
                user_id=user_id,
                account_id=account_id,
                category_id=category_id,
                amount=amount.value,
                description=description.value,
                type=transaction_type.value,
                transaction_date=transaction_date.value,
                is_reconciled=is_reconciled,
            )
            session.add(transaction)
            session.commit()
        return transaction_to_domain(transaction)

    def update(self, transaction_id: str, **changes: Any) -> DomainTransaction:
        session = self._get_session()
        transaction = self._require(session, transaction_id)
        apply_changes(transaction, changes, TRANSACTION_UPDATE_FIELDS, "Transaction")
        with database_operation(session, "update", "Transaction"):
            session.commit()
        return transaction_to_domain(transaction)

    def delete(self, transaction_id: str) -> None:
        session = self._get_session()
        transaction = self._require(session, transaction_id)
        with database_operation(session, "delete", "Transaction"):
            session.delete(transaction)
            session.commit()

    def _set_reconciled(self, transaction_id: str, value: bool) -> None:
        session = self._get_session()
        transaction = self._require(session, transaction_id)
        with database_operation(session, "mark_as_reconciled" if value else "mark_as_unreconciled", "Transaction"):
            transaction.is_reconciled = value
            session.commit()

    def mark_as_reconciled(self, transaction_id: str) -> None:
        self._set_reconciled(transaction_id, True)

    def mark_as_unreconciled(self, transaction_id: str) -> None:
        self._set_reconciled(transaction_id, False)

    def exists(self, transaction_id: str, user_id: str) -> bool:
        session = self._get_session()
        with database_operation(session, "exists", "Transaction"):
            count = (
                session.query(Transaction)
                .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
                .count()
            )
        return count > 0

    def get_count_by_user_id(self, user_id: str) -> int:
        session = self._get_session()
        with database_operation(session, "get_count_by_user_id", "Transaction"):
            return session.query(Transaction).filter(Transaction.user_id == user_id).count()

    def get_count_by_account_id_and_user_id(self, account_id: str, user_id: str) -> int:
        session = self._get_session()
        with database_operation(session, "get_count_by_account_id_and_user_id", "Transaction"):
            return (
                session.query(Transaction)
                .filter(Transaction.account_id == account_id, Transaction.user_id == user_id)
                .count()
            )

    def get_count_by_category_id_and_user_id(self, category_id: str, user_id: str) -> int:
        session = self._get_session()
        with database_operation(session, "get_count_by_category_id_and_user_id", "Transaction"):
            return (
                session.query(Transaction)
                .filter(Transaction.category_id == category_id, Transaction.user_id == user_id)
                .count()
            )

    def _total_amount(self, operation: str, *criteria: Any) -> Decimal:
        session = self._get_session()
        with database_operation(session, operation, "Transaction"):
            total = session.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(*criteria).scalar()
        return round_money(Decimal(str(total)))

    def get_total_amount_by_type_and_user_id(self, transaction_type: TransactionType, user_id: str) -> Decimal:
        return self._total_amount(
            "get_total_amount_by_type_and_user_id",
            Transaction.type == transaction_type.value,
            Transaction.user_id == user_id,
        )

    def get_total_amount_by_account_id_and_user_id(self, account_id: str, user_id: str) -> Decimal:
        return self._total_amount(
            "get_total_amount_by_account_id_and_user_id",
            Transaction.account_id == account_id,
            Transaction.user_id == user_id,
        )

    def get_total_amount_by_category_id_and_user_id(self, category_id: str, user_id: str) -> Decimal:
        return self._total_amount(
            "get_total_amount_by_category_id_and_user_id",
            Transaction.category_id == category_id,
            Transaction.user_id == user_id,
        )
