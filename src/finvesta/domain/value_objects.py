"""Self-validating value objects for the Finvesta domain.

Value objects are immutable and compared by their normalized value. Build
them through ``create``, which normalizes the raw input and raises the named
domain error on the first rule it violates. ``restore`` rebuilds a value that
was validated before it was stored. Calling the constructor directly skips
both and trusts the caller.
"""

import random
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from enum import Enum
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from finvesta.domain import constants
from finvesta.domain.errors import (
    AccountNameInvalidCharactersError,
    AccountNameTooLongError,
    AccountNameTooShortError,
    BalanceInvalidError,
    BalanceTooHighError,
    BalanceTooLowError,
    CategoryDescriptionTooLongError,
    CategoryNameInvalidCharactersError,
    CategoryNameTooLongError,
    CategoryNameTooShortError,
    CurrencyInvalidError,
    CurrencyNotSupportedError,
    InvalidAccountTypeError,
    InvalidCategoryColorError,
    InvalidCategoryTypeError,
    InvalidTransactionDateError,
    InvalidTransactionTypeError,
    TransactionAmountInvalidError,
    TransactionAmountNotPositiveError,
    TransactionAmountTooHighError,
    TransactionDateInFutureError,
    TransactionDateTooOldError,
    TransactionDescriptionInvalidCharactersError,
    TransactionDescriptionRequiredError,
    TransactionDescriptionTooLongError,
    TransactionDescriptionTooShortError,
)

Number = Union[int, float, Decimal]

TWO_PLACES = Decimal("0.01")


def _to_decimal(value: Number, error_cls: type) -> Decimal:
    """Convert a finite int/float/Decimal to Decimal or raise ``error_cls``."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise error_cls()
    try:
        # str() keeps the float's shortest repr, so 1000.005 stays 1000.005
        number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation:
        raise error_cls()
    if not number.is_finite():
        raise error_cls()
    return number


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places, halves towards positive infinity.

    -0.125 becomes -0.12 and 0.125 becomes 0.13.
    """
    cents = (value * 100 + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    return (cents / 100).quantize(TWO_PLACES)


# Accounts


class AccountType(str, Enum):
    """Kinds of financial account."""

    BANK = "bank"
    CRYPTO = "crypto"
    INVESTMENT = "investment"
    CASH = "cash"
    SAVINGS = "savings"

    @property
    def label(self) -> str:
        return _ACCOUNT_TYPE_LABELS[self]

    @classmethod
    def from_string(cls, value: str) -> "AccountType":
        if not isinstance(value, str):
            raise InvalidAccountTypeError()
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidAccountTypeError()


_ACCOUNT_TYPE_LABELS = {
    AccountType.BANK: "Bank",
    AccountType.CRYPTO: "Cryptocurrency",
    AccountType.INVESTMENT: "Investment",
    AccountType.CASH: "Cash",
    AccountType.SAVINGS: "Savings",
}


@dataclass(frozen=True)
class AccountName:
    """Trimmed account name, 2-100 letters, digits, spaces, hyphens or underscores."""

    value: str

    @classmethod
    def create(cls, name: Optional[str]) -> "AccountName":
        trimmed = (name or "").strip()

        if len(trimmed) < constants.ACCOUNT_NAME_MIN_LENGTH:
            raise AccountNameTooShortError()
        if len(trimmed) > constants.ACCOUNT_NAME_MAX_LENGTH:
            raise AccountNameTooLongError()
        if not re.fullmatch(constants.ACCOUNT_NAME_PATTERN, trimmed):
            raise AccountNameInvalidCharactersError()

        return cls(trimmed)

    @classmethod
    def restore(cls, name: str) -> "AccountName":
        return cls(name)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AccountBalance:
    """Monetary balance rounded to cents and kept within the allowed range."""

    value: Decimal

    @classmethod
    def create(cls, balance: Number) -> "AccountBalance":
        number = _to_decimal(balance, BalanceInvalidError)

        if number < constants.ACCOUNT_BALANCE_MIN:
            raise BalanceTooLowError()
        if number > constants.ACCOUNT_BALANCE_MAX:
            raise BalanceTooHighError()

        return cls(round_money(number))

    @classmethod
    def restore(cls, balance: Union[Number, str]) -> "AccountBalance":
        """Rebuild a stored balance, rounded to cents."""
        return cls(round_money(Decimal(str(balance))))

    def add(self, amount: Number) -> "AccountBalance":
        return AccountBalance.create(self.value + _to_decimal(amount, BalanceInvalidError))

    def subtract(self, amount: Number) -> "AccountBalance":
        return AccountBalance.create(self.value - _to_decimal(amount, BalanceInvalidError))

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"{self.value:.2f}"


@dataclass(frozen=True)
class Currency:
    """Supported ISO-4217 currency code."""

    code: str

    @classmethod
    def create(cls, code: Optional[str]) -> "Currency":
        normalized = (code or "").strip().upper()

        if not re.fullmatch(constants.CURRENCY_PATTERN, normalized):
            raise CurrencyInvalidError()
        if normalized not in constants.SUPPORTED_CURRENCIES:
            raise CurrencyNotSupportedError()

        return cls(normalized)

    @classmethod
    def restore(cls, code: str) -> "Currency":
        return cls(code)

    def __str__(self) -> str:
        return self.code


# Category


class CategoryType(str, Enum):
    """Kinds of category; transactions must match their category's type."""

    INCOME = "income"
    EXPENSE = "expense"
    INVESTMENT = "investment"
    TRANSFER = "transfer"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_string(cls, value: str) -> "CategoryType":
        if not isinstance(value, str):
            raise InvalidCategoryTypeError()
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidCategoryTypeError()


@dataclass(frozen=True, eq=False)
class CategoryName:
    """Trimmed category name. Equality ignores case."""

    value: str

    @classmethod
    def create(cls, name: Optional[str]) -> "CategoryName":
        trimmed = (name or "").strip()

        if len(trimmed) < constants.CATEGORY_NAME_MIN_LENGTH:
            raise CategoryNameTooShortError()
        if len(trimmed) > constants.CATEGORY_NAME_MAX_LENGTH:
            raise CategoryNameTooLongError()
        if not re.fullmatch(constants.CATEGORY_NAME_PATTERN, trimmed):
            raise CategoryNameInvalidCharactersError()

        return cls(trimmed)

    @classmethod
    def restore(cls, name: str) -> "CategoryName":
        return cls(name)

    @property
    def display_value(self) -> str:
        return self.value[:1].upper() + self.value[1:]

    def contains(self, substring: str) -> bool:
        return substring.casefold() in self.value.casefold()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryName):
            return NotImplemented
        return self.value.casefold() == other.value.casefold()

    def __hash__(self) -> int:
        return hash(self.value.casefold())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CategoryDescription:
    """Optional category description; blank input becomes an empty description."""

    value: Optional[str]

    @classmethod
    def create(cls, description: Optional[str] = None) -> "CategoryDescription":
        if not description or not description.strip():
            return cls(None)

        trimmed = description.strip()
        if len(trimmed) > constants.CATEGORY_DESCRIPTION_MAX_LENGTH:
            raise CategoryDescriptionTooLongError()

        return cls(trimmed)

    @classmethod
    def restore(cls, description: Optional[str]) -> "CategoryDescription":
        return cls(description or None)

    def has_value(self) -> bool:
        return bool(self.value)

    def is_empty(self) -> bool:
        return not self.has_value()

    def truncated(self, max_length: int = 50) -> str:
        """Return the description cut to ``max_length`` characters plus an ellipsis."""
        if not self.value:
            return ""
        if len(self.value) <= max_length:
            return self.value
        return self.value[:max_length] + "..."

    def __str__(self) -> str:
        return self.value or ""


@dataclass(frozen=True, eq=False)
class CategoryColor:
    """Hex color (#RRGGBB) used to display a category."""

    value: str

    @classmethod
    def create(cls, color: Optional[str]) -> "CategoryColor":
        if not color or not color.strip():
            return cls(constants.DEFAULT_CATEGORY_COLOR)

        trimmed = color.strip()
        if not re.fullmatch(constants.CATEGORY_COLOR_PATTERN, trimmed):
            raise InvalidCategoryColorError()

        return cls(trimmed)

    @classmethod
    def restore(cls, color: str) -> "CategoryColor":
        return cls(color)

    @classmethod
    def random(cls) -> "CategoryColor":
        return cls(random.choice(constants.CATEGORY_COLOR_PALETTE))

    def _channels(self) -> tuple[int, int, int]:
        hex_value = self.value.lstrip("#")
        return (int(hex_value[0:2], 16), int(hex_value[2:4], 16), int(hex_value[4:6], 16))

    @property
    def rgb(self) -> str:
        r, g, b = self._channels()
        return f"rgb({r}, {g}, {b})"

    def is_light(self) -> bool:
        r, g, b = self._channels()
        return (r * 299 + g * 587 + b * 114) / 1000 > 128

    @property
    def contrast_color(self) -> str:
        return "#000000" if self.is_light() else "#FFFFFF"

    def is_default(self) -> bool:
        return self == CategoryColor(constants.DEFAULT_CATEGORY_COLOR)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryColor):
            return NotImplemented
        return self.value.lower() == other.value.lower()

    def __hash__(self) -> int:
        return hash(self.value.lower())

    def __str__(self) -> str:
        return self.value


# Transaction


class TransactionType(str, Enum):
    """Kinds of transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    INVESTMENT = "investment"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_string(cls, value: str) -> "TransactionType":
        if not isinstance(value, str):
            raise InvalidTransactionTypeError()
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidTransactionTypeError()


@dataclass(frozen=True)
class TransactionAmount:
    """Positive transaction amount in cents precision, at most 1,000,000.

    The direction of money (in or out) is given by the transaction type.
    """

    value: Decimal

    @classmethod
    def create(cls, amount: Number) -> "TransactionAmount":
        number = _to_decimal(amount, TransactionAmountInvalidError)

        if number <= 0:
            raise TransactionAmountNotPositiveError()
        if number > constants.TRANSACTION_AMOUNT_MAX:
            raise TransactionAmountTooHighError()

        rounded = round_money(number)
        # 0.004 passes the sign check but rounds to zero
        if rounded <= 0:
            raise TransactionAmountNotPositiveError()
        return cls(rounded)

    @classmethod
    def restore(cls, amount: Union[Number, str]) -> "TransactionAmount":
        """Rebuild a stored amount, rounded to cents."""
        return cls(round_money(Decimal(str(amount))))

    def add(self, other: "TransactionAmount") -> "TransactionAmount":
        return TransactionAmount.create(self.value + other.value)

    def __str__(self) -> str:
        return f"{self.value:.2f}"


@dataclass(frozen=True)
class TransactionDescription:
    """Required, trimmed transaction description."""

    value: str

    @classmethod
    def create(cls, description: Optional[str]) -> "TransactionDescription":
        if not description or not description.strip():
            raise TransactionDescriptionRequiredError()

        trimmed = description.strip()
        if len(trimmed) < constants.TRANSACTION_DESCRIPTION_MIN_LENGTH:
            raise TransactionDescriptionTooShortError()
        if len(trimmed) > constants.TRANSACTION_DESCRIPTION_MAX_LENGTH:
            raise TransactionDescriptionTooLongError()
        if not re.fullmatch(constants.TRANSACTION_DESCRIPTION_PATTERN, trimmed):
            raise TransactionDescriptionInvalidCharactersError()

        return cls(trimmed)

    @classmethod
    def restore(cls, description: str) -> "TransactionDescription":
        return cls(description)

    def truncated(self, max_length: int = 50) -> str:
        if len(self.value) <= max_length:
            return self.value
        return self.value[:max_length] + "..."

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TransactionDate:
    """Calendar date of a transaction.

    New dates must fall within the trailing year up to and including today.
    """

    value: date

    @classmethod
    def create(
        cls, value: Union[date, datetime, str], today: Optional[date] = None
    ) -> "TransactionDate":
        """Validate a new transaction date.

        Args:
            value: date, datetime or ISO-8601 string (e.g. "2024-01-15")
            today: Reference day for the window (defaults to date.today())

        Raises:
            InvalidTransactionDateError: If the value cannot be read as a date
            TransactionDateInFutureError: If the date is after today
            TransactionDateTooOldError: If the date is more than one year ago
        """
        parsed = cls._parse(value)
        today = today or date.today()
        earliest = today - relativedelta(years=constants.TRANSACTION_DATE_WINDOW_YEARS)

        if parsed > today:
            raise TransactionDateInFutureError()
        if parsed < earliest:
            raise TransactionDateTooOldError()

        return cls(parsed)

    @classmethod
    def restore(cls, value: Union[date, datetime, str]) -> "TransactionDate":
        """Rebuild a stored date without the window check."""
        return cls(cls._parse(value))

    @staticmethod
    def _parse(value: Union[date, datetime, str]) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str) and value.strip():
            try:
                return date_parser.isoparse(value.strip()).date()
            except (ValueError, OverflowError):
                raise InvalidTransactionDateError()
        raise InvalidTransactionDateError()

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        return self.value.month

    def __str__(self) -> str:
        return self.value.isoformat()
