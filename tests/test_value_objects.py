"""Tests for domain value objects."""

from datetime import date, datetime
from decimal import Decimal

import pytest

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
    CategoryNameTooShortError,
    CurrencyInvalidError,
    CurrencyNotSupportedError,
    InvalidAccountTypeError,
    InvalidBalanceError,
    InvalidCategoryColorError,
    InvalidCategoryTypeError,
    InvalidCurrencyError,
    InvalidTransactionAmountError,
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
)


class TestAccountName:
    def test_trims_whitespace(self):
        assert AccountName.create("  My Savings  ").value == "My Savings"

    def test_allows_hyphens_underscores_and_digits(self):
        assert AccountName.create("Joint_Account-2").value == "Joint_Account-2"

    @pytest.mark.parametrize("name", ["", "   ", "A", None])
    def test_too_short(self, name):
        with pytest.raises(AccountNameTooShortError):
            AccountName.create(name)

    def test_too_long(self):
        with pytest.raises(AccountNameTooLongError):
            AccountName.create("a" * (constants.ACCOUNT_NAME_MAX_LENGTH + 1))

    def test_max_length_is_accepted(self):
        assert len(AccountName.create("a" * constants.ACCOUNT_NAME_MAX_LENGTH).value) == 100

    @pytest.mark.parametrize("name", ["My Savings!", "Cash & Co", "Ahorro €"])
    def test_invalid_characters(self, name):
        with pytest.raises(AccountNameInvalidCharactersError):
            AccountName.create(name)

    def test_equality_is_case_sensitive(self):
        assert AccountName.create("Savings") == AccountName.create(" Savings ")
        assert AccountName.create("Savings") != AccountName.create("savings")


class TestAccountBalance:
    def test_rounds_half_up_to_cents(self):
        assert AccountBalance.create(1000.005).value == Decimal("1000.01")
        assert AccountBalance.create(Decimal("2.675")).value == Decimal("2.68")
        assert AccountBalance.create(-1.005).value == Decimal("-1.00")

    def test_negative_halves_round_towards_positive_infinity(self):
        assert AccountBalance.create(-0.125).value == Decimal("-0.12")
        assert AccountBalance.create(-0.025).value == Decimal("-0.02")
        assert AccountBalance.create(Decimal("-0.126")).value == Decimal("-0.13")
        assert AccountBalance.create(-0.004).value == Decimal("0.00")

    def test_integer_balance(self):
        assert AccountBalance.create(250).value == Decimal("250.00")

    def test_bounds_are_inclusive(self):
        assert AccountBalance.create(999_999_999).value == Decimal("999999999.00")
        assert AccountBalance.create(-999_999_999).value == Decimal("-999999999.00")

    def test_too_high(self):
        with pytest.raises(BalanceTooHighError):
            AccountBalance.create(1_000_000_000)

    def test_too_low(self):
        with pytest.raises(BalanceTooLowError):
            AccountBalance.create(-1_000_000_000)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), "100", None, True])
    def test_non_finite_or_non_numeric(self, value):
        with pytest.raises(BalanceInvalidError):
            AccountBalance.create(value)

    def test_all_balance_errors_share_a_base(self):
        assert issubclass(BalanceTooHighError, InvalidBalanceError)
        assert issubclass(BalanceTooLowError, InvalidBalanceError)
        assert issubclass(BalanceInvalidError, InvalidBalanceError)

    def test_add_and_subtract_return_new_balances(self):
        balance = AccountBalance.create(100)
        assert balance.add(50.25).value == Decimal("150.25")
        assert balance.subtract(150).value == Decimal("-50.00")
        assert balance.value == Decimal("100.00")

    def test_add_revalidates_range(self):
        with pytest.raises(BalanceTooHighError):
            AccountBalance.create(999_999_999).add(1)

    def test_sign_predicates(self):
        assert AccountBalance.create(1).is_positive()
        assert AccountBalance.create(-1).is_negative()
        assert AccountBalance.create(0).is_zero()


class TestCurrency:
    def test_normalizes_case_and_whitespace(self):
        assert Currency.create(" eur ").code == "EUR"

    def test_unsupported_code(self):
        with pytest.raises(CurrencyNotSupportedError):
            Currency.create("XYZ")

    @pytest.mark.parametrize("code", ["EU", "EURO", "E1R", "", None])
    def test_malformed_code(self, code):
        with pytest.raises(CurrencyInvalidError):
            Currency.create(code)

    def test_errors_share_a_base(self):
        assert issubclass(CurrencyNotSupportedError, InvalidCurrencyError)


class TestTypeEnums:
    def test_account_type_from_string(self):
        assert AccountType.from_string(" Savings ") is AccountType.SAVINGS
        assert AccountType.CRYPTO.label == "Cryptocurrency"

    def test_account_type_invalid(self):
        with pytest.raises(InvalidAccountTypeError):
            AccountType.from_string("checking")

    def test_category_type_invalid(self):
        with pytest.raises(InvalidCategoryTypeError):
            CategoryType.from_string("gift")

    def test_transaction_type_invalid(self):
        with pytest.raises(InvalidTransactionTypeError):
            TransactionType.from_string("refund")

    def test_category_and_transaction_types_share_values(self):
        assert {kind.value for kind in CategoryType} == {kind.value for kind in TransactionType}


class TestCategoryName:
    def test_equality_ignores_case(self):
        assert CategoryName.create("Food") == CategoryName.create("food")
        assert hash(CategoryName.create("Food")) == hash(CategoryName.create("FOOD"))

    def test_allows_ampersand(self):
        assert CategoryName.create("Food & Dining").value == "Food & Dining"

    def test_invalid_characters(self):
        with pytest.raises(CategoryNameInvalidCharactersError):
            CategoryName.create("Food/Dining")

    def test_too_short(self):
        with pytest.raises(CategoryNameTooShortError):
            CategoryName.create(" x ")

    def test_contains_ignores_case(self):
        assert CategoryName.create("Restaurants").contains("RANT")

    def test_display_value_capitalizes_first_letter(self):
        name = CategoryName.create("side gigs")
        assert name.display_value == "Side gigs"
        assert name.value == "side gigs"


class TestCategoryDescription:
    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_is_empty(self, value):
        description = CategoryDescription.create(value)
        assert description.is_empty()
        assert description.value is None

    def test_default_is_empty(self):
        assert CategoryDescription.create().is_empty()

    def test_too_long(self):
        with pytest.raises(CategoryDescriptionTooLongError):
            CategoryDescription.create("x" * (constants.CATEGORY_DESCRIPTION_MAX_LENGTH + 1))

    def test_truncated(self):
        description = CategoryDescription.create("x" * 60)
        assert description.truncated() == "x" * 50 + "..."
        assert description.truncated(100) == "x" * 60
        assert CategoryDescription.create("short").truncated() == "short"


class TestCategoryColor:
    def test_blank_gives_default(self):
        color = CategoryColor.create("")
        assert color.value == constants.DEFAULT_CATEGORY_COLOR
        assert color.is_default()

    @pytest.mark.parametrize("value", ["red", "#FFF", "#GGGGGG", "FF0000"])
    def test_invalid(self, value):
        with pytest.raises(InvalidCategoryColorError):
            CategoryColor.create(value)

    def test_equality_ignores_case(self):
        assert CategoryColor.create("#ff0000") == CategoryColor.create("#FF0000")

    def test_rgb_and_contrast(self):
        assert CategoryColor.create("#FF8000").rgb == "rgb(255, 128, 0)"
        assert CategoryColor.create("#FFFFFF").contrast_color == "#000000"
        assert CategoryColor.create("#000000").contrast_color == "#FFFFFF"

    def test_random_comes_from_palette(self):
        assert CategoryColor.random().value in constants.CATEGORY_COLOR_PALETTE


class TestTransactionAmount:
    def test_rounds_to_cents(self):
        assert TransactionAmount.create(19.999).value == Decimal("20.00")

    @pytest.mark.parametrize("value", [0, -5, 0.004])
    def test_must_be_positive(self, value):
        with pytest.raises(TransactionAmountNotPositiveError):
            TransactionAmount.create(value)

    def test_upper_bound(self):
        assert TransactionAmount.create(1_000_000).value == Decimal("1000000.00")
        with pytest.raises(TransactionAmountTooHighError):
            TransactionAmount.create(1_000_000.01)

    def test_not_a_number(self):
        with pytest.raises(TransactionAmountInvalidError):
            TransactionAmount.create(float("nan"))
        assert issubclass(TransactionAmountInvalidError, InvalidTransactionAmountError)

    def test_restore_rounds_stored_amount(self):
        assert TransactionAmount.restore("42.105").value == Decimal("42.11")
        assert TransactionAmount.restore(Decimal("0.00")).value == Decimal("0.00")


class TestTransactionDescription:
    def test_trims(self):
        assert TransactionDescription.create("  Coffee, croissant (2x)!  ").value == "Coffee, croissant (2x)!"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_required(self, value):
        with pytest.raises(TransactionDescriptionRequiredError):
            TransactionDescription.create(value)

    def test_too_long(self):
        with pytest.raises(TransactionDescriptionTooLongError):
            TransactionDescription.create("x" * 201)

    def test_invalid_characters(self):
        with pytest.raises(TransactionDescriptionInvalidCharactersError):
            TransactionDescription.create("Rent #12")


class TestTransactionDate:
    TODAY = date(2024, 6, 15)

    def test_accepts_today_and_window_start(self):
        assert TransactionDate.create(self.TODAY, today=self.TODAY).value == self.TODAY
        assert TransactionDate.create(date(2023, 6, 15), today=self.TODAY).value == date(2023, 6, 15)

    def test_accepts_iso_string_and_datetime(self):
        assert TransactionDate.create("2024-03-01", today=self.TODAY).value == date(2024, 3, 1)
        assert TransactionDate.create(datetime(2024, 3, 1, 12, 30), today=self.TODAY).value == date(2024, 3, 1)

    def test_future_date(self):
        with pytest.raises(TransactionDateInFutureError):
            TransactionDate.create(date(2024, 6, 16), today=self.TODAY)

    def test_too_old(self):
        with pytest.raises(TransactionDateTooOldError):
            TransactionDate.create(date(2023, 6, 14), today=self.TODAY)

    @pytest.mark.parametrize("value", ["not a date", "", None, 20240101])
    def test_unreadable(self, value):
        with pytest.raises(InvalidTransactionDateError):
            TransactionDate.create(value, today=self.TODAY)

    def test_restore_skips_window(self):
        restored = TransactionDate.restore("2019-01-31")
        assert restored.value == date(2019, 1, 31)
        assert (restored.year, restored.month) == (2019, 1)
