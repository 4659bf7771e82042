"""Tests for CategoryService."""

from datetime import date

import pytest

from finvesta.domain import constants
from finvesta.domain.errors import (
    CannotDeleteCategoryInUseError,
    CannotDeleteDefaultCategoryError,
    CategoryDescriptionTooLongError,
    CategoryNotFoundError,
    DuplicateCategoryNameError,
    InvalidCategoryTypeError,
)
from finvesta.domain.value_objects import CategoryType


def add_expense(transaction_service, user_id, account, category, description="Coffee"):
    return transaction_service.create_transaction(
        user_id=user_id,
        account_id=account.id,
        category_id=category.id,
        amount=4.5,
        description=description,
        transaction_type="expense",
        transaction_date=date.today(),
    )


class TestCreateCategory:
    def test_create_with_all_fields(self, category_service, user_id):
        category = category_service.create_category(
            user_id, " Restaurants ", "EXPENSE", description="  Eating out ", color="#EC4899"
        )

        assert category.name.value == "Restaurants"
        assert category.category_type is CategoryType.EXPENSE
        assert category.description.value == "Eating out"
        assert category.color.value == "#EC4899"
        assert category.is_default is False

    def test_color_is_picked_from_palette_when_missing(self, category_service, user_id):
        category = category_service.create_category(user_id, "Gifts", "expense")
        assert category.color.value in constants.CATEGORY_COLOR_PALETTE

    def test_duplicate_name_ignores_case(self, category_service, sample_categories, user_id):
        with pytest.raises(DuplicateCategoryNameError):
            category_service.create_category(user_id, "GROCERIES", "expense")

    def test_long_description(self, category_service, user_id):
        with pytest.raises(CategoryDescriptionTooLongError):
            category_service.create_category(user_id, "Travel", "expense", description="x" * 201)

    def test_unknown_type(self, category_service, user_id):
        with pytest.raises(InvalidCategoryTypeError):
            category_service.create_category(user_id, "Travel", "gift")


class TestQueries:
    def test_get_categories_by_type(self, category_service, sample_categories, user_id):
        income = category_service.get_categories_by_type(user_id, "income")
        assert [cat.name.value for cat in income] == ["Salary"]

    def test_other_users_category_is_not_found(self, category_service, sample_categories, other_user_id):
        with pytest.raises(CategoryNotFoundError):
            category_service.get_category_by_id(sample_categories["income"].id, other_user_id)

    def test_category_name_exists(self, category_service, sample_categories, user_id, other_user_id):
        groceries = sample_categories["expense"]

        assert category_service.category_name_exists("groceries", user_id)
        assert not category_service.category_name_exists("groceries", user_id, exclude_id=groceries.id)
        assert not category_service.category_name_exists("groceries", other_user_id)


class TestUpdateCategory:
    def test_update_fields(self, category_service, sample_categories, user_id):
        category = sample_categories["expense"]
        updated = category_service.update_category(
            category.id, user_id, name="Food & Groceries", color="#10B981", description=""
        )

        assert updated.name.value == "Food & Groceries"
        assert updated.color.value == "#10B981"
        assert updated.description.is_empty()
        assert updated.category_type is CategoryType.EXPENSE

    def test_rename_to_existing_name(self, category_service, sample_categories, user_id):
        with pytest.raises(DuplicateCategoryNameError):
            category_service.update_category(sample_categories["expense"].id, user_id, name="salary")

    def test_change_case_of_own_name(self, category_service, sample_categories, user_id):
        updated = category_service.update_category(sample_categories["expense"].id, user_id, name="GROCERIES")
        assert updated.name.value == "GROCERIES"


class TestDeleteCategory:
    def test_delete_unused_category(self, category_service, sample_categories, user_id):
        category_service.delete_category(sample_categories["transfer"].id, user_id)

        with pytest.raises(CategoryNotFoundError):
            category_service.get_category_by_id(sample_categories["transfer"].id, user_id)

    def test_in_use_category_is_not_deleted(
        self, temp_db, category_service, transaction_service, sample_account, sample_categories, user_id, monkeypatch
    ):
        groceries = sample_categories["expense"]
        add_expense(transaction_service, user_id, sample_account, groceries)

        deleted = []
        monkeypatch.setattr(temp_db.categories, "delete", lambda category_id: deleted.append(category_id))

        with pytest.raises(CannotDeleteCategoryInUseError):
            category_service.delete_category(groceries.id, user_id)
        assert deleted == []

    def test_default_category_is_not_deleted(self, category_service, user_id):
        categories = category_service.create_default_categories_for_user(user_id)

        with pytest.raises(CannotDeleteDefaultCategoryError):
            category_service.delete_category(categories[0].id, user_id)

    def test_other_user_cannot_delete(self, category_service, sample_categories, other_user_id):
        with pytest.raises(CategoryNotFoundError):
            category_service.delete_category(sample_categories["transfer"].id, other_user_id)


class TestDefaultCategories:
    def test_seeds_full_set(self, category_service, user_id):
        categories = category_service.create_default_categories_for_user(user_id)

        assert len(categories) == len(constants.DEFAULT_CATEGORIES)
        assert all(cat.is_default for cat in categories)
        assert {cat.name.value for cat in categories} == {name for name, _, _, _ in constants.DEFAULT_CATEGORIES}

    def test_seeding_twice_adds_nothing(self, category_service, user_id):
        first = category_service.create_default_categories_for_user(user_id)
        second = category_service.create_default_categories_for_user(user_id)

        assert sorted(cat.id for cat in first) == sorted(cat.id for cat in second)

    def test_existing_names_are_kept(self, category_service, user_id):
        own = category_service.create_category(user_id, "groceries", "expense", color="#000000")
        categories = category_service.create_default_categories_for_user(user_id)

        matches = [cat for cat in categories if cat.name.value.lower() == "groceries"]
        assert [cat.id for cat in matches] == [own.id]
        assert matches[0].is_default is False
        assert len(categories) == len(constants.DEFAULT_CATEGORIES)

    def test_get_default_categories_by_type(self, category_service, user_id, other_user_id):
        category_service.create_default_categories_for_user(user_id)
        category_service.create_default_categories_for_user(other_user_id)

        defaults = category_service.get_default_categories("income")
        expected = [name for name, kind, _, _ in constants.DEFAULT_CATEGORIES if kind == "income"]
        assert len(defaults) == 2 * len(expected)
        assert {cat.category_type for cat in defaults} == {CategoryType.INCOME}


class TestUsageStats:
    def test_counts_and_ranking(
        self, category_service, transaction_service, sample_account, sample_categories, user_id
    ):
        groceries = sample_categories["expense"]
        restaurants = category_service.create_category(user_id, "Restaurants", "expense")
        for description in ("Market", "Bakery", "Butcher"):
            add_expense(transaction_service, user_id, sample_account, groceries, description)
        add_expense(transaction_service, user_id, sample_account, restaurants)

        stats = category_service.get_category_usage_stats(user_id)

        assert stats.total_categories == 5
        assert stats.categories_by_type == {"income": 1, "expense": 2, "investment": 1, "transfer": 1}
        assert [(usage.name, usage.usage_count) for usage in stats.most_used_categories] == [
            ("Groceries", 3),
            ("Restaurants", 1),
        ]

    def test_no_categories(self, category_service, user_id):
        stats = category_service.get_category_usage_stats(user_id)

        assert stats.total_categories == 0
        assert stats.most_used_categories == ()


class TestValidateCategoryData:
    def test_valid(self, category_service):
        result = category_service.validate_category_data("Travel", "expense", color="#123ABC")
        assert result.is_valid
        assert result.errors == ()

    def test_reports_every_failure(self, category_service):
        result = category_service.validate_category_data("T", "gift", description="x" * 201, color="red")

        assert not result.is_valid
        assert result.errors == (
            constants.CATEGORY_MESSAGES["name_too_short"],
            constants.CATEGORY_MESSAGES["type_invalid"],
            constants.CATEGORY_MESSAGES["description_too_long"],
            constants.CATEGORY_MESSAGES["color_invalid"],
        )
