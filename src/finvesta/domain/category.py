"""Category domain service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from finvesta.domain.constants import DEFAULT_CATEGORIES
from finvesta.domain.entities import (
    Category as CategoryEntity,
    CategoryUsage,
    CategoryUsageStats,
    ValidationResult,
)
from finvesta.domain.errors import (
    CannotDeleteCategoryInUseError,
    CannotDeleteDefaultCategoryError,
    CategoryNotFoundError,
    DomainError,
    DuplicateCategoryNameError,
)
from finvesta.domain.value_objects import (
    CategoryColor,
    CategoryDescription,
    CategoryName,
    CategoryType,
)

if TYPE_CHECKING:
    from finvesta.database.base import CategoryRepository

logger = logging.getLogger(__name__)

MOST_USED_LIMIT = 5


class CategoryService:
    """Service for managing a user's categories."""

    def __init__(self, categories: CategoryRepository):
        """Initialize category service.

        Args:
            categories: Category repository
        """
        self.categories = categories

    def get_user_categories(self, user_id: str) -> list[CategoryEntity]:
        """List all categories of a user, grouped by type and ordered by name."""
        return self.categories.find_by_user_id(user_id)

    def get_categories_by_type(self, user_id: str, category_type: str) -> list[CategoryEntity]:
        """List the user's categories of one type.

        Raises:
            InvalidCategoryTypeError: If the type is not recognized
        """
        return self.categories.find_by_type_and_user_id(CategoryType.from_string(category_type), user_id)

    def get_category_by_id(self, category_id: str, user_id: str) -> CategoryEntity:
        """Get a category owned by the user.

        Raises:
            CategoryNotFoundError: If no category with this ID belongs to the user
        """
        category = self.categories.find_by_id_and_user_id(category_id, user_id)
        if category is None:
            logger.debug("Category %s not found for user %s", category_id, user_id)
            raise CategoryNotFoundError()
        return category

    def create_category(
        self,
        user_id: str,
        name: str,
        category_type: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CategoryEntity:
        """Create a category.

        Args:
            user_id: Owner of the category
            name: Category name, unique per user ignoring case
            category_type: One of income, expense, investment, transfer
            description: Optional description
            color: Hex color such as "#FF0000". A palette color is picked when omitted.

        Returns:
            The stored category

        Raises:
            ValidationError: If any field is invalid
            DuplicateCategoryNameError: If the user already has a category with this name
        """
        category_name = CategoryName.create(name)
        kind = CategoryType.from_string(category_type)
        category_description = CategoryDescription.create(description)
        category_color = CategoryColor.create(color) if color else CategoryColor.random()

        if self.categories.name_exists(category_name, user_id):
            logger.debug("Rejected duplicate category name %r for user %s", category_name.value, user_id)
            raise DuplicateCategoryNameError()

        category = self.categories.create(
            user_id=user_id,
            name=category_name,
            category_type=kind,
            color=category_color,
            description=category_description,
        )
        logger.info("Created category %s for user %s", category.id, user_id)
        return category

    def update_category(
        self,
        category_id: str,
        user_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category_type: Optional[str] = None,
        color: Optional[str] = None,
        is_default: Optional[bool] = None,
    ) -> CategoryEntity:
        """Update selected fields of a category.

        Fields left as None are not changed; an empty description clears it.

        Raises:
            CategoryNotFoundError: If the category does not belong to the user
            ValidationError: If a new value is invalid
            DuplicateCategoryNameError: If another category of the user has the new name
        """
        category = self.get_category_by_id(category_id, user_id)

        changes: dict[str, Any] = {}
        if name is not None:
            category_name = CategoryName.create(name)
            if self.categories.name_exists(category_name, user_id, exclude_id=category_id):
                logger.debug("Rejected duplicate category name %r for user %s", category_name.value, user_id)
                raise DuplicateCategoryNameError()
            changes["name"] = category_name
        if description is not None:
            changes["description"] = CategoryDescription.create(description)
        if category_type is not None:
            changes["category_type"] = CategoryType.from_string(category_type)
        if color is not None:
            changes["color"] = CategoryColor.create(color)
        if is_default is not None:
            changes["is_default"] = is_default

        if not changes:
            return category

        updated = self.categories.update(category_id, **changes)
        logger.info("Updated category %s (%s)", category_id, ", ".join(sorted(changes)))
        return updated

    def delete_category(self, category_id: str, user_id: str) -> None:
        """Delete a category.

        Default categories and categories referenced by transactions are kept.

        Raises:
            CategoryNotFoundError: If the category does not belong to the user
            CannotDeleteDefaultCategoryError: If the category is a default one
            CannotDeleteCategoryInUseError: If transactions reference the category
        """
        category = self.get_category_by_id(category_id, user_id)

        if category.is_default:
            logger.debug("Refused to delete default category %s", category_id)
            raise CannotDeleteDefaultCategoryError()
        if self.categories.is_in_use(category_id):
            logger.debug("Refused to delete category %s in use", category_id)
            raise CannotDeleteCategoryInUseError()

        self.categories.delete(category_id)
        logger.info("Deleted category %s", category_id)

    def get_default_categories(self, category_type: str) -> list[CategoryEntity]:
        """List default categories of one type, across all users."""
        return self.categories.find_default_by_type(CategoryType.from_string(category_type))

    def category_name_exists(self, name: str, user_id: str, exclude_id: Optional[str] = None) -> bool:
        """Check whether the user has a category with this name, ignoring case."""
        return self.categories.name_exists(CategoryName.create(name), user_id, exclude_id=exclude_id)

    def get_category_usage_stats(self, user_id: str) -> CategoryUsageStats:
        """Count the user's categories per type and rank them by usage.

        Only categories referenced by at least one transaction are ranked.
        """
        categories = self.categories.find_by_user_id(user_id)

        by_type = {kind.value: 0 for kind in CategoryType}
        usage = []
        for category in categories:
            by_type[category.category_type.value] += 1
            count = self.categories.get_usage_count(category.id)
            if count > 0:
                usage.append(CategoryUsage(id=category.id, name=category.name.value, usage_count=count))

        usage.sort(key=lambda item: (-item.usage_count, item.name.lower()))
        return CategoryUsageStats(
            total_categories=len(categories),
            categories_by_type=by_type,
            most_used_categories=tuple(usage[:MOST_USED_LIMIT]),
        )

    def create_default_categories_for_user(self, user_id: str) -> list[CategoryEntity]:
        """Seed the default category set for a user.

        Names the user already has (ignoring case) are skipped, so calling
        this again only fills in what is missing.

        Returns:
            The user's categories after seeding
        """
        created = 0
        for name, category_type, color, description in DEFAULT_CATEGORIES:
            category_name = CategoryName.create(name)
            if self.categories.name_exists(category_name, user_id):
                continue
            self.categories.create(
                user_id=user_id,
                name=category_name,
                category_type=CategoryType.from_string(category_type),
                color=CategoryColor.create(color),
                description=CategoryDescription.create(description),
                is_default=True,
            )
            created += 1

        logger.info("Seeded %d default categories for user %s", created, user_id)
        return self.categories.find_by_user_id(user_id)

    def validate_category_data(
        self,
        name: str,
        category_type: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> ValidationResult:
        """Validate category fields without storing anything.

        Unlike ``create_category`` this checks every field and reports all
        failures.
        """
        checks = [
            lambda: CategoryName.create(name),
            lambda: CategoryType.from_string(category_type),
            lambda: CategoryDescription.create(description),
        ]
        if color:
            checks.append(lambda: CategoryColor.create(color))

        errors = []
        for check in checks:
            try:
                check()
            except DomainError as e:
                errors.append(e.message)
        return ValidationResult(is_valid=not errors, errors=tuple(errors))
