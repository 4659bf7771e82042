"""Resolve account and category references typed by a user.

A reference is either an entity ID or its name.
"""

from finvesta.domain.account import AccountService
from finvesta.domain.category import CategoryService
from finvesta.domain.errors import AccountNotFoundError, CategoryNotFoundError


def resolve_account(account_service: AccountService, user_id: str, account: str) -> str:
    """Resolve an account name or ID to the ID of an account the user owns.

    Raises:
        AccountNotFoundError: If neither an ID nor a name matches
    """
    try:
        return account_service.get_account_by_id(account, user_id).id
    except AccountNotFoundError:
        pass

    wanted = account.strip()
    for acc in account_service.get_user_accounts(user_id):
        if acc.name.value == wanted:
            return acc.id

    raise AccountNotFoundError(f"Account '{account}' not found")


def resolve_category(category_service: CategoryService, user_id: str, category: str) -> str:
    """Resolve a category name (any case) or ID to the ID of a category the user owns.

    Raises:
        CategoryNotFoundError: If neither an ID nor a name matches
    """
    try:
        return category_service.get_category_by_id(category, user_id).id
    except CategoryNotFoundError:
        pass

    wanted = category.strip().lower()
    for cat in category_service.get_user_categories(user_id):
        if cat.name.value.lower() == wanted:
            return cat.id

    raise CategoryNotFoundError(f"Category '{category}' not found")
