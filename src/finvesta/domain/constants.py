"""Constraint and message tables for the Accounts, Category and Transaction contexts."""

from decimal import Decimal

# Accounts

ACCOUNT_NAME_MIN_LENGTH = 2
ACCOUNT_NAME_MAX_LENGTH = 100
ACCOUNT_NAME_PATTERN = r"[a-zA-Z0-9\s\-_]+"

ACCOUNT_BALANCE_MIN = Decimal("-999999999")
ACCOUNT_BALANCE_MAX = Decimal("999999999")

CURRENCY_PATTERN = r"[A-Z]{3}"
SUPPORTED_CURRENCIES = ("EUR", "USD")
DEFAULT_CURRENCY = "EUR"

ACCOUNT_MESSAGES = {
    "name_too_short": f"Account name must be at least {ACCOUNT_NAME_MIN_LENGTH} characters",
    "name_too_long": f"Account name cannot exceed {ACCOUNT_NAME_MAX_LENGTH} characters",
    "name_invalid_chars": "Account name contains invalid characters",
    "balance_invalid": "Balance must be a valid number",
    "balance_too_low": "Balance cannot be less than -999,999,999",
    "balance_too_high": "Balance cannot exceed 999,999,999",
    "currency_invalid": "Currency must be a valid 3-letter ISO code",
    "currency_not_supported": "Currency is not supported",
    "account_type_invalid": "Invalid account type",
    "duplicate_name": "An account with this name already exists",
    "cannot_delete_active": "Cannot delete an active account. Deactivate it first.",
    "has_transactions": "Cannot delete account with transactions. Delete them first.",
    "access_denied": "Access denied to this account",
    "not_found": "Account not found",
    "already_deactivated": "Account is already deactivated",
}

# Category

CATEGORY_NAME_MIN_LENGTH = 2
CATEGORY_NAME_MAX_LENGTH = 50
CATEGORY_NAME_PATTERN = r"[a-zA-Z0-9\s\-_&]+"
CATEGORY_DESCRIPTION_MAX_LENGTH = 200
CATEGORY_COLOR_PATTERN = r"#[0-9A-Fa-f]{6}"
DEFAULT_CATEGORY_COLOR = "#6B7280"

CATEGORY_COLOR_PALETTE = (
    "#EF4444",
    "#F97316",
    "#EAB308",
    "#22C55E",
    "#06B6D4",
    "#3B82F6",
    "#8B5CF6",
    "#EC4899",
    "#6B7280",
    "#84CC16",
)

CATEGORY_MESSAGES = {
    "name_too_short": f"Category name must be at least {CATEGORY_NAME_MIN_LENGTH} characters",
    "name_too_long": f"Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters",
    "name_invalid_chars": "Category name contains invalid characters",
    "description_too_long": f"Description cannot exceed {CATEGORY_DESCRIPTION_MAX_LENGTH} characters",
    "color_invalid": "Color must be a valid hex color code (e.g., #FF0000)",
    "type_invalid": "Invalid category type",
    "duplicate_name": "A category with this name already exists",
    "cannot_delete_default": "Cannot delete default category",
    "cannot_delete_in_use": "Cannot delete category that is being used by transactions",
    "access_denied": "Access denied to this category",
    "not_found": "Category not found",
}

# Seeded for every new user by CategoryService.create_default_categories_for_user.
# (name, type, color, description)
DEFAULT_CATEGORIES = (
    ("Salary", "income", "#22C55E", "Monthly salary and wages"),
    ("Freelance", "income", "#84CC16", "Side projects and freelance work"),
    ("Dividends", "income", "#06B6D4", None),
    ("Groceries", "expense", "#EF4444", "Supermarket and food shopping"),
    ("Housing", "expense", "#F97316", "Rent, mortgage and utilities"),
    ("Transport", "expense", "#EAB308", None),
    ("Restaurants", "expense", "#EC4899", None),
    ("Health", "expense", "#8B5CF6", None),
    ("Leisure", "expense", "#3B82F6", None),
    ("Index Funds", "investment", "#3B82F6", "Long-term ETF and index fund contributions"),
    ("Crypto", "investment", "#EAB308", None),
    ("Internal Transfer", "transfer", "#6B7280", "Money moved between own accounts"),
)

# Transaction

TRANSACTION_DESCRIPTION_MIN_LENGTH = 1
TRANSACTION_DESCRIPTION_MAX_LENGTH = 200
TRANSACTION_DESCRIPTION_PATTERN = r"[a-zA-Z0-9\s\-_.,!?()]+"

TRANSACTION_AMOUNT_MAX = Decimal("1000000")
TRANSACTION_DATE_WINDOW_YEARS = 1

TRANSACTION_MESSAGES = {
    "amount_invalid": "Amount must be a valid number",
    "amount_not_positive": "Amount must be greater than 0",
    "amount_too_high": "Amount cannot exceed 1,000,000",
    "description_required": "Description is required",
    "description_too_short": f"Description must be at least {TRANSACTION_DESCRIPTION_MIN_LENGTH} character",
    "description_too_long": f"Description cannot exceed {TRANSACTION_DESCRIPTION_MAX_LENGTH} characters",
    "description_invalid_chars": "Description contains invalid characters",
    "type_invalid": "Invalid transaction type",
    "date_invalid": "Transaction date is invalid",
    "date_in_future": "Transaction date cannot be in the future",
    "date_too_old": "Transaction date cannot be more than one year ago",
    "not_found": "Transaction not found",
    "access_denied": "Access denied to this transaction",
    "category_type_mismatch": "Category type does not match transaction type",
    "cannot_delete_reconciled": "Cannot delete reconciled transaction",
    "period_invalid": "Period must be one of day, week, month, quarter or year",
    "page_invalid": "Page and page size must be at least 1",
}
