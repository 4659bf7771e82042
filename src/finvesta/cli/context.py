"""CLI helpers for the requesting user and the services bound to the database."""

import click

from finvesta.database.base import Database
from finvesta.domain import AccountService, CategoryService, DashboardService, TransactionService


def require_user(ctx: click.Context) -> str:
    """Return the user given by --user / FINVESTA_USER_ID, or exit with a usage error."""
    user_id = ctx.obj.get("user_id")
    if not user_id:
        raise click.UsageError("No user given. Pass --user or set FINVESTA_USER_ID.", ctx=ctx)
    return user_id


def _db(ctx: click.Context) -> Database:
    return ctx.obj["db"]


def account_service(ctx: click.Context) -> AccountService:
    db = _db(ctx)
    return AccountService(db.accounts, db.transactions)


def category_service(ctx: click.Context) -> CategoryService:
    return CategoryService(_db(ctx).categories)


def transaction_service(ctx: click.Context) -> TransactionService:
    db = _db(ctx)
    return TransactionService(db.transactions, db.accounts, db.categories)


def dashboard_service(ctx: click.Context) -> DashboardService:
    db = _db(ctx)
    return DashboardService(db.accounts, db.transactions)
