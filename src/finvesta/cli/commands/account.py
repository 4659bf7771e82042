"""Account management commands."""

import click

from finvesta.cli.context import account_service, require_user
from finvesta.cli.error_handling import handle_domain_error
from finvesta.cli.output import echo_json, format_money
from finvesta.database.errors import InfrastructureError
from finvesta.database.mappers import AccountMapper, account_to_row
from finvesta.domain.constants import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES
from finvesta.domain.value_objects import AccountType
from finvesta.utils.amount_parser import parse_amount
from finvesta.utils.resolvers import resolve_account

ACCOUNT_TYPES = [kind.value for kind in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False), default="bank",
    help="Account type (default: bank)",
)
@click.option("--balance", default="0", help="Opening balance (default: 0)")
@click.option(
    "--currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False), default=DEFAULT_CURRENCY,
    help=f"Currency (default: {DEFAULT_CURRENCY})",
)
@click.option("--provider", help="Bank or provider name")
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str, currency: str, provider: str | None):
    """Create a new account.

    Examples:
        finvesta account create "Main Checking" --balance 1500
        finvesta account create "Broker" --type investment --currency USD --provider "IBKR"
    """
    user_id = require_user(ctx)
    service = account_service(ctx)

    try:
        account = service.create_account(
            user_id=user_id,
            name=name,
            account_type=account_type,
            balance=parse_amount(balance),
            currency=currency,
            provider=provider,
        )
        click.echo(f"Created account '{account.name}' (ID: {account.id})")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False), help="Only accounts of this type")
@click.option("--json", "as_json", is_flag=True, help="Print accounts as JSON")
@click.pass_context
def list_accounts(ctx, account_type: str | None, as_json: bool):
    """List your accounts."""
    user_id = require_user(ctx)
    service = account_service(ctx)

    if account_type:
        accounts = service.get_accounts_by_type(user_id, account_type)
    else:
        accounts = service.get_user_accounts(user_id)

    if as_json:
        echo_json([AccountMapper.to_domain(account_to_row(acc)) for acc in accounts])
        return

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 100)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"{acc.id} | {acc.name.value:25s} | {acc.account_type.label:14s} | "
            f"{format_money(acc.balance.value, acc.currency.code):>18s}{status}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False), help="New account type")
@click.option("--balance", help="New balance")
@click.option("--currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False), help="New currency")
@click.option("--provider", help="New bank or provider name")
@click.option("--activate", is_flag=True, help="Reactivate a deactivated account")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    account_type: str | None,
    balance: str | None,
    currency: str | None,
    provider: str | None,
    activate: bool,
) -> None:
    """Update an account.

    ACCOUNT can be an account name or ID. Only the given fields change.

    Examples:
        finvesta account update "Main Checking" --name "Checking"
        finvesta account update "Old Savings" --activate
    """
    user_id = require_user(ctx)
    service = account_service(ctx)

    try:
        account_id = resolve_account(service, user_id, account)
        updated = service.update_account(
            account_id,
            user_id,
            name=name,
            account_type=account_type,
            provider=provider,
            balance=parse_amount(balance) if balance is not None else None,
            currency=currency,
            is_active=True if activate else None,
        )
        click.echo(f"Updated account '{updated.name}'")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account. Its balance no longer counts towards your total."""
    user_id = require_user(ctx)
    service = account_service(ctx)

    try:
        account_id = resolve_account(service, user_id, account)
        service.deactivate_account(account_id, user_id)
        click.echo(f"Deactivated account {account_id}")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account permanently.

    ACCOUNT can be an account name or ID. Only deactivated accounts without
    transactions can be deleted.

    Examples:
        finvesta account deactivate "Old Savings"
        finvesta account delete "Old Savings"
    """
    user_id = require_user(ctx)
    service = account_service(ctx)

    try:
        account_id = resolve_account(service, user_id, account)
        account_obj = service.get_account_by_id(account_id, user_id)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id, user_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@account_group.command("total")
@click.pass_context
def total_balance(ctx) -> None:
    """Show the total balance of your active accounts."""
    user_id = require_user(ctx)

    try:
        total = account_service(ctx).get_total_balance(user_id)
    except InfrastructureError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Total balance: {format_money(total)}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
