"""Dashboard command."""

import click

from finvesta.cli.context import dashboard_service, require_user
from finvesta.cli.error_handling import handle_domain_error
from finvesta.cli.output import format_money
from finvesta.database.errors import InfrastructureError


@click.command("dashboard")
@click.pass_context
def dashboard(ctx) -> None:
    """Show balances, this month's income and expense, and recent transactions."""
    user_id = require_user(ctx)

    try:
        summary = dashboard_service(ctx).get_summary(user_id)
    except InfrastructureError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTotal balance:   {format_money(summary.total_balance):>14s}  ({summary.active_accounts} active accounts)")
    click.echo(f"Income (month):  {format_money(summary.month_income):>14s}")
    click.echo(f"Expense (month): {format_money(summary.month_expense):>14s}")
    click.echo(f"Net (month):     {format_money(summary.month_net):>14s}")

    if not summary.recent_transactions:
        click.echo("\nNo transactions yet.")
        return

    click.echo("\nRecent transactions:")
    for txn in summary.recent_transactions:
        sign = "+" if txn.transaction_type.value == "income" else "-"
        click.echo(
            f"  {txn.transaction_date!s}  {sign}{format_money(txn.amount.value):>12s}  {txn.description.truncated(40)}"
        )


def register_commands(cli):
    """Register dashboard command with main CLI."""
    cli.add_command(dashboard)
