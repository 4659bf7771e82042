"""Transaction management commands."""

import csv
from datetime import date

import click

from finvesta.cli.context import account_service, category_service, require_user, transaction_service
from finvesta.cli.date_filters import resolve_cli_date_range
from finvesta.cli.error_handling import handle_domain_error
from finvesta.cli.output import echo_json, format_money
from finvesta.database.errors import InfrastructureError
from finvesta.database.mappers import TransactionMapper, transaction_to_row
from finvesta.domain.entities import Transaction
from finvesta.domain.transaction import PAGE_SIZE, SEARCH_LIMIT, SUMMARY_PERIODS
from finvesta.domain.value_objects import TransactionType
from finvesta.utils.amount_parser import parse_amount
from finvesta.utils.date_parser import PERIODS, parse_date
from finvesta.utils.resolvers import resolve_account, resolve_category

TRANSACTION_TYPES = [kind.value for kind in TransactionType]
IMPORT_COLUMNS = ("date", "account", "category", "type", "amount", "description")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--category", required=True, help="Category name or ID")
@click.option("--amount", required=True, help="Positive amount (e.g., 42.50)")
@click.option(
    "--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False), default="expense",
    help="Transaction type (default: expense)",
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--date", "txn_date", default="today", help="Transaction date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--force", is_flag=True, help="Add without checking for similar transactions")
@click.pass_context
def add_transaction(
    ctx, account: str, category: str, amount: str, transaction_type: str, description: str, txn_date: str,
    force: bool,
) -> None:
    """Record a transaction.

    The category must have the same type as the transaction, and the date
    must lie within the last year. If a similar transaction was recorded on
    the same account a few days around the date, you are asked to confirm.

    Examples:
        finvesta transaction add --account "Checking" --category Groceries --amount 54.20 --description "Weekly shop"
        finvesta transaction add --account "Checking" --category Salary --amount 3200 --type income --description "March salary" --date 2024-03-28
    """
    user_id = require_user(ctx)
    service = transaction_service(ctx)

    try:
        fields = dict(
            account_id=resolve_account(account_service(ctx), user_id, account),
            category_id=resolve_category(category_service(ctx), user_id, category),
            amount=parse_amount(amount),
            description=description,
            transaction_type=transaction_type,
            transaction_date=parse_date(txn_date),
        )
        duplicates = [] if force else service.get_duplicate_transaction_suggestions(
            user_id,
            fields["account_id"],
            fields["amount"],
            description,
            transaction_type,
            fields["transaction_date"],
        )
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    if duplicates:
        click.echo(f"Found {len(duplicates)} similar transaction(s):")
        for txn in duplicates:
            click.echo(f"  {txn.transaction_date!s}  {format_money(txn.amount.value):>12}  {txn.description.truncated(40)}")
        if not click.confirm("Add anyway?"):
            click.echo("Transaction not added.")
            return

    try:
        transaction = service.create_transaction(user_id=user_id, **fields)
        click.echo(f"Added transaction {transaction.id}")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


def print_transactions(ctx, user_id: str, transactions: list[Transaction]) -> None:
    """Print transactions as a table with account and category names."""
    account_names = {acc.id: acc.name.value for acc in account_service(ctx).get_user_accounts(user_id)}
    category_names = {cat.id: cat.name.value for cat in category_service(ctx).get_user_categories(user_id)}

    click.echo("-" * 120)
    click.echo(
        f"{'ID':<36} {'Date':<10} {'Type':<10} {'Amount':>12} {'Account':<16} {'Category':<16} Description"
    )
    click.echo("-" * 120)
    for txn in transactions:
        reconciled = " *" if txn.is_reconciled else ""
        click.echo(
            f"{txn.id:<36} {txn.transaction_date!s:<10} {txn.transaction_type.value:<10} "
            f"{format_money(txn.amount.value):>12} {account_names.get(txn.account_id, 'Unknown'):<16.16} "
            f"{category_names.get(txn.category_id, 'Unknown'):<16.16} {txn.description.truncated(40)}{reconciled}"
        )


def echo_transactions_json(transactions: list[Transaction]) -> None:
    echo_json([TransactionMapper.to_domain(transaction_to_row(txn)) for txn in transactions])


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Category name or ID")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False), help="Only this type")
@click.option("--period", type=click.Choice(PERIODS, case_sensitive=False), help="Named date range")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--limit", type=int, help="Show at most this many transactions (page size with --page)")
@click.option("--page", type=int, help=f"Show one page of all transactions, {PAGE_SIZE} per page unless --limit is given")
@click.option("--json", "as_json", is_flag=True, help="Print transactions as JSON")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    category: str | None,
    transaction_type: str | None,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
    limit: int | None,
    page: int | None,
    as_json: bool,
):
    """View your transactions, newest first, with optional filters."""
    user_id = require_user(ctx)
    service = transaction_service(ctx)

    if page is not None:
        if any((account, category, transaction_type, period, start_date, end_date)):
            click.echo("Error: --page cannot be combined with filters.", err=True)
            ctx.exit(1)
        list_page(ctx, user_id, page, limit if limit is not None else PAGE_SIZE, as_json)
        return

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        account_id = resolve_account(account_service(ctx), user_id, account) if account else None
        category_id = resolve_category(category_service(ctx), user_id, category) if category else None

        if start is not None or end is not None:
            transactions = service.get_transactions_by_date_range(
                user_id, start or date.min, end or date.today()
            )
        elif account_id is not None:
            transactions = service.get_transactions_by_account(user_id, account_id)
        elif category_id is not None:
            transactions = service.get_transactions_by_category(user_id, category_id)
        elif transaction_type is not None:
            transactions = service.get_transactions_by_type(user_id, transaction_type)
        else:
            transactions = service.get_user_transactions(user_id)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    if account_id is not None:
        transactions = [txn for txn in transactions if txn.account_id == account_id]
    if category_id is not None:
        transactions = [txn for txn in transactions if txn.category_id == category_id]
    if transaction_type is not None:
        transactions = [txn for txn in transactions if txn.transaction_type.value == transaction_type.lower()]
    if limit is not None:
        transactions = transactions[:limit]

    if as_json:
        echo_transactions_json(transactions)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    print_transactions(ctx, user_id, transactions)


def list_page(ctx, user_id: str, page: int, limit: int, as_json: bool) -> None:
    try:
        result = transaction_service(ctx).get_transactions_with_pagination(user_id, page, limit)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        echo_transactions_json(list(result.transactions))
        return

    if not result.transactions:
        click.echo(f"No transactions on page {result.page} ({result.total} in total).")
        return

    click.echo(f"\nPage {result.page} of {result.total_pages} ({result.total} transaction(s) in total):")
    print_transactions(ctx, user_id, list(result.transactions))


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Category name or ID")
@click.option("--amount", help="Positive amount")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False), help="Transaction type")
@click.option("--description", help="Transaction description")
@click.option("--date", "txn_date", help="Transaction date (YYYY-MM-DD or relative like 'yesterday')")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    account: str | None,
    category: str | None,
    amount: str | None,
    transaction_type: str | None,
    description: str | None,
    txn_date: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        finvesta transaction update <ID> --amount 60.00
        finvesta transaction update <ID> --category Salary --type income
    """
    user_id = require_user(ctx)
    service = transaction_service(ctx)

    try:
        service.update_transaction(
            transaction_id,
            user_id,
            account_id=resolve_account(account_service(ctx), user_id, account) if account else None,
            category_id=resolve_category(category_service(ctx), user_id, category) if category else None,
            amount=parse_amount(amount) if amount is not None else None,
            description=description,
            transaction_type=transaction_type,
            transaction_date=parse_date(txn_date) if txn_date is not None else None,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction. Reconciled transactions cannot be deleted."""
    user_id = require_user(ctx)
    service = transaction_service(ctx)

    try:
        transaction = service.get_transaction_by_id(transaction_id, user_id)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    prompt = (
        f"Delete transaction '{transaction.description.truncated(40)}' "
        f"({format_money(transaction.amount.value)} on {transaction.transaction_date})?"
    )
    if not yes and not click.confirm(prompt):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id, user_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@transaction_group.command("reconcile")
@click.argument("transaction_id")
@click.option("--undo", is_flag=True, help="Mark the transaction as unreconciled instead")
@click.pass_context
def reconcile_transaction(ctx, transaction_id: str, undo: bool) -> None:
    """Mark a transaction as reconciled with your bank statement."""
    user_id = require_user(ctx)
    service = transaction_service(ctx)

    try:
        if undo:
            service.mark_transaction_as_unreconciled(transaction_id, user_id)
            click.echo(f"Transaction {transaction_id} marked as unreconciled")
        else:
            service.mark_transaction_as_reconciled(transaction_id, user_id)
            click.echo(f"Transaction {transaction_id} marked as reconciled")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@transaction_group.command("stats")
@click.pass_context
def transaction_stats(ctx) -> None:
    """Show totals over all of your transactions."""
    user_id = require_user(ctx)

    try:
        stats = transaction_service(ctx).get_transaction_stats(user_id)
    except InfrastructureError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTransactions: {stats.total_transactions}")
    click.echo(f"Income:       {format_money(stats.total_income):>14s}")
    click.echo(f"Expense:      {format_money(stats.total_expense):>14s}")
    click.echo(f"Net:          {format_money(stats.net_amount):>14s}")
    click.echo("\nBy type:")
    for transaction_type, count in stats.transactions_by_type.items():
        click.echo(f"  {transaction_type:12s} {count}")


@transaction_group.command("monthly")
@click.option("--year", type=int, help="Year to summarize (default: current year)")
@click.pass_context
def monthly_totals(ctx, year: int | None) -> None:
    """Show income, expense and net per month."""
    user_id = require_user(ctx)
    year = year or date.today().year

    try:
        totals = transaction_service(ctx).get_monthly_totals(user_id, year)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{year}")
    click.echo("-" * 64)
    click.echo(f"{'Month':<10} {'Income':>14} {'Expense':>14} {'Net':>14} {'Count':>6}")
    click.echo("-" * 64)
    for total in totals:
        click.echo(
            f"{total.month_name:<10} {format_money(total.income):>14} {format_money(total.expense):>14} "
            f"{format_money(total.net):>14} {total.transaction_count:>6}"
        )


@transaction_group.command("search")
@click.argument("term")
@click.option("--limit", type=int, default=SEARCH_LIMIT, show_default=True, help="Show at most this many transactions")
@click.option("--json", "as_json", is_flag=True, help="Print transactions as JSON")
@click.pass_context
def search_transactions(ctx, term: str, limit: int, as_json: bool) -> None:
    """Find transactions whose description contains TERM, ignoring case."""
    user_id = require_user(ctx)

    try:
        transactions = transaction_service(ctx).search_transactions_by_description(user_id, term, limit)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        echo_transactions_json(transactions)
        return

    if not transactions:
        click.echo(f"No transactions matching '{term}'.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s) matching '{term}':")
    print_transactions(ctx, user_id, transactions)


@transaction_group.command("summary")
@click.option(
    "--period", type=click.Choice(SUMMARY_PERIODS, case_sensitive=False), default="month", show_default=True,
    help="Calendar period to summarize",
)
@click.option("--date", "anchor", default="today", help="Any day inside the period (default: today)")
@click.pass_context
def period_summary(ctx, period: str, anchor: str) -> None:
    """Show income, expense and the top categories and accounts of a period.

    Examples:
        finvesta transaction summary --period week
        finvesta transaction summary --period quarter --date 2024-05-15
    """
    user_id = require_user(ctx)

    try:
        summary = transaction_service(ctx).get_transaction_summary_by_period(user_id, period, parse_date(anchor))
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{summary.period.capitalize()}: {summary.start_date} to {summary.end_date}")
    click.echo(f"Transactions: {summary.transaction_count}")
    click.echo(f"Income:       {format_money(summary.income):>14s}")
    click.echo(f"Expense:      {format_money(summary.expense):>14s}")
    click.echo(f"Net:          {format_money(summary.net):>14s}")

    if summary.top_categories:
        names = {cat.id: cat.name.value for cat in category_service(ctx).get_user_categories(user_id)}
        click.echo("\nTop categories:")
        for group in summary.top_categories:
            click.echo(f"  {names.get(group.id, 'Unknown'):<30.30} {format_money(group.amount):>14} ({group.count})")

    if summary.top_accounts:
        names = {acc.id: acc.name.value for acc in account_service(ctx).get_user_accounts(user_id)}
        click.echo("\nTop accounts:")
        for group in summary.top_accounts:
            click.echo(f"  {names.get(group.id, 'Unknown'):<30.30} {format_money(group.amount):>14} ({group.count})")


@transaction_group.command("totals")
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Category name or ID")
@click.pass_context
def group_totals(ctx, account: str | None, category: str | None) -> None:
    """Show the summed amount and count of the transactions on an account or in a category."""
    user_id = require_user(ctx)
    if bool(account) == bool(category):
        raise click.UsageError("Give exactly one of --account or --category.")

    service = transaction_service(ctx)
    try:
        if account:
            totals = service.get_account_totals(user_id, resolve_account(account_service(ctx), user_id, account))
        else:
            totals = service.get_category_totals(user_id, resolve_category(category_service(ctx), user_id, category))
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"{account or category}: {format_money(totals.amount)} across {totals.count} transaction(s)")


@transaction_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_transactions(ctx, csv_file: str) -> None:
    """Import transactions from a CSV file.

    The file needs the columns date, account, category, type, amount and
    description. Accounts and categories are given by name or ID. Nothing is
    imported unless every row is valid.
    """
    user_id = require_user(ctx)
    accounts_svc = account_service(ctx)
    categories_svc = category_service(ctx)

    with open(csv_file, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        missing = [column for column in IMPORT_COLUMNS if column not in (reader.fieldnames or [])]
        if missing:
            click.echo(f"Error: Missing column(s): {', '.join(missing)}", err=True)
            ctx.exit(1)
        rows = list(reader)

    items = []
    for line, row in enumerate(rows, start=2):
        values = {column: (row.get(column) or "").strip() for column in IMPORT_COLUMNS}
        try:
            items.append(
                dict(
                    account_id=resolve_account(accounts_svc, user_id, values["account"]),
                    category_id=resolve_category(categories_svc, user_id, values["category"]),
                    amount=parse_amount(values["amount"]),
                    description=values["description"],
                    transaction_type=values["type"],
                    transaction_date=parse_date(values["date"]),
                )
            )
        except (ValueError, InfrastructureError) as e:
            click.echo(f"Error: Line {line}: {e}", err=True)
            ctx.exit(1)

    try:
        created = transaction_service(ctx).bulk_create_transactions(user_id, items)
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Imported {len(created)} transaction(s)")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
