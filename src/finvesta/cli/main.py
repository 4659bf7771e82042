"""Main CLI entry point."""

import logging

import click

from finvesta.cli.commands import account, category, dashboard, transaction
from finvesta.database.errors import InfrastructureError
from finvesta.database.factories import create_sqlite_database

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINVESTA_DB_PATH environment variable)",
    envvar="FINVESTA_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    help="ID of the authenticated user (overrides FINVESTA_USER_ID environment variable)",
    envvar="FINVESTA_USER_ID",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINVESTA_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str | None, log_level: str):
    """Finvesta - personal finance tracker.

    Keep your bank, savings, investment and crypto accounts in one place and
    record categorized income, expenses, transfers and investments.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["user_id"] = user_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        try:
            db.connect()
            db.initialize_schema()
        except InfrastructureError as e:
            raise click.ClickException(str(e))
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
dashboard.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
