"""CLI error handling helpers."""

import click

from finvesta.database.errors import InfrastructureError
from finvesta.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | InfrastructureError | ValueError) -> None:
    """Render a domain or storage error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
