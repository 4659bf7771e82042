"""Category management commands."""

import click

from finvesta.cli.context import category_service, require_user
from finvesta.cli.error_handling import handle_domain_error
from finvesta.cli.output import echo_json
from finvesta.database.errors import InfrastructureError
from finvesta.database.mappers import CategoryMapper, category_to_row
from finvesta.domain.entities import Category
from finvesta.domain.value_objects import CategoryType
from finvesta.utils.resolvers import resolve_category

CATEGORY_TYPES = [kind.value for kind in CategoryType]


def print_categories(categories: list[Category]) -> None:
    """Print categories grouped under their type."""
    current_type = None
    for cat in categories:
        if cat.category_type != current_type:
            current_type = cat.category_type
            click.echo(f"\n{current_type.label}:")
        default = " [default]" if cat.is_default else ""
        description = f" - {cat.description.truncated()}" if cat.description.has_value() else ""
        click.echo(f"  {cat.name.display_value} ({cat.color.value}, ID: {cat.id}){default}{description}")


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES, case_sensitive=False), help="Only categories of this type")
@click.option("--json", "as_json", is_flag=True, help="Print categories as JSON")
@click.pass_context
def list_categories(ctx, category_type: str | None, as_json: bool):
    """List your categories grouped by type."""
    user_id = require_user(ctx)
    service = category_service(ctx)

    if category_type:
        categories = service.get_categories_by_type(user_id, category_type)
    else:
        categories = service.get_user_categories(user_id)

    if as_json:
        echo_json([CategoryMapper.to_domain(category_to_row(cat)) for cat in categories])
        return

    if not categories:
        click.echo("No categories found. Run 'category init-defaults' to create default categories.")
        return

    print_categories(categories)


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type", "category_type", type=click.Choice(CATEGORY_TYPES, case_sensitive=False), default="expense",
    help="Category type (default: expense)",
)
@click.option("--description", help="Optional description")
@click.option("--color", help="Hex color such as #FF0000 (default: picked from the palette)")
@click.pass_context
def create_category(ctx, name: str, category_type: str, description: str | None, color: str | None):
    """Create a new category."""
    user_id = require_user(ctx)
    service = category_service(ctx)

    try:
        category = service.create_category(
            user_id=user_id, name=name, category_type=category_type, description=description, color=color
        )
        click.echo(f"Created {category.category_type.value} category '{category.name}' (ID: {category.id})")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@category_group.command("update")
@click.argument("category", metavar="CATEGORY")
@click.option("--name", help="New name")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES, case_sensitive=False), help="New type")
@click.option("--description", help="New description, or empty string to clear")
@click.option("--color", help="New hex color")
@click.pass_context
def update_category(
    ctx, category: str, name: str | None, category_type: str | None, description: str | None, color: str | None
) -> None:
    """Update a category.

    CATEGORY can be a category name or ID.

    Examples:
        finvesta category update Groceries --color "#10B981"
        finvesta category update Leisure --name "Hobbies" --description ""
    """
    user_id = require_user(ctx)
    service = category_service(ctx)

    try:
        category_id = resolve_category(service, user_id, category)
        updated = service.update_category(
            category_id, user_id, name=name, description=description, category_type=category_type, color=color
        )
        click.echo(f"Updated category '{updated.name}'")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category", metavar="CATEGORY")
@click.pass_context
def delete_category(ctx, category: str) -> None:
    """Delete a category.

    Default categories and categories used by transactions cannot be deleted.
    """
    user_id = require_user(ctx)
    service = category_service(ctx)

    try:
        category_id = resolve_category(service, user_id, category)
        service.delete_category(category_id, user_id)
        click.echo(f"Deleted category {category_id}")
    except (ValueError, InfrastructureError) as e:
        handle_domain_error(ctx, e)


@category_group.command("init-defaults")
@click.pass_context
def init_defaults(ctx) -> None:
    """Create the default categories.

    Categories you already have (by name) are left alone, so this can be
    run again safely.
    """
    user_id = require_user(ctx)
    service = category_service(ctx)

    before = len(service.get_user_categories(user_id))
    categories = service.create_default_categories_for_user(user_id)
    click.echo(f"Created {len(categories) - before} default categories ({len(categories)} in total)")


@category_group.command("stats")
@click.pass_context
def category_stats(ctx) -> None:
    """Show category counts and the most used categories."""
    user_id = require_user(ctx)

    try:
        stats = category_service(ctx).get_category_usage_stats(user_id)
    except InfrastructureError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTotal categories: {stats.total_categories}")
    for category_type, count in stats.categories_by_type.items():
        click.echo(f"  {category_type:12s} {count}")

    if stats.most_used_categories:
        click.echo("\nMost used:")
        for usage in stats.most_used_categories:
            click.echo(f"  {usage.name:30s} {usage.usage_count} transaction(s)")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
