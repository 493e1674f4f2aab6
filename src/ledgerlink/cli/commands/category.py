"""Category commands."""

import click
from ledgerlink.domain.category import CategoryService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default categories, including the internal transfer category.

    Existing categories are left untouched, so this is safe to run again.
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.init_defaults()
    if not created:
        click.echo("All default categories already exist.")
        return
    click.echo(f"Created {len(created)} categor{'y' if len(created) == 1 else 'ies'}.")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'ledgerlink category init' first.")
        return

    click.echo(f"\n{'ID':<5} {'Code':<20} {'Kind':<10} {'Name'}")
    click.echo("-" * 60)
    for cat in categories:
        click.echo(f"{cat.id:<5} {cat.code:<20} {cat.kind.value:<10} {cat.name}")


def register_commands(cli: click.Group) -> None:
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
