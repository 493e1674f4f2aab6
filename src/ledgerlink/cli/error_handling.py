"""CLI error handling helpers."""

import click

from ledgerlink.domain.errors import DomainError, LinkInconsistencyError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, LinkInconsistencyError):
        click.echo(f"Error: INCONSISTENT TRANSFER LINK: {error}", err=True)
        click.echo(
            "Check both transactions before reconciling their statements.", err=True
        )
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
