"""Exchange rate commands."""

import click
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.errors import DomainError
from ledgerlink.domain.ledger import LedgerService
from ledgerlink.utils.amount_parser import parse_amount
from ledgerlink.utils.date_parser import parse_date


@click.group()
def rate_group():
    """Manage cached exchange rates."""
    pass


@rate_group.command("set")
@click.argument("from_currency")
@click.argument("to_currency")
@click.argument("rate")
@click.option("--date", "date_str", default="today", show_default=True, help="Rate date")
@click.option("--source", default="manual", show_default=True, help="Where the rate came from")
@click.pass_context
def set_rate(ctx, from_currency: str, to_currency: str, rate: str, date_str: str, source: str):
    """Cache the rate converting FROM_CURRENCY into TO_CURRENCY on a date.

    Example:
        ledgerlink rate set USD CAD 1.35 --date 2024-03-01
    """
    db = ctx.obj["db"]

    try:
        rate_date = parse_date(date_str)
        value = parse_amount(rate)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    from_code, to_code = from_currency.upper(), to_currency.upper()
    try:
        LedgerService(db).set_exchange_rate(rate_date, from_code, to_code, value, source=source)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Set {from_code}->{to_code} rate for {rate_date}: {value}")


def register_commands(cli: click.Group) -> None:
    """Register exchange rate commands with main CLI."""
    cli.add_command(rate_group, name="rate")
