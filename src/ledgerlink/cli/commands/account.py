"""Account management commands."""

import click
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.entities import BalancePolarity
from ledgerlink.domain.errors import DomainError


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--institution", help="Bank name (defaults to account name if not provided)")
@click.option("--currency", default="CAD", show_default=True, help="ISO currency code")
@click.option("--type", "account_type", help="Account type, e.g. 'Chequing' or 'Credit Card'")
@click.option("--company", help="Company or client that owns the account")
@click.option(
    "--balance-type",
    type=click.Choice([p.value for p in BalancePolarity]),
    help="Explicit polarity (inferred from --type when omitted)",
)
@click.pass_context
def create_account(
    ctx,
    name: str,
    institution: str | None,
    currency: str,
    account_type: str | None,
    company: str | None,
    balance_type: str | None,
):
    """Create a new bank account.

    Credit card accounts are liabilities: purchases (debits) increase the
    balance owed. Every other account type is treated as an asset unless
    --balance-type says otherwise.

    Examples:
        ledgerlink account create "Ops Chequing" --institution "RBC"
        ledgerlink account create "Amex" --type "Credit Card" --company "Acme"
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(
            name=name,
            institution=institution if institution is not None else name,
            currency=currency.upper(),
            account_type=account_type,
            company=company,
            balance_type=BalancePolarity(balance_type) if balance_type else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    created = service.get_account(account_id)
    click.echo(f"Created account '{name}' (ID: {account_id})")
    click.echo(f"Polarity: {created.polarity.value}")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.institution:15s} | {acc.currency} | "
            f"{(acc.account_type or '-'):12s} | {acc.polarity.value:9s} | {acc.company or ''}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
