"""Transaction management commands."""

import click
from ledgerlink.cli.account_resolution import resolve_account_or_exit
from ledgerlink.cli.date_filters import resolve_cli_date_range
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.category import CategoryService
from ledgerlink.domain.entities import Direction
from ledgerlink.domain.errors import DomainError
from ledgerlink.domain.ledger import LedgerService
from ledgerlink.domain.queries import TransactionQuery
from ledgerlink.utils.amount_parser import parse_amount, split_signed_amount
from ledgerlink.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", help="Account name or ID")
@click.option("--statement", "statement_id", type=int, help="Statement ID (implies the account)")
@click.option("--date", "date_str", required=True, help="Transaction date")
@click.option("--amount", help="Amount; negative means debit unless --direction is given")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    help="Credit or debit (inferred from the amount's sign when omitted)",
)
@click.option("--description", help="Transaction description")
@click.option("--currency", help="ISO currency code (defaults to the account's)")
@click.pass_context
def add_transaction(
    ctx,
    account: str | None,
    statement_id: int | None,
    date_str: str,
    amount: str | None,
    direction: str | None,
    description: str | None,
    currency: str | None,
):
    """Add a transaction.

    A transaction without --amount is stored with its amount missing and is
    reported as suspect when its statement is reconciled.

    Examples:
        ledgerlink transaction add --statement 1 --date 2024-03-02 --amount 200
        ledgerlink transaction add --account "Amex" --date 2024-03-04 --amount 45.10 --direction debit
    """
    db = ctx.obj["db"]
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    if account_id is None and statement_id is None:
        click.echo("Error: Provide --account or --statement.", err=True)
        ctx.exit(1)

    try:
        txn_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    explicit_direction = Direction(direction) if direction else None
    if amount is None:
        magnitude = None
        resolved_direction = explicit_direction or Direction.DEBIT
    else:
        try:
            magnitude, resolved_direction = split_signed_amount(
                parse_amount(amount), explicit_direction
            )
        except ValueError as e:
            click.echo(f"Error: Invalid amount: {e}", err=True)
            ctx.exit(1)

    try:
        txn_id = LedgerService(db).add_transaction(
            date=txn_date,
            amount=magnitude,
            direction=resolved_direction,
            account_id=account_id,
            statement_id=statement_id,
            description=description,
            currency=currency.upper() if currency else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn_id}")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--statement", "statement_id", type=int, help="Statement ID")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.option("--period", help="Month to show (YYYY-MM)")
@click.option("--uncategorized", is_flag=True, help="Only transactions without a category")
@click.option("--needs-review", is_flag=True, help="Only transactions flagged for review")
@click.option("--unlinked", is_flag=True, help="Only transactions not linked to a transfer")
@click.option("--limit", type=int, help="Maximum number of rows")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    statement_id: int | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    uncategorized: bool,
    needs_review: bool,
    unlinked: bool,
    limit: int | None,
):
    """List transactions in date order."""
    db = ctx.obj["db"]
    account_service = AccountService(db)

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    transactions = LedgerService(db).list_transactions(
        TransactionQuery(
            account_id=account_id,
            statement_id=statement_id,
            start_date=start,
            end_date=end,
            uncategorized=uncategorized,
            needs_review=True if needs_review else None,
            unlinked_only=unlinked,
            limit=limit,
        )
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}
    categories = {cat.id: cat.code for cat in CategoryService(db).list_categories()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>12} {'Dir':<7} {'Account':<18} "
        f"{'Category':<16} {'Link':<8} {'Description'}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        amount_str = "MISSING" if txn.amount is None else f"{txn.amount:,.2f} {txn.currency}"
        category = categories.get(txn.category_id, "") if txn.category_id else ""
        link = f"-> {txn.linked_to}" if txn.linked_to else ""
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:>12} {txn.direction.value:<7} "
            f"{accounts.get(txn.account_id, 'Unknown')[:18]:<18} {category[:16]:<16} "
            f"{link:<8} {(txn.description or '')[:40]}"
        )


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category_code")
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category_code: str):
    """Assign a category to a transaction by code.

    Pass an empty code ("") to clear the category and flag the transaction
    for review again.
    """
    db = ctx.obj["db"]
    code = category_code.strip() or None

    try:
        LedgerService(db).categorize(transaction_id, code)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if code is None:
        click.echo(f"Cleared category of transaction {transaction_id}")
    else:
        click.echo(f"Categorized transaction {transaction_id} as '{code}'")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
