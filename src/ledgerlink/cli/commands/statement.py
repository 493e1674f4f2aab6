"""Statement commands."""

import click
from ledgerlink.cli.account_resolution import resolve_account_or_exit
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.errors import DomainError
from ledgerlink.domain.ledger import LedgerService
from ledgerlink.domain.reconciliation import ReconciliationService
from ledgerlink.utils.amount_parser import parse_amount
from ledgerlink.utils.date_parser import parse_date, parse_period


def _parse_optional_amount(ctx, label: str, value: str | None):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _check_mark(value: bool | None) -> str:
    if value is None:
        return "not reported"
    return "OK" if value else "MISMATCH"


@click.group()
def statement_group():
    """Manage and reconcile statements."""
    pass


@statement_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--period", help="Statement month (YYYY-MM); alternative to --start/--end")
@click.option("--start", "start_date", help="Period start date")
@click.option("--end", "end_date", help="Period end date")
@click.option("--opening", required=True, help="Opening balance")
@click.option("--closing", required=True, help="Closing balance")
@click.option("--total-credits", help="Total credits reported by the statement")
@click.option("--total-debits", help="Total debits reported by the statement")
@click.option("--count", "transaction_count", type=int, help="Transaction count reported by the statement")
@click.pass_context
def add_statement(
    ctx,
    account: str,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
    opening: str,
    closing: str,
    total_credits: str | None,
    total_debits: str | None,
    transaction_count: int | None,
):
    """Record an imported statement period.

    Examples:
        ledgerlink statement add --account "Ops Chequing" --period 2024-03 --opening 1000 --closing 1150
        ledgerlink statement add --account 2 --start 2024-03-05 --end 2024-04-04 --opening 500 --closing 300
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    if period and (start_date or end_date):
        click.echo("Error: --period cannot be combined with --start or --end.", err=True)
        ctx.exit(1)

    try:
        if period:
            start, end = parse_period(period)
        elif start_date and end_date:
            start, end = parse_date(start_date), parse_date(end_date)
        else:
            click.echo("Error: Provide --period or both --start and --end.", err=True)
            ctx.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    opening_balance = _parse_optional_amount(ctx, "opening balance", opening)
    closing_balance = _parse_optional_amount(ctx, "closing balance", closing)

    try:
        statement_id = LedgerService(db).add_statement(
            account_id=account_id,
            period_start=start,
            period_end=end,
            opening_balance=opening_balance,
            closing_balance=closing_balance,
            total_credits=_parse_optional_amount(ctx, "total credits", total_credits),
            total_debits=_parse_optional_amount(ctx, "total debits", total_debits),
            transaction_count=transaction_count,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created statement {statement_id} ({start} to {end})")


@statement_group.command("list")
@click.option("--account", help="Account name or ID")
@click.pass_context
def list_statements(ctx, account: str | None):
    """List statements."""
    db = ctx.obj["db"]
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    statements = LedgerService(db).list_statements(account_id=account_id)
    if not statements:
        click.echo("No statements found.")
        return

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    click.echo(f"\n{'ID':<5} {'Account':<20} {'Period':<25} {'Opening':>12} {'Closing':>12}")
    click.echo("-" * 80)
    for s in statements:
        period = f"{s.period_start} to {s.period_end}"
        click.echo(
            f"{s.id:<5} {accounts.get(s.account_id, 'Unknown'):<20} {period:<25} "
            f"{s.opening_balance:>12,.2f} {s.closing_balance:>12,.2f}"
        )


@statement_group.command("reconcile")
@click.argument("statement_id", type=int)
@click.option("--verbose", "-v", is_flag=True, help="Show the running balance of every transaction")
@click.pass_context
def reconcile_statement(ctx, statement_id: int, verbose: bool):
    """Check a statement's closing balance against its transactions.

    Exits with status 2 when the statement does not balance.
    """
    db = ctx.obj["db"]

    try:
        report = ReconciliationService(db).reconcile_statement(statement_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    result = report.result
    statement = report.statement
    click.echo(
        f"\nStatement {statement.id}: {report.account.name} "
        f"({statement.period_start} to {statement.period_end}, {result.polarity.value})"
    )

    if verbose and result.rows:
        click.echo("-" * 70)
        click.echo(f"{'Txn':<6} {'Date':<12} {'Effect':>14} {'Balance':>14}")
        click.echo("-" * 70)
        for row in result.rows:
            marker = "  SUSPECT" if row.suspect else ""
            click.echo(
                f"{row.transaction_id:<6} {str(row.date):<12} {row.effect:>14,.2f} "
                f"{row.balance:>14,.2f}{marker}"
            )
        click.echo("-" * 70)

    click.echo(f"Opening balance:     {result.opening_balance:,.2f}")
    click.echo(f"Calculated closing:  {result.calculated_closing:,.2f}")
    click.echo(f"Reported closing:    {result.closing_balance:,.2f}")
    click.echo(f"Discrepancy:         {result.discrepancy:,.2f}")
    click.echo(f"Transactions: {report.transaction_count} (count {_check_mark(report.count_match)}), "
               f"credits {_check_mark(report.credits_match)}, debits {_check_mark(report.debits_match)}")

    if result.suspect_transaction_ids:
        ids = ", ".join(str(i) for i in result.suspect_transaction_ids)
        click.echo(f"Suspect transactions (amount missing or invalid): {ids}")

    if result.is_balanced:
        click.echo("Status: BALANCED")
    else:
        click.echo("Status: NOT BALANCED")
        ctx.exit(2)


def register_commands(cli: click.Group) -> None:
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
