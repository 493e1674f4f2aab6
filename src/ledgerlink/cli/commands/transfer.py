"""Transfer detection and review commands."""

import click
from ledgerlink.cli.account_resolution import resolve_account_or_exit
from ledgerlink.cli.date_filters import resolve_cli_date_range
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.detection import (
    DEFAULT_AUTO_LINK_THRESHOLD,
    DEFAULT_DATE_TOLERANCE_DAYS,
    TransferDetectionService,
)
from ledgerlink.domain.entities import (
    CandidateStatus,
    ConfidenceBand,
    PendingTransferStatus,
    TransferCandidate,
)
from ledgerlink.domain.errors import DomainError
from ledgerlink.domain.pending_transfers import (
    DEFAULT_MATCH_TOLERANCE_AMOUNT,
    DEFAULT_MATCH_TOLERANCE_DAYS,
    PendingTransferService,
)
from ledgerlink.domain.queries import CandidateQuery, TransactionQuery
from ledgerlink.domain.scoring import confidence_band
from ledgerlink.domain.transfer_review import TransferReviewService
from ledgerlink.utils.amount_parser import parse_amount
from ledgerlink.utils.date_parser import parse_date


def _candidate_flags(service: TransferReviewService, candidate: TransferCandidate) -> str:
    assessment = service.assess(candidate)
    flags = list(assessment.data_quality_issues)
    if candidate.is_cross_company:
        flags.append("cross_company")
    if assessment.requires_manual_review:
        flags.append("manual_review")
    return ", ".join(flags)


def _echo_candidate(service: TransferReviewService, candidate: TransferCandidate, accounts: dict) -> None:
    factors = candidate.confidence_factors
    band = confidence_band(candidate.confidence_score)
    click.echo(f"\nCandidate {candidate.id} ({band.value}, score {candidate.confidence_score})")
    click.echo(
        f"  From: txn {candidate.from_transaction_id} {candidate.date_from} "
        f"{accounts.get(candidate.from_account_id, 'Unknown')} "
        f"{candidate.amount_from:,.2f} {candidate.currency_from}"
    )
    click.echo(
        f"  To:   txn {candidate.to_transaction_id} {candidate.date_to} "
        f"{accounts.get(candidate.to_account_id, 'Unknown')} "
        f"{candidate.amount_to:,.2f} {candidate.currency_to}"
    )
    click.echo(
        f"  Match: {factors.amount_match_type.value}, {candidate.date_diff_days} day(s) apart, "
        f"same company: {'yes' if factors.same_company else 'no'}, "
        f"keywords: {'yes' if factors.has_transfer_keywords else 'no'}"
    )
    if candidate.exchange_rate_used is not None:
        click.echo(f"  Rate: {candidate.exchange_rate_used} ({candidate.exchange_rate_source})")
    flags = _candidate_flags(service, candidate)
    if flags:
        click.echo(f"  Flags: {flags}")


@click.group()
def transfer_group():
    """Detect and review transfers between accounts."""
    pass


@transfer_group.command("detect")
@click.option("--account", help="Only analyze this account (name or ID)")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.option("--period", help="Month to analyze (YYYY-MM)")
@click.option(
    "--threshold",
    type=click.IntRange(0, 100),
    default=DEFAULT_AUTO_LINK_THRESHOLD,
    envvar="LEDGERLINK_AUTO_LINK_THRESHOLD",
    show_default=True,
    help="Minimum score for auto-linking same-company pairs",
)
@click.option(
    "--date-tolerance",
    type=click.IntRange(min=0),
    default=DEFAULT_DATE_TOLERANCE_DAYS,
    envvar="LEDGERLINK_DATE_TOLERANCE_DAYS",
    show_default=True,
    help="Maximum days between the two legs",
)
@click.option("--dry-run", is_flag=True, help="Show what would be detected without saving")
@click.pass_context
def detect_transfers(
    ctx,
    account: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    threshold: int,
    date_tolerance: int,
    dry_run: bool,
):
    """Find transfer candidates among unlinked transactions.

    Same-company pairs scoring at or above the threshold are linked right
    away; everything else waits for review.
    """
    db = ctx.obj["db"]
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    try:
        summary = TransferDetectionService(db).detect(
            TransactionQuery(account_id=account_id, start_date=start, end_date=end),
            auto_link_threshold=threshold,
            date_tolerance_days=date_tolerance,
            dry_run=dry_run,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    prefix = "[dry run] " if dry_run else ""
    click.echo(f"{prefix}Analyzed {summary.analyzed} transaction(s)")
    click.echo(f"{prefix}Candidates found: {summary.candidates}")
    click.echo(f"{prefix}Auto-linked: {summary.auto_linked}")
    click.echo(f"{prefix}Pending review: {summary.pending_review}")
    if not dry_run:
        click.echo(f"Planned transfers matched: {summary.pending_transfers_matched}")
        click.echo(f"Planned transfers partially matched: {summary.pending_transfers_partial}")
    if dry_run:
        for pair in summary.pairs:
            action = "auto-link" if pair.auto_linked else "review"
            click.echo(
                f"  txn {pair.from_transaction.id} -> txn {pair.to_transaction.id} "
                f"score {pair.confidence_score} ({action})"
            )


@transfer_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in CandidateStatus] + ["all"]),
    default=CandidateStatus.PENDING.value,
    show_default=True,
    help="Candidate status to show",
)
@click.option(
    "--confidence",
    type=click.Choice([b.value for b in ConfidenceBand]),
    help="Only show one confidence band",
)
@click.option("--cross-company", is_flag=True, help="Only show cross-company candidates")
@click.option("--limit", type=int, help="Maximum number of candidates")
@click.pass_context
def list_transfers(ctx, status: str, confidence: str | None, cross_company: bool, limit: int | None):
    """List transfer candidates, highest confidence first."""
    db = ctx.obj["db"]
    service = TransferReviewService(db)

    candidates = service.list_candidates(
        CandidateQuery(
            status=None if status == "all" else CandidateStatus(status),
            band=ConfidenceBand(confidence) if confidence else None,
            cross_company=True if cross_company else None,
            limit=limit,
        )
    )
    if not candidates:
        click.echo("No transfer candidates found.")
        return

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    click.echo(f"\n{'ID':<5} {'Score':<6} {'Band':<7} {'Status':<12} {'From':<22} {'To':<22} {'Amount':>12}  Flags")
    click.echo("-" * 110)
    for c in candidates:
        from_leg = f"{c.date_from} {accounts.get(c.from_account_id, 'Unknown')}"[:22]
        to_leg = f"{c.date_to} {accounts.get(c.to_account_id, 'Unknown')}"[:22]
        band = confidence_band(c.confidence_score)
        click.echo(
            f"{c.id:<5} {c.confidence_score:<6} {band.value:<7} {c.status.value:<12} "
            f"{from_leg:<22} {to_leg:<22} {c.amount_from:>12,.2f}  {_candidate_flags(service, c)}"
        )


@transfer_group.command("confirm")
@click.argument("candidate_id", type=int)
@click.pass_context
def confirm_transfer(ctx, candidate_id: int):
    """Confirm a pending candidate and link its two transactions."""
    service = TransferReviewService(ctx.obj["db"])
    try:
        candidate = service.confirm(candidate_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Confirmed candidate {candidate.id}: linked transaction "
        f"{candidate.from_transaction_id} <-> {candidate.to_transaction_id}"
    )


@transfer_group.command("reject")
@click.argument("candidate_id", type=int)
@click.option("--reason", help="Why this is not a transfer")
@click.pass_context
def reject_transfer(ctx, candidate_id: int, reason: str | None):
    """Reject a pending candidate."""
    service = TransferReviewService(ctx.obj["db"])
    try:
        candidate = service.reject(candidate_id, reason)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Rejected candidate {candidate.id}: {candidate.rejection_reason}")


@transfer_group.command("review")
@click.option(
    "--confidence",
    type=click.Choice([b.value for b in ConfidenceBand]),
    help="Only review one confidence band",
)
@click.pass_context
def review_transfers(ctx, confidence: str | None):
    """Walk through pending candidates one at a time.

    For each candidate choose c(onfirm), r(eject), s(kip) or q(uit).
    Skipped candidates come back the next time you run review.
    """
    db = ctx.obj["db"]
    service = TransferReviewService(db)
    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    query = CandidateQuery(band=ConfidenceBand(confidence) if confidence else None)

    confirmed = rejected = skipped = 0
    while True:
        pending = service.list_candidates(query)
        if not pending:
            break
        candidate = pending[0]
        _echo_candidate(service, candidate, accounts)

        action = click.prompt(
            "Action [c]onfirm/[r]eject/[s]kip/[q]uit",
            type=click.Choice(["c", "r", "s", "q"]),
            show_choices=False,
        )
        if action == "q":
            break
        if action == "s":
            service.skip(candidate.id)
            skipped += 1
            continue

        try:
            if action == "c":
                service.confirm(candidate.id)
                confirmed += 1
                click.echo("Confirmed.")
            else:
                reason = click.prompt("Reason", default="", show_default=False)
                service.reject(candidate.id, reason or None)
                rejected += 1
                click.echo("Rejected.")
        except DomainError as e:
            handle_domain_error(ctx, e)

    summary = service.summary()
    click.echo(
        f"\nReviewed: {confirmed} confirmed, {rejected} rejected, {skipped} skipped. "
        f"Pending: {summary.pending}"
    )


@transfer_group.command("plan")
@click.option("--from", "from_account", required=True, help="Account the money leaves (name or ID)")
@click.option("--to", "to_account", required=True, help="Account the money arrives in (name or ID)")
@click.option("--amount", required=True, help="Transfer amount")
@click.option("--date", "date_str", required=True, help="Expected transfer date")
@click.option("--description", help="Transfer description")
@click.option("--notes", help="Free-form notes")
@click.option(
    "--tolerance-days",
    type=click.IntRange(min=0),
    default=DEFAULT_MATCH_TOLERANCE_DAYS,
    show_default=True,
    help="Days either side of the date to accept",
)
@click.option(
    "--tolerance-amount",
    default=str(DEFAULT_MATCH_TOLERANCE_AMOUNT),
    show_default=True,
    help="Amount difference to accept",
)
@click.pass_context
def plan_transfer(
    ctx,
    from_account: str,
    to_account: str,
    amount: str,
    date_str: str,
    description: str | None,
    notes: str | None,
    tolerance_days: int,
    tolerance_amount: str,
):
    """Record a transfer before its statements are imported.

    The next detection run links the two imported legs to each other.

    Examples:
        ledgerlink transfer plan --from "Ops Chequing" --to "Acme Savings" --amount 5000 --date 2024-03-05
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    from_id = resolve_account_or_exit(ctx, account_service, from_account)
    to_id = resolve_account_or_exit(ctx, account_service, to_account)

    try:
        transfer_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_amount = parse_amount(amount)
        parsed_tolerance = parse_amount(tolerance_amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)

    try:
        pending_id = PendingTransferService(db).plan(
            from_account_id=from_id,
            to_account_id=to_id,
            amount=parsed_amount,
            transfer_date=transfer_date,
            description=description,
            notes=notes,
            match_tolerance_days=tolerance_days,
            match_tolerance_amount=parsed_tolerance,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Planned transfer {pending_id}: {parsed_amount:,.2f} on {transfer_date} "
        f"(tolerance {tolerance_days} day(s), {parsed_tolerance:,.2f})"
    )


@transfer_group.command("planned")
@click.option(
    "--status",
    type=click.Choice([s.value for s in PendingTransferStatus]),
    help="Only show one status",
)
@click.pass_context
def list_planned(ctx, status: str | None):
    """List planned transfers and their matching status."""
    db = ctx.obj["db"]
    transfers = PendingTransferService(db).list_pending_transfers(
        PendingTransferStatus(status) if status else None
    )
    if not transfers:
        click.echo("No planned transfers found.")
        return

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    click.echo(f"\n{'ID':<5} {'Date':<12} {'From':<20} {'To':<20} {'Amount':>12}  {'Status':<10} Legs")
    click.echo("-" * 95)
    for p in transfers:
        legs = f"{p.from_transaction_id or '-'} -> {p.to_transaction_id or '-'}"
        click.echo(
            f"{p.id:<5} {p.transfer_date!s:<12} {accounts.get(p.from_account_id, 'Unknown')[:20]:<20} "
            f"{accounts.get(p.to_account_id, 'Unknown')[:20]:<20} {p.amount:>12,.2f}  "
            f"{p.status.value:<10} {legs}"
        )


@transfer_group.command("cancel")
@click.argument("pending_id", type=int)
@click.pass_context
def cancel_planned(ctx, pending_id: int):
    """Cancel a planned transfer that is not fully matched."""
    try:
        PendingTransferService(ctx.obj["db"]).cancel(pending_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Cancelled planned transfer {pending_id}")


def register_commands(cli: click.Group) -> None:
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
