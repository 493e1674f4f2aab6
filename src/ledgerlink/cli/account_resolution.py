"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from ledgerlink.cli.error_handling import handle_domain_error
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.errors import DomainError


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return account_service.resolve_account(account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
