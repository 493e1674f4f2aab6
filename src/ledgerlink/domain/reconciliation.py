"""Statement balance reconciliation."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import (
    BalancePolarity,
    Direction,
    ReconciliationResult,
    RunningBalance,
    StatementReconciliation,
    Transaction,
)
from ledgerlink.domain.errors import NotFoundError, account_not_found, statement_not_found
from ledgerlink.domain.queries import TransactionQuery
from ledgerlink.logger import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.02")


def round_money(value: Decimal) -> Decimal:
    """Round to the currency minor unit, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def within_tolerance(difference: Decimal) -> bool:
    """Return True if a balance difference is small enough to count as balanced."""
    return abs(to_decimal(difference)) < BALANCE_TOLERANCE


def to_decimal(value) -> Decimal:
    """Convert a number to Decimal through its string form."""
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _effect_magnitude(amount) -> Optional[Decimal]:
    """Return |amount| as a Decimal, or None if the amount is unusable."""
    if amount is None:
        return None
    try:
        value = to_decimal(amount)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not value.is_finite():
        return None
    return abs(value)


def _signed_effect(magnitude: Decimal, direction: Direction, polarity: BalancePolarity) -> Decimal:
    increases = Direction.CREDIT if polarity == BalancePolarity.ASSET else Direction.DEBIT
    return magnitude if direction == increases else -magnitude


def sort_for_reconciliation(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order transactions chronologically, breaking date ties by ID."""
    return sorted(transactions, key=lambda txn: (txn.date, txn.id))


def reconcile(
    opening_balance: Decimal,
    transactions: Iterable[Transaction],
    polarity: Optional[BalancePolarity],
    closing_balance: Decimal,
) -> ReconciliationResult:
    """Compute running balances and the discrepancy against a reported closing.

    The transactions are sorted by (date, id) before the pass so the result
    does not depend on fetch order. A transaction without a usable amount
    contributes nothing and is flagged as suspect.

    Args:
        opening_balance: Balance before the first transaction
        transactions: Transactions of the statement period, in any order
        polarity: Account polarity; None is treated as an asset account
        closing_balance: Closing balance reported by the statement

    Returns:
        ReconciliationResult with one RunningBalance per transaction
    """
    polarity = polarity or BalancePolarity.ASSET
    opening = to_decimal(opening_balance)
    closing = to_decimal(closing_balance)

    balance = opening
    total_credits = Decimal("0")
    total_debits = Decimal("0")
    rows: list[RunningBalance] = []

    for txn in sort_for_reconciliation(transactions):
        magnitude = _effect_magnitude(txn.amount)
        if magnitude is None:
            logger.warning(
                "suspect transaction amount", transaction_id=txn.id, amount=str(txn.amount)
            )
            rows.append(RunningBalance(txn.id, txn.date, Decimal("0"), balance, suspect=True))
            continue

        if txn.direction == Direction.CREDIT:
            total_credits += magnitude
        else:
            total_debits += magnitude

        effect = _signed_effect(magnitude, txn.direction, polarity)
        balance += effect
        rows.append(RunningBalance(txn.id, txn.date, effect, balance))

    calculated_closing = round_money(balance)
    difference = closing - calculated_closing
    result = ReconciliationResult(
        opening_balance=opening,
        closing_balance=closing,
        polarity=polarity,
        rows=tuple(rows),
        calculated_closing=calculated_closing,
        discrepancy=round_money(difference),
        is_balanced=within_tolerance(difference),
        total_credits=total_credits,
        total_debits=total_debits,
    )
    logger.debug(
        "reconciled transactions",
        count=len(rows),
        calculated_closing=str(result.calculated_closing),
        discrepancy=str(result.discrepancy),
        is_balanced=result.is_balanced,
    )
    return result


class ReconciliationService:
    """Service for reconciling stored statements."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def reconcile_statement(self, statement_id: int) -> StatementReconciliation:
        """Reconcile a statement against its transactions.

        Args:
            statement_id: Statement ID

        Returns:
            StatementReconciliation including reported-totals checks

        Raises:
            NotFoundError: If the statement or its account doesn't exist
        """
        statement = self.db.get_statement(statement_id)
        if statement is None:
            raise NotFoundError(statement_not_found(statement_id))

        account = self.db.get_account(statement.account_id)
        if account is None:
            raise NotFoundError(account_not_found(statement.account_id))

        transactions = self.db.list_transactions(TransactionQuery(statement_id=statement_id))
        result = reconcile(
            opening_balance=statement.opening_balance,
            transactions=transactions,
            polarity=account.polarity,
            closing_balance=statement.closing_balance,
        )

        def _matches(reported: Optional[Decimal], calculated: Decimal) -> Optional[bool]:
            if reported is None:
                return None
            return within_tolerance(to_decimal(reported) - calculated)

        count_match = None
        if statement.transaction_count is not None:
            count_match = statement.transaction_count == len(transactions)

        return StatementReconciliation(
            statement=statement,
            account=account,
            result=result,
            credits_match=_matches(statement.total_credits, result.total_credits),
            debits_match=_matches(statement.total_debits, result.total_debits),
            count_match=count_match,
            transaction_count=len(transactions),
        )
