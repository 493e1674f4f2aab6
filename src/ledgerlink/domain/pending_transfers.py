"""Planned transfers entered before their legs are imported.

A pending transfer names both accounts, an amount and a date. As statements
are imported, each new transaction is checked against the open pending
transfers: the debit on the source account fills the ``from`` leg, the credit
on the destination account fills the ``to`` leg. One leg moves the transfer
to ``partial``; the second leg links both transactions and marks it
``matched``.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Iterable, Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import (
    Category,
    Direction,
    PendingTransfer,
    PendingTransferStatus,
    Transaction,
)
from ledgerlink.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    pending_transfer_not_found,
)
from ledgerlink.domain.linking import (
    link_transactions,
    resolve_transfer_category,
    verify_transactions_linked,
)
from ledgerlink.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MATCH_TOLERANCE_DAYS = 5
DEFAULT_MATCH_TOLERANCE_AMOUNT = Decimal("0.50")


@dataclass
class PendingMatchSummary:
    """Outcome of matching transactions against pending transfers."""

    matched: int = 0
    partial: int = 0
    transaction_ids: set[int] = field(default_factory=set)


def leg_for(pending: PendingTransfer, txn: Transaction) -> Optional[str]:
    """Return which leg of a pending transfer a transaction could fill.

    The source account must show a debit and the destination account a
    credit. Date and amount must fall within the transfer's tolerances.
    Returns "from", "to" or None.
    """
    if txn.amount is None or not txn.amount.is_finite():
        return None
    if abs((txn.date - pending.transfer_date).days) > pending.match_tolerance_days:
        return None
    if abs(abs(txn.amount) - pending.amount) > pending.match_tolerance_amount:
        return None

    if txn.account_id == pending.from_account_id and txn.direction == Direction.DEBIT:
        return None if pending.from_transaction_id is not None else "from"
    if txn.account_id == pending.to_account_id and txn.direction == Direction.CREDIT:
        return None if pending.to_transaction_id is not None else "to"
    return None


def _reserved_ids(transfers: Iterable[PendingTransfer]) -> set[int]:
    return {
        txn_id
        for p in transfers
        if p.status != PendingTransferStatus.CANCELLED
        for txn_id in (p.from_transaction_id, p.to_transaction_id)
        if txn_id is not None
    }


class PendingTransferService:
    """Service for planned transfers."""

    def __init__(self, db: Database):
        """Initialize pending transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def plan(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        transfer_date: date,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        match_tolerance_days: int = DEFAULT_MATCH_TOLERANCE_DAYS,
        match_tolerance_amount: Decimal = DEFAULT_MATCH_TOLERANCE_AMOUNT,
    ) -> int:
        """Record a transfer that has not been imported yet.

        Args:
            from_account_id: Account the money leaves (shows a debit)
            to_account_id: Account the money arrives in (shows a credit)
            amount: Positive transfer amount
            transfer_date: Expected date of the transfer
            description: Optional description
            notes: Optional free-form notes
            match_tolerance_days: Days either side of the date to accept
            match_tolerance_amount: Absolute amount difference to accept

        Returns:
            Pending transfer ID

        Raises:
            NotFoundError: If either account doesn't exist
            ValidationError: If the accounts are the same, the amount is not
                positive, or a tolerance is negative
        """
        for account_id in (from_account_id, to_account_id):
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))
        if from_account_id == to_account_id:
            raise ValidationError("A transfer needs two different accounts")
        if not amount.is_finite() or amount <= 0:
            raise ValidationError(f"Transfer amount must be positive, got {amount}")
        if match_tolerance_days < 0:
            raise ValidationError("Match tolerance days cannot be negative")
        if match_tolerance_amount < 0:
            raise ValidationError("Match tolerance amount cannot be negative")

        pending_id = self.db.create_pending_transfer(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            transfer_date=transfer_date,
            match_tolerance_days=match_tolerance_days,
            match_tolerance_amount=match_tolerance_amount,
            description=description,
            notes=notes,
        )
        logger.info(
            "pending transfer planned",
            pending_transfer_id=pending_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=str(amount),
        )
        return pending_id

    def get_pending_transfer(self, pending_id: int) -> PendingTransfer:
        pending = self.db.get_pending_transfer(pending_id)
        if pending is None:
            raise NotFoundError(pending_transfer_not_found(pending_id))
        return pending

    def list_pending_transfers(
        self, status: Optional[PendingTransferStatus] = None
    ) -> list[PendingTransfer]:
        return self.db.list_pending_transfers(statuses=[status] if status else None)

    def reserved_transaction_ids(self) -> set[int]:
        """IDs of transactions recorded on a pending transfer that is not cancelled."""
        return _reserved_ids(self.db.list_pending_transfers())

    def cancel(self, pending_id: int) -> PendingTransfer:
        """Cancel a transfer that is not fully matched.

        A leg matched so far keeps its transfer category.

        Raises:
            NotFoundError: If the pending transfer doesn't exist
            ConflictError: If it is already matched or cancelled
        """
        pending = self.get_pending_transfer(pending_id)
        if not pending.status.is_open:
            raise ConflictError(
                f"Cannot cancel pending transfer {pending_id}: status is '{pending.status.value}'"
            )
        self.db.update_pending_transfer(pending_id, PendingTransferStatus.CANCELLED)
        logger.info("pending transfer cancelled", pending_transfer_id=pending_id)
        return self.get_pending_transfer(pending_id)

    def match(self, transactions: Iterable[Transaction]) -> PendingMatchSummary:
        """Fill pending transfer legs from imported transactions.

        Each transaction fills at most one leg. Transactions already linked,
        or already recorded on another pending transfer, are left alone.

        Returns:
            PendingMatchSummary; ``transaction_ids`` holds every transaction
            that filled a leg

        Raises:
            NotFoundError: If a leg matches and the transfer category is missing
        """
        summary = PendingMatchSummary()
        existing = self.db.list_pending_transfers()
        open_transfers = [p for p in existing if p.status.is_open]
        if not open_transfers:
            return summary

        claimed = _reserved_ids(existing)
        category: Optional[Category] = None

        for txn in sorted(transactions, key=lambda t: (t.date, t.id)):
            if txn.linked_to is not None or txn.id in claimed:
                continue
            for index, pending in enumerate(open_transfers):
                if not pending.status.is_open:
                    continue
                side = leg_for(pending, txn)
                if side is None:
                    continue
                if category is None:
                    category = resolve_transfer_category(self.db)
                try:
                    updated = self._fill_leg(pending, txn, side, category.id)
                except ConflictError as exc:
                    logger.warning(
                        "pending transfer leg conflicts with existing link",
                        pending_transfer_id=pending.id,
                        transaction_id=txn.id,
                        error=str(exc),
                    )
                    continue

                open_transfers[index] = updated
                claimed.add(txn.id)
                summary.transaction_ids.add(txn.id)
                if updated.status == PendingTransferStatus.MATCHED:
                    summary.matched += 1
                else:
                    summary.partial += 1
                break

        logger.info(
            "pending transfer matching complete",
            matched=summary.matched,
            partial=summary.partial,
        )
        return summary

    def _fill_leg(
        self, pending: PendingTransfer, txn: Transaction, side: str, category_id: int
    ) -> PendingTransfer:
        leg = {"from_transaction_id": txn.id} if side == "from" else {"to_transaction_id": txn.id}
        updated = replace(pending, **leg)
        both = updated.from_transaction_id is not None and updated.to_transaction_id is not None

        with self.db.unit_of_work():
            if both:
                matched_at = datetime.now(UTC)
                self.db.update_pending_transfer(
                    pending.id, PendingTransferStatus.MATCHED, matched_at=matched_at, **leg
                )
                link_transactions(
                    self.db, updated.from_transaction_id, updated.to_transaction_id, category_id
                )
                updated = replace(updated, status=PendingTransferStatus.MATCHED, matched_at=matched_at)
            else:
                self.db.update_pending_transfer(pending.id, PendingTransferStatus.PARTIAL, **leg)
                self.db.update_transaction_category(txn.id, category_id, needs_review=False)
                updated = replace(updated, status=PendingTransferStatus.PARTIAL)

        if both:
            verify_transactions_linked(
                self.db, updated.from_transaction_id, updated.to_transaction_id
            )
            logger.info(
                "pending transfer matched",
                pending_transfer_id=pending.id,
                from_transaction_id=updated.from_transaction_id,
                to_transaction_id=updated.to_transaction_id,
            )
        return updated
