"""Two-sided transfer linking shared by review and detection."""

from typing import Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import Category, LinkType, TransferCandidate
from ledgerlink.domain.errors import (
    ConflictError,
    LinkInconsistencyError,
    NotFoundError,
    TransferLinkError,
    category_code_not_found,
    leg_already_linked,
    link_inconsistent,
    link_side_failed,
)

TRANSFER_CATEGORY_CODE = "bank_transfer"


def resolve_transfer_category(db: Database) -> Category:
    """Return the canonical internal transfer category.

    Raises:
        NotFoundError: If the category has not been seeded
    """
    category = db.get_category_by_code(TRANSFER_CATEGORY_CODE)
    if category is None:
        raise NotFoundError(category_code_not_found(TRANSFER_CATEGORY_CODE))
    return category


def check_unlinked(db: Database, candidate_id: Optional[int], from_id: int, to_id: int) -> None:
    """Refuse to link a leg that already points at a different transaction.

    Raises:
        ConflictError: If either leg is linked elsewhere
    """
    for transaction_id, other_id in ((from_id, to_id), (to_id, from_id)):
        txn = db.get_transaction(transaction_id)
        if txn is not None and txn.linked_to is not None and txn.linked_to != other_id:
            raise ConflictError(leg_already_linked(candidate_id, transaction_id, txn.linked_to))


def link_transactions(
    db: Database,
    from_id: int,
    to_id: int,
    category_id: Optional[int],
    candidate_id: Optional[int] = None,
) -> None:
    """Write reciprocal links on a debit leg and its credit leg.

    Must be called inside ``db.unit_of_work()``; a failure on either side is
    re-raised as TransferLinkError naming the side, and the caller's unit of
    work rolls both writes back.

    Raises:
        ConflictError: If either leg is already linked to another transaction
        TransferLinkError: If a link write failed
    """
    check_unlinked(db, candidate_id, from_id, to_id)
    sides = (
        ("from", from_id, to_id, LinkType.TRANSFER_OUT),
        ("to", to_id, from_id, LinkType.TRANSFER_IN),
    )
    for side, transaction_id, other_id, link_type in sides:
        try:
            db.link_transaction(
                transaction_id=transaction_id,
                linked_to=other_id,
                link_type=link_type,
                category_id=category_id,
            )
        except Exception as exc:
            raise TransferLinkError(
                link_side_failed(candidate_id, side, exc), candidate_id=candidate_id, side=side
            ) from exc


def link_pair(db: Database, candidate: TransferCandidate, category_id: int) -> None:
    """Link both legs of a candidate. See link_transactions."""
    link_transactions(
        db,
        candidate.from_transaction_id,
        candidate.to_transaction_id,
        category_id,
        candidate_id=candidate.id,
    )


def verify_link(db: Database, candidate: TransferCandidate) -> None:
    """Check that both legs of a candidate reference each other."""
    verify_transactions_linked(
        db, candidate.from_transaction_id, candidate.to_transaction_id, candidate.id
    )


def verify_transactions_linked(
    db: Database, from_id: int, to_id: int, candidate_id: Optional[int] = None
) -> None:
    """Check that two legs reference each other with reciprocal link types.

    Raises:
        LinkInconsistencyError: If either leg is missing or points elsewhere
    """
    source = db.get_transaction(from_id)
    target = db.get_transaction(to_id)
    consistent = (
        source is not None
        and target is not None
        and source.linked_to == target.id
        and target.linked_to == source.id
        and source.link_type == LinkType.TRANSFER_OUT
        and target.link_type == LinkType.TRANSFER_IN
    )
    if not consistent:
        raise LinkInconsistencyError(
            link_inconsistent(candidate_id, from_id, to_id),
            candidate_id=candidate_id,
        )
