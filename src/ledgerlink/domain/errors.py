"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or invalid transitions."""


class TransferLinkError(DomainError):
    """Linking the two legs of a transfer failed.

    The unit of work was rolled back, so neither transaction nor the
    candidate changed.
    """

    def __init__(self, message: str, candidate_id: Optional[int] = None, side: Optional[str] = None):
        super().__init__(message)
        self.candidate_id = candidate_id
        self.side = side


class LinkInconsistencyError(TransferLinkError):
    """The two legs of a transfer no longer reference each other reciprocally.

    Raised after a write that claimed success; the stored link graph must be
    inspected by hand.
    """


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def statement_not_found(statement_id: int) -> str:
    """Return message for missing statement."""
    return f"Statement {statement_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def candidate_not_found(candidate_id: int) -> str:
    """Return message for missing transfer candidate."""
    return f"Transfer candidate {candidate_id} not found"


def pending_transfer_not_found(pending_id: int) -> str:
    """Return message for missing pending transfer."""
    return f"Pending transfer {pending_id} not found"


def category_code_not_found(code: str) -> str:
    """Return message for missing category by code."""
    return f"Category with code '{code}' not found"


def invalid_candidate_transition(candidate_id: int, status: str, action: str) -> str:
    """Return message when a review action is not allowed in the current status."""
    return f"Cannot {action} transfer candidate {candidate_id}: status is '{status}'"


def _transfer_subject(candidate_id: Optional[int]) -> str:
    return "transfer" if candidate_id is None else f"transfer candidate {candidate_id}"


def link_side_failed(candidate_id: Optional[int], side: str, cause: Exception) -> str:
    """Return message when one leg of a transfer could not be linked."""
    return (
        f"Failed to link {side} side of {_transfer_subject(candidate_id)}: {cause}. "
        "No changes were saved."
    )


def link_inconsistent(candidate_id: Optional[int], from_id: int, to_id: int) -> str:
    """Return message when a linked transfer is linked on one side only."""
    subject = _transfer_subject(candidate_id)
    return (
        f"{subject[0].upper()}{subject[1:]} is inconsistently linked: transactions "
        f"{from_id} and {to_id} do not reference each other. Reconciliation state "
        "may be inconsistent across the two transactions."
    )


def leg_already_linked(candidate_id: Optional[int], transaction_id: int, linked_to: int) -> str:
    """Return message when a transfer leg is already linked to another transaction."""
    return (
        f"Cannot link {_transfer_subject(candidate_id)}: transaction {transaction_id} "
        f"is already linked to transaction {linked_to}"
    )
