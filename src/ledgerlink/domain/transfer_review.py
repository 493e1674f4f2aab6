"""Transfer candidate review workflow.

Candidates move ``pending -> confirmed`` or ``pending -> rejected``.
``auto_linked`` is written only by detection and is read-only here. Skipping
is local to a service instance and never persisted.

Remote state is never changed optimistically: a confirm or reject is only
reflected in cached listings after the store accepted it.
"""

from datetime import datetime, UTC
from typing import Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import (
    CandidateAssessment,
    CandidateStatus,
    ReviewSummary,
    TransferCandidate,
)
from ledgerlink.domain.errors import (
    ConflictError,
    NotFoundError,
    TransferLinkError,
    candidate_not_found,
    invalid_candidate_transition,
)
from ledgerlink.domain.linking import link_pair, resolve_transfer_category, verify_link
from ledgerlink.domain.queries import CandidateQuery
from ledgerlink.domain.scoring import assess_candidate, confidence_band
from ledgerlink.logger import get_logger

logger = get_logger(__name__)

DEFAULT_REJECTION_REASON = "Not a transfer"


class TransferReviewService:
    """Service for reviewing transfer candidates."""

    def __init__(self, db: Database):
        """Initialize transfer review service.

        Args:
            db: Database instance
        """
        self.db = db
        self._cache: dict[tuple, list[TransferCandidate]] = {}
        self._skipped: set[int] = set()

    def _fetch(self, query: CandidateQuery) -> list[TransferCandidate]:
        key = query.fingerprint()
        if key not in self._cache:
            candidates = self.db.list_transfer_candidates(status=query.status)
            if query.band is not None:
                candidates = [
                    c for c in candidates if confidence_band(c.confidence_score) == query.band
                ]
            if query.cross_company is not None:
                candidates = [c for c in candidates if c.is_cross_company == query.cross_company]
            self._cache[key] = candidates
        return self._cache[key]

    def list_candidates(self, query: Optional[CandidateQuery] = None) -> list[TransferCandidate]:
        """List candidates matching a query, excluding skipped ones.

        Args:
            query: Filter and pagination; defaults to all pending candidates

        Returns:
            List of transfer candidates, highest confidence first
        """
        query = query or CandidateQuery()
        visible = [c for c in self._fetch(query) if c.id not in self._skipped]
        end = None if query.limit is None else query.offset + query.limit
        return visible[query.offset:end]

    def get_candidate(self, candidate_id: int) -> TransferCandidate:
        """Get a candidate by ID.

        Raises:
            NotFoundError: If the candidate doesn't exist
        """
        candidate = self.db.get_transfer_candidate(candidate_id)
        if candidate is None:
            raise NotFoundError(candidate_not_found(candidate_id))
        return candidate

    def summary(self) -> ReviewSummary:
        """Count candidates per status."""
        counts = self.db.count_candidates_by_status()
        return ReviewSummary(
            pending=counts.get(CandidateStatus.PENDING, 0),
            confirmed=counts.get(CandidateStatus.CONFIRMED, 0),
            rejected=counts.get(CandidateStatus.REJECTED, 0),
            auto_linked=counts.get(CandidateStatus.AUTO_LINKED, 0),
        )

    def assess(self, candidate: TransferCandidate) -> CandidateAssessment:
        return assess_candidate(candidate)

    def skip(self, candidate_id: int) -> None:
        """Hide a candidate from listings until the next refresh."""
        self._skipped.add(candidate_id)
        logger.info("transfer candidate skipped", candidate_id=candidate_id)

    def refresh(self) -> None:
        """Drop cached listings and skipped candidates."""
        self._cache.clear()
        self._skipped.clear()

    def _require_pending(self, candidate_id: int, action: str) -> TransferCandidate:
        candidate = self.get_candidate(candidate_id)
        if candidate.status != CandidateStatus.PENDING:
            raise ConflictError(
                invalid_candidate_transition(candidate_id, candidate.status.value, action)
            )
        return candidate

    def confirm(self, candidate_id: int) -> TransferCandidate:
        """Confirm a candidate and link both of its transactions.

        The status change and both transaction links are written in one unit
        of work. After commit, both legs are read back and checked.

        Args:
            candidate_id: Candidate ID

        Returns:
            The confirmed candidate

        Raises:
            NotFoundError: If the candidate or transfer category doesn't exist
            ConflictError: If the candidate is not pending, or a leg is already
                linked to another transaction (nothing saved)
            TransferLinkError: If either leg could not be linked (nothing saved)
            LinkInconsistencyError: If the stored links are not reciprocal
        """
        candidate = self._require_pending(candidate_id, "confirm")
        category = resolve_transfer_category(self.db)

        try:
            with self.db.unit_of_work():
                self.db.update_candidate_status(
                    candidate_id, CandidateStatus.CONFIRMED, reviewed_at=datetime.now(UTC)
                )
                link_pair(self.db, candidate, category.id)
        except TransferLinkError as exc:
            logger.error(
                "transfer link failed", candidate_id=candidate_id, side=exc.side, error=str(exc)
            )
            raise

        self._cache.clear()
        verify_link(self.db, candidate)
        logger.info(
            "transfer candidate confirmed",
            candidate_id=candidate_id,
            from_transaction_id=candidate.from_transaction_id,
            to_transaction_id=candidate.to_transaction_id,
        )
        return self.get_candidate(candidate_id)

    def reject(self, candidate_id: int, reason: Optional[str] = None) -> TransferCandidate:
        """Reject a candidate without touching its transactions.

        Args:
            candidate_id: Candidate ID
            reason: Optional reason; defaults to "Not a transfer"

        Returns:
            The rejected candidate

        Raises:
            NotFoundError: If the candidate doesn't exist
            ConflictError: If the candidate is not pending
        """
        self._require_pending(candidate_id, "reject")
        reason = reason or DEFAULT_REJECTION_REASON
        self.db.update_candidate_status(
            candidate_id,
            CandidateStatus.REJECTED,
            reviewed_at=datetime.now(UTC),
            rejection_reason=reason,
        )
        self._cache.clear()
        logger.info("transfer candidate rejected", candidate_id=candidate_id, reason=reason)
        return self.get_candidate(candidate_id)
