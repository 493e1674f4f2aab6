"""Transfer candidate detection.

Transactions are first matched against planned transfers. The rest are paired
debit to credit across accounts; each pair is scored and either auto-linked or
queued for review.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import (
    AmountMatchType,
    BankAccount,
    CandidateStatus,
    ConfidenceFactors,
    Direction,
    Transaction,
)
from ledgerlink.domain.linking import link_pair, resolve_transfer_category, verify_link
from ledgerlink.domain.pending_transfers import PendingTransferService
from ledgerlink.domain.queries import TransactionQuery
from ledgerlink.domain.scoring import (
    calculate_confidence_score,
    classify_amount_match,
    days_between,
    has_transfer_keywords,
)
from ledgerlink.logger import get_logger

logger = get_logger(__name__)

DEFAULT_AUTO_LINK_THRESHOLD = 95
DEFAULT_DATE_TOLERANCE_DAYS = 3


@dataclass(frozen=True)
class DetectedPair:
    """A scored debit/credit pairing."""

    from_transaction: Transaction
    to_transaction: Transaction
    confidence_score: int
    confidence_factors: ConfidenceFactors
    is_cross_company: bool
    exchange_rate_used: Optional[Decimal] = None
    exchange_rate_source: Optional[str] = None
    auto_linked: bool = False


@dataclass
class DetectionSummary:
    """Outcome of one detection run."""

    analyzed: int = 0
    auto_linked: int = 0
    pending_review: int = 0
    pending_transfers_matched: int = 0
    pending_transfers_partial: int = 0
    pairs: list[DetectedPair] = field(default_factory=list)

    @property
    def candidates(self) -> int:
        return len(self.pairs)


class TransferDetectionService:
    """Service for finding internal transfer pairs."""

    def __init__(self, db: Database):
        """Initialize transfer detection service.

        Args:
            db: Database instance
        """
        self.db = db

    def _lookup_rate(self, txn: Transaction, to_currency: str) -> Optional[tuple[Decimal, str]]:
        if txn.currency.upper() == to_currency.upper():
            return Decimal("1"), "same_currency"
        cached = self.db.get_exchange_rate(txn.date, txn.currency, to_currency)
        if cached is None:
            return None
        return cached.rate, f"{cached.source}_cached"

    def _score_pair(
        self,
        debit: Transaction,
        credit: Transaction,
        accounts: dict[int, BankAccount],
        date_tolerance_days: int,
    ) -> Optional[DetectedPair]:
        date_diff = days_between(debit.date, credit.date)
        if date_diff > date_tolerance_days:
            return None

        same_currency = debit.currency.upper() == credit.currency.upper()
        rate = self._lookup_rate(debit, credit.currency)
        if rate is None:
            return None
        exchange_rate, rate_source = rate

        match_type = classify_amount_match(
            debit.amount, credit.amount, exchange_rate=exchange_rate, same_currency=same_currency
        )
        if match_type == AmountMatchType.NO_MATCH:
            return None

        debit_account = accounts.get(debit.account_id)
        credit_account = accounts.get(credit.account_id)
        same_company = (
            debit_account is not None
            and credit_account is not None
            and debit_account.company == credit_account.company
        )
        keywords = has_transfer_keywords(debit.description) or has_transfer_keywords(
            credit.description
        )
        factors = ConfidenceFactors(
            amount_match=True,
            amount_match_type=match_type,
            date_diff_days=date_diff,
            same_company=same_company,
            has_transfer_keywords=keywords,
        )
        return DetectedPair(
            from_transaction=debit,
            to_transaction=credit,
            confidence_score=calculate_confidence_score(match_type, date_diff, same_company, keywords),
            confidence_factors=factors,
            is_cross_company=not same_company,
            exchange_rate_used=None if same_currency else exchange_rate,
            exchange_rate_source=None if same_currency else rate_source,
        )

    def find_pairs(
        self,
        transactions: list[Transaction],
        auto_link_threshold: int = DEFAULT_AUTO_LINK_THRESHOLD,
        date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
    ) -> list[DetectedPair]:
        """Score every plausible debit/credit pairing.

        A same-company pair scoring at or above the threshold is marked for
        auto-linking and consumes both legs; later pairs cannot reuse them.
        """
        accounts = {acc.id: acc for acc in self.db.list_accounts()}
        usable = [t for t in transactions if t.amount is not None and t.amount.is_finite()]
        debits = [t for t in usable if t.direction == Direction.DEBIT]
        credits = [t for t in usable if t.direction == Direction.CREDIT]

        pairs: list[DetectedPair] = []
        consumed: set[int] = set()
        for debit in debits:
            if debit.id in consumed:
                continue
            for credit in credits:
                if credit.id in consumed or credit.account_id == debit.account_id:
                    continue
                pair = self._score_pair(debit, credit, accounts, date_tolerance_days)
                if pair is None:
                    continue
                if pair.confidence_score >= auto_link_threshold and not pair.is_cross_company:
                    pairs.append(replace(pair, auto_linked=True))
                    consumed.update((debit.id, credit.id))
                    break
                pairs.append(pair)
        return pairs

    def detect(
        self,
        query: Optional[TransactionQuery] = None,
        auto_link_threshold: int = DEFAULT_AUTO_LINK_THRESHOLD,
        date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
        dry_run: bool = False,
    ) -> DetectionSummary:
        """Detect transfer candidates among unlinked transactions.

        Args:
            query: Transactions to analyze; linked transactions are always excluded
            auto_link_threshold: Minimum score for auto-linking same-company pairs
            date_tolerance_days: Maximum days between the two legs
            dry_run: Score without writing anything; planned transfers are not
                matched either

        Returns:
            DetectionSummary
        """
        base = query or TransactionQuery()
        transactions = self.db.list_transactions(
            TransactionQuery(
                account_id=base.account_id,
                statement_id=base.statement_id,
                start_date=base.start_date,
                end_date=base.end_date,
                unlinked_only=True,
            )
        )
        summary = DetectionSummary(analyzed=len(transactions))

        pending_service = PendingTransferService(self.db)
        if not dry_run:
            matched = pending_service.match(transactions)
            summary.pending_transfers_matched = matched.matched
            summary.pending_transfers_partial = matched.partial
        reserved = pending_service.reserved_transaction_ids()
        unplanned = [t for t in transactions if t.id not in reserved]

        pairs = [
            pair
            for pair in self.find_pairs(unplanned, auto_link_threshold, date_tolerance_days)
            if not self.db.transfer_candidate_exists(pair.from_transaction.id, pair.to_transaction.id)
        ]
        summary.pairs = pairs

        transfer_category = None
        if not dry_run and any(pair.auto_linked for pair in pairs):
            transfer_category = resolve_transfer_category(self.db)

        for pair in pairs:
            if pair.auto_linked:
                summary.auto_linked += 1
            else:
                summary.pending_review += 1
            if dry_run:
                continue
            self._save(pair, transfer_category.id if transfer_category else None)

        logger.info(
            "transfer detection complete",
            analyzed=summary.analyzed,
            candidates=summary.candidates,
            auto_linked=summary.auto_linked,
            pending_review=summary.pending_review,
            pending_transfers_matched=summary.pending_transfers_matched,
            pending_transfers_partial=summary.pending_transfers_partial,
            dry_run=dry_run,
        )
        return summary

    def _save(self, pair: DetectedPair, transfer_category_id: Optional[int]) -> None:
        status = CandidateStatus.AUTO_LINKED if pair.auto_linked else CandidateStatus.PENDING
        with self.db.unit_of_work():
            candidate_id = self.db.create_transfer_candidate(
                from_transaction=pair.from_transaction,
                to_transaction=pair.to_transaction,
                confidence_score=pair.confidence_score,
                confidence_factors=pair.confidence_factors,
                is_cross_company=pair.is_cross_company,
                status=status,
                exchange_rate_used=pair.exchange_rate_used,
                exchange_rate_source=pair.exchange_rate_source,
            )
            if pair.auto_linked:
                candidate = self.db.get_transfer_candidate(candidate_id)
                link_pair(self.db, candidate, transfer_category_id)

        if pair.auto_linked:
            verify_link(self.db, self.db.get_transfer_candidate(candidate_id))
