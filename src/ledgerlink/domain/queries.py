"""Immutable query parameters for fetching transactions and candidates.

Filters and pagination are passed around as frozen dataclasses instead of
loose keyword arguments, so a query can be used as a cache key.
"""

from dataclasses import dataclass, astuple
from datetime import date
from typing import Optional

from ledgerlink.domain.entities import CandidateStatus, ConfidenceBand


@dataclass(frozen=True)
class TransactionQuery:
    """Filter and pagination for transaction listings."""

    account_id: Optional[int] = None
    statement_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[int] = None
    uncategorized: bool = False
    needs_review: Optional[bool] = None
    unlinked_only: bool = False
    limit: Optional[int] = None
    offset: int = 0

    def fingerprint(self) -> tuple:
        return ("transactions",) + astuple(self)


@dataclass(frozen=True)
class CandidateQuery:
    """Filter and pagination for transfer candidate listings.

    ``status`` is applied by the store; ``band`` and ``cross_company`` are
    presentation filters applied to the fetched rows.
    """

    status: Optional[CandidateStatus] = CandidateStatus.PENDING
    band: Optional[ConfidenceBand] = None
    cross_company: Optional[bool] = None
    limit: Optional[int] = None
    offset: int = 0

    def fingerprint(self) -> tuple:
        return ("candidates",) + astuple(self)
