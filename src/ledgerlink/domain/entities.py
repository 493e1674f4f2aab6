"""Domain model entities for ledgerlink.

These are pure data classes representing business concepts, independent of
database schema. String-typed codes coming from storage are resolved into the
enums below once, when rows are mapped, so the rest of the code never compares
raw strings.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    """Which side of the account a transaction lands on."""

    CREDIT = "credit"
    DEBIT = "debit"


class BalancePolarity(str, Enum):
    """Whether credits or debits increase an account's reported balance."""

    ASSET = "asset"
    LIABILITY = "liability"

    @classmethod
    def from_account_type(cls, account_type: Optional[str]) -> "BalancePolarity":
        """Infer polarity from a free-form account type.

        Credit cards are liabilities; anything else (including a missing
        type) is treated as an asset account.
        """
        if account_type and "credit card" in account_type.lower():
            return cls.LIABILITY
        return cls.ASSET


class LinkType(str, Enum):
    """Role of a transaction within a linked transfer."""

    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


class CategoryKind(str, Enum):
    """Kind of category."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class CandidateStatus(str, Enum):
    """Review status of a transfer candidate."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    AUTO_LINKED = "auto_linked"


class PendingTransferStatus(str, Enum):
    """Matching status of a planned transfer."""

    PENDING = "pending"
    PARTIAL = "partial"
    MATCHED = "matched"
    CANCELLED = "cancelled"

    @property
    def is_open(self) -> bool:
        return self in (PendingTransferStatus.PENDING, PendingTransferStatus.PARTIAL)


class AmountMatchType(str, Enum):
    """How the two legs' amounts were matched."""

    EXACT = "exact"
    FOREX_1PCT = "forex_1pct"
    FOREX_2PCT = "forex_2pct"
    NO_MATCH = "no_match"


class ConfidenceBand(str, Enum):
    """Presentation band over a candidate's confidence score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    name: str
    institution: str
    currency: str
    account_type: Optional[str]
    company: Optional[str]
    polarity: BalancePolarity
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    code: str
    kind: CategoryKind
    created_at: datetime


@dataclass(frozen=True)
class Statement:
    """One imported statement period for one account."""

    id: int
    account_id: int
    period_start: date
    period_end: date
    opening_balance: Decimal
    closing_balance: Decimal
    total_credits: Optional[Decimal]
    total_debits: Optional[Decimal]
    transaction_count: Optional[int]
    imported_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    account_id: int
    date: date
    amount: Optional[Decimal]
    direction: Direction
    currency: str
    description: Optional[str] = None
    statement_id: Optional[int] = None
    category_id: Optional[int] = None
    linked_to: Optional[int] = None
    link_type: Optional[LinkType] = None
    needs_review: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ConfidenceFactors:
    """Heuristic factors that contributed to a candidate's score."""

    amount_match: bool
    amount_match_type: AmountMatchType
    date_diff_days: int
    same_company: bool
    has_transfer_keywords: bool

    def to_dict(self) -> dict:
        return {
            "amount_match": self.amount_match,
            "amount_match_type": self.amount_match_type.value,
            "date_diff_days": self.date_diff_days,
            "same_company": self.same_company,
            "has_transfer_keywords": self.has_transfer_keywords,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ConfidenceFactors":
        data = data or {}
        return cls(
            amount_match=bool(data.get("amount_match", False)),
            amount_match_type=AmountMatchType(data.get("amount_match_type", "no_match")),
            date_diff_days=int(data.get("date_diff_days", 0)),
            same_company=bool(data.get("same_company", False)),
            has_transfer_keywords=bool(data.get("has_transfer_keywords", False)),
        )


@dataclass(frozen=True)
class TransferCandidate:
    """A proposed pairing of two transactions as legs of one transfer."""

    id: int
    from_transaction_id: int
    to_transaction_id: int
    from_account_id: int
    to_account_id: int
    amount_from: Decimal
    amount_to: Decimal
    currency_from: str
    currency_to: str
    date_from: date
    date_to: date
    date_diff_days: int
    is_cross_company: bool
    confidence_score: int
    confidence_factors: ConfidenceFactors
    status: CandidateStatus
    exchange_rate_used: Optional[Decimal] = None
    exchange_rate_source: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_cross_currency(self) -> bool:
        return self.currency_from.upper() != self.currency_to.upper()

    @property
    def missing_exchange_rate(self) -> bool:
        """True when a cross-currency pair carries no usable rate."""
        if not self.is_cross_currency:
            return False
        return self.exchange_rate_used is None or not self.exchange_rate_source


@dataclass(frozen=True)
class PendingTransfer:
    """A transfer entered by hand before either leg was imported."""

    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    transfer_date: date
    status: PendingTransferStatus
    match_tolerance_days: int
    match_tolerance_amount: Decimal
    description: Optional[str] = None
    notes: Optional[str] = None
    from_transaction_id: Optional[int] = None
    to_transaction_id: Optional[int] = None
    matched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExchangeRate:
    """Cached exchange rate for one day."""

    rate_date: date
    from_currency: str
    to_currency: str
    rate: Decimal
    source: str


@dataclass(frozen=True)
class RunningBalance:
    """Balance after applying one transaction."""

    transaction_id: int
    date: date
    effect: Decimal
    balance: Decimal
    suspect: bool = False


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one ordered set of transactions."""

    opening_balance: Decimal
    closing_balance: Decimal
    polarity: BalancePolarity
    rows: tuple[RunningBalance, ...]
    calculated_closing: Decimal
    discrepancy: Decimal
    is_balanced: bool
    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")

    @property
    def per_transaction_balances(self) -> list[Decimal]:
        return [row.balance for row in self.rows]

    @property
    def suspect_transaction_ids(self) -> list[int]:
        return [row.transaction_id for row in self.rows if row.suspect]


@dataclass(frozen=True)
class StatementReconciliation:
    """Reconciliation of a stored statement plus its reported-totals checks."""

    statement: Statement
    account: BankAccount
    result: ReconciliationResult
    credits_match: Optional[bool] = None
    debits_match: Optional[bool] = None
    count_match: Optional[bool] = None
    transaction_count: int = 0


@dataclass(frozen=True)
class CandidateAssessment:
    """How the reviewer should treat a candidate's externally computed score."""

    band: ConfidenceBand
    requires_manual_review: bool
    data_quality_issues: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_trusted(self) -> bool:
        return not self.data_quality_issues


@dataclass(frozen=True)
class ReviewSummary:
    """Candidate counts per status."""

    pending: int = 0
    confirmed: int = 0
    rejected: int = 0
    auto_linked: int = 0

    @property
    def reviewed(self) -> int:
        return self.confirmed + self.rejected + self.auto_linked
