"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerlink.domain.entities import (
    BalancePolarity,
    BankAccount,
    CandidateStatus,
    Category,
    CategoryKind,
    ConfidenceFactors,
    Direction,
    ExchangeRate,
    LinkType,
    PendingTransfer,
    PendingTransferStatus,
    Statement,
    Transaction,
    TransferCandidate,
)
from ledgerlink.domain.queries import TransactionQuery


class Database(ABC):
    """Abstract database interface for ledgerlink."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes into one atomic unit.

        Writes made inside the block are committed together when the
        outermost block exits and rolled back if it raises.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        institution: str,
        currency: str = "CAD",
        account_type: Optional[str] = None,
        company: Optional[str] = None,
        balance_type: Optional[BalancePolarity] = None,
    ) -> int:
        """Create a new bank account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[BankAccount]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[BankAccount]:
        """Get account by name."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[BankAccount]:
        """List all accounts."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, code: str, kind: CategoryKind = CategoryKind.EXPENSE) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_code(self, code: str) -> Optional[Category]:
        """Get category by its stable code (e.g. 'bank_transfer')."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Statement operations
    @abstractmethod
    def create_statement(
        self,
        account_id: int,
        period_start: date,
        period_end: date,
        opening_balance: Decimal,
        closing_balance: Decimal,
        total_credits: Optional[Decimal] = None,
        total_debits: Optional[Decimal] = None,
        transaction_count: Optional[int] = None,
    ) -> int:
        """Create a statement. Returns statement ID."""
        pass

    @abstractmethod
    def get_statement(self, statement_id: int) -> Optional[Statement]:
        """Get statement by ID."""
        pass

    @abstractmethod
    def list_statements(self, account_id: Optional[int] = None) -> list[Statement]:
        """List statements, optionally filtered by account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: Optional[Decimal],
        direction: Direction,
        currency: str = "CAD",
        description: Optional[str] = None,
        statement_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self, query: TransactionQuery) -> list[Transaction]:
        """List transactions matching a query, ordered by (date, id)."""
        pass

    @abstractmethod
    def update_transaction_category(
        self, transaction_id: int, category_id: Optional[int], needs_review: bool = False
    ) -> None:
        """Update transaction category and review flag."""
        pass

    @abstractmethod
    def link_transaction(
        self, transaction_id: int, linked_to: int, link_type: LinkType, category_id: Optional[int]
    ) -> None:
        """Record one leg of a transfer link and clear its review flag."""
        pass

    # Transfer candidate operations
    @abstractmethod
    def create_transfer_candidate(
        self,
        from_transaction: Transaction,
        to_transaction: Transaction,
        confidence_score: int,
        confidence_factors: ConfidenceFactors,
        is_cross_company: bool,
        status: CandidateStatus = CandidateStatus.PENDING,
        exchange_rate_used: Optional[Decimal] = None,
        exchange_rate_source: Optional[str] = None,
    ) -> int:
        """Create a transfer candidate. Returns candidate ID."""
        pass

    @abstractmethod
    def get_transfer_candidate(self, candidate_id: int) -> Optional[TransferCandidate]:
        """Get transfer candidate by ID."""
        pass

    @abstractmethod
    def list_transfer_candidates(
        self, status: Optional[CandidateStatus] = None
    ) -> list[TransferCandidate]:
        """List transfer candidates, highest confidence first."""
        pass

    @abstractmethod
    def transfer_candidate_exists(self, from_transaction_id: int, to_transaction_id: int) -> bool:
        """Check if a candidate already pairs these two transactions."""
        pass

    @abstractmethod
    def update_candidate_status(
        self,
        candidate_id: int,
        status: CandidateStatus,
        reviewed_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> None:
        """Update a candidate's review status."""
        pass

    @abstractmethod
    def count_candidates_by_status(self) -> dict[CandidateStatus, int]:
        """Count candidates per status."""
        pass

    # Pending transfer operations
    @abstractmethod
    def create_pending_transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        transfer_date: date,
        match_tolerance_days: int = 5,
        match_tolerance_amount: Decimal = Decimal("0.50"),
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a pending transfer. Returns pending transfer ID."""
        pass

    @abstractmethod
    def get_pending_transfer(self, pending_id: int) -> Optional[PendingTransfer]:
        """Get pending transfer by ID."""
        pass

    @abstractmethod
    def list_pending_transfers(
        self,
        statuses: Optional[list[PendingTransferStatus]] = None,
        account_id: Optional[int] = None,
    ) -> list[PendingTransfer]:
        """List pending transfers by transfer date.

        ``account_id`` matches either side of the transfer.
        """
        pass

    @abstractmethod
    def update_pending_transfer(
        self,
        pending_id: int,
        status: PendingTransferStatus,
        from_transaction_id: Optional[int] = None,
        to_transaction_id: Optional[int] = None,
        matched_at: Optional[datetime] = None,
    ) -> None:
        """Update status, and record any newly matched leg."""
        pass

    # Exchange rate operations
    @abstractmethod
    def set_exchange_rate(
        self, rate_date: date, from_currency: str, to_currency: str, rate: Decimal, source: str = "manual"
    ) -> None:
        """Insert or replace a cached exchange rate."""
        pass

    @abstractmethod
    def get_exchange_rate(
        self, rate_date: date, from_currency: str, to_currency: str
    ) -> Optional[ExchangeRate]:
        """Get the cached exchange rate for a day and currency pair."""
        pass
