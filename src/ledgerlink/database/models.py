"""SQLAlchemy models for ledgerlink database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    institution = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="CAD")
    account_type = Column(String, nullable=True)
    # Explicit polarity; inferred from account_type when NULL
    balance_type = Column(String, nullable=True)
    company = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    statements = relationship("Statement", back_populates="account")
    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, nullable=False)
    kind = Column(String, nullable=False, default="expense")
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Statement(Base):
    """Imported statement period model."""

    __tablename__ = "statements"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    opening_balance = Column(Numeric(14, 2), nullable=False)
    closing_balance = Column(Numeric(14, 2), nullable=False)
    total_credits = Column(Numeric(14, 2), nullable=True)
    total_debits = Column(Numeric(14, 2), nullable=True)
    transaction_count = Column(Integer, nullable=True)
    imported_at = Column(DateTime, default=_utcnow, nullable=False)

    account = relationship("BankAccount", back_populates="statements")
    transactions = relationship("Transaction", back_populates="statement")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    statement_id = Column(Integer, ForeignKey("statements.id"), nullable=True)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    # NULL marks an amount the import could not read
    amount = Column(Numeric(14, 2), nullable=True)
    direction = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="CAD")
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    linked_to = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    link_type = Column(String, nullable=True)
    needs_review = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    account = relationship("BankAccount", back_populates="transactions")
    statement = relationship("Statement", back_populates="transactions")
    category = relationship("Category")


class TransferCandidate(Base):
    """Proposed transfer pairing model."""

    __tablename__ = "transfer_candidates"

    id = Column(Integer, primary_key=True)
    from_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    to_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    from_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    to_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    amount_from = Column(Numeric(14, 2), nullable=False)
    amount_to = Column(Numeric(14, 2), nullable=False)
    currency_from = Column(String(3), nullable=False)
    currency_to = Column(String(3), nullable=False)
    exchange_rate_used = Column(Numeric(18, 8), nullable=True)
    exchange_rate_source = Column(String, nullable=True)
    date_from = Column(Date, nullable=False)
    date_to = Column(Date, nullable=False)
    date_diff_days = Column(Integer, nullable=False, default=0)
    is_cross_company = Column(Boolean, nullable=False, default=False)
    confidence_score = Column(Integer, nullable=False)
    confidence_factors = Column(JSON, nullable=False, default=dict)
    status = Column(String, nullable=False, default="pending")
    rejection_reason = Column(String, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("from_transaction_id", "to_transaction_id", name="uq_candidate_pair"),
    )


class PendingTransfer(Base):
    """Manually entered transfer awaiting its imported legs."""

    __tablename__ = "pending_transfers"

    id = Column(Integer, primary_key=True)
    from_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    to_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    transfer_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    from_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    to_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    match_tolerance_days = Column(Integer, nullable=False, default=5)
    match_tolerance_amount = Column(Numeric(14, 2), nullable=False, default=0.50)
    matched_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class ExchangeRate(Base):
    """Cached daily exchange rate model."""

    __tablename__ = "exchange_rates"

    id = Column(Integer, primary_key=True)
    rate_date = Column(Date, nullable=False)
    from_currency = Column(String(3), nullable=False)
    to_currency = Column(String(3), nullable=False)
    rate = Column(Numeric(18, 8), nullable=False)
    source = Column(String, nullable=False, default="manual")

    __table_args__ = (
        UniqueConstraint("rate_date", "from_currency", "to_currency", name="uq_rate_day_pair"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
