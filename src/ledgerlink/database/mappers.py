"""Mapper functions to convert between domain models and SQLAlchemy models.

String codes stored in the database (polarity, direction, link type, status)
are resolved into domain enums here, once, at load time.
"""

from ledgerlink.domain import entities as domain
from ledgerlink.database.models import (
    BankAccount as ORMBankAccount,
    Category as ORMCategory,
    ExchangeRate as ORMExchangeRate,
    PendingTransfer as ORMPendingTransfer,
    Statement as ORMStatement,
    Transaction as ORMTransaction,
    TransferCandidate as ORMTransferCandidate,
)


def resolve_polarity(balance_type: str | None, account_type: str | None) -> domain.BalancePolarity:
    """Resolve account polarity from an explicit balance type or the account type."""
    if balance_type:
        return domain.BalancePolarity(balance_type.lower())
    return domain.BalancePolarity.from_account_type(account_type)


def account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        name=orm_account.name,
        institution=orm_account.institution,
        currency=orm_account.currency,
        account_type=orm_account.account_type,
        company=orm_account.company,
        polarity=resolve_polarity(orm_account.balance_type, orm_account.account_type),
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        code=orm_category.code,
        kind=domain.CategoryKind(orm_category.kind),
        created_at=orm_category.created_at,
    )


def statement_to_domain(orm_statement: ORMStatement) -> domain.Statement:
    """Convert SQLAlchemy Statement model to domain Statement entity."""
    return domain.Statement(
        id=orm_statement.id,
        account_id=orm_statement.account_id,
        period_start=orm_statement.period_start,
        period_end=orm_statement.period_end,
        opening_balance=orm_statement.opening_balance,
        closing_balance=orm_statement.closing_balance,
        total_credits=orm_statement.total_credits,
        total_debits=orm_statement.total_debits,
        transaction_count=orm_statement.transaction_count,
        imported_at=orm_statement.imported_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    link_type = orm_transaction.link_type
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        statement_id=orm_transaction.statement_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        direction=domain.Direction(orm_transaction.direction),
        currency=orm_transaction.currency,
        category_id=orm_transaction.category_id,
        linked_to=orm_transaction.linked_to,
        link_type=domain.LinkType(link_type) if link_type else None,
        needs_review=orm_transaction.needs_review,
        created_at=orm_transaction.created_at,
    )


def candidate_to_domain(orm_candidate: ORMTransferCandidate) -> domain.TransferCandidate:
    """Convert SQLAlchemy TransferCandidate model to domain TransferCandidate entity."""
    return domain.TransferCandidate(
        id=orm_candidate.id,
        from_transaction_id=orm_candidate.from_transaction_id,
        to_transaction_id=orm_candidate.to_transaction_id,
        from_account_id=orm_candidate.from_account_id,
        to_account_id=orm_candidate.to_account_id,
        amount_from=orm_candidate.amount_from,
        amount_to=orm_candidate.amount_to,
        currency_from=orm_candidate.currency_from,
        currency_to=orm_candidate.currency_to,
        exchange_rate_used=orm_candidate.exchange_rate_used,
        exchange_rate_source=orm_candidate.exchange_rate_source,
        date_from=orm_candidate.date_from,
        date_to=orm_candidate.date_to,
        date_diff_days=orm_candidate.date_diff_days,
        is_cross_company=orm_candidate.is_cross_company,
        confidence_score=orm_candidate.confidence_score,
        confidence_factors=domain.ConfidenceFactors.from_dict(orm_candidate.confidence_factors),
        status=domain.CandidateStatus(orm_candidate.status),
        rejection_reason=orm_candidate.rejection_reason,
        reviewed_at=orm_candidate.reviewed_at,
        created_at=orm_candidate.created_at,
    )


def exchange_rate_to_domain(orm_rate: ORMExchangeRate) -> domain.ExchangeRate:
    """Convert SQLAlchemy ExchangeRate model to domain ExchangeRate entity."""
    return domain.ExchangeRate(
        rate_date=orm_rate.rate_date,
        from_currency=orm_rate.from_currency,
        to_currency=orm_rate.to_currency,
        rate=orm_rate.rate,
        source=orm_rate.source,
    )


def pending_transfer_to_domain(orm_pending: ORMPendingTransfer) -> domain.PendingTransfer:
    """Convert SQLAlchemy PendingTransfer model to domain PendingTransfer entity."""
    return domain.PendingTransfer(
        id=orm_pending.id,
        from_account_id=orm_pending.from_account_id,
        to_account_id=orm_pending.to_account_id,
        amount=orm_pending.amount,
        transfer_date=orm_pending.transfer_date,
        status=domain.PendingTransferStatus(orm_pending.status),
        match_tolerance_days=orm_pending.match_tolerance_days,
        match_tolerance_amount=orm_pending.match_tolerance_amount,
        description=orm_pending.description,
        notes=orm_pending.notes,
        from_transaction_id=orm_pending.from_transaction_id,
        to_transaction_id=orm_pending.to_transaction_id,
        matched_at=orm_pending.matched_at,
        created_at=orm_pending.created_at,
    )
