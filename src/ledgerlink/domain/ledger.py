"""Statement and transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerlink.database.base import Database
from ledgerlink.domain.entities import Direction, Statement, Transaction
from ledgerlink.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_code_not_found,
    statement_not_found,
    transaction_not_found,
)
from ledgerlink.domain.queries import TransactionQuery


class LedgerService:
    """Service for statements, transactions and exchange rates."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_statement(
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
        """Record an imported statement period.

        Returns:
            Statement ID

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the period is inverted
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if period_end < period_start:
            raise ValidationError(
                f"Statement period ends ({period_end}) before it starts ({period_start})"
            )

        return self.db.create_statement(
            account_id=account_id,
            period_start=period_start,
            period_end=period_end,
            opening_balance=opening_balance,
            closing_balance=closing_balance,
            total_credits=total_credits,
            total_debits=total_debits,
            transaction_count=transaction_count,
        )

    def get_statement(self, statement_id: int) -> Optional[Statement]:
        return self.db.get_statement(statement_id)

    def list_statements(self, account_id: Optional[int] = None) -> list[Statement]:
        return self.db.list_statements(account_id=account_id)

    def add_transaction(
        self,
        date: date,
        amount: Optional[Decimal],
        direction: Direction,
        account_id: Optional[int] = None,
        statement_id: Optional[int] = None,
        description: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Either ``account_id`` or ``statement_id`` must be given; a statement
        implies its account. The currency defaults to the account's.

        Returns:
            Transaction ID

        Raises:
            ValidationError: If neither account nor statement is given, or the
                date falls outside the statement period
            NotFoundError: If the account or statement doesn't exist
        """
        statement = None
        if statement_id is not None:
            statement = self.db.get_statement(statement_id)
            if statement is None:
                raise NotFoundError(statement_not_found(statement_id))
            if account_id is not None and account_id != statement.account_id:
                raise ValidationError(
                    f"Statement {statement_id} belongs to account {statement.account_id}, not {account_id}"
                )
            account_id = statement.account_id
            if not statement.period_start <= date <= statement.period_end:
                raise ValidationError(
                    f"Date {date} is outside statement period "
                    f"{statement.period_start} to {statement.period_end}"
                )

        if account_id is None:
            raise ValidationError("A transaction needs an account or a statement")

        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        return self.db.create_transaction(
            account_id=account_id,
            statement_id=statement_id,
            date=date,
            amount=amount,
            direction=direction,
            currency=currency or account.currency,
            description=description,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.db.get_transaction(transaction_id)

    def list_transactions(self, query: Optional[TransactionQuery] = None) -> list[Transaction]:
        return self.db.list_transactions(query or TransactionQuery())

    def categorize(self, transaction_id: int, category_code: Optional[str]) -> None:
        """Set or clear a transaction's category.

        Linked transfer legs keep their transfer category.

        Raises:
            NotFoundError: If the transaction or category doesn't exist
            ConflictError: If the transaction is part of a linked transfer
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.linked_to is not None:
            raise ConflictError(
                f"Transaction {transaction_id} is linked to transaction {txn.linked_to}; "
                "its category is managed by the transfer link"
            )

        if category_code is None:
            self.db.update_transaction_category(transaction_id, None, needs_review=True)
            return

        category = self.db.get_category_by_code(category_code)
        if category is None:
            raise NotFoundError(category_code_not_found(category_code))
        self.db.update_transaction_category(transaction_id, category.id, needs_review=False)

    def set_exchange_rate(
        self, rate_date: date, from_currency: str, to_currency: str, rate: Decimal, source: str = "manual"
    ) -> None:
        """Cache an exchange rate for detection.

        Raises:
            ValidationError: If the rate is not positive
        """
        if rate <= 0:
            raise ValidationError(f"Exchange rate must be positive, got {rate}")
        self.db.set_exchange_rate(rate_date, from_currency, to_currency, rate, source=source)
