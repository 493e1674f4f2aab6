"""Shared pytest fixtures for ledgerlink tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest
import structlog

from ledgerlink.database.factories import create_sqlite_database
from ledgerlink.domain.account import AccountService
from ledgerlink.domain.category import CategoryService
from ledgerlink.domain.entities import ConfidenceFactors, AmountMatchType, Direction
from ledgerlink.domain.ledger import LedgerService


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration installed by CLI invocations."""
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that open the same file
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def seeded_categories(category_service):
    """Create the default categories, including the transfer category."""
    category_service.init_defaults()
    return {cat.code: cat for cat in category_service.list_categories()}


@pytest.fixture
def chequing(account_service):
    """An asset account owned by Acme."""
    account_id = account_service.create_account(
        name="Ops Chequing", institution="RBC", account_type="Chequing", company="Acme"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def savings(account_service):
    """A second Acme asset account."""
    account_id = account_service.create_account(
        name="Acme Savings", institution="RBC", account_type="Savings", company="Acme"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def credit_card(account_service):
    """A liability account."""
    account_id = account_service.create_account(
        name="Amex", institution="American Express", account_type="Credit Card", company="Acme"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def make_candidate(temp_db):
    """Factory creating a pending candidate between two new transactions."""

    def _make(
        from_account,
        to_account,
        amount=Decimal("250.00"),
        txn_date=date(2024, 3, 5),
        score=85,
        is_cross_company=False,
        to_amount=None,
        to_currency=None,
        exchange_rate_used=None,
        exchange_rate_source=None,
    ):
        from_id = temp_db.create_transaction(
            account_id=from_account.id,
            date=txn_date,
            amount=amount,
            direction=Direction.DEBIT,
            currency=from_account.currency,
            description="TRANSFER TO SAVINGS",
        )
        to_id = temp_db.create_transaction(
            account_id=to_account.id,
            date=txn_date,
            amount=to_amount if to_amount is not None else amount,
            direction=Direction.CREDIT,
            currency=to_currency or to_account.currency,
            description="TRANSFER FROM CHEQUING",
        )
        factors = ConfidenceFactors(
            amount_match=True,
            amount_match_type=AmountMatchType.EXACT,
            date_diff_days=0,
            same_company=not is_cross_company,
            has_transfer_keywords=True,
        )
        candidate_id = temp_db.create_transfer_candidate(
            from_transaction=temp_db.get_transaction(from_id),
            to_transaction=temp_db.get_transaction(to_id),
            confidence_score=score,
            confidence_factors=factors,
            is_cross_company=is_cross_company,
            exchange_rate_used=exchange_rate_used,
            exchange_rate_source=exchange_rate_source,
        )
        return temp_db.get_transfer_candidate(candidate_id)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
