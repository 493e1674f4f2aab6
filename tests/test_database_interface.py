"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from ledgerlink.domain import entities
from ledgerlink.domain.entities import CandidateStatus, Direction, LinkType
from ledgerlink.domain.errors import NotFoundError
from ledgerlink.domain.queries import TransactionQuery
from ledgerlink.domain.scoring import confidence_band


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        account_id = temp_db.create_account(name="Test Account", institution="Test Bank", currency="usd")

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.BankAccount)
        assert account.name == "Test Account"
        assert account.currency == "USD"
        assert isinstance(account.created_at, datetime)

    def test_get_account_by_name(self, temp_db):
        temp_db.create_account(name="Amex", institution="American Express", account_type="Credit Card")

        account = temp_db.get_account_by_name("Amex")

        assert account.polarity == entities.BalancePolarity.LIABILITY
        assert temp_db.get_account_by_name("missing") is None

    def test_transaction_returns_domain_model(self, temp_db, chequing):
        txn_id = temp_db.create_transaction(
            account_id=chequing.id,
            date=date(2024, 3, 1),
            amount=Decimal("12.34"),
            direction=Direction.DEBIT,
            currency="cad",
            description="Coffee",
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("12.34")
        assert txn.direction == Direction.DEBIT
        assert txn.currency == "CAD"
        assert txn.needs_review is True
        assert txn.linked_to is None

    def test_transaction_without_amount(self, temp_db, chequing):
        txn_id = temp_db.create_transaction(
            account_id=chequing.id, date=date(2024, 3, 1), amount=None, direction=Direction.CREDIT
        )

        assert temp_db.get_transaction(txn_id).amount is None

    def test_link_missing_transaction(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.link_transaction(99, 100, LinkType.TRANSFER_OUT, None)

    def test_candidate_round_trip(self, temp_db, chequing, savings, make_candidate):
        candidate = make_candidate(chequing, savings, amount=Decimal("250.00"), score=85)

        assert isinstance(candidate, entities.TransferCandidate)
        assert candidate.status == CandidateStatus.PENDING
        assert candidate.amount_from == Decimal("250.00")
        assert candidate.confidence_factors.amount_match_type == entities.AmountMatchType.EXACT
        assert confidence_band(candidate.confidence_score) == entities.ConfidenceBand.MEDIUM
        assert temp_db.transfer_candidate_exists(
            candidate.from_transaction_id, candidate.to_transaction_id
        )
        assert not temp_db.transfer_candidate_exists(
            candidate.to_transaction_id, candidate.from_transaction_id
        )

    def test_count_candidates_by_status(self, temp_db, chequing, savings, make_candidate):
        make_candidate(chequing, savings, amount=Decimal("1.00"))
        rejected = make_candidate(chequing, savings, amount=Decimal("2.00"))
        temp_db.update_candidate_status(rejected.id, CandidateStatus.REJECTED, rejection_reason="no")

        counts = temp_db.count_candidates_by_status()

        assert counts[CandidateStatus.PENDING] == 1
        assert counts[CandidateStatus.REJECTED] == 1
        assert temp_db.get_transfer_candidate(rejected.id).rejection_reason == "no"


class TestUnitOfWork:
    """Tests for grouped writes."""

    def test_commits_on_success(self, temp_db, chequing):
        with temp_db.unit_of_work():
            first = temp_db.create_transaction(
                account_id=chequing.id, date=date(2024, 3, 1), amount=Decimal("1.00"), direction=Direction.CREDIT
            )
            second = temp_db.create_transaction(
                account_id=chequing.id, date=date(2024, 3, 2), amount=Decimal("2.00"), direction=Direction.CREDIT
            )

        temp_db.disconnect()
        assert temp_db.get_transaction(first) is not None
        assert temp_db.get_transaction(second) is not None

    def test_rolls_back_on_error(self, temp_db, chequing):
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                temp_db.create_transaction(
                    account_id=chequing.id, date=date(2024, 3, 1), amount=Decimal("1.00"), direction=Direction.CREDIT
                )
                raise RuntimeError("abort")

        assert temp_db.list_transactions(TransactionQuery()) == []

    def test_nested_units_commit_once(self, temp_db, chequing):
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                with temp_db.unit_of_work():
                    temp_db.create_transaction(
                        account_id=chequing.id, date=date(2024, 3, 1), amount=Decimal("1.00"),
                        direction=Direction.CREDIT,
                    )
                raise RuntimeError("abort outer")

        assert temp_db.list_transactions(TransactionQuery()) == []
