"""Tests for statement balance reconciliation."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerlink.domain.entities import BalancePolarity, Direction, Transaction
from ledgerlink.domain.errors import NotFoundError
from ledgerlink.domain.reconciliation import (
    ReconciliationService,
    reconcile,
    round_money,
    within_tolerance,
)


def _txn(txn_id, day, amount, direction, account_id=1):
    return Transaction(
        id=txn_id,
        account_id=account_id,
        date=date(2024, 3, day),
        amount=amount,
        direction=direction,
        currency="CAD",
    )


class TestReconcile:
    """Tests for the pure reconcile function."""

    def test_asset_account_balances(self):
        transactions = [
            _txn(1, 2, Decimal("200.00"), Direction.CREDIT),
            _txn(2, 3, Decimal("50.00"), Direction.DEBIT),
        ]
        result = reconcile(Decimal("1000.00"), transactions, BalancePolarity.ASSET, Decimal("1150.00"))

        assert result.per_transaction_balances == [Decimal("1200.00"), Decimal("1150.00")]
        assert result.calculated_closing == Decimal("1150.00")
        assert result.discrepancy == Decimal("0.00")
        assert result.is_balanced is True
        assert result.total_credits == Decimal("200.00")
        assert result.total_debits == Decimal("50.00")

    def test_liability_account_debits_increase_balance(self):
        transactions = [
            _txn(1, 2, Decimal("100.00"), Direction.DEBIT),
            _txn(2, 3, Decimal("300.00"), Direction.CREDIT),
        ]
        result = reconcile(Decimal("500.00"), transactions, BalancePolarity.LIABILITY, Decimal("300.00"))

        assert result.per_transaction_balances == [Decimal("600.00"), Decimal("300.00")]
        assert result.is_balanced is True

    def test_float_balances_convert_through_their_decimal_text(self):
        transactions = [_txn(1, 2, 0.2, Direction.CREDIT)]
        result = reconcile(0.1, transactions, BalancePolarity.ASSET, 0.3)

        assert result.opening_balance == Decimal("0.1")
        assert result.closing_balance == Decimal("0.3")
        assert result.per_transaction_balances == [Decimal("0.3")]
        assert result.discrepancy == Decimal("0.00")
        assert result.is_balanced is True

    def test_missing_polarity_treated_as_asset(self):
        transactions = [_txn(1, 2, Decimal("10.00"), Direction.CREDIT)]
        result = reconcile(Decimal("0"), transactions, None, Decimal("10.00"))

        assert result.polarity == BalancePolarity.ASSET
        assert result.calculated_closing == Decimal("10.00")

    def test_empty_transactions(self):
        result = reconcile(Decimal("750.00"), [], BalancePolarity.ASSET, Decimal("750.00"))

        assert result.rows == ()
        assert result.calculated_closing == Decimal("750.00")
        assert result.is_balanced is True

    def test_empty_transactions_with_different_closing(self):
        result = reconcile(Decimal("750.00"), [], BalancePolarity.ASSET, Decimal("700.00"))

        assert result.discrepancy == Decimal("-50.00")
        assert result.is_balanced is False

    @pytest.mark.parametrize(
        "closing,expected",
        [
            (Decimal("100.019"), True),
            (Decimal("99.981"), True),
            (Decimal("100.021"), False),
            (Decimal("99.979"), False),
        ],
    )
    def test_tolerance_boundary(self, closing, expected):
        transactions = [_txn(1, 2, Decimal("100.00"), Direction.CREDIT)]
        result = reconcile(Decimal("0"), transactions, BalancePolarity.ASSET, closing)

        assert result.is_balanced is expected

    def test_order_independent(self):
        transactions = [
            _txn(3, 5, Decimal("20.00"), Direction.DEBIT),
            _txn(1, 2, Decimal("100.00"), Direction.CREDIT),
            _txn(2, 2, Decimal("5.00"), Direction.DEBIT),
        ]
        forward = reconcile(Decimal("0"), transactions, BalancePolarity.ASSET, Decimal("75.00"))
        backward = reconcile(Decimal("0"), list(reversed(transactions)), BalancePolarity.ASSET, Decimal("75.00"))

        assert [row.transaction_id for row in forward.rows] == [1, 2, 3]
        assert forward == backward

    def test_same_inputs_give_same_result(self):
        transactions = [
            _txn(1, 2, Decimal("33.33"), Direction.CREDIT),
            _txn(2, 2, Decimal("0.01"), Direction.DEBIT),
        ]
        first = reconcile(Decimal("1.00"), transactions, BalancePolarity.ASSET, Decimal("34.32"))
        second = reconcile(Decimal("1.00"), transactions, BalancePolarity.ASSET, Decimal("34.32"))

        assert first == second

    def test_missing_amount_is_suspect_and_ignored(self):
        transactions = [
            _txn(1, 2, Decimal("200.00"), Direction.CREDIT),
            _txn(2, 3, None, Direction.DEBIT),
        ]
        result = reconcile(Decimal("1000.00"), transactions, BalancePolarity.ASSET, Decimal("1200.00"))

        assert result.suspect_transaction_ids == [2]
        assert result.rows[1].effect == Decimal("0")
        assert result.rows[1].balance == Decimal("1200.00")
        assert result.is_balanced is True

    def test_non_finite_amount_is_suspect(self):
        transactions = [_txn(1, 2, Decimal("NaN"), Direction.CREDIT)]
        result = reconcile(Decimal("10.00"), transactions, BalancePolarity.ASSET, Decimal("10.00"))

        assert result.suspect_transaction_ids == [1]
        assert result.calculated_closing == Decimal("10.00")

    def test_negative_amount_uses_magnitude(self):
        transactions = [_txn(1, 2, Decimal("-40.00"), Direction.DEBIT)]
        result = reconcile(Decimal("100.00"), transactions, BalancePolarity.ASSET, Decimal("60.00"))

        assert result.calculated_closing == Decimal("60.00")


def test_round_money_half_up():
    assert round_money(Decimal("0.005")) == Decimal("0.01")
    assert round_money(Decimal("-0.005")) == Decimal("-0.01")
    assert round_money(Decimal("2.344")) == Decimal("2.34")


def test_within_tolerance():
    assert within_tolerance(Decimal("0.019"))
    assert within_tolerance(Decimal("-0.019"))
    assert not within_tolerance(Decimal("0.02"))


class TestReconciliationService:
    """Tests for reconciling stored statements."""

    def test_reconcile_statement(self, ledger_service, chequing):
        statement_id = ledger_service.add_statement(
            account_id=chequing.id,
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 31),
            opening_balance=Decimal("1000.00"),
            closing_balance=Decimal("1150.00"),
            total_credits=Decimal("200.00"),
            total_debits=Decimal("50.00"),
            transaction_count=2,
        )
        ledger_service.add_transaction(
            date=date(2024, 3, 4), amount=Decimal("50.00"), direction=Direction.DEBIT,
            statement_id=statement_id,
        )
        ledger_service.add_transaction(
            date=date(2024, 3, 2), amount=Decimal("200.00"), direction=Direction.CREDIT,
            statement_id=statement_id,
        )

        report = ReconciliationService(ledger_service.db).reconcile_statement(statement_id)

        assert report.result.per_transaction_balances == [Decimal("1200.00"), Decimal("1150.00")]
        assert report.result.is_balanced is True
        assert report.credits_match is True
        assert report.debits_match is True
        assert report.count_match is True
        assert report.transaction_count == 2

    def test_reconcile_credit_card_statement(self, ledger_service, credit_card):
        statement_id = ledger_service.add_statement(
            account_id=credit_card.id,
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 31),
            opening_balance=Decimal("500.00"),
            closing_balance=Decimal("250.00"),
        )
        ledger_service.add_transaction(
            date=date(2024, 3, 2), amount=Decimal("100.00"), direction=Direction.DEBIT,
            statement_id=statement_id,
        )
        ledger_service.add_transaction(
            date=date(2024, 3, 3), amount=Decimal("300.00"), direction=Direction.CREDIT,
            statement_id=statement_id,
        )

        report = ReconciliationService(ledger_service.db).reconcile_statement(statement_id)

        assert report.result.polarity == BalancePolarity.LIABILITY
        assert report.result.calculated_closing == Decimal("300.00")
        assert report.result.discrepancy == Decimal("-50.00")
        assert report.result.is_balanced is False
        assert report.credits_match is None
        assert report.count_match is None

    def test_reported_count_mismatch(self, ledger_service, chequing):
        statement_id = ledger_service.add_statement(
            account_id=chequing.id,
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 31),
            opening_balance=Decimal("0"),
            closing_balance=Decimal("0"),
            transaction_count=3,
        )

        report = ReconciliationService(ledger_service.db).reconcile_statement(statement_id)

        assert report.count_match is False

    def test_missing_statement(self, temp_db):
        with pytest.raises(NotFoundError, match="Statement 99 not found"):
            ReconciliationService(temp_db).reconcile_statement(99)
