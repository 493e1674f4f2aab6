"""Tests for account, category and ledger services."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerlink.domain.category import DEFAULT_CATEGORIES
from ledgerlink.domain.entities import BalancePolarity, CategoryKind, Direction
from ledgerlink.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgerlink.domain.queries import TransactionQuery


class TestAccountService:
    """Tests for AccountService."""

    def test_create_account(self, account_service):
        account_id = account_service.create_account(name="Ops Chequing", institution="RBC")
        account = account_service.get_account(account_id)

        assert account.name == "Ops Chequing"
        assert account.currency == "CAD"
        assert account.polarity == BalancePolarity.ASSET

    def test_credit_card_is_liability(self, credit_card):
        assert credit_card.polarity == BalancePolarity.LIABILITY

    def test_explicit_balance_type_overrides(self, account_service):
        account_id = account_service.create_account(
            name="Line of Credit",
            institution="RBC",
            account_type="Loan",
            balance_type=BalancePolarity.LIABILITY,
        )
        assert account_service.get_account(account_id).polarity == BalancePolarity.LIABILITY

    def test_duplicate_name(self, account_service, chequing):
        with pytest.raises(ConflictError, match="already exists"):
            account_service.create_account(name="Ops Chequing", institution="TD")

    def test_invalid_currency(self, account_service):
        with pytest.raises(ValidationError, match="Invalid currency"):
            account_service.create_account(name="Bad", institution="TD", currency="DOLLARS")

    def test_resolve_by_name_and_id(self, account_service, chequing):
        assert account_service.resolve_account("Ops Chequing") == chequing.id
        assert account_service.resolve_account(str(chequing.id)) == chequing.id
        assert account_service.resolve_account(chequing.id) == chequing.id

    def test_resolve_missing(self, account_service):
        with pytest.raises(NotFoundError, match="Account 'Nope' not found"):
            account_service.resolve_account("Nope")
        with pytest.raises(NotFoundError, match="Account ID 99 not found"):
            account_service.resolve_account("99")


class TestCategoryService:
    """Tests for CategoryService."""

    def test_init_defaults_is_idempotent(self, category_service):
        created = category_service.init_defaults()

        assert len(created) == len(DEFAULT_CATEGORIES)
        assert category_service.init_defaults() == []

    def test_transfer_category_seeded(self, category_service, seeded_categories):
        transfer = category_service.get_by_code("bank_transfer")

        assert transfer is not None
        assert transfer.kind == CategoryKind.TRANSFER


class TestLedgerService:
    """Tests for statements and transactions."""

    @pytest.fixture
    def statement_id(self, ledger_service, chequing):
        return ledger_service.add_statement(
            account_id=chequing.id,
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 31),
            opening_balance=Decimal("1000.00"),
            closing_balance=Decimal("1150.00"),
        )

    def test_add_statement(self, ledger_service, chequing, statement_id):
        statement = ledger_service.get_statement(statement_id)

        assert statement.account_id == chequing.id
        assert statement.opening_balance == Decimal("1000.00")
        assert ledger_service.list_statements(account_id=chequing.id) == [statement]

    def test_inverted_period(self, ledger_service, chequing):
        with pytest.raises(ValidationError, match="before it starts"):
            ledger_service.add_statement(
                account_id=chequing.id,
                period_start=date(2024, 3, 31),
                period_end=date(2024, 3, 1),
                opening_balance=Decimal("0"),
                closing_balance=Decimal("0"),
            )

    def test_statement_for_missing_account(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.add_statement(
                account_id=99,
                period_start=date(2024, 3, 1),
                period_end=date(2024, 3, 31),
                opening_balance=Decimal("0"),
                closing_balance=Decimal("0"),
            )

    def test_transaction_takes_statement_account(self, ledger_service, chequing, statement_id):
        txn_id = ledger_service.add_transaction(
            date=date(2024, 3, 2), amount=Decimal("200.00"), direction=Direction.CREDIT,
            statement_id=statement_id,
        )
        txn = ledger_service.get_transaction(txn_id)

        assert txn.account_id == chequing.id
        assert txn.statement_id == statement_id
        assert txn.currency == "CAD"
        assert txn.needs_review is True

    def test_transaction_outside_period(self, ledger_service, statement_id):
        with pytest.raises(ValidationError, match="outside statement period"):
            ledger_service.add_transaction(
                date=date(2024, 4, 2), amount=Decimal("1.00"), direction=Direction.CREDIT,
                statement_id=statement_id,
            )

    def test_transaction_account_mismatch(self, ledger_service, savings, statement_id):
        with pytest.raises(ValidationError, match="belongs to account"):
            ledger_service.add_transaction(
                date=date(2024, 3, 2), amount=Decimal("1.00"), direction=Direction.CREDIT,
                account_id=savings.id, statement_id=statement_id,
            )

    def test_transaction_needs_account(self, ledger_service):
        with pytest.raises(ValidationError):
            ledger_service.add_transaction(
                date=date(2024, 3, 2), amount=Decimal("1.00"), direction=Direction.CREDIT
            )

    def test_list_transactions_in_date_order(self, ledger_service, chequing):
        later = ledger_service.add_transaction(
            date=date(2024, 3, 9), amount=Decimal("1.00"), direction=Direction.CREDIT, account_id=chequing.id
        )
        earlier = ledger_service.add_transaction(
            date=date(2024, 3, 1), amount=Decimal("2.00"), direction=Direction.DEBIT, account_id=chequing.id
        )

        ids = [t.id for t in ledger_service.list_transactions()]
        assert ids == [earlier, later]

        page = ledger_service.list_transactions(TransactionQuery(limit=1, offset=1))
        assert [t.id for t in page] == [later]

    def test_categorize_and_clear(self, ledger_service, chequing, seeded_categories):
        txn_id = ledger_service.add_transaction(
            date=date(2024, 3, 2), amount=Decimal("12.00"), direction=Direction.DEBIT, account_id=chequing.id
        )

        ledger_service.categorize(txn_id, "bank_fees")
        txn = ledger_service.get_transaction(txn_id)
        assert txn.category_id == seeded_categories["bank_fees"].id
        assert txn.needs_review is False
        assert ledger_service.list_transactions(TransactionQuery(uncategorized=True)) == []

        ledger_service.categorize(txn_id, None)
        txn = ledger_service.get_transaction(txn_id)
        assert txn.category_id is None
        assert txn.needs_review is True

    def test_categorize_unknown_code(self, ledger_service, chequing):
        txn_id = ledger_service.add_transaction(
            date=date(2024, 3, 2), amount=Decimal("12.00"), direction=Direction.DEBIT, account_id=chequing.id
        )
        with pytest.raises(NotFoundError, match="nope"):
            ledger_service.categorize(txn_id, "nope")

    def test_categorize_linked_transaction(
        self, temp_db, ledger_service, seeded_categories, chequing, savings, make_candidate
    ):
        from ledgerlink.domain.transfer_review import TransferReviewService

        candidate = make_candidate(chequing, savings)
        TransferReviewService(temp_db).confirm(candidate.id)

        with pytest.raises(ConflictError, match="linked"):
            ledger_service.categorize(candidate.from_transaction_id, "bank_fees")

    def test_exchange_rate_must_be_positive(self, ledger_service):
        with pytest.raises(ValidationError):
            ledger_service.set_exchange_rate(date(2024, 3, 1), "USD", "CAD", Decimal("0"))

    def test_exchange_rate_upsert(self, temp_db, ledger_service):
        ledger_service.set_exchange_rate(date(2024, 3, 1), "usd", "cad", Decimal("1.30"))
        ledger_service.set_exchange_rate(date(2024, 3, 1), "USD", "CAD", Decimal("1.35"), source="boc")

        rate = temp_db.get_exchange_rate(date(2024, 3, 1), "USD", "CAD")
        assert rate.rate == Decimal("1.35")
        assert rate.source == "boc"
