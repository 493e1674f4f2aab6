"""Account domain service."""

from typing import Optional
from ledgerlink.database.base import Database
from ledgerlink.domain.entities import BalancePolarity, BankAccount
from ledgerlink.domain.errors import ConflictError, NotFoundError, ValidationError


class AccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        institution: str,
        currency: str = "CAD",
        account_type: Optional[str] = None,
        company: Optional[str] = None,
        balance_type: Optional[BalancePolarity] = None,
    ) -> int:
        """Create a new bank account.

        Args:
            name: Display name, unique across accounts
            institution: Bank or card issuer
            currency: ISO 4217 currency code
            account_type: Free-form type such as "Chequing" or "Credit Card"
            company: Owning company or client, used to spot cross-company transfers
            balance_type: Explicit polarity; inferred from account_type when None

        Returns:
            Account ID

        Raises:
            ValidationError: If the currency code is malformed
            ConflictError: If account name already exists
        """
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code '{currency}'")

        if self.db.get_account_by_name(name) is not None:
            raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            name=name,
            institution=institution,
            currency=currency,
            account_type=account_type,
            company=company,
            balance_type=balance_type,
        )

    def get_account(self, account_id: int) -> Optional[BankAccount]:
        """Get account by ID."""
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[BankAccount]:
        """List all accounts."""
        return self.db.list_accounts()

    def resolve_account(self, account: str | int) -> int:
        """Resolve an account name or ID to an account ID.

        Args:
            account: Account name, or ID as int or numeric string

        Returns:
            Account ID

        Raises:
            NotFoundError: If no account matches
        """
        if isinstance(account, int) or str(account).isdigit():
            account_id = int(account)
            if self.db.get_account(account_id) is None:
                raise NotFoundError(f"Account ID {account_id} not found")
            return account_id

        found = self.db.get_account_by_name(account)
        if found is None:
            raise NotFoundError(f"Account '{account}' not found")
        return found.id
