"""Category domain service."""

from typing import Optional
from ledgerlink.database.base import Database
from ledgerlink.domain.entities import Category, CategoryKind
from ledgerlink.domain.linking import TRANSFER_CATEGORY_CODE

# (code, name, kind)
DEFAULT_CATEGORIES = [
    (TRANSFER_CATEGORY_CODE, "Internal Transfer", CategoryKind.TRANSFER),
    ("bank_fees", "Bank Fees", CategoryKind.EXPENSE),
    ("interest_expense", "Interest Expense", CategoryKind.EXPENSE),
    ("office_supplies", "Office Supplies", CategoryKind.EXPENSE),
    ("professional_fees", "Professional Fees", CategoryKind.EXPENSE),
    ("rent", "Rent", CategoryKind.EXPENSE),
    ("utilities", "Utilities", CategoryKind.EXPENSE),
    ("meals", "Meals & Entertainment", CategoryKind.EXPENSE),
    ("travel", "Travel", CategoryKind.EXPENSE),
    ("sales", "Sales", CategoryKind.INCOME),
    ("interest_income", "Interest Income", CategoryKind.INCOME),
]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def init_defaults(self) -> list[str]:
        """Create any missing default categories.

        Returns:
            Codes of the categories that were created
        """
        created = []
        for code, name, kind in DEFAULT_CATEGORIES:
            if self.db.get_category_by_code(code) is None:
                self.db.create_category(name=name, code=code, kind=kind)
                created.append(code)
        return created

    def get_by_code(self, code: str) -> Optional[Category]:
        return self.db.get_category_by_code(code)

    def list_categories(self) -> list[Category]:
        return self.db.list_categories()
