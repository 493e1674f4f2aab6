"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from ledgerlink.domain.entities import Direction


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles "1,234.56", "$123.45", "-123.45", "-$123.45" and accounting
    negatives written as "(123.45)".

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip()
    is_negative = cleaned.startswith("(") and cleaned.endswith(")")
    if is_negative:
        cleaned = cleaned[1:-1]

    cleaned = re.sub(r"[$€£¥,\s]", "", cleaned)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")
    return -amount if is_negative else amount


def split_signed_amount(amount: Decimal, direction: Direction | None = None) -> tuple[Decimal, Direction]:
    """Split a signed amount into a magnitude and a direction.

    A negative amount is a debit and a positive one a credit, unless an
    explicit direction is given.
    """
    if direction is None:
        direction = Direction.DEBIT if amount < 0 else Direction.CREDIT
    return abs(amount), direction
