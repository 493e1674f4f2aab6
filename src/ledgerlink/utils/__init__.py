"""Utility functions for ledgerlink."""

from ledgerlink.utils.date_parser import parse_date, parse_period
from ledgerlink.utils.amount_parser import parse_amount, split_signed_amount

__all__ = ["parse_date", "parse_period", "parse_amount", "split_signed_amount"]
