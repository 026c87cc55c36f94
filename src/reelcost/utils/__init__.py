"""Utility functions for reelcost."""

from reelcost.utils.date_parser import parse_date
from reelcost.utils.amount_parser import parse_amount, format_amount
from reelcost.utils.normalize import normalize_ico, normalize_variable_symbol

__all__ = [
    "parse_date",
    "parse_amount",
    "format_amount",
    "normalize_ico",
    "normalize_variable_symbol",
]
