"""Normalization of vendor identifiers extracted from invoices."""

import re
from typing import Optional


def normalize_ico(ico: Optional[str]) -> str:
    """Reduce an IČO to its digits.

    Extraction output often carries labels or spacing ("IČO: 123 45 678").

    Args:
        ico: Raw IČO value or None

    Returns:
        Digit string, empty when nothing usable remains
    """
    if not ico:
        return ""
    return re.sub(r"\D", "", str(ico))


def normalize_variable_symbol(variable_symbol: Optional[str]) -> str:
    """Strip all whitespace from a variable symbol.

    Args:
        variable_symbol: Raw variable symbol or None

    Returns:
        Variable symbol without whitespace, empty when nothing remains
    """
    if not variable_symbol:
        return ""
    return re.sub(r"\s+", "", str(variable_symbol))
