"""Duplicate detection for incoming invoices."""

import logging
from decimal import Decimal
from typing import Optional

from reelcost.database.base import Database
from reelcost.utils.normalize import normalize_ico, normalize_variable_symbol

logger = logging.getLogger(__name__)


def is_duplicate(
    db: Database,
    project_id: Optional[int],
    ico: Optional[str],
    variable_symbol: Optional[str],
    amount: Optional[Decimal],
) -> bool:
    """Check whether an invoice candidate is already recorded in a project.

    The vendor is identified by its normalized IČO; without one nothing is
    ever a duplicate. A variable symbol, when present, decides alone.
    Otherwise the gross amount is compared.

    Args:
        db: Database instance
        project_id: Project the candidate goes into, or None for the inbox
        ico: Vendor IČO as extracted
        variable_symbol: Payment reference as extracted
        amount: Gross amount (with VAT)

    Returns:
        True if a matching invoice exists
    """
    normalized_ico = normalize_ico(ico)
    if not normalized_ico:
        return False

    normalized_vs = normalize_variable_symbol(variable_symbol)
    if normalized_vs:
        found = db.invoice_matches(project_id, normalized_ico, variable_symbol=normalized_vs)
    elif amount is not None:
        found = db.invoice_matches(project_id, normalized_ico, amount_with_vat=amount)
    else:
        return False

    if found:
        logger.debug(
            "Duplicate candidate in project %s: ico=%s vs=%s amount=%s",
            project_id,
            normalized_ico,
            normalized_vs,
            amount,
        )
    return found
