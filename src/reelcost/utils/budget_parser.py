"""Budget definition parsing.

Budgets arrive as XML exports from production budgeting software. The export
lists categories and accounts separately; accounts point at their category
through ``categoryID``::

    <budget>
      <category><cID>7</cID><cNumber>20</cNumber><cDescription>Camera</cDescription></category>
      <account>
        <categoryID>7</categoryID><aNumber>2001</aNumber>
        <aDescription>Camera rental</aDescription><aTotal>150000</aTotal>
      </account>
    </budget>
"""

import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Optional

from reelcost.domain.entities import ParsedBudgetLine
from reelcost.domain.errors import ParseError
from reelcost.utils.amount_parser import parse_amount


def _child_text(element: ET.Element, tag: str) -> str:
    """Return the stripped text of the first descendant named ``tag``."""
    child = element.find(f".//{tag}")
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_total(total_str: str) -> Decimal:
    if not total_str:
        return Decimal("0")
    try:
        return parse_amount(total_str)
    except ValueError:
        return Decimal("0")


def parse_budget_definition(raw_content: Optional[str]) -> list[ParsedBudgetLine]:
    """Parse a budget definition into budget lines.

    A line is kept only when it has a non-empty account number and its
    category ID resolves to a declared category. Accounts with a missing or
    unreadable total are kept with an amount of zero.

    Args:
        raw_content: XML content of the budget export

    Returns:
        Parsed budget lines in document order

    Raises:
        ParseError: If the content is not XML or declares no valid lines
    """
    if not raw_content or not raw_content.strip():
        raise ParseError("Budget file is empty")

    try:
        root = ET.fromstring(raw_content)
    except ET.ParseError as e:
        raise ParseError(f"Budget file is not valid XML: {e}")

    categories: dict[str, tuple[str, str]] = {}
    for category in root.iter("category"):
        category_id = _child_text(category, "cID")
        if category_id:
            categories[category_id] = (
                _child_text(category, "cNumber"),
                _child_text(category, "cDescription"),
            )

    lines = []
    for account in root.iter("account"):
        account_number = _child_text(account, "aNumber")
        category = categories.get(_child_text(account, "categoryID"))
        if not account_number or category is None:
            continue

        category_number, category_description = category
        lines.append(
            ParsedBudgetLine(
                account_number=account_number,
                account_description=_child_text(account, "aDescription"),
                category_number=category_number,
                category_description=category_description,
                original_amount=_parse_total(_child_text(account, "aTotal")),
            )
        )

    if not lines:
        raise ParseError(
            "Budget file contains no valid budget lines "
            "(each line needs an account number and a known category)"
        )
    return lines
