"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "1,234.56"
    - "1 234,56" (Czech grouping with decimal comma)
    - "1.234,56"
    - "1 234,56 Kč", "€123.45"
    - "-123.45"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"(?i)kč|czk|eur|usd|[$€£¥]", "", amount_str)

    # Remove grouping whitespace, including non-breaking spaces
    amount_str = re.sub(r"\s", "", amount_str)

    if "," in amount_str and "." in amount_str:
        # "1.234,56" groups with dots; "1,234.56" groups with commas
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif "," in amount_str:
        # "1,234,567" is grouping; anything else ("1234,56") is a decimal comma
        parts = amount_str.split(",")
        if parts[0].lstrip("-").isdigit() and all(len(p) == 3 for p in parts[1:]):
            amount_str = "".join(parts)
        else:
            head, _, tail = amount_str.rpartition(",")
            amount_str = head.replace(",", "") + "." + tail

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if is_negative:
        amount = -amount
    return amount


def format_amount(amount: Decimal) -> str:
    """Format an amount the way Czech locale prints numbers.

    Thousands are grouped with spaces and the decimal separator is a comma.
    Up to two decimals are shown and trailing zeros are dropped, so 5000
    prints as "5 000" and 1200.50 as "1 200,5".

    Args:
        amount: Amount to format

    Returns:
        Formatted amount
    """
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    integral, _, fraction = f"{abs(quantized):.2f}".partition(".")
    fraction = fraction.rstrip("0")

    groups = []
    while len(integral) > 3:
        groups.insert(0, integral[-3:])
        integral = integral[:-3]
    groups.insert(0, integral)

    text = sign + " ".join(groups)
    if fraction:
        text += "," + fraction
    return text
