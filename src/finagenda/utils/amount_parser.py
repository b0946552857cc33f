"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R$ 123.45"
    - "$1,234.56"
    - "1.234,56" (comma as decimal separator)
    - "123,45"

    Amounts in the ledger are always positive; whether they add or subtract
    is decided by the entry kind, so a sign is rejected.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount, rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    original = amount_str
    amount_str = amount_str.strip()

    # Remove currency symbols
    amount_str = re.sub(r"R\$|[$€£¥]", "", amount_str).strip()
    if amount_str.startswith("-"):
        raise ValueError(f"Amount '{original}' cannot be negative")

    # A trailing ",dd" is a decimal comma; everything else separates thousands
    if re.search(r",\d{1,2}$", amount_str):
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        return Decimal(amount_str).quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{original}': {e}")
