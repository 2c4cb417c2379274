"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# A monetary token as printed on statements: optional currency symbol,
# thousands separators, exactly two decimals, and an optional outflow sign
# (trailing minus or enclosing parentheses).
AMOUNT_TOKEN_PATTERN = re.compile(
    r"(?<![\w.])\(?(?:[$€£¥]|(?<![A-Za-z])R)?\s?"
    r"(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\)?-?(?![\w.])"
)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45" / "R123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)
    - "123.45-" (negative with trailing minus, as printed by banks)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    is_negative = False

    # Handle trailing minus (statement debit notation)
    if amount_str.endswith("-"):
        is_negative = True
        amount_str = amount_str[:-1].strip()

    # Handle parentheses notation (negative)
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥R]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Remove whitespace again
    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if is_negative:
        amount = -amount
    return amount


def find_amount_tokens(text: str) -> list[str]:
    """Return every monetary token in a line, in order of appearance."""
    return [match.group(0).strip() for match in AMOUNT_TOKEN_PATTERN.finditer(text)]


def is_outflow_token(token: str) -> bool:
    """Return True if the token carries a debit/outflow sign."""
    token = token.strip()
    return token.endswith("-") or (token.startswith("(") and token.endswith(")"))
