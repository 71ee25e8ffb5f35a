"""Amount parsing and minor-unit conversion utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "€", "GBP": "£"}


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal at cent precision.

    Handles various formats:
    - "123.45"
    - "R$ 123,45" (decimal comma)
    - "1.234,56" and "1,234.56" (thousands separators)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"R\$|[$€£]", "", amount_str).strip()

    # Whichever separator comes last is the decimal separator
    if "," in amount_str and amount_str.rfind(",") > amount_str.rfind("."):
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = quantize_amount(Decimal(amount_str))
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    return -amount if is_negative else amount


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to cent precision."""
    if not amount.is_finite():
        raise InvalidOperation(f"non-finite amount {amount}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a Decimal amount to integer cents."""
    return int(quantize_amount(amount) * 100)


def from_minor_units(minor: int) -> Decimal:
    """Convert integer cents back to a Decimal amount.

    Raises:
        TypeError: If minor is not an integer (floats are never truncated)
    """
    if isinstance(minor, bool) or not isinstance(minor, int):
        raise TypeError(f"Minor units must be an integer, got {minor!r}")
    return (Decimal(minor) / 100).quantize(CENT)


def format_money(amount: Decimal, currency: str = "BRL") -> str:
    """Format an amount for display, e.g. 'R$ 1,234.56'."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {abs(amount):,.2f}"
