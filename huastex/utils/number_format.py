"""Number parsing utilities for Mexican peso amounts."""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MX_NUMBER_PATTERN = re.compile(r"^-?\$?\s*(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?$")

CENTS = Decimal('0.01')
# Largest amount a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal('9999999999.99')


def to_decimal(value, default=None):
    """
    Convert a loosely typed amount (int, float, str, Decimal) to Decimal.

    Empty strings and None return `default`. Non-numeric input also returns
    `default`; callers that need to reject it should use parse_mx_decimal.
    Floats go through str() so 1.1 becomes Decimal('1.1').
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        if MX_NUMBER_PATTERN.match(value):
            value = value.replace('$', '').replace(',', '').replace(' ', '')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
    return result if result.is_finite() else default


def parse_mx_decimal(value: str, field: str = 'monto') -> Decimal:
    """
    Parse a monetary string in Mexican format (e.g., 1,234.56 or $1234.5).

    Rules:
    - Thousands separator: comma (,) with proper grouping
    - Decimal separator: dot (.)
    - Optional leading $ sign

    Raises:
        ValueError: if the value is invalid or empty.
    """
    if value is None:
        raise ValueError(f'El campo {field} es requerido')

    cleaned = str(value).strip()
    if not cleaned:
        raise ValueError(f'El campo {field} es requerido')

    if not MX_NUMBER_PATTERN.match(cleaned):
        raise ValueError(f'Formato inválido en {field}. Usá 1,234.56')

    return to_decimal(cleaned)


def quantize_money(value) -> Decimal:
    """Round an amount to cents. Only used at serialization boundaries."""
    amount = to_decimal(value, Decimal('0'))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def money_float(value):
    """JSON representation of an amount: float rounded to cents, None stays None."""
    if value is None:
        return None
    return float(quantize_money(value))
