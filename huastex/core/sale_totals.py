"""Sale totals, balances and due date."""
import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from huastex.core.constants import PaymentModality, TermUnit, NORMAL_PRICE_MARKUP
from huastex.utils.number_format import to_decimal

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def get_field(item, *names, default=None):
    """Read the first present attribute/key among `names` from a dict or object."""
    for name in names:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value is not None:
            return value
    return default


def line_total(unit_price, quantity) -> Decimal:
    """total_price of a sale line: unit_price x quantity."""
    return to_decimal(unit_price, ZERO) * to_decimal(quantity, ZERO)


def subtotal(line_items: Iterable[Any]) -> Decimal:
    """Sum of the lines' total_price. Lines without a total use unit_price x quantity."""
    total = ZERO
    for item in line_items or []:
        price = to_decimal(get_field(item, 'total_price', 'totalProductPrice'))
        if price is None:
            price = line_total(get_field(item, 'unit_price', 'unitPrice'), get_field(item, 'quantity', default=1))
        total += price
    return total


def parse_date(value) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).split('T')[0], '%Y-%m-%d').date()
    except ValueError:
        return None


def add_months(start: date, months: int) -> date:
    """Calendar month addition, clamped to the last day of the target month (Jan 31 + 1 -> Feb 28/29)."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_due_date(fecha, term) -> Optional[date]:
    """
    Due date of a sale: fecha + plazo.

    `term` is a dict {'value', 'unit'} with unit days, weeks or months
    (unknown units default to weeks). Missing fecha or term value, or values
    that do not parse, give None.
    """
    start = parse_date(fecha)
    if start is None or not term:
        return None
    raw_value = get_field(term, 'value')
    if raw_value is None or str(raw_value).strip() == '':
        return None
    try:
        value = int(str(raw_value).strip())
    except ValueError:
        return None

    unit = str(get_field(term, 'unit', default=TermUnit.WEEKS.value))
    if unit == TermUnit.DAYS.value:
        return start + timedelta(days=value)
    if unit == TermUnit.MONTHS.value:
        return add_months(start, value)
    return start + timedelta(days=value * 7)


def compute_totals(line_items, discount_percent, payment_modality, down_payment,
                   fecha=None, term=None) -> Dict[str, Any]:
    """
    Derive promo/normal prices, balances and due date for a sale.

    Cash (Contado) and card sales have no normal price and no balances. Financed
    sales carry a 12% normal price over the discounted promo price and owe
    both prices minus the down payment. Negative balances are kept as is.
    Nothing is rounded here.

    Returns:
        Dict with keys: subtotal, promo_price, normal_price, balance_promo,
        balance_normal, due_date
    """
    modality = PaymentModality.parse(payment_modality)
    gross = subtotal(line_items)
    discount = to_decimal(discount_percent, ZERO)
    enganche = to_decimal(down_payment, ZERO)

    promo_price = gross * (1 - discount / HUNDRED)

    if modality.is_financed:
        normal_price = promo_price * NORMAL_PRICE_MARKUP
        balance_promo = promo_price - enganche
        balance_normal = normal_price - enganche
    else:
        normal_price = balance_promo = balance_normal = ZERO

    return {
        'subtotal': gross,
        'promo_price': promo_price,
        'normal_price': normal_price,
        'balance_promo': balance_promo,
        'balance_normal': balance_normal,
        'due_date': compute_due_date(fecha, term),
    }


def apply_payment(balance_promo, balance_normal, amount) -> Dict[str, Decimal]:
    """Balances after an abono of `amount`. Not clamped at zero."""
    paid = to_decimal(amount, ZERO)
    return {
        'balance_promo': to_decimal(balance_promo, ZERO) - paid,
        'balance_normal': to_decimal(balance_normal, ZERO) - paid,
    }


def is_settled(balance_promo) -> bool:
    """A sale is settled once its promo balance reaches zero or below."""
    return to_decimal(balance_promo, ZERO) <= 0
