"""Daily cash-reconciliation aggregation over ledger transactions."""
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from huastex.core.constants import NON_DRAWER_PAYMENT_TYPES, TransactionType
from huastex.core.sale_totals import get_field, parse_date
from huastex.utils.number_format import to_decimal

ZERO = Decimal('0')
ALL_LOCATIONS = 'all'


def _matches_location(transaction, location: Optional[str]) -> bool:
    if not location or location == ALL_LOCATIONS:
        return True
    return str(get_field(transaction, 'location', default='')).lower() == location.lower()


def summarize_day(transactions: Iterable[Any], day: date, location: Optional[str] = None) -> Dict[str, Any]:
    """
    Cash drawer totals for one day and branch.

    Transactions paid by credit card, transfer or online are listed but do
    not count toward total_in / total_out, since that money never goes
    through the drawer.

    Returns:
        Dict with keys:
        - transactions: day's transactions for the location, in input order
        - total_in / total_out / net: drawer totals (Decimal)
        - by_payment_type: {payment_type: {'income', 'outcome', 'count'}}
        - excluded_total: sum of income left out of the drawer
    """
    day_transactions = [
        t for t in transactions
        if parse_date(get_field(t, 'transaction_date')) == day and _matches_location(t, location)
    ]

    total_in = ZERO
    total_out = ZERO
    excluded_total = ZERO
    buckets = OrderedDict()

    for t in day_transactions:
        value = to_decimal(get_field(t, 'value'), ZERO)
        kind = get_field(t, 'transaction_type', default=TransactionType.INCOME.value)
        kind = kind.value if isinstance(kind, TransactionType) else str(kind)
        payment_type = str(get_field(t, 'payment_type', default='') or '')

        bucket = buckets.setdefault(payment_type, {'income': ZERO, 'outcome': ZERO, 'count': 0})
        bucket['count'] += 1
        if kind == TransactionType.OUTCOME.value:
            bucket['outcome'] += value
        else:
            bucket['income'] += value

        if payment_type in NON_DRAWER_PAYMENT_TYPES:
            if kind != TransactionType.OUTCOME.value:
                excluded_total += value
            continue

        if kind == TransactionType.OUTCOME.value:
            total_out += value
        elif kind == TransactionType.INCOME.value:
            total_in += value

    return {
        'day': day,
        'location': location or ALL_LOCATIONS,
        'transactions': day_transactions,
        'total_in': total_in,
        'total_out': total_out,
        'net': total_in - total_out,
        'by_payment_type': dict(buckets),
        'excluded_total': excluded_total,
    }


def reconcile(summary: Dict[str, Any], counted_amount) -> Dict[str, Optional[Decimal]]:
    """Compare the counted cash against the expected drawer net. difference > 0 means surplus."""
    counted = to_decimal(counted_amount)
    if counted is None:
        return {'counted_amount': None, 'difference': None}
    return {'counted_amount': counted, 'difference': counted - summary['net']}
