"""Ledger (transaction) records produced by sales and abonos."""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from huastex.core.constants import PaymentModality, PaymentType, TransactionType
from huastex.core.sale_totals import apply_payment, get_field, parse_date
from huastex.utils.number_format import to_decimal

ZERO = Decimal('0')
NO_PRODUCT = '(sin producto)'


def product_list(sale) -> str:
    """Comma-separated product names of a sale, or '(sin producto)'."""
    lines = get_field(sale, 'lines', 'products', default=[]) or []
    names = [get_field(line, 'producto', 'title', 'name', default='(sin nombre)') for line in lines]
    return ', '.join(names) if names else NO_PRODUCT


def _resolve_modality(sale):
    """Return (modality or None, is_card) for a sale dict/model."""
    try:
        modality = PaymentModality.parse(get_field(sale, 'forma_de_pago', 'formaDePago', default=''))
    except ValueError:
        modality = None
    is_card = modality is PaymentModality.TARJETA or bool(get_field(sale, 'card_payment', default=False))
    return modality, is_card


def income_payment_type(sale) -> PaymentType:
    """
    Ledger tag for the income recorded when a sale is created:
    Contado -> sale, financed modalities -> down_payment, card -> credit_card,
    anything else -> deposit. A financed sale keeps down_payment even when
    its enganche was paid by card.
    """
    modality, is_card = _resolve_modality(sale)
    if modality is PaymentModality.CONTADO:
        return PaymentType.SALE
    if modality is not None and modality.is_financed:
        return PaymentType.DOWN_PAYMENT
    if is_card:
        return PaymentType.CREDIT_CARD
    return PaymentType.DEPOSIT


def build_income_record(sale, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Normalized income transaction for a newly created (or edited) sale.

    value is the promo price for cash and card sales and the enganche for financed
    ones; saldo / por_pagar mirror the normal / promo balances (zero for
    cash). `today` is only used when the sale has no fecha.
    """
    modality, is_card = _resolve_modality(sale)
    is_financed = modality is not None and modality.is_financed
    is_cash = modality is PaymentModality.CONTADO or (is_card and not is_financed)

    promo_price = to_decimal(get_field(sale, 'precio_promocion', 'promo_price'), ZERO)
    enganche = to_decimal(get_field(sale, 'enganche', 'down_payment'), ZERO)

    if is_cash:
        value, saldo, por_pagar = promo_price, ZERO, ZERO
    else:
        value = enganche if is_financed else ZERO
        saldo = to_decimal(get_field(sale, 'saldo_precio_normal', 'balance_normal'), ZERO)
        por_pagar = to_decimal(get_field(sale, 'saldo_precio_promocion', 'balance_promo'), ZERO)

    return {
        'transaction_type': TransactionType.INCOME.value,
        'name': get_field(sale, 'nombre', 'name', default=''),
        'product': product_list(sale),
        'value': value,
        'saldo': saldo,
        'por_pagar': por_pagar,
        'transaction_date': parse_date(get_field(sale, 'fecha')) or today,
        'payment_type': income_payment_type(sale).value,
        'location': get_field(sale, 'sucursal', 'location', default=''),
        'sale_id': get_field(sale, 'id'),
    }


def build_payment_record(sale, payment) -> Dict[str, Any]:
    """
    Income transaction for an abono. saldo / por_pagar are the balances
    after the payment, the same figures the sale must be updated to.
    """
    amount = to_decimal(get_field(payment, 'amount', 'cantidad'), ZERO)
    balances = apply_payment(
        get_field(sale, 'saldo_precio_promocion', 'balance_promo'),
        get_field(sale, 'saldo_precio_normal', 'balance_normal'),
        amount,
    )
    method = get_field(payment, 'payment_type', default=PaymentType.DEPOSIT.value)
    if isinstance(method, PaymentType):
        method = method.value

    return {
        'transaction_type': TransactionType.INCOME.value,
        'name': get_field(sale, 'nombre', 'name', default=''),
        'product': product_list(sale),
        'value': amount,
        'saldo': balances['balance_normal'],
        'por_pagar': balances['balance_promo'],
        'transaction_date': parse_date(get_field(payment, 'fecha', 'date')),
        'payment_type': str(method).lower(),
        'location': get_field(sale, 'sucursal', 'location', default=''),
        'sale_id': get_field(sale, 'id'),
    }
