"""
Pure pricing and sales arithmetic.

Nothing in this package touches the database, Flask or the clock; every
screen, service and endpoint goes through these functions.
"""
from huastex.core.constants import (
    Branch, PaymentModality, PaymentType, TransactionType, TermUnit,
    PAYMENT_TYPE_LABELS, NON_DRAWER_PAYMENT_TYPES,
)
from huastex.core.formula import evaluate, apply_formula, tokenize, PERCENT_LITERAL, PERCENT_RELATIVE
from huastex.core.branch_prices import derive, round_up_to_ten, price_for, flatten, unflatten, price_column
from huastex.core.sale_totals import compute_totals, compute_due_date, apply_payment, add_months, is_settled
from huastex.core.income import build_income_record, build_payment_record, income_payment_type
from huastex.core.report import summarize_day, reconcile

__all__ = [
    'Branch', 'PaymentModality', 'PaymentType', 'TransactionType', 'TermUnit',
    'PAYMENT_TYPE_LABELS', 'NON_DRAWER_PAYMENT_TYPES',
    'evaluate', 'apply_formula', 'tokenize', 'PERCENT_LITERAL', 'PERCENT_RELATIVE',
    'derive', 'round_up_to_ten', 'price_for', 'flatten', 'unflatten', 'price_column',
    'compute_totals', 'compute_due_date', 'apply_payment', 'add_months', 'is_settled',
    'build_income_record', 'build_payment_record', 'income_payment_type',
    'summarize_day', 'reconcile',
]
