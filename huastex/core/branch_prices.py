"""
Branch price derivation.

One cost price plus an optional formula expands into the full table of
4 branches x {cash, msi, credit}. Every figure is rounded up to the next
multiple of ten.
"""
import logging
from decimal import Decimal, ROUND_CEILING
from typing import Dict, Optional

from huastex.core.constants import (
    Branch, BRANCH_PREMIUMS, MSI_FACTOR, CREDIT_FACTOR, PRICE_KINDS, PaymentModality
)
from huastex.core.formula import apply_formula, PERCENT_LITERAL
from huastex.utils.number_format import to_decimal, MAX_AMOUNT

logger = logging.getLogger(__name__)

TEN = Decimal('10')

BranchPriceTable = Dict[str, Dict[str, Decimal]]


def round_up_to_ten(value) -> Decimal:
    """ceil(value / 10) * 10, e.g. 173 -> 180, 180 -> 180, 180.01 -> 190."""
    amount = to_decimal(value)
    return (amount / TEN).to_integral_value(rounding=ROUND_CEILING) * TEN


def _formula_expression(formula) -> Optional[str]:
    """Accept a Formula model, a dict, a bare expression string or None."""
    if formula is None:
        return None
    if isinstance(formula, str):
        return formula
    if isinstance(formula, dict):
        return formula.get('operators')
    return getattr(formula, 'operators', None)


def derive(base_price, formula=None, percent_mode: str = PERCENT_LITERAL,
           strict: bool = False) -> Optional[BranchPriceTable]:
    """
    Build the per-branch price table for a cost price.

    Returns None when `base_price` is missing, zero, not a number or too
    large, or when a derived price does not fit a price column. Callers must
    then keep whatever prices they already have.

    >>> derive(173)['aquismon']
    {'cash': Decimal('190'), 'msi': Decimal('210'), 'credit': Decimal('290')}
    """
    base = to_decimal(base_price)
    if base is None or base == 0 or abs(base) > MAX_AMOUNT:
        logger.debug(f"Skipping price derivation for base {base_price!r}")
        return None

    adjusted = apply_formula(base, _formula_expression(formula), percent_mode=percent_mode, strict=strict)
    reference = round_up_to_ten(adjusted)

    table = {}
    for branch in Branch:
        cash = round_up_to_ten(reference * BRANCH_PREMIUMS[branch])
        table[branch.value] = {
            'cash': cash,
            'msi': round_up_to_ten(cash * MSI_FACTOR),
            'credit': round_up_to_ten(cash * CREDIT_FACTOR),
        }

    largest = max(price for prices in table.values() for price in prices.values())
    if largest > MAX_AMOUNT:
        logger.warning(f"Derived price {largest} for base {base_price!r} does not fit a price column")
        return None
    return table


def price_column(branch, kind: str) -> str:
    """Inventory column holding `kind` price for `branch` (cerro_azul_msi_price, ...)."""
    prefix = Branch.parse(branch).column_prefix
    if kind == 'cash':
        return f'{prefix}_price'
    if kind not in PRICE_KINDS:
        raise ValueError(f'Tipo de precio inválido: {kind}')
    return f'{prefix}_{kind}_price'


def flatten(table: BranchPriceTable) -> Dict[str, Decimal]:
    """Map a price table onto the 12 inventory column names."""
    columns = {}
    for branch_value, prices in table.items():
        for kind in PRICE_KINDS:
            columns[price_column(branch_value, kind)] = prices[kind]
    return columns


def unflatten(columns) -> BranchPriceTable:
    """Read a price table back from a dict or an object with the inventory columns."""
    getter = columns.get if isinstance(columns, dict) else (lambda name: getattr(columns, name, None))
    table = {}
    for branch in Branch:
        table[branch.value] = {kind: to_decimal(getter(price_column(branch, kind))) for kind in PRICE_KINDS}
    return table


def price_for(table: BranchPriceTable, branch, modality) -> Decimal:
    """
    Unit price of a product for a sale at `branch` under `modality`.
    MSI uses the msi column, Crédito the credit column and everything else
    (Contado, Apartado) the cash price. Missing prices count as 0.
    """
    branch = Branch.parse(branch)
    kind = PaymentModality.parse(modality).price_kind
    price = (table.get(branch.value) or {}).get(kind)
    return to_decimal(price, Decimal('0'))
