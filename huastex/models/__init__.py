"""Models package - exports all SQLAlchemy models."""
from huastex.models.formula import Formula
from huastex.models.inventory_item import InventoryItem
from huastex.models.sale import Sale
from huastex.models.sale_line import SaleLine
from huastex.models.payment import Payment
from huastex.models.transaction import Transaction
from huastex.models.daily_accounting import DailyAccounting

__all__ = [
    'Formula', 'InventoryItem',
    'Sale', 'SaleLine', 'Payment',
    'Transaction', 'DailyAccounting',
]
