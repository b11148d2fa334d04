"""
Formatting helpers for reports.
Mexican style: comma thousands separator, dot decimals.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union


def money_mx(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format an amount with thousands separators and exactly 2 decimals.

    Examples:
        money_mx(1500) -> "$1,500.00"
        money_mx(-20.5) -> "-$20.50"
        money_mx(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    sign = "-" if num < 0 else ""
    return f"{sign}${abs(num):,.2f}"


def date_mx(value: Union[date, datetime, None]) -> str:
    """DD/MM/YYYY, or "-" when there is no date."""
    if value is None:
        return "-"
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return "-"
    return value.strftime("%d/%m/%Y")
