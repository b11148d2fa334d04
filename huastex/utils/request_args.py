"""Helpers to read JSON bodies and query arguments."""
from datetime import date
from typing import Any, Dict, Optional

from flask import request

from huastex.core.sale_totals import parse_date
from huastex.exceptions import ValidationError


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON')
    return data


def date_arg(value: Optional[str], field: str = 'date', default: Optional[date] = None) -> Optional[date]:
    """Parse a YYYY-MM-DD argument; empty returns `default`."""
    if not value:
        return default
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f'{field} debe tener formato YYYY-MM-DD', field=field)
    return parsed


def int_arg(value: Optional[str], field: str) -> Optional[int]:
    if value in (None, ''):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'{field} debe ser un número entero', field=field)


def bool_arg(value: Optional[str]) -> bool:
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'si', 'sí', 'on')
