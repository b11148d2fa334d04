"""Inventory service - products and their branch price tables."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from huastex.core.branch_prices import derive, flatten, price_column
from huastex.core.constants import Branch, PRICE_KINDS
from huastex.exceptions import NotFoundError, ValidationError
from huastex.models import InventoryItem, Formula
from huastex.services.formula_service import get_formula_settings
from huastex.utils.number_format import to_decimal, MAX_AMOUNT

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    'product', 'model', 'serial_number', 'category', 'internal_number', 'description',
    'supplier', 'supplier_bill', 'final_customer_bill', 'devolution_bill', 'bank_deposit', 'comments',
)
QUANTITY_FIELDS = ('original_quantity', 'all_branches_quantity')
PRICE_COLUMNS = tuple(price_column(branch, kind) for branch in Branch for kind in PRICE_KINDS)

# Column names used by older clients (cerro_azul_msiPrice, ...)
LEGACY_PRICE_KEYS = {
    f'{branch.column_prefix}_{kind}Price': price_column(branch, kind)
    for branch in Branch for kind in ('msi', 'credit')
}


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(data)
    for legacy, column in LEGACY_PRICE_KEYS.items():
        if legacy in normalized and column not in normalized:
            normalized[column] = normalized.pop(legacy)
    return normalized


def _parse_int(value, field: str) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f'El campo {field} debe ser un número entero', field=field)


def _parse_date(value, field: str):
    if value is None or str(value).strip() == '':
        return None
    try:
        return datetime.strptime(str(value).strip().split('T')[0], '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'El campo {field} debe tener formato YYYY-MM-DD', field=field)


def _resolve_formula(session: Session, formula_id) -> Optional[Formula]:
    if formula_id in (None, ''):
        return None
    try:
        formula = session.get(Formula, int(formula_id))
    except (TypeError, ValueError):
        raise ValidationError(f'ID de fórmula inválido: {formula_id}', field='formula_id')
    if not formula:
        raise NotFoundError(f'Fórmula con ID {formula_id} no encontrada')
    return formula


def _apply_fields(session: Session, item: InventoryItem, data: Dict[str, Any]) -> None:
    for field in TEXT_FIELDS:
        if field in data:
            value = data[field]
            item_value = value.strip() if isinstance(value, str) else value
            setattr(item, field, item_value or None)

    if not item.product:
        raise ValidationError('El nombre del producto es requerido', field='product')

    for field in QUANTITY_FIELDS:
        if field in data:
            setattr(item, field, _parse_int(data[field], field))

    if 'headquarters_arrival_date' in data:
        item.headquarters_arrival_date = _parse_date(data['headquarters_arrival_date'], 'headquarters_arrival_date')

    if 'price_cost' in data:
        price_cost = to_decimal(data['price_cost'])
        if data['price_cost'] not in (None, '') and price_cost is None:
            raise ValidationError('El costo debe ser numérico', field='price_cost')
        if price_cost is not None and price_cost < 0:
            raise ValidationError('El costo no puede ser negativo', field='price_cost')
        if price_cost is not None and price_cost > MAX_AMOUNT:
            raise ValidationError('El costo excede el máximo permitido', field='price_cost')
        item.price_cost = price_cost

    if 'formula_id' in data:
        formula = _resolve_formula(session, data['formula_id'])
        item.formula = formula
        item.formula_id = formula.id if formula else None

    if 'manual_pricing' in data:
        item.manual_pricing = bool(data['manual_pricing'])


def apply_pricing(item: InventoryItem, data: Optional[Dict[str, Any]] = None) -> bool:
    """
    Refresh the branch prices of `item`.

    Automatic mode re-derives all 12 prices from price_cost and the formula,
    discarding any hand-typed price. Manual mode stores the prices given in
    `data` as they are. Returns True when prices changed.
    """
    if item.manual_pricing:
        changed = False
        for column in PRICE_COLUMNS:
            if data and column in data:
                setattr(item, column, to_decimal(data[column]))
                changed = True
        return changed

    percent_mode, strict = get_formula_settings()
    table = derive(item.price_cost, item.formula, percent_mode=percent_mode, strict=strict)
    if table is None:
        # No usable cost: keep the prices the item already has
        return False

    for column, value in flatten(table).items():
        setattr(item, column, value)
    return True


def list_items(session: Session, q: Optional[str] = None) -> List[InventoryItem]:
    query = session.query(InventoryItem)
    if q:
        pattern = f'%{q.strip()}%'
        query = query.filter(or_(
            InventoryItem.product.ilike(pattern),
            InventoryItem.serial_number.ilike(pattern),
            InventoryItem.model.ilike(pattern),
            InventoryItem.internal_number.ilike(pattern),
        ))
    return query.order_by(InventoryItem.product.asc()).all()


def get_item(session: Session, item_id: int) -> InventoryItem:
    item = session.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError(f'Producto de inventario con ID {item_id} no encontrado')
    return item


def save_item(session: Session, data: Dict[str, Any], item_id: Optional[int] = None) -> InventoryItem:
    """Create or update an inventory item and refresh its price table."""
    data = _normalize_keys(data)
    try:
        if item_id is None:
            item = InventoryItem(manual_pricing=False)
            session.add(item)
        else:
            item = get_item(session, item_id)

        _apply_fields(session, item, data)
        apply_pricing(item, data)

        session.commit()
        logger.info(f"Inventory item saved: id={item.id}, manual_pricing={item.manual_pricing}")
        return item

    except Exception:
        session.rollback()
        raise


def delete_item(session: Session, item_id: int) -> None:
    item = get_item(session, item_id)
    try:
        session.delete(item)
        session.commit()
        logger.info(f"Inventory item deleted: id={item_id}")
    except Exception:
        session.rollback()
        raise


def preview_prices(session: Session, price_cost, formula_id=None):
    """Price table the editor shows before saving; None when the cost is not usable."""
    formula = _resolve_formula(session, formula_id)
    percent_mode, strict = get_formula_settings()
    return derive(price_cost, formula, percent_mode=percent_mode, strict=strict)


def recompute_all_prices(session: Session, commit: bool = True) -> int:
    """
    Re-derive prices of every item in automatic mode (after a formula or factor change).
    With commit=False the changes are rolled back and only the count is returned.
    """
    items = session.query(InventoryItem).filter(InventoryItem.manual_pricing.is_(False)).all()
    updated = 0
    try:
        for item in items:
            if apply_pricing(item):
                updated += 1
        if commit:
            session.commit()
        else:
            session.rollback()
    except Exception:
        session.rollback()
        raise
    logger.info(f"Recomputed prices for {updated} of {len(items)} inventory items (commit={commit})")
    return updated
