"""
Sales service with transactional logic.
Handles sale registration, edition and the income transaction each sale
records in the ledger.
"""
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from huastex.core.branch_prices import price_for
from huastex.core.constants import Branch, PaymentModality, TermUnit
from huastex.core.income import build_income_record
from huastex.core.sale_totals import compute_totals, compute_due_date, line_total, parse_date
from huastex.exceptions import NotFoundError, ValidationError
from huastex.models import Sale, SaleLine, InventoryItem, Transaction
from huastex.utils.number_format import to_decimal, quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal('0')

TEXT_FIELDS = (
    'nombre', 'email', 'phone', 'calle_y_numero', 'ciudad', 'estado',
    'agente_de_ventas', 'aclaraciones',
)
REQUIRED_FIELDS = ('nombre', 'email', 'phone')
AMOUNT_FIELDS = ('precio_promocion', 'precio_normal', 'saldo_precio_promocion', 'saldo_precio_normal')

# camelCase / lowercase keys sent by the mobile client
LEGACY_KEYS = {
    'calleYNumero': 'calle_y_numero', 'calleynumero': 'calle_y_numero',
    'formaDePago': 'forma_de_pago', 'formadepago': 'forma_de_pago',
    'precioNormal': 'precio_normal', 'precionormal': 'precio_normal',
    'precioPromocion': 'precio_promocion', 'preciopromocion': 'precio_promocion',
    'saldoPrecioPromocion': 'saldo_precio_promocion',
    'saldoPrecioNormal': 'saldo_precio_normal',
    'fechaVencimiento': 'fecha_vencimiento', 'fechavencimiento': 'fecha_vencimiento',
    'agenteDeVentas': 'agente_de_ventas', 'agentedeventas': 'agente_de_ventas',
    'manualPricing': 'manual_pricing',
}


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in (data or {}).items():
        normalized[LEGACY_KEYS.get(key, key)] = value
    return normalized


def _parse_plazo(raw) -> Dict[str, Any]:
    """Plazo arrives as a dict or as a JSON string (older records nest it twice)."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except ValueError:
            raw = {}
    raw = raw or {}
    if isinstance(raw.get('value'), str) and raw['value'].strip().startswith('{'):
        try:
            raw = json.loads(raw['value'])
        except ValueError:
            pass

    value = raw.get('value')
    if value is None or str(value).strip() == '':
        value = None
    else:
        try:
            value = int(str(value).strip())
        except ValueError:
            raise ValidationError('El plazo debe ser un número entero', field='plazo')

    units = [u.value for u in TermUnit]
    unit = raw.get('unit') if raw.get('unit') in units else TermUnit.WEEKS.value
    return {'value': value, 'unit': unit}


def _parse_modality(value) -> PaymentModality:
    try:
        return PaymentModality.parse(value or PaymentModality.CONTADO.value)
    except ValueError as e:
        raise ValidationError(str(e), field='forma_de_pago')


def _parse_branch(value) -> Branch:
    try:
        return Branch.parse(value)
    except ValueError as e:
        raise ValidationError(str(e), field='sucursal')


def _parse_amount(data: Dict[str, Any], field: str) -> Optional[Decimal]:
    raw = data.get(field)
    amount = to_decimal(raw)
    if raw not in (None, '') and amount is None:
        raise ValidationError(f'El campo {field} debe ser numérico', field=field)
    return amount


def build_lines(session: Session, products: List[Dict[str, Any]], branch: Branch,
                modality: PaymentModality, manual_pricing: bool = False) -> List[Dict[str, Any]]:
    """
    Resolve the sale lines. Lines linked to an inventory item take the unit
    price of the branch/modality from its price table unless the sale is in
    manual pricing mode.
    """
    if not products:
        raise ValidationError('La venta debe tener al menos un producto', field='products')

    lines = []
    for index, product in enumerate(products):
        quantity = product.get('quantity')
        try:
            quantity = int(quantity) if quantity not in (None, '') else 1
        except (TypeError, ValueError):
            raise ValidationError(f'Cantidad inválida en el producto #{index + 1}', field='quantity')
        if quantity < 1:
            raise ValidationError(f'La cantidad debe ser mayor a 0 en el producto #{index + 1}', field='quantity')

        inventory_id = product.get('inventory_id')
        item = None
        if inventory_id not in (None, ''):
            item = session.get(InventoryItem, int(inventory_id))
            if not item:
                raise NotFoundError(f'Producto de inventario con ID {inventory_id} no encontrado')

        if item is not None and not manual_pricing:
            unit_price = price_for(item.price_table, branch, modality)
        else:
            unit_price = to_decimal(product.get('unit_price', product.get('unitPrice')), ZERO)

        producto = (product.get('producto') or product.get('title') or (item.product if item else '') or '').strip()
        if not producto:
            raise ValidationError(f'El producto #{index + 1} no tiene nombre', field='producto')

        lines.append({
            'producto': producto,
            'inventory_id': item.id if item else None,
            'serial_number': product.get('serial_number') or (item.serial_number if item else None),
            'quantity': quantity,
            'unit_price': unit_price,
            'total_price': line_total(unit_price, quantity),
        })
    return lines


def calculate_amounts(data: Dict[str, Any], lines: List[Dict[str, Any]], modality: PaymentModality,
                      manual_pricing: bool = False) -> Dict[str, Any]:
    """
    Sale amounts: derived by the core in automatic mode, taken verbatim from
    the request in manual mode. The due date is always derived when fecha and
    plazo allow it.
    """
    plazo = _parse_plazo(data.get('plazo'))
    due_date = compute_due_date(data.get('fecha'), plazo) or parse_date(data.get('fecha_vencimiento'))

    if manual_pricing:
        amounts = {field: _parse_amount(data, field) or ZERO for field in AMOUNT_FIELDS}
        return {**amounts, 'due_date': due_date, 'plazo': plazo}

    totals = compute_totals(
        lines,
        discount_percent=_parse_amount(data, 'discount'),
        payment_modality=modality,
        down_payment=_parse_amount(data, 'enganche'),
        fecha=data.get('fecha'),
        term=plazo,
    )
    return {
        'precio_promocion': totals['promo_price'],
        'precio_normal': totals['normal_price'],
        'saldo_precio_promocion': totals['balance_promo'],
        'saldo_precio_normal': totals['balance_normal'],
        'due_date': totals['due_date'] or due_date,
        'plazo': plazo,
    }


def _assign_sale(sale: Sale, data: Dict[str, Any], modality: PaymentModality, branch: Branch,
                 amounts: Dict[str, Any], manual_pricing: bool) -> None:
    for field in TEXT_FIELDS:
        if field in data:
            value = data[field]
            setattr(sale, field, value.strip() if isinstance(value, str) else value)

    missing = [field for field in REQUIRED_FIELDS if not getattr(sale, field)]
    if missing:
        raise ValidationError('Por favor completa los campos requeridos', field=missing[0])

    if 'fecha' in data:
        fecha = parse_date(data.get('fecha'))
        if data.get('fecha') and fecha is None:
            raise ValidationError('La fecha debe tener formato YYYY-MM-DD', field='fecha')
        sale.fecha = fecha

    sale.forma_de_pago = modality.value
    sale.sucursal = branch.value
    sale.card_payment = (modality is PaymentModality.TARJETA
                         or bool(data.get('card_payment', sale.card_payment or False)))
    sale.manual_pricing = manual_pricing
    sale.discount = _parse_amount(data, 'discount') or ZERO
    sale.enganche = _parse_amount(data, 'enganche') or ZERO

    sale.precio_promocion = quantize_money(amounts['precio_promocion'])
    sale.precio_normal = quantize_money(amounts['precio_normal'])
    sale.saldo_precio_promocion = quantize_money(amounts['saldo_precio_promocion'])
    sale.saldo_precio_normal = quantize_money(amounts['saldo_precio_normal'])

    sale.plazo_value = amounts['plazo']['value']
    sale.plazo_unit = amounts['plazo']['unit']
    sale.fecha_vencimiento = amounts['due_date']


def _replace_lines(sale: Sale, lines: List[Dict[str, Any]]) -> None:
    sale.lines.clear()
    for line in lines:
        sale.lines.append(SaleLine(
            producto=line['producto'],
            inventory_id=line['inventory_id'],
            serial_number=line['serial_number'],
            quantity=line['quantity'],
            unit_price=quantize_money(line['unit_price']),
            total_price=quantize_money(line['total_price']),
        ))


def ledger_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    """Transaction column values for an income record, amounts rounded to cents."""
    fields = dict(record)
    for key in ('value', 'saldo', 'por_pagar'):
        fields[key] = quantize_money(fields[key])
    return fields


def _sale_request(sale: Optional[Sale], data: Dict[str, Any]):
    """Resolve modality, branch and pricing mode of a create/update request."""
    modality = _parse_modality(data.get('forma_de_pago', sale.forma_de_pago if sale else None))
    branch = _parse_branch(data.get('sucursal', sale.sucursal if sale else None))
    manual_pricing = bool(data.get('manual_pricing', sale.manual_pricing if sale else False))
    return modality, branch, manual_pricing


def _stored_lines(sale: Sale) -> List[Dict[str, Any]]:
    return [{
        'producto': line.producto,
        'inventory_id': line.inventory_id,
        'serial_number': line.serial_number,
        'quantity': line.quantity,
        'unit_price': line.unit_price,
        'total_price': line.total_price,
    } for line in sale.lines]


def _edit_request(session: Session, sale: Sale, data: Dict[str, Any]):
    """
    Lines and amounts of an edited sale. Lines are re-priced only when the
    request carries `products`. Abonos already registered are subtracted
    again from the recomputed balances.
    """
    modality, branch, manual_pricing = _sale_request(sale, data)
    if data.get('products'):
        lines = build_lines(session, data['products'], branch, modality, manual_pricing)
    else:
        lines = _stored_lines(sale)

    merged = {
        'fecha': sale.fecha.isoformat() if sale.fecha else None,
        'plazo': sale.plazo,
        'discount': sale.discount,
        'enganche': sale.enganche,
        **{field: getattr(sale, field) for field in AMOUNT_FIELDS},
        **data,
    }
    amounts = calculate_amounts(merged, lines, modality, manual_pricing)
    if not manual_pricing and modality.is_financed:
        paid = sum((p.amount for p in sale.payments), ZERO)
        amounts['saldo_precio_promocion'] -= paid
        amounts['saldo_precio_normal'] -= paid
    return modality, branch, manual_pricing, lines, merged, amounts


def preview_sale(session: Session, data: Dict[str, Any], sale_id: Optional[int] = None) -> Dict[str, Any]:
    """Lines and amounts a sale (new, or an edit of `sale_id`) would get, without saving anything."""
    data = _normalize_keys(data)
    if sale_id is not None:
        _, _, _, lines, _, amounts = _edit_request(session, get_sale(session, sale_id), data)
        return {'lines': lines, **amounts}

    modality, branch, manual_pricing = _sale_request(None, data)
    lines = build_lines(session, data.get('products'), branch, modality, manual_pricing)
    amounts = calculate_amounts(data, lines, modality, manual_pricing)
    return {'lines': lines, **amounts}


def create_sale(session: Session, data: Dict[str, Any], today: Optional[date] = None) -> Sale:
    """
    Register a sale with its lines and its income transaction.

    The sale, lines and ledger entry are committed together; any failure
    rolls the whole unit back.
    """
    data = _normalize_keys(data)
    today = today or date.today()

    try:
        modality, branch, manual_pricing = _sale_request(None, data)
        lines = build_lines(session, data.get('products'), branch, modality, manual_pricing)
        amounts = calculate_amounts(data, lines, modality, manual_pricing)

        sale = Sale()
        _assign_sale(sale, data, modality, branch, amounts, manual_pricing)
        _replace_lines(sale, lines)
        session.add(sale)
        session.flush()

        record = build_income_record(sale, today=today)
        session.add(Transaction(**ledger_fields(record)))

        session.commit()
        logger.info(f"Sale created: id={sale.id}, forma_de_pago={sale.forma_de_pago}, "
                    f"promo={sale.precio_promocion}, saldo={sale.saldo_precio_promocion}")
        return sale

    except Exception:
        session.rollback()
        raise


def update_sale(session: Session, sale_id: int, data: Dict[str, Any], today: Optional[date] = None) -> Sale:
    """Edit a sale and upsert its income transaction (matched by sale_id)."""
    data = _normalize_keys(data)
    today = today or date.today()

    try:
        sale = get_sale(session, sale_id)
        modality, branch, manual_pricing, lines, merged, amounts = _edit_request(session, sale, data)

        _assign_sale(sale, merged, modality, branch, amounts, manual_pricing)
        if data.get('products'):
            _replace_lines(sale, lines)
        session.flush()

        fields = ledger_fields(build_income_record(sale, today=today))
        transaction = (
            session.query(Transaction)
            .filter(Transaction.sale_id == sale.id, Transaction.payment_id.is_(None))
            .order_by(Transaction.id.asc())
            .first()
        )
        if transaction:
            for key, value in fields.items():
                setattr(transaction, key, value)
        else:
            session.add(Transaction(**fields))

        session.commit()
        logger.info(f"Sale updated: id={sale.id}")
        return sale

    except Exception:
        session.rollback()
        raise


def get_sale(session: Session, sale_id: int) -> Sale:
    sale = session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError(f'Venta con ID {sale_id} no encontrada')
    return sale


def list_sales(session: Session, sucursal: Optional[str] = None, q: Optional[str] = None,
               pending_only: bool = False) -> List[Sale]:
    query = session.query(Sale)
    if sucursal and sucursal != 'all':
        query = query.filter(Sale.sucursal == _parse_branch(sucursal).value)
    if q:
        pattern = f'%{q.strip()}%'
        query = query.filter(or_(Sale.nombre.ilike(pattern), Sale.phone.ilike(pattern), Sale.email.ilike(pattern)))
    if pending_only:
        query = query.filter(Sale.saldo_precio_promocion > 0)
    return query.order_by(Sale.id.desc()).all()


def delete_sale(session: Session, sale_id: int) -> None:
    """Delete a sale with its lines, abonos and every ledger entry that references it."""
    try:
        sale = get_sale(session, sale_id)
        session.query(Transaction).filter(Transaction.sale_id == sale.id).delete(synchronize_session=False)
        session.delete(sale)
        session.commit()
        logger.info(f"Sale deleted: id={sale_id}")
    except Exception:
        session.rollback()
        raise
