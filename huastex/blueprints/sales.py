"""Sales blueprint - registration, edition and totals preview."""
from flask import Blueprint, jsonify, request

from huastex.blueprints.metrics import sales_created_total
from huastex.database import get_session
from huastex.services.payment_service import list_payments
from huastex.services.sales_service import (
    create_sale, update_sale, get_sale, list_sales, delete_sale, preview_sale
)
from huastex.utils.number_format import money_float
from huastex.utils.request_args import json_body, bool_arg

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')


def _serialize_preview(preview):
    return {
        'products': [
            {
                'producto': line['producto'],
                'inventory_id': line['inventory_id'],
                'serial_number': line['serial_number'],
                'quantity': line['quantity'],
                'unit_price': money_float(line['unit_price']),
                'total_price': money_float(line['total_price']),
            }
            for line in preview['lines']
        ],
        'precio_promocion': money_float(preview['precio_promocion']),
        'precio_normal': money_float(preview['precio_normal']),
        'saldo_precio_promocion': money_float(preview['saldo_precio_promocion']),
        'saldo_precio_normal': money_float(preview['saldo_precio_normal']),
        'fecha_vencimiento': preview['due_date'].isoformat() if preview['due_date'] else None,
        'plazo': preview['plazo'],
    }


@sales_bp.route('', methods=['GET'])
def list_all():
    """List sales, optionally filtered by branch, customer text or pending balance."""
    db_session = get_session()
    sales = list_sales(
        db_session,
        sucursal=request.args.get('sucursal'),
        q=request.args.get('q', '').strip() or None,
        pending_only=bool_arg(request.args.get('pending')),
    )
    return jsonify([sale.to_dict(include_lines=False) for sale in sales])


@sales_bp.route('', methods=['POST'])
def create():
    db_session = get_session()
    sale = create_sale(db_session, json_body())
    sales_created_total.labels(sucursal=sale.sucursal, forma_de_pago=sale.forma_de_pago).inc()
    return jsonify(sale.to_dict()), 201


@sales_bp.route('/<int:sale_id>', methods=['GET'])
def detail(sale_id):
    db_session = get_session()
    sale = get_sale(db_session, sale_id)
    data = sale.to_dict()
    data['payments'] = [p.to_dict() for p in list_payments(db_session, sale_id)]
    return jsonify(data)


@sales_bp.route('/<int:sale_id>', methods=['PUT'])
def update(sale_id):
    db_session = get_session()
    sale = update_sale(db_session, sale_id, json_body())
    return jsonify(sale.to_dict())


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
def delete(sale_id):
    db_session = get_session()
    delete_sale(db_session, sale_id)
    return jsonify({'status': 'ok'})


@sales_bp.route('/totals-preview', methods=['POST'])
def totals_preview():
    """Amounts and due date of a new sale, computed without saving."""
    db_session = get_session()
    return jsonify(_serialize_preview(preview_sale(db_session, json_body())))


@sales_bp.route('/<int:sale_id>/totals-preview', methods=['POST'])
def edit_totals_preview(sale_id):
    """Amounts the sale would get if the edit in the body were saved."""
    db_session = get_session()
    return jsonify(_serialize_preview(preview_sale(db_session, json_body(), sale_id=sale_id)))
