"""Payments blueprint - abonos against financed sales."""
from flask import Blueprint, jsonify, request

from huastex.blueprints.metrics import payments_registered_total
from huastex.database import get_session
from huastex.exceptions import ValidationError
from huastex.services.payment_service import register_payment, delete_payment, list_payments
from huastex.services.sales_service import get_sale
from huastex.utils.request_args import json_body, int_arg

payments_bp = Blueprint('payments', __name__, url_prefix='/payments')


@payments_bp.route('', methods=['GET'])
def list_all():
    db_session = get_session()
    sale_id = int_arg(request.args.get('sale_id'), 'sale_id')
    if sale_id is None:
        raise ValidationError('sale_id es requerido', field='sale_id')
    return jsonify([p.to_dict() for p in list_payments(db_session, sale_id)])


@payments_bp.route('', methods=['POST'])
def create():
    """Register an abono. Returns the payment and the sale balances after it."""
    db_session = get_session()
    data = json_body()
    sale_id = int_arg(data.get('sale_id'), 'sale_id')
    if sale_id is None:
        raise ValidationError('sale_id es requerido', field='sale_id')

    payment = register_payment(db_session, sale_id, data)
    payments_registered_total.labels(payment_type=payment.payment_type).inc()

    sale = get_sale(db_session, sale_id)
    return jsonify({
        'payment': payment.to_dict(),
        'sale': sale.to_dict(include_lines=False),
    }), 201


@payments_bp.route('/<int:payment_id>', methods=['DELETE'])
def delete(payment_id):
    db_session = get_session()
    delete_payment(db_session, payment_id)
    return jsonify({'status': 'ok'})
