"""Inventory blueprint - products and branch price tables."""
from flask import Blueprint, jsonify, request

from huastex.database import get_session
from huastex.services.inventory_service import (
    list_items, get_item, save_item, delete_item, preview_prices
)
from huastex.utils.number_format import money_float
from huastex.utils.request_args import json_body

inventory_bp = Blueprint('inventory', __name__, url_prefix='/inventory')


def serialize_price_table(table):
    if table is None:
        return None
    return {
        branch: {kind: money_float(price) for kind, price in prices.items()}
        for branch, prices in table.items()
    }


@inventory_bp.route('', methods=['GET'])
def list_all():
    db_session = get_session()
    items = list_items(db_session, q=request.args.get('q', '').strip() or None)
    return jsonify([item.to_dict() for item in items])


@inventory_bp.route('', methods=['POST'])
def create():
    db_session = get_session()
    item = save_item(db_session, json_body())
    return jsonify(item.to_dict()), 201


@inventory_bp.route('/<int:item_id>', methods=['GET'])
def detail(item_id):
    db_session = get_session()
    item = get_item(db_session, item_id)
    data = item.to_dict()
    data['price_table'] = serialize_price_table(item.price_table)
    return jsonify(data)


@inventory_bp.route('/<int:item_id>', methods=['PUT'])
def update(item_id):
    db_session = get_session()
    item = save_item(db_session, json_body(), item_id=item_id)
    return jsonify(item.to_dict())


@inventory_bp.route('/<int:item_id>', methods=['DELETE'])
def delete(item_id):
    db_session = get_session()
    delete_item(db_session, item_id)
    return jsonify({'status': 'ok'})


@inventory_bp.route('/preview-prices', methods=['POST'])
def preview():
    """
    Price table for a cost and formula before saving.
    `prices` is null when the cost is empty, zero or not a number.
    """
    db_session = get_session()
    data = json_body()
    table = preview_prices(db_session, data.get('price_cost'), data.get('formula_id'))
    return jsonify({'prices': serialize_price_table(table)})
