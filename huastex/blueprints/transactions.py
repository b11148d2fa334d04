"""Transactions blueprint - ledger entries read by the daily report."""
from flask import Blueprint, jsonify, request

from huastex.database import get_session
from huastex.services.transaction_service import (
    list_transactions, get_transaction, save_transaction, delete_transaction
)
from huastex.utils.request_args import json_body, date_arg, int_arg

transactions_bp = Blueprint('transactions', __name__, url_prefix='/transactions')


@transactions_bp.route('', methods=['GET'])
def list_all():
    db_session = get_session()
    transactions = list_transactions(
        db_session,
        location=request.args.get('location'),
        day=date_arg(request.args.get('date')),
        sale_id=int_arg(request.args.get('sale_id'), 'sale_id'),
    )
    return jsonify([t.to_dict() for t in transactions])


@transactions_bp.route('', methods=['POST'])
def create():
    db_session = get_session()
    transaction = save_transaction(db_session, json_body())
    return jsonify(transaction.to_dict()), 201


@transactions_bp.route('/<int:transaction_id>', methods=['GET'])
def detail(transaction_id):
    db_session = get_session()
    return jsonify(get_transaction(db_session, transaction_id).to_dict())


@transactions_bp.route('/<int:transaction_id>', methods=['PUT'])
def update(transaction_id):
    db_session = get_session()
    transaction = save_transaction(db_session, json_body(), transaction_id=transaction_id)
    return jsonify(transaction.to_dict())


@transactions_bp.route('/<int:transaction_id>', methods=['DELETE'])
def delete(transaction_id):
    db_session = get_session()
    delete_transaction(db_session, transaction_id)
    return jsonify({'status': 'ok'})
