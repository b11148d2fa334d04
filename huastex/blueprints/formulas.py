"""Formulas blueprint - pricing formulas per category."""
from flask import Blueprint, jsonify

from huastex.database import get_session
from huastex.services.formula_service import (
    list_formulas, get_formula, save_formula, delete_formula, example_output
)
from huastex.utils.number_format import money_float
from huastex.utils.request_args import json_body

formulas_bp = Blueprint('formulas', __name__, url_prefix='/formulas')


@formulas_bp.route('', methods=['GET'])
def list_all():
    db_session = get_session()
    return jsonify([f.to_dict() for f in list_formulas(db_session)])


@formulas_bp.route('', methods=['POST'])
def create():
    db_session = get_session()
    formula = save_formula(db_session, json_body())
    return jsonify(formula.to_dict()), 201


@formulas_bp.route('/<int:formula_id>', methods=['GET'])
def detail(formula_id):
    db_session = get_session()
    return jsonify(get_formula(db_session, formula_id).to_dict())


@formulas_bp.route('/<int:formula_id>', methods=['PUT'])
def update(formula_id):
    db_session = get_session()
    formula = save_formula(db_session, json_body(), formula_id=formula_id)
    return jsonify(formula.to_dict())


@formulas_bp.route('/<int:formula_id>', methods=['DELETE'])
def delete(formula_id):
    db_session = get_session()
    delete_formula(db_session, formula_id)
    return jsonify({'status': 'ok'})


@formulas_bp.route('/preview', methods=['POST'])
def preview():
    """Example output shown live in the formula editor."""
    data = json_body()
    result = example_output(data.get('initial_number'), data.get('operators') or '')
    return jsonify({'final_number': money_float(result)})
