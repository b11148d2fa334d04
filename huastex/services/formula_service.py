"""Formula service - CRUD for pricing formulas."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huastex.core.formula import evaluate, tokenize, PERCENT_LITERAL, PERCENT_MODES
from huastex.exceptions import BusinessLogicError, NotFoundError, ValidationError, InvalidFormulaResult
from huastex.models import Formula, InventoryItem
from huastex.utils.number_format import to_decimal

logger = logging.getLogger(__name__)


def get_formula_settings() -> Tuple[str, bool]:
    """(percent_mode, strict) from the app config, or the defaults outside an app context."""
    try:
        from flask import current_app
        percent_mode = current_app.config.get('FORMULA_PERCENT_MODE', PERCENT_LITERAL)
        strict = bool(current_app.config.get('FORMULA_STRICT', False))
    except RuntimeError:
        return PERCENT_LITERAL, False
    if percent_mode not in PERCENT_MODES:
        logger.warning(f"Unknown FORMULA_PERCENT_MODE {percent_mode!r}, using {PERCENT_LITERAL}")
        percent_mode = PERCENT_LITERAL
    return percent_mode, strict


def example_output(initial_number, operators: str):
    """
    Result of applying `operators` to the example input, or None when there is
    no input or the result is not a number (the editor then shows it empty).
    """
    initial = to_decimal(initial_number)
    if initial is None or not operators:
        return None
    percent_mode, strict = get_formula_settings()
    try:
        return evaluate(initial, operators, percent_mode=percent_mode, strict=strict)
    except InvalidFormulaResult as e:
        logger.info(f"Formula example has no valid output: {e.message}")
        return None


def list_formulas(session: Session) -> List[Formula]:
    return session.query(Formula).order_by(Formula.name.asc()).all()


def get_formula(session: Session, formula_id: int) -> Formula:
    formula = session.get(Formula, formula_id)
    if not formula:
        raise NotFoundError(f'Fórmula con ID {formula_id} no encontrada')
    return formula


def _validate(data: Dict[str, Any]) -> Dict[str, Any]:
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError('El nombre de la fórmula es requerido', field='name')

    operators = (data.get('operators') or '').strip()
    if not operators:
        raise ValidationError('Los operadores de la fórmula son requeridos', field='operators')

    _, strict = get_formula_settings()
    if not tokenize(operators, strict=strict):
        raise ValidationError(f'La fórmula "{operators}" no contiene operaciones válidas', field='operators')

    initial_number = to_decimal(data.get('initial_number', data.get('initialNumber')))
    return {'name': name, 'operators': operators, 'initial_number': initial_number}


def _reprice_items(formula: Formula) -> int:
    """Re-derive the prices of the automatic-pricing items that use `formula`."""
    from huastex.services.inventory_service import apply_pricing

    repriced = 0
    for item in formula.inventory_items:
        if not item.manual_pricing and apply_pricing(item):
            repriced += 1
    return repriced


def save_formula(session: Session, data: Dict[str, Any], formula_id: Optional[int] = None) -> Formula:
    """
    Create or update a formula. The example output (final_number) is always
    recomputed from initial_number, never taken from the request. Items that
    use the formula and are priced automatically are re-derived in the same
    commit.
    """
    fields = _validate(data)

    try:
        if formula_id is None:
            formula = Formula()
            session.add(formula)
        else:
            formula = get_formula(session, formula_id)

        formula.name = fields['name']
        formula.operators = fields['operators']
        formula.initial_number = fields['initial_number']
        formula.final_number = example_output(fields['initial_number'], fields['operators'])

        repriced = _reprice_items(formula) if formula_id is not None else 0

        session.commit()
        logger.info(f"Formula saved: id={formula.id}, operators={formula.operators!r}, repriced={repriced}")
        return formula

    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'Ya existe una fórmula llamada "{fields["name"]}"', status_code=409)
    except Exception:
        session.rollback()
        raise


def delete_formula(session: Session, formula_id: int) -> None:
    """Delete a formula that no inventory item uses."""
    formula = get_formula(session, formula_id)

    in_use = session.query(InventoryItem).filter(InventoryItem.formula_id == formula.id).count()
    if in_use:
        raise BusinessLogicError(
            f'La fórmula "{formula.name}" está asignada a {in_use} producto(s) y no puede eliminarse',
            status_code=409
        )

    try:
        session.delete(formula)
        session.commit()
        logger.info(f"Formula deleted: id={formula_id}")
    except Exception:
        session.rollback()
        raise
