"""Transaction service - manual ledger entries from the report screen."""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from huastex.core.constants import Branch, PaymentType, TransactionType
from huastex.core.sale_totals import parse_date
from huastex.exceptions import NotFoundError, ValidationError
from huastex.models import Transaction
from huastex.utils.number_format import to_decimal, quantize_money

logger = logging.getLogger(__name__)


def _validate(data: Dict[str, Any], today: date) -> Dict[str, Any]:
    transaction_type = str(data.get('transaction_type') or TransactionType.INCOME.value).lower()
    if transaction_type not in [t.value for t in TransactionType]:
        raise ValidationError(f'Tipo de movimiento inválido: {transaction_type}', field='transaction_type')

    value = to_decimal(data.get('value'))
    if value is None:
        raise ValidationError('El monto es requerido', field='value')
    if value <= 0:
        raise ValidationError('El monto debe ser mayor a 0', field='value')

    raw_date = data.get('transaction_date')
    transaction_date = parse_date(raw_date) if raw_date else today
    if transaction_date is None:
        raise ValidationError('La fecha debe tener formato YYYY-MM-DD', field='transaction_date')

    location = data.get('location') or ''
    if location:
        try:
            location = Branch.parse(location).value
        except ValueError as e:
            raise ValidationError(str(e), field='location')

    payment_type = data.get('payment_type') or None
    if transaction_type == TransactionType.INCOME.value:
        payment_type = str(payment_type or PaymentType.DEPOSIT.value).lower()
        if payment_type not in [t.value for t in PaymentType]:
            raise ValidationError(f'Método de pago inválido: {payment_type}', field='payment_type')

    fields = {
        'transaction_type': transaction_type,
        'name': (data.get('name') or '').strip(),
        'product': (data.get('product') or '').strip() or None,
        'value': quantize_money(value),
        'transaction_date': transaction_date,
        'payment_type': payment_type,
        'location': location,
    }
    # saldo / por_pagar only make sense for income entries
    for key in ('saldo', 'por_pagar'):
        amount = to_decimal(data.get(key))
        fields[key] = quantize_money(amount) if amount is not None and transaction_type == 'income' else None
    return fields


def list_transactions(session: Session, location: Optional[str] = None, day: Optional[date] = None,
                      sale_id: Optional[int] = None) -> List[Transaction]:
    query = session.query(Transaction)
    if location and location != 'all':
        try:
            location = Branch.parse(location).value
        except ValueError as e:
            raise ValidationError(str(e), field='location')
        query = query.filter(Transaction.location == location)
    if day:
        query = query.filter(Transaction.transaction_date == day)
    if sale_id:
        query = query.filter(Transaction.sale_id == sale_id)
    return query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc()).all()


def get_transaction(session: Session, transaction_id: int) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if not transaction:
        raise NotFoundError(f'Transacción con ID {transaction_id} no encontrada')
    return transaction


def save_transaction(session: Session, data: Dict[str, Any], transaction_id: Optional[int] = None,
                     today: Optional[date] = None) -> Transaction:
    """Create or correct a ledger entry by hand."""
    fields = _validate(data, today or date.today())
    try:
        if transaction_id is None:
            transaction = Transaction(**fields)
            session.add(transaction)
        else:
            transaction = get_transaction(session, transaction_id)
            for key, value in fields.items():
                setattr(transaction, key, value)
        session.commit()
        logger.info(f"Transaction saved: id={transaction.id}, type={transaction.transaction_type}, value={transaction.value}")
        return transaction
    except Exception:
        session.rollback()
        raise


def delete_transaction(session: Session, transaction_id: int) -> None:
    transaction = get_transaction(session, transaction_id)
    session.delete(transaction)
    session.commit()
