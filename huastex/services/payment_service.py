"""Payment (abono) service - applies partial payments to financed sales."""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from huastex.core.constants import ABONO_PAYMENT_TYPES, PaymentType
from huastex.core.income import build_payment_record
from huastex.core.sale_totals import apply_payment, parse_date
from huastex.exceptions import NotFoundError, ValidationError
from huastex.models import Sale, Payment, Transaction
from huastex.services.sales_service import ledger_fields
from huastex.utils.number_format import to_decimal, quantize_money

logger = logging.getLogger(__name__)


def _validate_payment(data: Dict[str, Any], today: date) -> Dict[str, Any]:
    amount = to_decimal(data.get('amount', data.get('cantidad')))
    if amount is None:
        raise ValidationError('El monto del abono es requerido', field='amount')
    if amount <= 0:
        raise ValidationError('El monto del abono debe ser mayor a 0', field='amount')

    raw_fecha = data.get('fecha')
    fecha = parse_date(raw_fecha) if raw_fecha else today
    if fecha is None:
        raise ValidationError('La fecha debe tener formato YYYY-MM-DD', field='fecha')

    cajero = (data.get('cajero') or '').strip()
    if not cajero:
        raise ValidationError('El nombre del cajero es requerido', field='cajero')

    payment_type = str(data.get('payment_type') or PaymentType.DEPOSIT.value).lower()
    if payment_type not in [t.value for t in ABONO_PAYMENT_TYPES]:
        raise ValidationError(f'Método de pago inválido: {payment_type}', field='payment_type')

    return {'amount': amount, 'fecha': fecha, 'cajero': cajero, 'payment_type': payment_type}


def register_payment(session: Session, sale_id: int, data: Dict[str, Any],
                     today: Optional[date] = None) -> Payment:
    """
    Register an abono against a sale.

    Phase 1 computes the post-payment balances with the core. Phase 2 writes
    the Payment, its income Transaction and the new Sale balances and
    commits them as one unit; a failure in any write rolls all of them back.
    Settled sales still accept payments (balances may go negative).
    """
    today = today or date.today()
    fields = _validate_payment(data, today)

    try:
        sale = (
            session.query(Sale)
            .filter(Sale.id == sale_id)
            .with_for_update()
            .first()
        )
        if not sale:
            raise NotFoundError(f'Venta con ID {sale_id} no encontrada')

        if sale.is_settled:
            logger.warning(f"Payment registered on settled sale {sale.id} "
                           f"(saldo={sale.saldo_precio_promocion}, abono={fields['amount']})")

        # Phase 1: compute
        balances = apply_payment(sale.saldo_precio_promocion, sale.saldo_precio_normal, fields['amount'])
        record = build_payment_record(sale, fields)

        # Phase 2: write payment, ledger entry and balances together
        payment = Payment(sale_id=sale.id, **fields)
        session.add(payment)
        session.flush()

        session.add(Transaction(payment_id=payment.id, **ledger_fields(record)))
        sale.saldo_precio_promocion = quantize_money(balances['balance_promo'])
        sale.saldo_precio_normal = quantize_money(balances['balance_normal'])

        session.commit()
        logger.info(f"Payment registered: sale={sale.id}, amount={fields['amount']}, "
                    f"saldo={sale.saldo_precio_normal}, por_pagar={sale.saldo_precio_promocion}")
        return payment

    except Exception:
        session.rollback()
        raise


def delete_payment(session: Session, payment_id: int) -> None:
    """
    Undo an abono: restore the sale balances and drop the payment with its
    ledger entry, all in one commit.
    """
    try:
        payment = session.get(Payment, payment_id)
        if not payment:
            raise NotFoundError(f'Abono con ID {payment_id} no encontrado')

        sale = payment.sale
        restored = apply_payment(sale.saldo_precio_promocion, sale.saldo_precio_normal, -payment.amount)
        sale.saldo_precio_promocion = quantize_money(restored['balance_promo'])
        sale.saldo_precio_normal = quantize_money(restored['balance_normal'])

        session.query(Transaction).filter(Transaction.payment_id == payment.id).delete(synchronize_session=False)
        session.delete(payment)

        session.commit()
        logger.info(f"Payment deleted: id={payment_id}, sale={sale.id}")
    except Exception:
        session.rollback()
        raise


def list_payments(session: Session, sale_id: int) -> List[Payment]:
    if not session.get(Sale, sale_id):
        raise NotFoundError(f'Venta con ID {sale_id} no encontrada')
    return (
        session.query(Payment)
        .filter(Payment.sale_id == sale_id)
        .order_by(Payment.fecha.asc(), Payment.id.asc())
        .all()
    )


def total_paid(session: Session, sale_id: int) -> Decimal:
    return sum((p.amount for p in list_payments(session, sale_id)), Decimal('0'))
