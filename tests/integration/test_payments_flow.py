"""
Integration tests for abonos against financed sales.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from huastex.exceptions import ValidationError, NotFoundError
from huastex.models import Sale, Payment, Transaction
from huastex.services.payment_service import (
    register_payment, delete_payment, list_payments, total_paid
)
from huastex.services.sales_service import create_sale

from conftest import credit_sale_data


@pytest.fixture
def credit_sale_id(session, today):
    sale = create_sale(session, credit_sale_data(), today=today)
    return sale.id


class TestRegisterPayment:
    
    def test_balances_and_ledger_entry(self, session, credit_sale_id):
        payment = register_payment(session, credit_sale_id, {
            'amount': 300, 'fecha': '2024-03-15', 'cajero': 'Ana', 'payment_type': 'deposit',
        })
        
        sale = session.get(Sale, credit_sale_id)
        assert sale.saldo_precio_promocion == Decimal('400')
        assert sale.saldo_precio_normal == Decimal('508')
        
        transaction = session.query(Transaction).filter(Transaction.payment_id == payment.id).one()
        assert transaction.value == Decimal('300')
        assert transaction.saldo == Decimal('508')
        assert transaction.por_pagar == Decimal('400')
        assert transaction.payment_type == 'deposit'
        assert transaction.transaction_date == date(2024, 3, 15)
        assert transaction.sale_id == credit_sale_id
    
    def test_fecha_defaults_to_today(self, session, credit_sale_id):
        payment = register_payment(session, credit_sale_id, {'amount': 50, 'cajero': 'Ana'}, today=date(2024, 4, 2))
        assert payment.fecha == date(2024, 4, 2)
        assert payment.payment_type == 'deposit'
    
    def test_settled_sale_accepts_overpayment(self, session, credit_sale_id):
        register_payment(session, credit_sale_id, {'amount': 700, 'cajero': 'Ana', 'payment_type': 'settled'})
        assert session.get(Sale, credit_sale_id).is_settled
        
        register_payment(session, credit_sale_id, {'amount': 10, 'cajero': 'Ana'})
        assert session.get(Sale, credit_sale_id).saldo_precio_promocion == Decimal('-10')
    
    @pytest.mark.parametrize('data,field', [
        ({'amount': 0, 'cajero': 'Ana'}, 'amount'),
        ({'amount': -5, 'cajero': 'Ana'}, 'amount'),
        ({'cajero': 'Ana'}, 'amount'),
        ({'amount': 10}, 'cajero'),
        ({'amount': 10, 'cajero': 'Ana', 'payment_type': 'sale'}, 'payment_type'),
        ({'amount': 10, 'cajero': 'Ana', 'fecha': '15/03/2024'}, 'fecha'),
    ])
    def test_invalid_payment(self, session, credit_sale_id, data, field):
        with pytest.raises(ValidationError) as exc:
            register_payment(session, credit_sale_id, data)
        assert exc.value.payload == {'field': field}
        assert session.query(Payment).count() == 0
    
    def test_unknown_sale(self, session):
        with pytest.raises(NotFoundError):
            register_payment(session, 999, {'amount': 10, 'cajero': 'Ana'})
    
    def test_failed_ledger_write_rolls_back_everything(self, session, credit_sale_id):
        with patch('huastex.services.payment_service.ledger_fields', side_effect=RuntimeError('disk full')):
            with pytest.raises(RuntimeError):
                register_payment(session, credit_sale_id, {'amount': 300, 'cajero': 'Ana'})
        
        assert session.query(Payment).count() == 0
        assert session.query(Transaction).filter(Transaction.payment_id.isnot(None)).count() == 0
        assert session.get(Sale, credit_sale_id).saldo_precio_promocion == Decimal('700')


class TestDeletePayment:
    
    def test_delete_restores_balances(self, session, credit_sale_id):
        payment = register_payment(session, credit_sale_id, {'amount': 300, 'cajero': 'Ana'})
        payment_id = payment.id
        
        delete_payment(session, payment_id)
        
        sale = session.get(Sale, credit_sale_id)
        assert sale.saldo_precio_promocion == Decimal('700')
        assert sale.saldo_precio_normal == Decimal('808')
        assert session.query(Transaction).filter(Transaction.payment_id == payment_id).count() == 0
        assert list_payments(session, credit_sale_id) == []
    
    def test_unknown_payment(self, session):
        with pytest.raises(NotFoundError):
            delete_payment(session, 999)


def test_total_paid(session, credit_sale_id):
    register_payment(session, credit_sale_id, {'amount': 100, 'cajero': 'Ana'})
    register_payment(session, credit_sale_id, {'amount': '250.50', 'cajero': 'Ana', 'payment_type': 'transfer'})
    assert total_paid(session, credit_sale_id) == Decimal('350.50')
