"""
Unit tests for ledger records produced by sales and abonos.
"""

from datetime import date
from decimal import Decimal

from huastex.core.income import build_income_record, build_payment_record, income_payment_type, product_list
from huastex.core.constants import PaymentType


def make_sale(**overrides):
    sale = {
        'id': 7,
        'nombre': 'María López',
        'sucursal': 'cerroazul',
        'fecha': '2024-03-01',
        'forma_de_pago': 'Crédito',
        'precio_promocion': Decimal('900'),
        'enganche': Decimal('200'),
        'saldo_precio_promocion': Decimal('700'),
        'saldo_precio_normal': Decimal('808'),
        'lines': [{'producto': 'Sala modular'}, {'producto': 'Comedor'}],
    }
    sale.update(overrides)
    return sale


class TestIncomePaymentType:
    
    def test_cash_sale(self):
        assert income_payment_type(make_sale(forma_de_pago='Contado')) is PaymentType.SALE
    
    def test_financed_sale(self):
        assert income_payment_type(make_sale()) is PaymentType.DOWN_PAYMENT
        assert income_payment_type(make_sale(forma_de_pago='Apartado')) is PaymentType.DOWN_PAYMENT
    
    def test_modality_checked_before_card(self):
        """A financed sale whose enganche went on a card is still a down payment."""
        assert income_payment_type(make_sale(card_payment=True)) is PaymentType.DOWN_PAYMENT
        assert income_payment_type(make_sale(forma_de_pago='MSI', card_payment=True)) is PaymentType.DOWN_PAYMENT
        assert income_payment_type(make_sale(forma_de_pago='Contado', card_payment=True)) is PaymentType.SALE
    
    def test_card_sale(self):
        assert income_payment_type(make_sale(forma_de_pago='c/tarjeta')) is PaymentType.CREDIT_CARD
        assert income_payment_type(make_sale(forma_de_pago='trueque', card_payment=True)) is PaymentType.CREDIT_CARD
    
    def test_financed_card_sale_records_enganche(self):
        record = build_income_record(make_sale(card_payment=True))
        assert record['value'] == Decimal('200')
        assert record['por_pagar'] == Decimal('700')
        assert record['payment_type'] == 'down_payment'
    
    def test_unknown_modality(self):
        assert income_payment_type(make_sale(forma_de_pago='trueque')) is PaymentType.DEPOSIT


class TestBuildIncomeRecord:
    
    def test_financed_sale_records_enganche(self):
        record = build_income_record(make_sale())
        assert record['value'] == Decimal('200')
        assert record['saldo'] == Decimal('808')
        assert record['por_pagar'] == Decimal('700')
        assert record['payment_type'] == 'down_payment'
        assert record['transaction_type'] == 'income'
        assert record['product'] == 'Sala modular, Comedor'
        assert record['transaction_date'] == date(2024, 3, 1)
        assert record['location'] == 'cerroazul'
        assert record['sale_id'] == 7
    
    def test_cash_sale_records_promo_price(self):
        record = build_income_record(make_sale(
            forma_de_pago='Contado', saldo_precio_promocion=0, saldo_precio_normal=0
        ))
        assert record['value'] == Decimal('900')
        assert record['saldo'] == 0
        assert record['por_pagar'] == 0
        assert record['payment_type'] == 'sale'
    
    def test_card_only_sale_is_cash(self):
        record = build_income_record(make_sale(forma_de_pago='c/tarjeta'))
        assert record['value'] == Decimal('900')
        assert record['payment_type'] == 'credit_card'
    
    def test_missing_fecha_uses_today(self):
        record = build_income_record(make_sale(fecha=None), today=date(2024, 5, 2))
        assert record['transaction_date'] == date(2024, 5, 2)
    
    def test_no_products(self):
        assert product_list(make_sale(lines=[])) == '(sin producto)'


class TestBuildPaymentRecord:
    
    def test_payment_record_balances(self):
        sale = make_sale(saldo_precio_promocion=Decimal('700'), saldo_precio_normal=Decimal('808'))
        record = build_payment_record(sale, {'amount': 300, 'fecha': '2024-03-15', 'payment_type': 'deposit'})
        assert record['value'] == Decimal('300')
        assert record['saldo'] == Decimal('508')
        assert record['por_pagar'] == Decimal('400')
        assert record['payment_type'] == 'deposit'
        assert record['transaction_date'] == date(2024, 3, 15)
    
    def test_payment_type_is_lowercased(self):
        record = build_payment_record(make_sale(), {'amount': 10, 'fecha': '2024-03-15', 'payment_type': 'TRANSFER'})
        assert record['payment_type'] == 'transfer'
