"""
Integration tests for manual ledger entries and the daily report.
"""

import pytest
from datetime import date
from decimal import Decimal

from huastex.exceptions import ValidationError
from huastex.services.payment_service import register_payment
from huastex.services.report_service import (
    get_daily_report, save_daily_accounting, get_daily_accounting, generate_daily_report_pdf
)
from huastex.services.sales_service import create_sale
from huastex.services.transaction_service import save_transaction, list_transactions, delete_transaction

from conftest import credit_sale_data

DAY = date(2024, 3, 1)


@pytest.fixture
def day_activity(session, today):
    """Crédito sale (enganche 200), cash sale (900), card abono (100) and an expense (150)."""
    sale = create_sale(session, credit_sale_data(), today=today)
    create_sale(session, credit_sale_data(forma_de_pago='Contado', enganche=0), today=today)
    register_payment(session, sale.id, {
        'amount': 100, 'cajero': 'Ana', 'payment_type': 'credit_card', 'fecha': '2024-03-01',
    })
    save_transaction(session, {
        'transaction_type': 'outcome', 'name': 'Gasolina', 'value': 150,
        'transaction_date': '2024-03-01', 'location': 'Cerro Azul',
    })


class TestTransactionService:
    
    def test_manual_income_defaults(self, session, today):
        transaction = save_transaction(session, {'name': 'Depósito', 'value': '1,250.00', 'location': 'aquismon'}, today=today)
        assert transaction.transaction_type == 'income'
        assert transaction.payment_type == 'deposit'
        assert transaction.value == Decimal('1250.00')
        assert transaction.transaction_date == today
    
    def test_outcome_has_no_balances(self, session, today):
        transaction = save_transaction(session, {
            'transaction_type': 'outcome', 'value': 10, 'saldo': 5, 'location': 'tlacolula',
        }, today=today)
        assert transaction.saldo is None
        assert transaction.payment_type is None
    
    @pytest.mark.parametrize('data,field', [
        ({'value': 0}, 'value'),
        ({'value': 10, 'transaction_type': 'refund'}, 'transaction_type'),
        ({'value': 10, 'location': 'monterrey'}, 'location'),
        ({'value': 10, 'payment_type': 'barter'}, 'payment_type'),
    ])
    def test_invalid_entries(self, session, today, data, field):
        with pytest.raises(ValidationError) as exc:
            save_transaction(session, data, today=today)
        assert exc.value.payload == {'field': field}
    
    def test_list_and_delete(self, session, today):
        kept = save_transaction(session, {'value': 10, 'location': 'aquismon'}, today=today)
        other = save_transaction(session, {'value': 20, 'location': 'tepetzintla'}, today=today)
        kept_id, other_id = kept.id, other.id
        
        assert [t.id for t in list_transactions(session, location='aquismon')] == [kept_id]
        delete_transaction(session, other_id)
        assert [t.id for t in list_transactions(session, day=today)] == [kept_id]


class TestDailyReport:
    
    def test_drawer_totals(self, session, day_activity):
        report = get_daily_report(session, DAY, 'cerroazul')
        assert report['total_in'] == Decimal('1100')
        assert report['total_out'] == Decimal('150')
        assert report['net'] == Decimal('950')
        assert report['excluded_total'] == Decimal('100')
        assert len(report['transactions']) == 4
        assert report['counted_amount'] is None
    
    def test_other_branch_is_empty(self, session, day_activity):
        report = get_daily_report(session, DAY, 'aquismon')
        assert report['transactions'] == []
        assert report['net'] == 0
    
    def test_reconciliation_with_counted_cash(self, session, day_activity):
        save_daily_accounting(session, DAY, 'cerroazul', {'counted_amount': '940', 'cashier_name': 'Ana'})
        report = get_daily_report(session, DAY, 'cerroazul')
        assert report['counted_amount'] == Decimal('940')
        assert report['difference'] == Decimal('-10')
        assert report['accounting'].cashier_name == 'Ana'
    
    def test_accounting_is_upserted(self, session):
        save_daily_accounting(session, DAY, 'aquismon', {'counted_amount': 100})
        save_daily_accounting(session, DAY, 'Aquismón', {'counted_amount': 120})
        accounting = get_daily_accounting(session, DAY, 'aquismon')
        assert accounting.counted_amount == Decimal('120')
    
    def test_accounting_needs_a_branch(self, session):
        with pytest.raises(ValidationError):
            save_daily_accounting(session, DAY, 'all', {'counted_amount': 100})
    
    def test_pdf_export(self, session, day_activity):
        report = get_daily_report(session, DAY, 'cerroazul')
        pdf = generate_daily_report_pdf(report, {'name': 'Huastex', 'phone': '789 123 4567'})
        assert pdf.read(4) == b'%PDF'
    
    def test_pdf_export_without_transactions(self, session):
        report = get_daily_report(session, DAY, None)
        pdf = generate_daily_report_pdf(report, {})
        assert pdf.getvalue().startswith(b'%PDF')
