"""
Unit tests for the daily cash reconciliation.
"""

from datetime import date
from decimal import Decimal

from huastex.core.report import summarize_day, reconcile

DAY = date(2024, 3, 1)


def tx(value, payment_type, transaction_type='income', location='cerroazul', day=DAY):
    return {
        'transaction_type': transaction_type,
        'value': value,
        'payment_type': payment_type,
        'location': location,
        'transaction_date': day,
    }


TRANSACTIONS = [
    tx(500, 'sale'),
    tx(300, 'credit_card'),
    tx(100, None, transaction_type='outcome'),
    tx(200, 'deposit', location='aquismon'),
    tx(50, 'transfer'),
    tx(80, 'deposit', day=date(2024, 3, 2)),
]


class TestSummarizeDay:
    
    def test_branch_totals_exclude_non_drawer_payments(self):
        summary = summarize_day(TRANSACTIONS, DAY, 'cerroazul')
        assert summary['total_in'] == Decimal('500')
        assert summary['total_out'] == Decimal('100')
        assert summary['net'] == Decimal('400')
        assert summary['excluded_total'] == Decimal('350')
        assert len(summary['transactions']) == 4
    
    def test_all_locations(self):
        summary = summarize_day(TRANSACTIONS, DAY)
        assert summary['location'] == 'all'
        assert summary['total_in'] == Decimal('700')
        assert len(summary['transactions']) == 5
    
    def test_buckets_by_payment_type(self):
        summary = summarize_day(TRANSACTIONS, DAY, 'cerroazul')
        assert summary['by_payment_type']['credit_card'] == {
            'income': Decimal('300'), 'outcome': Decimal('0'), 'count': 1,
        }
        assert summary['by_payment_type']['']['outcome'] == Decimal('100')
    
    def test_empty_day(self):
        summary = summarize_day(TRANSACTIONS, date(2024, 1, 1), 'cerroazul')
        assert summary['transactions'] == []
        assert summary['net'] == 0


class TestReconcile:
    
    def test_difference_against_net(self):
        summary = summarize_day(TRANSACTIONS, DAY, 'cerroazul')
        assert reconcile(summary, '390') == {'counted_amount': Decimal('390'), 'difference': Decimal('-10')}
    
    def test_no_count(self):
        assert reconcile({'net': Decimal('400')}, None) == {'counted_amount': None, 'difference': None}
