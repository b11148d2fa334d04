"""
Unit tests for branch price derivation.
"""

import random
from decimal import Decimal

import pytest

from huastex.core.branch_prices import (
    derive, round_up_to_ten, flatten, unflatten, price_for, price_column
)
from huastex.core.constants import Branch, PaymentModality
from huastex.core.formula import apply_formula


def _random_pricing_cases(seed=20240301, count=200):
    """Seeded (base, formula) pairs built from positive + and x terms."""
    rng = random.Random(seed)
    cases = []
    for _ in range(count):
        base = Decimal(rng.randint(1, 5000000)) / 100
        terms = [
            f"{rng.choice('+x')}{Decimal(rng.randint(1, 2000)) / 100}{rng.choice(['', '%'])}"
            for _ in range(rng.randint(1, 3))
        ]
        cases.append((base, ''.join(terms)))
    return cases


class TestRoundUpToTen:
    
    @pytest.mark.parametrize('value,expected', [
        (173, 180),
        (180, 180),
        ('180.01', 190),
        (0, 0),
        ('1.5', 10),
    ])
    def test_rounding(self, value, expected):
        assert round_up_to_ten(value) == Decimal(expected)


class TestDerive:
    """Tests for the 4 branches x {cash, msi, credit} table."""
    
    def test_reference_branch(self):
        table = derive(173)
        assert table['cerroazul'] == {
            'cash': Decimal('180'),
            'msi': Decimal('200'),
            'credit': Decimal('280'),
        }
    
    def test_premium_branches(self):
        table = derive(173)
        for branch in ('aquismon', 'tepetzintla', 'tlacolula'):
            assert table[branch] == {
                'cash': Decimal('190'),
                'msi': Decimal('210'),
                'credit': Decimal('290'),
            }
    
    @pytest.mark.parametrize('base,formula', _random_pricing_cases())
    def test_every_price_is_multiple_of_ten(self, base, formula):
        table = derive(base, formula)
        adjusted = apply_formula(base, formula)
        for prices in table.values():
            assert prices['cash'] >= adjusted
            for price in prices.values():
                assert price % 10 == 0
                assert price > 0
    
    def test_deterministic(self):
        assert derive(173, '+10x1.16') == derive(173, '+10x1.16')
    
    def test_formula_is_applied_before_rounding(self):
        # 100 + 10 = 110 -> x1.16 = 127.6 -> 130
        assert derive(100, '+10x1.16')['cerroazul']['cash'] == Decimal('130')
    
    def test_formula_object_or_dict(self):
        class FormulaStub:
            operators = '+10x1.16'
        assert derive(100, FormulaStub()) == derive(100, {'operators': '+10x1.16'})
    
    @pytest.mark.parametrize('base', [0, '0', None, '', 'abc', '1e20'])
    def test_unusable_base_gives_none(self, base):
        assert derive(base) is None
    
    def test_invalid_formula_uses_base(self):
        assert derive(100, '/0') == derive(100)
        assert derive(100, 'x1' + '0' * 30) == derive(100)
    
    def test_price_too_large_for_column_gives_none(self):
        # 100 x 90,000,000 fits, its Tlacolula credit price does not
        assert derive(100, 'x90000000') is None


class TestPriceColumns:
    
    def test_column_names(self):
        assert price_column(Branch.CERRO_AZUL, 'cash') == 'cerro_azul_price'
        assert price_column('aquismon', 'msi') == 'aquismon_msi_price'
        assert price_column('tlacolula', 'credit') == 'tlacolula_credit_price'
    
    def test_flatten_has_twelve_columns(self):
        columns = flatten(derive(173))
        assert len(columns) == 12
        assert columns['tepetzintla_credit_price'] == Decimal('290')
    
    def test_unflatten_reads_back(self):
        table = derive(173)
        assert unflatten(flatten(table)) == table


class TestPriceFor:
    
    def test_price_by_modality(self):
        table = derive(173)
        assert price_for(table, 'aquismon', PaymentModality.CONTADO) == Decimal('190')
        assert price_for(table, 'aquismon', 'Apartado') == Decimal('190')
        assert price_for(table, 'aquismon', 'MSI') == Decimal('210')
        assert price_for(table, 'aquismon', 'Crédito') == Decimal('290')
    
    def test_missing_price_is_zero(self):
        assert price_for({}, 'cerroazul', 'Contado') == Decimal('0')
