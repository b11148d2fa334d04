"""
Integration tests for formulas and inventory pricing on the database.
"""

import pytest
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.orm import Session

from huastex.exceptions import BusinessLogicError, ValidationError, NotFoundError
from huastex.models import InventoryItem
from huastex.services.formula_service import save_formula, delete_formula, list_formulas
from huastex.services.inventory_service import (
    save_item, delete_item, preview_prices, recompute_all_prices, list_items
)


class TestFormulaService:
    
    def test_example_output_is_computed(self, session):
        formula = save_formula(session, {'name': 'Electro', 'operators': '+10+5%', 'initial_number': '100'})
        assert formula.final_number == Decimal('110.05')
    
    def test_example_output_ignores_request_value(self, session):
        formula = save_formula(session, {
            'name': 'Electro', 'operators': 'x2', 'initial_number': 50, 'final_number': 1,
        })
        assert formula.final_number == Decimal('100')
    
    def test_invalid_example_output_is_empty(self, session):
        formula = save_formula(session, {'name': 'Rota', 'operators': '/0', 'initial_number': 10})
        assert formula.final_number is None
    
    def test_operators_required(self, session):
        with pytest.raises(ValidationError):
            save_formula(session, {'name': 'Vacía', 'operators': ''})
    
    def test_operators_without_tokens(self, session):
        with pytest.raises(ValidationError):
            save_formula(session, {'name': 'Texto', 'operators': 'abc'})
    
    def test_duplicate_name(self, session, formula):
        with pytest.raises(BusinessLogicError) as exc:
            save_formula(session, {'name': 'Muebles', 'operators': '+1'})
        assert exc.value.status_code == 409
        assert len(list_formulas(session)) == 1
    
    def test_formula_in_use_cannot_be_deleted(self, session, formula):
        save_item(session, {'product': 'Sala', 'price_cost': 100, 'formula_id': formula.id})
        with pytest.raises(BusinessLogicError) as exc:
            delete_formula(session, formula.id)
        assert exc.value.status_code == 409
    
    def test_failed_delete_is_rolled_back(self, session, formula):
        formula_id = formula.id
        with patch.object(Session, 'commit', side_effect=RuntimeError('db down')):
            with pytest.raises(RuntimeError):
                delete_formula(session, formula_id)
        assert [f.name for f in list_formulas(session)] == ['Muebles']


class TestInventoryPricing:
    
    def test_automatic_prices(self, session, inventory_item):
        assert inventory_item.cerro_azul_price == Decimal('180')
        assert inventory_item.cerro_azul_msi_price == Decimal('200')
        assert inventory_item.cerro_azul_credit_price == Decimal('280')
        assert inventory_item.aquismon_price == Decimal('190')
        assert inventory_item.tlacolula_credit_price == Decimal('290')
    
    def test_formula_is_applied(self, session, formula):
        item = save_item(session, {'product': 'Comedor', 'price_cost': 100, 'formula_id': formula.id})
        # (100 + 10) x 1.16 = 127.6 -> 130
        assert item.cerro_azul_price == Decimal('130')
    
    def test_hand_typed_prices_are_overwritten_in_automatic_mode(self, session, inventory_item):
        item = save_item(session, {'cerro_azul_price': 999}, item_id=inventory_item.id)
        assert item.cerro_azul_price == Decimal('180')
    
    def test_manual_prices_are_kept(self, session):
        item = save_item(session, {
            'product': 'Colchón',
            'price_cost': 173,
            'manual_pricing': True,
            'cerro_azul_price': '999.50',
            'cerro_azul_msiPrice': 1100,
        })
        assert item.cerro_azul_price == Decimal('999.50')
        assert item.cerro_azul_msi_price == Decimal('1100')
        assert item.aquismon_price is None
    
    def test_zero_cost_keeps_prices(self, session, inventory_item):
        item = save_item(session, {'price_cost': 0}, item_id=inventory_item.id)
        assert item.cerro_azul_price == Decimal('180')
    
    def test_negative_cost_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            save_item(session, {'product': 'Estufa', 'price_cost': -5})
        assert exc.value.payload == {'field': 'price_cost'}
        assert session.query(InventoryItem).count() == 0
    
    def test_cost_too_large_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            save_item(session, {'product': 'Estufa', 'price_cost': '1' + '0' * 12})
        assert exc.value.payload == {'field': 'price_cost'}
    
    def test_unknown_formula(self, session):
        with pytest.raises(NotFoundError):
            save_item(session, {'product': 'Estufa', 'price_cost': 5, 'formula_id': 999})
    
    def test_preview_prices(self, session, formula):
        table = preview_prices(session, '100', formula.id)
        assert table['cerroazul']['cash'] == Decimal('130')
        assert preview_prices(session, '') is None
    
    def test_saving_formula_reprices_its_items(self, session, formula):
        item = save_item(session, {'product': 'Comedor', 'price_cost': 100, 'formula_id': formula.id})
        manual = save_item(session, {
            'product': 'Colchón', 'price_cost': 100, 'formula_id': formula.id,
            'manual_pricing': True, 'cerro_azul_price': 5,
        })
        other = save_item(session, {'product': 'Estufa', 'price_cost': 100})
        item_id, manual_id, other_id = item.id, manual.id, other.id
        assert item.cerro_azul_price == Decimal('130')
        
        save_formula(session, {'name': 'Muebles', 'operators': 'x2'}, formula_id=formula.id)
        session.expire_all()
        
        assert session.get(InventoryItem, item_id).cerro_azul_price == Decimal('200')
        assert session.get(InventoryItem, item_id).aquismon_price == Decimal('210')
        assert session.get(InventoryItem, manual_id).cerro_azul_price == Decimal('5')
        assert session.get(InventoryItem, other_id).cerro_azul_price == Decimal('100')
    
    def test_recompute_after_formula_change(self, session, formula):
        item = save_item(session, {'product': 'Comedor', 'price_cost': 100, 'formula_id': formula.id})
        manual = save_item(session, {'product': 'Colchón', 'manual_pricing': True, 'cerro_azul_price': 5})
        item_id, manual_id = item.id, manual.id
        
        # Edited outside the service, so nothing re-derived the item yet
        formula.operators = 'x2'
        session.commit()
        assert session.get(InventoryItem, item_id).cerro_azul_price == Decimal('130')
        
        assert recompute_all_prices(session) == 1
        
        assert session.get(InventoryItem, item_id).cerro_azul_price == Decimal('200')
        assert session.get(InventoryItem, manual_id).cerro_azul_price == Decimal('5')
    
    def test_recompute_dry_run(self, session, formula):
        item = save_item(session, {'product': 'Comedor', 'price_cost': 100, 'formula_id': formula.id})
        item_id = item.id
        formula.operators = 'x2'
        session.commit()
        
        assert recompute_all_prices(session, commit=False) == 1
        assert session.get(InventoryItem, item_id).cerro_azul_price == Decimal('130')
    
    def test_failed_delete_is_rolled_back(self, session, inventory_item):
        item_id = inventory_item.id
        with patch.object(Session, 'commit', side_effect=RuntimeError('db down')):
            with pytest.raises(RuntimeError):
                delete_item(session, item_id)
        assert session.get(InventoryItem, item_id) is not None
        assert session.query(InventoryItem).count() == 1
    
    def test_search(self, session, inventory_item):
        assert [i.product for i in list_items(session, 'SN-0001')] == ['Refrigerador 11 pies']
        assert list_items(session, 'lavadora') == []
