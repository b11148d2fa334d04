import pytest
from datetime import date

from huastex import create_app
from huastex.database import db_session, get_session, create_all, drop_all
from huastex.models import Formula


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(autouse=True)
def _clean_database(app):
    """Every test starts from empty tables."""
    db_session.remove()
    drop_all()
    create_all()
    yield
    db_session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture
def today():
    return date(2024, 3, 1)


@pytest.fixture(scope='function')
def formula(session):
    """Formula adding 10 and then multiplying by 1.16."""
    formula = Formula(name='Muebles', operators='+10x1.16')
    session.add(formula)
    session.commit()
    return formula


@pytest.fixture(scope='function')
def inventory_item(session):
    """Automatic-pricing item with cost 173 and no formula (reference price 180)."""
    from huastex.services.inventory_service import save_item
    return save_item(session, {
        'product': 'Refrigerador 11 pies',
        'model': 'RT11',
        'serial_number': 'SN-0001',
        'price_cost': '173',
    })


def credit_sale_data(**overrides):
    """Crédito sale of one 1000 product with 10% discount and 200 enganche."""
    data = {
        'nombre': 'María López',
        'email': 'maria@example.com',
        'phone': '7891234567',
        'sucursal': 'cerroazul',
        'forma_de_pago': 'Crédito',
        'fecha': '2024-03-01',
        'discount': 10,
        'enganche': 200,
        'plazo': {'value': 10, 'unit': 'weeks'},
        'products': [{'producto': 'Sala modular', 'unit_price': 1000, 'quantity': 1}],
    }
    data.update(overrides)
    return data

