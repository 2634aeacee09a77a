import pytest
from datetime import date
from decimal import Decimal

from webshop import create_app, database
from webshop.models import Order, OrderLine
from webshop.services.auth_service import SESSION_USER_KEY
from webshop.services.cart_service import Cart
from webshop.services.catalog_service import StaticCatalog, StaticPromotionRegistry

CUSTOMER_EMAIL = 'client@example.com'


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing (fresh in-memory database)."""
    app = create_app('config.TestConfig')
    with app.app_context():
        database.create_tables()
        yield app
        database.get_session().remove()
        database.drop_tables()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session shared with the requests of the test."""
    session = database.get_session()
    yield session
    session.rollback()


@pytest.fixture
def catalog():
    return StaticCatalog()


@pytest.fixture
def promotions():
    return StaticPromotionRegistry()


@pytest.fixture
def cart(catalog, promotions):
    """Empty cart with a fixed date so expiry checks are deterministic."""
    return Cart(catalog, promotions, tax_rate=Decimal('0.20'), today=lambda: date(2026, 3, 1))


@pytest.fixture(scope='function')
def logged_in_client(client):
    """Test client with a demo customer in the session."""
    with client.session_transaction() as flask_session:
        flask_session[SESSION_USER_KEY] = {
            'id': 'demo-test',
            'email': CUSTOMER_EMAIL,
            'name': 'Camille Martin',
            'role': 'client',
        }
    return client


def make_order(session, **overrides):
    """Insert a pending card order for CUSTOMER_EMAIL."""
    fields = dict(
        order_reference='WS-2026-TEST',
        customer_email=CUSTOMER_EMAIL,
        customer_first_name='Camille',
        customer_last_name='Martin',
        billing_address='12 rue des Lilas',
        billing_postal_code='75011',
        billing_city='Paris',
        billing_country='France',
        payment_method='card',
        subtotal=Decimal('499.00'),
        discount_amount=Decimal('0.00'),
        tax_amount=Decimal('99.80'),
        total_amount=Decimal('598.80'),
    )
    fields.update(overrides)
    order = Order(**fields)
    order.lines.append(OrderLine(
        product_id='site-vitrine',
        product_name_snapshot='Site Vitrine',
        quantity=1,
        unit_price=Decimal('499.00'),
        line_total=Decimal('499.00'),
    ))
    session.add(order)
    session.commit()
    return order


@pytest.fixture(scope='function')
def order_42(session):
    """Pending order with primary key 42."""
    return make_order(session, id=42)


@pytest.fixture
def order_factory(session):
    """Insert orders with custom fields: order_factory(order_reference='WS-2026-AAAA')."""
    return lambda **overrides: make_order(session, **overrides)
