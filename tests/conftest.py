import pytest
from dataclasses import replace

from praiaflow import create_app
from praiaflow import database
from praiaflow.cli_commands import seed_catalog
from praiaflow.models import Product
from praiaflow.services.cart_service import OrderEngine
from praiaflow.services.store import OrderStore, StoreError


STALL_ID = 'barraca-1'


class FakeStore(OrderStore):
    """In-memory order store that records every call."""

    def __init__(self, products=None, options=None):
        self.products = list(products or [])
        self.options = list(options or [])
        self.orders = {}
        self.lines = []
        self.calls = []
        self.fail_on = set()
        self.return_no_id = False
        self._next_id = 1

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise StoreError(f'{name} failed')

    @property
    def write_calls(self):
        return [c for c in self.calls if not c.startswith('fetch_')]

    def fetch_products(self, stall_id):
        self._call('fetch_products')
        return [dict(row) for row in self.products]

    def fetch_options(self, stall_id):
        self._call('fetch_options')
        return [dict(row) for row in self.options]

    def create_order(self, header):
        self._call('create_order')
        if self.return_no_id:
            return header
        order_id = f'order-{self._next_id}'
        self._next_id += 1
        order = replace(header, id=order_id)
        self.orders[order_id] = order
        return order

    def create_order_lines(self, lines):
        self._call('create_order_lines')
        self.lines.extend(lines)

    def delete_order(self, order_id):
        self._call('delete_order')
        self.orders.pop(order_id, None)


@pytest.fixture(scope='function')
def product_rows():
    """Catalog rows: plain drink, optioned dessert, alcoholic drink."""
    return [
        {'id': 'p1', 'name': 'Água', 'price': 5.00, 'category': 'Bebidas', 'active': True},
        {'id': 'p2', 'name': 'Açaí', 'price': '12.00', 'category': 'Sobremesas', 'active': True},
        {'id': 'p3', 'name': 'Cerveja', 'price': 8.5, 'category': 'Bebidas Alcoólicas', 'active': True},
    ]


@pytest.fixture(scope='function')
def option_rows():
    return [
        {'id': 'o1', 'product_id': 'p2', 'label': 'Pequeno', 'active': True},
        {'id': 'o2', 'product_id': 'p2', 'label': 'Grande', 'active': True},
    ]


@pytest.fixture(scope='function')
def fake_store(product_rows, option_rows):
    return FakeStore(product_rows, option_rows)


@pytest.fixture(scope='function')
def engine(fake_store):
    """Engine on STALL_ID with an identified customer."""
    engine = OrderEngine(fake_store, stall_id=STALL_ID)
    engine.set_customer(name='Maria', location='Guarda-sol 12')
    return engine


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing (fresh in-memory database)."""
    app = create_app('config.TestingConfig')
    yield app
    database.get_session().remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = database.get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def stall_catalog(session):
    """Seed STALL_ID with three products (one with options) and return them by name."""
    seed_catalog(session, {
        'stall_id': STALL_ID,
        'products': [
            {'name': 'Água', 'price': 5, 'category': 'Bebidas'},
            {'name': 'Açaí', 'price': '12.00', 'category': 'Sobremesas', 'options': ['Pequeno', 'Grande']},
            {'name': 'Caipirinha', 'price': '18.50', 'category': 'bebidas alcoólicas'},
            {'name': 'Picolé', 'price': 4, 'category': 'Sobremesas', 'active': False},
        ],
    })
    seed_catalog(session, {
        'stall_id': 'barraca-2',
        'products': [{'name': 'Milho', 'price': 7, 'category': 'Para petiscar'}],
    })
    products = session.query(Product).filter(Product.stall_id == STALL_ID).all()
    return {p.name: p for p in products}
