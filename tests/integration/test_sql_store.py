"""
Integration tests for the SQLAlchemy order store.
"""

from decimal import Decimal

import pytest

from praiaflow.domain import Order, OrderLine, OrderStatus
from praiaflow.models import CustomerOrder, OrderLine as OrderLineRow
from praiaflow.services.sql_store import SqlOrderStore
from praiaflow.services.store import StoreError


@pytest.fixture
def store(session):
    return SqlOrderStore(session)


def _header(total='12.00'):
    return Order(stall_id='barraca-1', customer_name='Maria', location='Guarda-sol 12', total=Decimal(total))


def test_fetch_products_filters_stall_and_active(store, stall_catalog):
    rows = store.fetch_products('barraca-1')

    assert {row['name'] for row in rows} == {'Água', 'Açaí', 'Caipirinha'}
    assert all(row['active'] for row in rows)
    agua = next(row for row in rows if row['name'] == 'Água')
    assert agua['price'] == Decimal('5.00')
    assert agua['category'] == 'Bebidas'


def test_fetch_options_only_for_stall(store, stall_catalog):
    rows = store.fetch_options('barraca-1')

    assert {row['label'] for row in rows} == {'Pequeno', 'Grande'}
    assert {row['product_id'] for row in rows} == {stall_catalog['Açaí'].id}
    assert store.fetch_options('barraca-2') == []


def test_create_order_assigns_id(store, session):
    order = store.create_order(_header())

    assert order.id
    assert order.status == OrderStatus.NEW
    row = session.query(CustomerOrder).filter(CustomerOrder.id == order.id).one()
    assert row.total == Decimal('12.00')
    assert row.status == 'new'


def test_create_lines_and_delete_order(store, session, stall_catalog):
    product_id = stall_catalog['Açaí'].id
    order = store.create_order(_header())

    store.create_order_lines([
        OrderLine(order_id=order.id, product_id=product_id, quantity=1, unit_price=Decimal('12.00'), notes='Grande'),
    ])
    assert session.query(OrderLineRow).filter(OrderLineRow.order_id == order.id).count() == 1

    store.delete_order(order.id)

    assert session.query(CustomerOrder).count() == 0
    assert session.query(OrderLineRow).count() == 0


def test_invalid_line_rolls_back_and_raises(store, session, stall_catalog):
    order = store.create_order(_header())
    line = OrderLine(order_id=order.id, product_id=stall_catalog['Água'].id, quantity=None, unit_price=Decimal('5.00'))

    with pytest.raises(StoreError):
        store.create_order_lines([line])

    # Session is usable again and the header is still there
    assert session.query(CustomerOrder).filter(CustomerOrder.id == order.id).count() == 1
    assert session.query(OrderLineRow).count() == 0
