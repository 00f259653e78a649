"""
Unit tests for category helpers.
"""

from decimal import Decimal

from praiaflow.domain import Product
from praiaflow.services.category_service import (
    filter_products, format_category, list_categories, normalize_category
)


def _product(pid, category):
    return Product(id=pid, name=pid, price=Decimal('1.00'), category=category)


def test_normalize_category():
    assert normalize_category('  Guarda-Sol ') == 'guarda-sol'
    assert normalize_category(None) == ''


def test_format_category():
    assert format_category('BEBIDAS ALCOÓLICAS') == 'Bebidas alcoólicas'
    assert format_category('para petiscar') == 'Para petiscar'
    assert format_category('') == 'Outros'
    assert format_category(None) == 'Outros'


def test_list_categories_uses_menu_order_then_alphabetical():
    products = [
        _product('a', 'Sobremesas'),
        _product('b', 'Guarda-sol'),
        _product('c', 'Massagem'),
        _product('d', 'pratos'),
        _product('e', 'Artesanato'),
    ]

    assert list_categories(products) == [
        'todas', 'guarda-sol', 'pratos', 'sobremesas', 'artesanato', 'massagem'
    ]


def test_list_categories_of_empty_catalog():
    assert list_categories([]) == ['todas']


def test_filter_products():
    products = [_product('a', 'Pratos'), _product('b', 'PRATOS'), _product('c', 'Sobremesas')]

    assert [p.id for p in filter_products(products, 'pratos')] == ['a', 'b']
    assert [p.id for p in filter_products(products, 'TODAS')] == ['a', 'b', 'c']
    assert filter_products(products, 'guarda-sol') == []


def test_uncategorized_products_have_no_tab():
    products = [_product('a', None), _product('b', ''), _product('c', 'Pratos')]

    assert list_categories(products) == ['todas', 'pratos']
    assert [p.id for p in filter_products(products, 'todas')] == ['a', 'b', 'c']
