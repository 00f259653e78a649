"""
Unit tests for the catalog loader.
"""

import pytest
from decimal import Decimal

from praiaflow.services.catalog_service import (
    Catalog, CatalogLoader, CatalogStatus, load_catalog, parse_product
)


class TestLoadCatalog:
    """Tests for load_catalog."""

    def test_without_stall_is_not_configured(self, fake_store):
        catalog = load_catalog(fake_store, '   ')

        assert catalog.status == CatalogStatus.NOT_CONFIGURED
        assert catalog.is_empty()
        assert fake_store.calls == []

    def test_loads_typed_products_and_grouped_options(self, fake_store):
        catalog = load_catalog(fake_store, 'barraca-1')

        assert catalog.status == CatalogStatus.LOADED
        assert [p.id for p in catalog.products] == ['p1', 'p2', 'p3']
        assert catalog.get_product('p3').price == Decimal('8.50')
        assert [o.label for o in catalog.options_for('p2')] == ['Pequeno', 'Grande']
        assert catalog.requires_option('p2') is True
        assert catalog.requires_option('p1') is False

    def test_failure_degrades_to_empty_catalog(self, fake_store):
        fake_store.fail_on.add('fetch_products')

        catalog = load_catalog(fake_store, 'barraca-1')

        assert catalog.status == CatalogStatus.FAILED
        assert catalog.is_empty()
        assert catalog.error.message == 'Erro ao carregar o cardápio.'

    def test_option_failure_fails_the_whole_load(self, fake_store):
        fake_store.fail_on.add('fetch_options')

        catalog = load_catalog(fake_store, 'barraca-1')

        assert catalog.status == CatalogStatus.FAILED
        assert catalog.products == ()

    def test_invalid_and_inactive_rows_are_skipped(self, fake_store):
        fake_store.products += [
            {'id': 'p4', 'name': '', 'price': 3},
            {'id': 'p5', 'name': 'Grátis?', 'price': -1},
            {'id': 'p6', 'name': 'Sem preço', 'price': None},
            {'id': 'p7', 'name': 'Picolé', 'price': 4, 'active': False},
            {'id': 'p1', 'name': 'Água duplicada', 'price': 6},
            {'id': None, 'name': 'Sem id', 'price': 2},
        ]

        catalog = load_catalog(fake_store, 'barraca-1')

        assert [p.id for p in catalog.products] == ['p1', 'p2', 'p3']
        assert catalog.get_product('p1').name == 'Água'

    def test_orphan_and_inactive_options_are_dropped(self, fake_store):
        fake_store.options += [
            {'id': 'o3', 'product_id': 'p99', 'label': 'Grande', 'active': True},
            {'id': 'o4', 'product_id': 'p1', 'label': 'Com gelo', 'active': False},
            {'id': 'o5', 'product_id': 'p2', 'label': 'Grande', 'active': True},
            {'id': 'o6', 'product_id': 'p3', 'label': '  ', 'active': True},
        ]

        catalog = load_catalog(fake_store, 'barraca-1')

        assert set(catalog.options) == {'p2'}
        assert [o.label for o in catalog.options_for('p2')] == ['Pequeno', 'Grande']


class TestParseProduct:
    """Tests for row validation."""

    def test_float_price_keeps_cents(self):
        product = parse_product({'id': 10, 'name': ' Coco ', 'price': 7.1, 'category': None})

        assert product.id == '10'
        assert product.name == 'Coco'
        assert product.price == Decimal('7.10')
        assert product.category == ''

    def test_rejects_non_numeric_price(self):
        with pytest.raises(ValueError):
            parse_product({'id': 'x', 'name': 'Coco', 'price': 'sete'})


class TestCatalogLoader:
    """The loader fetches once per distinct stall id."""

    def test_same_stall_is_not_refetched(self, fake_store):
        loader = CatalogLoader(fake_store)

        first = loader.load('barraca-1')
        second = loader.load(' barraca-1 ')

        assert first is second
        assert fake_store.calls == ['fetch_products', 'fetch_options']

    def test_failed_load_is_not_retried_automatically(self, fake_store):
        fake_store.fail_on.add('fetch_products')
        loader = CatalogLoader(fake_store)

        loader.load('barraca-1')
        fake_store.fail_on.clear()
        catalog = loader.load('barraca-1')

        assert catalog.status == CatalogStatus.FAILED
        assert fake_store.calls.count('fetch_products') == 1

    def test_new_stall_triggers_fetch(self, fake_store):
        loader = CatalogLoader(fake_store)

        loader.load('barraca-1')
        loader.load('barraca-2')

        assert fake_store.calls.count('fetch_products') == 2
        assert loader.catalog.stall_id == 'barraca-2'

    def test_seeded_loader_does_not_fetch(self, fake_store):
        saved = load_catalog(fake_store, 'barraca-1').to_dict()
        fake_store.calls.clear()

        loader = CatalogLoader(fake_store, Catalog.from_dict(saved))
        catalog = loader.load('barraca-1')

        assert fake_store.calls == []
        assert [p.id for p in catalog.products] == ['p1', 'p2', 'p3']
        assert catalog.get_product('p3').price == Decimal('8.50')
        assert [o.label for o in catalog.options_for('p2')] == ['Pequeno', 'Grande']

    def test_saved_failure_stays_failed(self, fake_store):
        fake_store.fail_on.add('fetch_products')
        saved = load_catalog(fake_store, 'barraca-1').to_dict()
        fake_store.fail_on.clear()

        catalog = CatalogLoader(fake_store, Catalog.from_dict(saved)).load('barraca-1')

        assert catalog.status == CatalogStatus.FAILED
        assert catalog.error.message == 'Erro ao carregar o cardápio.'
        assert fake_store.calls.count('fetch_products') == 1

    def test_reload_fetches_again(self, fake_store):
        fake_store.fail_on.add('fetch_products')
        loader = CatalogLoader(fake_store)
        loader.load('barraca-1')
        fake_store.fail_on.clear()

        catalog = loader.reload('barraca-1')

        assert catalog.status == CatalogStatus.LOADED
        assert fake_store.calls.count('fetch_products') == 2
