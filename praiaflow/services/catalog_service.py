"""
Catalog loader - active products and options of one stall.

Rows returned by the store are validated here and turned into typed
entities. A failed load degrades to an empty catalog carrying the error;
it never blocks the cart.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from praiaflow.domain import Product, ProductOption
from praiaflow.exceptions import CatalogLoadError
from praiaflow.services.store import OrderStore, StoreError
from praiaflow.utils.formatters import to_money

logger = logging.getLogger(__name__)


class CatalogStatus(str, enum.Enum):
    """Outcome of a catalog load."""
    LOADED = 'loaded'
    NOT_CONFIGURED = 'not_configured'
    FAILED = 'failed'


@dataclass(frozen=True)
class Catalog:
    """Read-only catalog snapshot for one stall."""

    stall_id: Optional[str]
    status: CatalogStatus
    products: Tuple[Product, ...] = ()
    options: Dict[str, Tuple[ProductOption, ...]] = field(default_factory=dict)
    error: Optional[CatalogLoadError] = None

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def options_for(self, product_id: str) -> Tuple[ProductOption, ...]:
        return self.options.get(product_id, ())

    def requires_option(self, product_id: str) -> bool:
        return bool(self.options_for(product_id))

    def is_empty(self) -> bool:
        return not self.products

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stall_id': self.stall_id,
            'status': self.status.value,
            'products': [p.to_dict() for p in self.products],
            'options': {pid: [o.to_dict() for o in opts] for pid, opts in self.options.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Catalog':
        """
        Rebuild a catalog saved with ``to_dict``.

        A failed catalog keeps its status, so it is not fetched again.
        """
        status = CatalogStatus(data['status'])
        stall_id = data.get('stall_id')
        error = None
        if status == CatalogStatus.FAILED:
            error = CatalogLoadError(payload={'stall_id': stall_id})
        return cls(
            stall_id=stall_id,
            status=status,
            products=tuple(Product.from_dict(p) for p in data.get('products', [])),
            options={
                str(pid): tuple(ProductOption.from_dict(o) for o in opts)
                for pid, opts in (data.get('options') or {}).items()
            },
            error=error,
        )


def _clean_id(value: Any) -> str:
    text = str(value).strip() if value is not None else ''
    if not text:
        raise ValueError('missing id')
    return text


def parse_product(row: Mapping[str, Any]) -> Product:
    """
    Build a Product from a store row.

    Raises:
        ValueError: missing id/name or negative/invalid price.
    """
    name = str(row.get('name') or '').strip()
    if not name:
        raise ValueError('missing name')

    price = to_money(row.get('price'))
    if price < 0:
        raise ValueError(f'negative price {price}')

    return Product(
        id=_clean_id(row.get('id')),
        name=name,
        price=price,
        category=str(row.get('category') or '').strip(),
        active=bool(row.get('active', True)),
    )


def parse_option(row: Mapping[str, Any]) -> ProductOption:
    """
    Build a ProductOption from a store row.

    Raises:
        ValueError: missing id/product_id/label.
    """
    label = str(row.get('label') or '').strip()
    if not label:
        raise ValueError('missing label')

    return ProductOption(
        id=_clean_id(row.get('id')),
        product_id=_clean_id(row.get('product_id')),
        label=label,
        active=bool(row.get('active', True)),
    )


def _build_products(rows: List[Mapping[str, Any]]) -> List[Product]:
    products: List[Product] = []
    seen = set()
    for row in rows:
        try:
            product = parse_product(row)
        except ValueError as e:
            logger.warning(f"[CATALOG] Skipping product row {row.get('id')!r}: {e}")
            continue
        if not product.active or product.id in seen:
            continue
        seen.add(product.id)
        products.append(product)
    return products


def _group_options(rows: List[Mapping[str, Any]], product_ids) -> Dict[str, Tuple[ProductOption, ...]]:
    grouped: Dict[str, List[ProductOption]] = {}
    for row in rows:
        try:
            option = parse_option(row)
        except ValueError as e:
            logger.warning(f"[CATALOG] Skipping option row {row.get('id')!r}: {e}")
            continue
        if not option.active or option.product_id not in product_ids:
            continue
        labels = [o.label for o in grouped.get(option.product_id, [])]
        if option.label in labels:
            continue
        grouped.setdefault(option.product_id, []).append(option)
    return {pid: tuple(opts) for pid, opts in grouped.items()}


def load_catalog(store: OrderStore, stall_id: Optional[str]) -> Catalog:
    """Fetch and validate the catalog of ``stall_id``."""
    stall_id = (stall_id or '').strip() or None
    if stall_id is None:
        return Catalog(stall_id=None, status=CatalogStatus.NOT_CONFIGURED)

    try:
        product_rows = store.fetch_products(stall_id)
        option_rows = store.fetch_options(stall_id)
    except StoreError as e:
        logger.warning(f"[CATALOG] Load failed for stall {stall_id}: {e}")
        return Catalog(
            stall_id=stall_id,
            status=CatalogStatus.FAILED,
            error=CatalogLoadError(payload={'stall_id': stall_id}),
        )

    products = _build_products(product_rows or [])
    options = _group_options(option_rows or [], {p.id for p in products})

    logger.info(f"[CATALOG] Stall {stall_id}: {len(products)} products, {len(options)} with options")
    return Catalog(
        stall_id=stall_id,
        status=CatalogStatus.LOADED,
        products=tuple(products),
        options=options,
    )


class CatalogLoader:
    """
    Loads a stall catalog once per distinct stall id.

    ``catalog`` seeds the loader with a catalog loaded earlier (e.g. kept in
    the session); it is reused while the stall id stays the same.
    """

    def __init__(self, store: OrderStore, catalog: Optional[Catalog] = None):
        self.store = store
        self._catalog: Optional[Catalog] = catalog

    @property
    def catalog(self) -> Optional[Catalog]:
        return self._catalog

    def load(self, stall_id: Optional[str]) -> Catalog:
        stall_id = (stall_id or '').strip() or None
        if self._catalog is not None and self._catalog.stall_id == stall_id:
            return self._catalog

        self._catalog = load_catalog(self.store, stall_id)
        return self._catalog

    def reload(self, stall_id: Optional[str]) -> Catalog:
        """Fetch again, even for the same stall. Used for an explicit retry."""
        self._catalog = None
        return self.load(stall_id)
