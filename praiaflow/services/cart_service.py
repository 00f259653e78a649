"""
Cart/order engine - in-memory cart for one stall menu session.

All mutations are synchronous and validated before touching state, so a
rejected call leaves the cart exactly as it was. The only store calls are
the catalog load and the two writes made by ``submit``.
"""
import enum
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from praiaflow.domain import Cart, CartLine, Product
from praiaflow.exceptions import CartLockedError, NotFoundError, OptionRequiredError
from praiaflow.services import order_service
from praiaflow.services.catalog_service import Catalog, CatalogLoader
from praiaflow.services.category_service import (
    ALL_CATEGORIES, filter_products, list_categories, normalize_category
)
from praiaflow.services.store import OrderStore

logger = logging.getLogger(__name__)


class CartState(str, enum.Enum):
    """Cart lifecycle: EMPTY -> COMPOSING -> SUBMITTING -> EMPTY | COMPOSING."""
    EMPTY = 'empty'
    COMPOSING = 'composing'
    SUBMITTING = 'submitting'


class OrderEngine:
    """
    Owns the cart of one customer at one stall.

    The catalog is loaded lazily through ``CatalogLoader`` the first time it
    is needed for a stall id and reused until the stall id changes.
    """

    def __init__(self, store: OrderStore, stall_id: Optional[str] = None, cart: Optional[Cart] = None,
                 catalog: Optional[Catalog] = None):
        self.store = store
        self.loader = CatalogLoader(store, catalog)
        self.stall_id = (stall_id or '').strip() or None
        self.cart = cart if cart is not None else Cart()
        self.active_category = ALL_CATEGORIES
        self.submitting = False

    # ------------------------------------------------------------------
    # Catalog and view
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        return self.loader.load(self.stall_id)

    def reload_catalog(self) -> Catalog:
        """Fetch the catalog again, e.g. after a failed load."""
        return self.loader.reload(self.stall_id)

    def set_stall(self, stall_id: Optional[str]) -> None:
        """Switch stall. Lines belong to a stall and are dropped on change."""
        self._ensure_editable()
        stall_id = (stall_id or '').strip() or None
        if stall_id == self.stall_id:
            return
        self.stall_id = stall_id
        self.active_category = ALL_CATEGORIES
        self.cart.clear()

    def select_category(self, label: Optional[str]) -> None:
        key = normalize_category(label)
        self.active_category = key or ALL_CATEGORIES

    def categories(self) -> List[str]:
        return list_categories(self.catalog.products)

    def visible_products(self) -> List[Product]:
        return filter_products(self.catalog.products, self.active_category)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CartState:
        if self.submitting:
            return CartState.SUBMITTING
        if self.cart.is_empty():
            return CartState.EMPTY
        return CartState.COMPOSING

    def total(self) -> Decimal:
        return order_service.cart_total(self.cart.lines)

    def _ensure_editable(self) -> None:
        if self.submitting:
            raise CartLockedError()

    def _resolve(self, product: Union[Product, str]) -> Product:
        """Catalog record for a product or product id."""
        product_id = product.id if isinstance(product, Product) else str(product or '').strip()
        found = self.catalog.get_product(product_id)
        if found is not None:
            return found

        # Lines restored from a snapshot keep their captured product
        line = self.cart.find(product_id)
        if line is not None:
            return line.product

        raise NotFoundError(f'Produto não encontrado: {product_id}')

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def adjust_quantity(self, product: Union[Product, str], delta: int) -> Optional[CartLine]:
        """
        Add ``delta`` to the product's quantity.

        A product without a line starts at ``delta`` (1 for the usual +1
        step), so the quantity is always the sum of the deltas applied.

        Returns the line, or None when the product has no line afterwards.

        Raises:
            OptionRequiredError: positive delta on a product with options and
                no option chosen yet.
        """
        self._ensure_editable()
        delta = int(delta)
        product = self._resolve(product)
        line = self.cart.find(product.id)

        if delta > 0 and self.catalog.requires_option(product.id) and (line is None or not line.option):
            raise OptionRequiredError(product.name)

        if line is not None:
            new_qty = line.quantity + delta
            if new_qty <= 0:
                self.cart.remove(product.id)
                return None
            line.quantity = new_qty
            return line

        if delta <= 0:
            return None

        line = CartLine(product=product, quantity=delta)
        self.cart.lines.append(line)
        return line

    def select_option(self, product_id: Union[Product, str], option_label: str) -> CartLine:
        """
        Choose the option of a product's line, creating a pending line if
        the product has none yet.

        Raises:
            NotFoundError: unknown product, or label not among its options.
        """
        self._ensure_editable()
        product = self._resolve(product_id)
        label = (option_label or '').strip()

        allowed = [o.label for o in self.catalog.options_for(product.id)]
        if label not in allowed:
            raise NotFoundError(f'Opção "{label}" não disponível para {product.name}')

        line = self.cart.find(product.id)
        if line is None:
            line = CartLine(product=product, quantity=0, option=label)
            self.cart.lines.append(line)
        else:
            line.option = label
        return line

    def set_note(self, product_id: Union[Product, str], text: Optional[str]) -> Optional[CartLine]:
        """Set the free-text note of an existing line; no-op without line."""
        self._ensure_editable()
        pid = product_id.id if isinstance(product_id, Product) else str(product_id or '').strip()
        line = self.cart.find(pid)
        if line is None:
            return None
        line.note = text or ''
        return line

    def set_customer(self, name: Optional[str] = None, location: Optional[str] = None) -> None:
        """Update the comanda name and/or the delivery location."""
        self._ensure_editable()
        if name is not None:
            self.cart.customer_name = name
        if location is not None:
            self.cart.location = location

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def validate(self) -> None:
        order_service.validate_cart(self.stall_id, self.cart, self.catalog)

    def submit(self) -> order_service.SubmissionResult:
        """
        Submit the cart as an order.

        Validation errors are raised before entering SUBMITTING. Store
        failures return the engine to COMPOSING with the cart untouched.
        On success the lines are cleared and the customer identity kept.
        """
        self._ensure_editable()
        self.validate()

        self.submitting = True
        try:
            result = order_service.submit_cart(self.store, self.stall_id, self.cart, self.catalog)
        finally:
            self.submitting = False

        self.cart.clear()
        return result

    # ------------------------------------------------------------------
    # Session snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        catalog = self.loader.catalog
        return {
            'stall_id': self.stall_id,
            'category': self.active_category,
            'cart': self.cart.to_dict(),
            'catalog': catalog.to_dict() if catalog is not None else None,
        }

    @classmethod
    def restore(cls, store: OrderStore, data: Optional[Dict[str, Any]], stall_id: Optional[str] = None) -> 'OrderEngine':
        """
        Rebuild an engine from ``snapshot()`` output.

        The saved catalog is reused when it belongs to the same stall, so a
        restored engine does not fetch it again.
        """
        data = data or {}
        catalog = None
        if data.get('catalog'):
            try:
                catalog = Catalog.from_dict(data['catalog'])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"[CART] Discarding unreadable catalog snapshot: {e}")

        engine = cls(
            store,
            stall_id=stall_id or data.get('stall_id'),
            cart=Cart.from_dict(data.get('cart')),
            catalog=catalog,
        )
        engine.select_category(data.get('category'))
        return engine
