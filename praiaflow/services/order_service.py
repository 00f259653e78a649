"""
Order submission - turns a cart into an order header plus its lines.

Protocol:
    1. validate locally (no store call on failure)
    2. create the header, get its id
    3. bulk insert the lines under that id
    4. if step 3 fails, delete the header again before reporting
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from praiaflow.domain import Cart, CartLine, Order, OrderLine, OrderStatus
from praiaflow.exceptions import (
    EmptyCartError, MissingIdentityError, MissingOptionError, OrderHeaderCreateError,
    OrderLinesCreateError, StallNotConfiguredError
)
from praiaflow.services.catalog_service import Catalog
from praiaflow.services.store import OrderStore, StoreError
from praiaflow.utils.formatters import CENT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """A fully persisted order."""

    order: Order
    lines: List[OrderLine]
    message: str


def cart_total(lines: Iterable[CartLine]) -> Decimal:
    """Sum of unit price x quantity over the lines with positive quantity."""
    total = Decimal('0')
    for line in lines:
        if not line.is_pending:
            total += line.subtotal
    return total.quantize(CENT)


def success_message(location: str) -> str:
    return f'Pedido enviado com sucesso! Entrega em: {location}'


def validate_cart(stall_id: Optional[str], cart: Cart, catalog: Optional[Catalog]) -> None:
    """
    Check the cart can be submitted.

    Raises:
        StallNotConfiguredError: no stall id.
        MissingIdentityError: empty customer name or location.
        EmptyCartError: no line with positive quantity.
        MissingOptionError: an optioned product has no option chosen.
    """
    if not (stall_id or '').strip():
        raise StallNotConfiguredError()

    missing = []
    if not (cart.customer_name or '').strip():
        missing.append('customer_name')
    if not (cart.location or '').strip():
        missing.append('location')
    if missing:
        raise MissingIdentityError(missing)

    if cart.is_empty():
        raise EmptyCartError()

    if catalog is not None:
        without_option = [
            line.product.name
            for line in cart.items
            if catalog.requires_option(line.product_id) and not line.option
        ]
        if without_option:
            raise MissingOptionError(without_option)


def build_order_lines(order_id: str, cart: Cart) -> List[OrderLine]:
    """Map cart lines to order lines, with the price captured in the cart."""
    return [
        OrderLine(
            order_id=order_id,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.product.price,
            notes=line.combined_notes(),
        )
        for line in cart.items
    ]


def _compensate(store: OrderStore, order_id: str) -> bool:
    """Delete a header left without lines. Returns False if it stays orphaned."""
    try:
        store.delete_order(order_id)
    except StoreError:
        logger.exception(f"[ORDER] Compensating delete failed, order {order_id} has no lines")
        return False

    logger.warning(f"[ORDER] Order {order_id} deleted after line insert failure")
    return True


def submit_cart(store: OrderStore, stall_id: str, cart: Cart, catalog: Optional[Catalog] = None) -> SubmissionResult:
    """
    Persist ``cart`` as an order of ``stall_id``.

    The cart itself is not modified; clearing it is the caller's decision.

    Raises:
        ValidationError subclasses before any store call.
        OrderHeaderCreateError: nothing was written.
        OrderLinesCreateError: header written, lines not; header deleted
            again unless ``compensated`` is False.
    """
    validate_cart(stall_id, cart, catalog)

    location = cart.location.strip()
    header = Order(
        stall_id=stall_id.strip(),
        customer_name=cart.customer_name.strip(),
        location=location,
        total=cart_total(cart.lines),
        status=OrderStatus.NEW,
    )

    try:
        order = store.create_order(header)
    except StoreError as e:
        logger.error(f"[ORDER] Header insert failed for stall {header.stall_id}: {e}")
        raise OrderHeaderCreateError() from e

    if order is None or not order.id:
        logger.error(f"[ORDER] Header insert returned no id for stall {header.stall_id}")
        raise OrderHeaderCreateError()

    lines = build_order_lines(order.id, cart)
    try:
        store.create_order_lines(lines)
    except StoreError as e:
        logger.error(f"[ORDER] Line insert failed for order {order.id}: {e}")
        compensated = _compensate(store, order.id)
        raise OrderLinesCreateError(order.id, compensated) from e

    logger.info(f"[ORDER] Order {order.id} submitted: {len(lines)} lines, total {order.total}")
    return SubmissionResult(order=order, lines=lines, message=success_message(location))
