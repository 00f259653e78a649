"""
Typed entities for the menu and ordering flow.

These are plain dataclasses, independent from the storage back-end. Stores
convert their rows into ``Product`` / ``ProductOption`` on the way in and
receive ``Order`` / ``OrderLine`` on the way out.
"""
import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from praiaflow.utils.formatters import to_money


class OrderStatus(str, enum.Enum):
    """Order status as written on the header."""
    NEW = 'new'


@dataclass(frozen=True)
class Product:
    """A catalog product, read-only copy of the store row."""

    id: str
    name: str
    price: Decimal
    category: str = ''
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': str(self.price),
            'category': self.category,
            'active': self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            price=to_money(data['price']),
            category=str(data.get('category') or ''),
            active=bool(data.get('active', True)),
        )


@dataclass(frozen=True)
class ProductOption:
    """A named variant of a product (e.g. size)."""

    id: str
    product_id: str
    label: str
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'label': self.label,
            'active': self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductOption':
        return cls(
            id=str(data['id']),
            product_id=str(data['product_id']),
            label=str(data['label']),
            active=bool(data.get('active', True)),
        )


@dataclass
class CartLine:
    """
    One product in the cart.

    ``quantity`` is 0 only for a line created by choosing an option before
    adding any quantity; such a line is pending and is neither totalled nor
    submitted.
    """

    product: Product
    quantity: int = 0
    note: str = ''
    option: Optional[str] = None

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def is_pending(self) -> bool:
        return self.quantity <= 0

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity

    def combined_notes(self) -> str:
        """Notes as persisted on the order line."""
        note = (self.note or '').strip()
        if self.option:
            return f'{self.option} - {note}' if note else self.option
        return note

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product': self.product.to_dict(),
            'quantity': self.quantity,
            'note': self.note,
            'option': self.option,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartLine':
        return cls(
            product=Product.from_dict(data['product']),
            quantity=int(data.get('quantity', 0)),
            note=str(data.get('note') or ''),
            option=data.get('option') or None,
        )


@dataclass
class Cart:
    """The customer's unsubmitted selection plus the identity fields."""

    lines: List[CartLine] = field(default_factory=list)
    customer_name: str = ''
    location: str = ''

    def find(self, product_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    @property
    def items(self) -> List[CartLine]:
        """Lines carrying a positive quantity, in insertion order."""
        return [line for line in self.lines if not line.is_pending]

    def is_empty(self) -> bool:
        return not self.items

    def clear(self) -> None:
        """Drop every line. Customer identity is kept."""
        self.lines = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lines': [line.to_dict() for line in self.lines],
            'customer_name': self.customer_name,
            'location': self.location,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Cart':
        if not data:
            return cls()

        cart = cls(
            customer_name=str(data.get('customer_name') or ''),
            location=str(data.get('location') or ''),
        )
        for raw in data.get('lines', []):
            line = CartLine.from_dict(raw)
            # Snapshots are client-held; re-apply the line invariants
            if line.quantity < 0 or (line.is_pending and not line.option):
                continue
            if cart.find(line.product_id) is None:
                cart.lines.append(line)
        return cart


@dataclass(frozen=True)
class Order:
    """Order header. ``id`` is assigned by the store."""

    stall_id: str
    customer_name: str
    location: str
    total: Decimal
    status: OrderStatus = OrderStatus.NEW
    id: Optional[str] = None


@dataclass(frozen=True)
class OrderLine:
    """One persisted line under an order header."""

    order_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    notes: str = ''
