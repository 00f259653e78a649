"""Models package - exports all SQLAlchemy models."""
from praiaflow.models.product import Product
from praiaflow.models.product_option import ProductOption
from praiaflow.models.order import CustomerOrder
from praiaflow.models.order_line import OrderLine

__all__ = [
    'Product', 'ProductOption', 'CustomerOrder', 'OrderLine',
]
