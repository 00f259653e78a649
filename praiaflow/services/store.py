"""
Order store contract.

The cart engine talks to persistence only through this interface: two reads
for the catalog and the writes of the submission protocol. Implementations
raise ``StoreError`` for any back-end failure.
"""
import abc
from typing import Any, Dict, List

from flask import Flask, current_app

from praiaflow.domain import Order, OrderLine


class StoreError(Exception):
    """Any failure talking to the order store."""


class OrderStore(abc.ABC):
    """Read the stall catalog and persist submitted orders."""

    @abc.abstractmethod
    def fetch_products(self, stall_id: str) -> List[Dict[str, Any]]:
        """
        Active product rows of the stall.

        Rows use the keys ``id``, ``name``, ``price``, ``category`` and
        ``active``; the catalog loader validates them.
        """

    @abc.abstractmethod
    def fetch_options(self, stall_id: str) -> List[Dict[str, Any]]:
        """Active option rows (``id``, ``product_id``, ``label``, ``active``)."""

    @abc.abstractmethod
    def create_order(self, header: Order) -> Order:
        """Insert the header and return it with the generated ``id``."""

    @abc.abstractmethod
    def create_order_lines(self, lines: List[OrderLine]) -> None:
        """Bulk insert the lines of one order."""

    @abc.abstractmethod
    def delete_order(self, order_id: str) -> None:
        """Delete a header that was left without lines."""


def build_store(app: Flask) -> OrderStore:
    """Create the store selected by ``STORE_BACKEND``."""
    backend = (app.config.get('STORE_BACKEND') or 'sql').lower()

    if backend == 'sql':
        from praiaflow.services.sql_store import SqlOrderStore
        return SqlOrderStore()

    if backend == 'supabase':
        from praiaflow.services.supabase_store import SupabaseOrderStore
        return SupabaseOrderStore(
            base_url=app.config.get('SUPABASE_URL'),
            api_key=app.config.get('SUPABASE_KEY'),
            timeout=app.config.get('SUPABASE_TIMEOUT', 10),
        )

    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def init_store(app: Flask) -> None:
    """Attach the configured store to the app."""
    app.extensions['order_store'] = build_store(app)


def get_store() -> OrderStore:
    """Store bound to the current app."""
    return current_app.extensions['order_store']
