"""Order store backed by a Supabase (PostgREST) project."""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from praiaflow.domain import Order, OrderLine, OrderStatus
from praiaflow.services.store import OrderStore, StoreError

logger = logging.getLogger(__name__)

# Status values as stored in the pedidos table
STATUS_VALUES = {
    OrderStatus.NEW: 'novo',
}


def _json_amount(value: Decimal) -> float:
    return float(value)


class SupabaseOrderStore(OrderStore):
    """
    PostgREST client for the stall menu tables in Supabase.

    Tables: ``produtos``, ``produto_opcoes``, ``pedidos``, ``itens_pedido``.
    """

    PRODUCTS_TABLE = 'produtos'
    OPTIONS_TABLE = 'produto_opcoes'
    ORDERS_TABLE = 'pedidos'
    ORDER_LINES_TABLE = 'itens_pedido'

    def __init__(self, base_url: Optional[str], api_key: Optional[str], timeout: int = 10):
        """
        Initialize the PostgREST client.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: anon or service key sent as ``apikey`` and bearer token
            timeout: seconds per request
        """
        if not base_url:
            raise ValueError("SUPABASE_URL is required")
        if not api_key:
            raise ValueError("SUPABASE_KEY is required")

        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.headers = {
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        }

    def _url(self, table: str) -> str:
        return f"{self.rest_url}/{table}"

    def _get(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = requests.get(self._url(table), params=params, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"[SUPABASE] GET {table} failed: {e}")
            raise StoreError(f'Error reading {table}: {e}') from e

        if not isinstance(data, list):
            raise StoreError(f'Unexpected response reading {table}')
        return data

    def fetch_products(self, stall_id: str) -> List[Dict[str, Any]]:
        rows = self._get(self.PRODUCTS_TABLE, {
            'select': '*',
            'barraca_id': f'eq.{stall_id}',
            'ativo': 'eq.true',
        })
        return [
            {
                'id': row.get('id'),
                'name': row.get('nome'),
                'price': row.get('preco'),
                'category': row.get('categoria'),
                'active': row.get('ativo', True),
            }
            for row in rows
        ]

    def fetch_options(self, stall_id: str) -> List[Dict[str, Any]]:
        # Options carry no stall column; the loader drops the ones whose
        # product is not in the stall catalog.
        rows = self._get(self.OPTIONS_TABLE, {
            'select': '*',
            'ativo': 'eq.true',
        })
        return [
            {
                'id': row.get('id'),
                'product_id': row.get('produto_id'),
                'label': row.get('nome'),
                'active': row.get('ativo', True),
            }
            for row in rows
        ]

    def create_order(self, header: Order) -> Order:
        payload = [{
            'barraca_id': header.stall_id,
            'comanda': header.customer_name,
            'local': header.location,
            'total': _json_amount(header.total),
            'status': STATUS_VALUES[header.status],
        }]
        headers = dict(self.headers, Prefer='return=representation')

        try:
            response = requests.post(self._url(self.ORDERS_TABLE), json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[SUPABASE] Error creating order: {e}")
            raise StoreError(f'Error creating order: {e}') from e

        row = data[0] if isinstance(data, list) and data else data
        order_id = row.get('id') if isinstance(row, dict) else None
        if not order_id:
            raise StoreError('Order created without identifier')

        logger.info(f"[SUPABASE] Order {order_id} created for stall {header.stall_id}")
        return Order(
            id=str(order_id),
            stall_id=header.stall_id,
            customer_name=header.customer_name,
            location=header.location,
            total=header.total,
            status=header.status,
        )

    def create_order_lines(self, lines: List[OrderLine]) -> None:
        payload = [
            {
                'pedido_id': line.order_id,
                'produto_id': line.product_id,
                'quantidade': line.quantity,
                'preco_unitario': _json_amount(line.unit_price),
                'observacoes': line.notes,
            }
            for line in lines
        ]
        headers = dict(self.headers, Prefer='return=minimal')

        try:
            response = requests.post(self._url(self.ORDER_LINES_TABLE), json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"[SUPABASE] Error creating order lines: {e}")
            raise StoreError(f'Error creating order lines: {e}') from e

    def delete_order(self, order_id: str) -> None:
        try:
            response = requests.delete(
                self._url(self.ORDERS_TABLE),
                params={'id': f'eq.{order_id}'},
                headers=self.headers,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"[SUPABASE] Error deleting order {order_id}: {e}")
            raise StoreError(f'Error deleting order {order_id}: {e}') from e
