"""Order store backed by the application's SQLAlchemy database."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from praiaflow import models
from praiaflow.database import get_session
from praiaflow.domain import Order, OrderLine
from praiaflow.services.store import OrderStore, StoreError

logger = logging.getLogger(__name__)


class SqlOrderStore(OrderStore):
    """
    Stall catalog and orders in the local database.

    Every write is committed on its own so the store behaves like a remote
    API: a header survives even if the lines written afterwards fail.
    """

    def __init__(self, session: Optional[Session] = None):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else get_session()

    def fetch_products(self, stall_id: str) -> List[Dict[str, Any]]:
        try:
            rows = self.session.query(models.Product).filter(
                models.Product.stall_id == stall_id,
                models.Product.active == True  # noqa: E712
            ).order_by(models.Product.name).all()
        except SQLAlchemyError as e:
            raise StoreError(f'Error reading products: {e}') from e

        return [
            {
                'id': p.id,
                'name': p.name,
                'price': p.price,
                'category': p.category,
                'active': p.active,
            }
            for p in rows
        ]

    def fetch_options(self, stall_id: str) -> List[Dict[str, Any]]:
        try:
            rows = (self.session.query(models.ProductOption)
                    .join(models.Product)
                    .filter(
                        models.Product.stall_id == stall_id,
                        models.ProductOption.active == True  # noqa: E712
                    )
                    .order_by(models.ProductOption.label)
                    .all())
        except SQLAlchemyError as e:
            raise StoreError(f'Error reading product options: {e}') from e

        return [
            {
                'id': o.id,
                'product_id': o.product_id,
                'label': o.label,
                'active': o.active,
            }
            for o in rows
        ]

    def create_order(self, header: Order) -> Order:
        session = self.session
        row = models.CustomerOrder(
            stall_id=header.stall_id,
            customer_name=header.customer_name,
            location=header.location,
            total=header.total,
            status=header.status.value,
        )
        try:
            session.add(row)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f'Error creating order: {e}') from e

        logger.info(f"[STORE] Order {row.id} created for stall {header.stall_id}")
        return Order(
            id=row.id,
            stall_id=header.stall_id,
            customer_name=header.customer_name,
            location=header.location,
            total=header.total,
            status=header.status,
        )

    def create_order_lines(self, lines: List[OrderLine]) -> None:
        session = self.session
        try:
            session.add_all([
                models.OrderLine(
                    order_id=line.order_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    notes=line.notes,
                )
                for line in lines
            ])
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f'Error creating order lines: {e}') from e

    def delete_order(self, order_id: str) -> None:
        session = self.session
        try:
            session.query(models.OrderLine).filter(
                models.OrderLine.order_id == order_id
            ).delete(synchronize_session=False)
            session.query(models.CustomerOrder).filter(
                models.CustomerOrder.id == order_id
            ).delete(synchronize_session=False)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f'Error deleting order {order_id}: {e}') from e
