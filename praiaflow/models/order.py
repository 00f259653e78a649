"""Customer Order model."""
import uuid

from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from praiaflow.database import Base
from praiaflow.domain import OrderStatus


class CustomerOrder(Base):
    """Order header (pedido) submitted from a stall menu."""

    __tablename__ = 'customer_order'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    stall_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False)  # comanda
    location = Column(String, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.NEW.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    lines = relationship('OrderLine', back_populates='order', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<CustomerOrder(id={self.id}, total={self.total}, status={self.status})>"
