"""Order Line model."""
from sqlalchemy import Column, BigInteger, Integer, String, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from praiaflow.database import Base


class OrderLine(Base):
    """One line (item) of a customer order."""

    __tablename__ = 'order_line'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey('customer_order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey('product.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=False, default='')

    # Relationships
    order = relationship('CustomerOrder', back_populates='lines')
    product = relationship('Product')

    def __repr__(self):
        return f"<OrderLine(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
