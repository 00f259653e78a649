"""Product Option model."""
import uuid

from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from praiaflow.database import Base


class ProductOption(Base):
    """Named variant of a product (e.g. size)."""

    __tablename__ = 'product_option'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(String(36), ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    label = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    # Relationships
    product = relationship('Product', back_populates='options')

    def __repr__(self):
        return f"<ProductOption(id={self.id}, product_id={self.product_id}, label='{self.label}')>"
