"""Product model."""
import uuid

from sqlalchemy import Column, String, Boolean, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from praiaflow.database import Base


class Product(Base):
    """Product offered by a stall (produto)."""

    __tablename__ = 'product'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    stall_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    options = relationship('ProductOption', back_populates='product', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stall_id='{self.stall_id}')>"
