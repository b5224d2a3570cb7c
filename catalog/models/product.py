from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)

from catalog.database import Base

# Upper bound of the 32-bit INTEGER stock column
MAX_STOCK = 2**31 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    Product model representing an item in the catalog.

    Attributes:
        id: Unique identifier, assigned by the database
        name: Product name
        description: Free-text description (optional)
        price: Unit price (must be non-negative)
        stock: Available quantity (must be non-negative)
        category: Category label used for browsing
        image_url: Reference to the product image (optional)
        active: False once the product has been soft-deleted
        created_at: Timestamp when product was created
        updated_at: Timestamp of the last write
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=True, index=True)
    image_url = Column(String(512), nullable=True)
    active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )

    @property
    def in_stock(self) -> bool:
        return self.stock is not None and self.stock > 0

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock}, active={self.active})>"
