"""Product model."""
from sqlalchemy import Column, String, Boolean, Numeric, Text, Integer, DateTime
from sqlalchemy.sql import func
from webshop.database import Base


class Product(Base):
    """Catalog product (offre). Keyed by a slug so carts can reference it directly."""

    __tablename__ = 'product'

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    icon = Column(String(16), nullable=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Product(id='{self.id}', name='{self.name}', price={self.price})>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'price': str(self.price),
            'icon': self.icon,
            'description': self.description,
        }
