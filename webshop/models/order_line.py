"""OrderLine model for order line items."""
from sqlalchemy import Column, BigInteger, String, Numeric, Integer, ForeignKey
from sqlalchemy.orm import relationship
from webshop.database import Base, BigIntId


class OrderLine(Base):
    """
    Order Line (ligne de commande).

    Stores snapshot of product details at the time of checkout
    to preserve pricing even if the catalog changes later.
    """

    __tablename__ = 'order_lines'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, ForeignKey('orders.id'), nullable=False)
    product_id = Column(String(64), nullable=False)
    product_name_snapshot = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship('Order', back_populates='lines')

    def __repr__(self):
        return f"<OrderLine(id={self.id}, order_id={self.order_id}, product='{self.product_name_snapshot}', qty={self.quantity})>"
