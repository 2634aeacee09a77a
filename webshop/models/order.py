"""Order model and its two status vocabularies."""
import enum
from sqlalchemy import Column, String, Numeric, DateTime, Text, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from webshop.database import Base, BigIntId


class PaymentStatus(str, enum.Enum):
    """Payment status, driven by payment gateway callbacks."""
    PENDING = 'pending'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'

    @classmethod
    def values(cls):
        return [status.value for status in cls]


class FulfillmentStatus(str, enum.Enum):
    """Work progress status shown on the customer dashboard."""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def label(self):
        return FULFILLMENT_DISPLAY[self][0]

    @property
    def color(self):
        return FULFILLMENT_DISPLAY[self][1]


FULFILLMENT_DISPLAY = {
    FulfillmentStatus.PENDING: ('En attente', '#f59e0b'),
    FulfillmentStatus.CONFIRMED: ('Confirmée', '#3b82f6'),
    FulfillmentStatus.IN_PROGRESS: ('En cours', '#8b5cf6'),
    FulfillmentStatus.COMPLETED: ('Terminée', '#10b981'),
    FulfillmentStatus.CANCELLED: ('Annulée', '#ef4444'),
}


class Order(Base):
    """
    Order (commande) persisted at checkout.

    Payment status and fulfillment status are independent columns: the first
    is updated by the payment callback, the second by the agency team.
    """

    __tablename__ = 'orders'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    order_reference = Column(String(32), nullable=False, unique=True, index=True)

    # Idempotency key to prevent duplicate orders on double-submit
    idempotency_key = Column(String(64), unique=True, nullable=True, index=True)

    # Customer contact
    customer_email = Column(String(255), nullable=False, index=True)
    customer_first_name = Column(String(100), nullable=False)
    customer_last_name = Column(String(100), nullable=False)
    customer_phone = Column(String(50), nullable=True)
    customer_company = Column(String(200), nullable=True)

    # Billing address
    billing_address = Column(String(255), nullable=False)
    billing_postal_code = Column(String(20), nullable=False)
    billing_city = Column(String(100), nullable=False)
    billing_country = Column(String(100), nullable=False)

    payment_method = Column(String(20), nullable=False)
    promo_code = Column(String(40), nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    fulfillment_status = Column(String(20), nullable=False, default=FulfillmentStatus.PENDING.value)
    stripe_session_id = Column(String(255), nullable=True)

    project_details = Column(Text, nullable=True)
    newsletter = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    lines = relationship('OrderLine', back_populates='order', cascade='all, delete-orphan')

    def __repr__(self):
        return (
            f"<Order(id={self.id}, reference='{self.order_reference}', "
            f"payment_status='{self.payment_status}', total={self.total_amount})>"
        )
