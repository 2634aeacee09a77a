"""Models package - exports all SQLAlchemy models."""
from webshop.models.product import Product
from webshop.models.promotion import Promotion, PromotionKind
from webshop.models.order import Order, PaymentStatus, FulfillmentStatus, FULFILLMENT_DISPLAY
from webshop.models.order_line import OrderLine

__all__ = [
    'Product',
    'Promotion', 'PromotionKind',
    'Order', 'PaymentStatus', 'FulfillmentStatus', 'FULFILLMENT_DISPLAY',
    'OrderLine',
]
