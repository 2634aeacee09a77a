"""
Order status lifecycle.

Payment status transitions are triggered from outside (payment success page,
back office) and are unconditional between any two valid states, so an order
can go straight from pending to refunded. Fulfillment status is display-only.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from webshop.exceptions import InvalidStatusError, OrderNotFoundError, ExternalServiceError
from webshop.models import Order, PaymentStatus, FulfillmentStatus
from webshop.services.order_service import INSTALLMENTS_METHOD, compute_installments
from webshop.utils.formatters import money_fr, date_fr

logger = logging.getLogger(__name__)

UNKNOWN_STATUS_COLOR = '#71717a'


def set_payment_status(session, order_id: int, new_status: str, gateway_reference: Optional[str] = None) -> None:
    """
    Update the payment status of one order.

    Args:
        session: SQLAlchemy session
        order_id: Order primary key
        new_status: One of pending, paid, cancelled, refunded
        gateway_reference: Optional payment session id (stored in stripe_session_id)

    Raises:
        InvalidStatusError: status outside the payment vocabulary (nothing written)
        OrderNotFoundError: no order matched order_id (nothing written)
        ExternalServiceError: the database is unreachable
    """
    if new_status not in PaymentStatus.values():
        raise InvalidStatusError(new_status)

    values = {Order.payment_status: new_status}
    if gateway_reference:
        values[Order.stripe_session_id] = gateway_reference

    try:
        rows = (session.query(Order)
                .filter(Order.id == order_id)
                .update(values, synchronize_session=False))
        if rows == 0:
            session.rollback()
            raise OrderNotFoundError(order_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[STATUS] Failed to update order {order_id}: {e}")
        raise ExternalServiceError() from e

    logger.info(f"[STATUS] Order {order_id} payment status -> {new_status}")


def get_order(session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id, message='Commande introuvable')
    return order


def list_orders_for_customer(session, email: str) -> List[Order]:
    """Orders of one customer, most recent first."""
    return (session.query(Order)
            .filter(Order.customer_email == email.lower())
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())


def describe_fulfillment_status(value: str) -> dict:
    """Label and color for a fulfillment status; unknown values are shown raw."""
    try:
        status = FulfillmentStatus(value)
    except ValueError:
        return {'value': value, 'label': value, 'color': UNKNOWN_STATUS_COLOR}
    return {'value': status.value, 'label': status.label, 'color': status.color}


def order_summary(order: Order, with_lines: bool = False, installments_count: int = 3, symbol: str = '€') -> dict:
    """Dashboard/confirmation view of an order with French-formatted amounts."""
    data = {
        'id': order.id,
        'reference': order.order_reference,
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'date': date_fr(order.created_at),
        'payment_method': order.payment_method,
        'payment_status': order.payment_status,
        'fulfillment_status': describe_fulfillment_status(order.fulfillment_status),
        'promo_code': order.promo_code,
        'subtotal': str(order.subtotal),
        'discount': str(order.discount_amount),
        'tax': str(order.tax_amount),
        'total': str(order.total_amount),
        'total_display': money_fr(order.total_amount, symbol),
    }

    if order.payment_method == INSTALLMENTS_METHOD:
        data['installments'] = [
            {'amount': str(amount), 'display': money_fr(amount, symbol)}
            for amount in compute_installments(order.total_amount, installments_count)
        ]

    if with_lines:
        data['items'] = [
            {
                'product_id': line.product_id,
                'name': line.product_name_snapshot,
                'quantity': line.quantity,
                'unit_price': str(line.unit_price),
                'line_total': str(line.line_total),
                'line_total_display': money_fr(line.line_total, symbol),
            }
            for line in order.lines
        ]
    return data
