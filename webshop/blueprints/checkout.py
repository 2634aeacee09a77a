"""Checkout blueprint: order summary and (simulated) payment confirmation."""
import logging
from flask import Blueprint, request, jsonify, current_app, g

from webshop.database import get_session
from webshop.exceptions import ValidationError
from webshop.middleware import require_login, load_cart, save_cart
from webshop.services.order_service import (
    OrderRepository, checkout, compute_installments, scoped_idempotency_key
)
from webshop.services.order_status_service import order_summary
from webshop.blueprints.metrics import orders_submitted_total

logger = logging.getLogger(__name__)

checkout_bp = Blueprint('checkout', __name__, url_prefix='/checkout')


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'on', 'yes')
    return bool(value)


@checkout_bp.route('/summary')
@require_login
def summary():
    """Cart totals with the installment preview shown next to the payment options."""
    cart = load_cart()
    config = current_app.config
    count = config['INSTALLMENTS_COUNT']
    installments = compute_installments(cart.get_total(), count)

    payload = cart.summary()
    payload['payment_methods'] = list(config['PAYMENT_METHODS'])
    payload['installments'] = [
        {'amount': str(amount), 'display': cart.format_price(amount)}
        for amount in installments
    ]
    return jsonify(payload)


def _order_response(order, status_code):
    config = current_app.config
    return jsonify({
        'success': True,
        'order_id': order.id,
        'order_reference': order.order_reference,
        'order': order_summary(
            order,
            with_lines=True,
            installments_count=config['INSTALLMENTS_COUNT'],
            symbol=config['CURRENCY_SYMBOL'],
        ),
    }), status_code


@checkout_bp.route('', methods=['POST'])
@require_login
def submit():
    """
    Confirm the order.

    Body: {"customer": {...}, "billing": {...}, "payment_method": "card",
           "terms": true, "project_details": "...", "newsletter": false}
    An Idempotency-Key header makes retries of the same submission safe:
    a replay by the same customer answers 200 with the order created by the
    first call.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    config = current_app.config

    customer_fields = data.get('customer') or {}
    if not isinstance(customer_fields, dict):
        raise ValidationError('customer', 'Coordonnées invalides.')
    billing_fields = data.get('billing') or {}
    if not isinstance(billing_fields, dict):
        raise ValidationError('billing', 'Adresse de facturation invalide.')

    idempotency_key = request.headers.get('Idempotency-Key') or data.get('idempotency_key')
    if idempotency_key is not None and not isinstance(idempotency_key, str):
        raise ValidationError('idempotency_key', "Clé d'idempotence invalide.")
    if idempotency_key:
        idempotency_key = scoped_idempotency_key(g.user['email'], idempotency_key)

    cart = load_cart()
    if not cart.is_empty() and not _truthy(data.get('terms')):
        raise ValidationError('terms', 'Veuillez accepter les Conditions Générales de Vente')

    customer_fields = dict(customer_fields)
    if not customer_fields.get('email'):
        customer_fields['email'] = g.user.get('email')

    order, created = checkout(
        cart,
        OrderRepository(get_session()),
        idempotency_key=idempotency_key,
        customer_fields=customer_fields,
        billing_fields=billing_fields,
        payment_method=data.get('payment_method'),
        payment_methods=config['PAYMENT_METHODS'],
        installments_count=config['INSTALLMENTS_COUNT'],
        reference_prefix=config['ORDER_REFERENCE_PREFIX'],
        project_details=data.get('project_details'),
        newsletter=_truthy(data.get('newsletter')),
    )
    if not created:
        return _order_response(order, 200)

    # Only reached once the order is stored
    save_cart(cart)

    orders_submitted_total.labels(payment_method=order.payment_method).inc()
    logger.info(f"[CHECKOUT] {order.order_reference} confirmed for {order.customer_email}")
    return _order_response(order, 201)
