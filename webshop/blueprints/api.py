"""
Payment status API.

Called from the payment success page (cross-origin) to record the outcome of
a payment session on the order. Always answers JSON.
"""
import logging
from flask import Blueprint, request, jsonify, current_app

from webshop.database import get_session
from webshop.exceptions import ShopError, ValidationError, OrderNotFoundError
from webshop.services.order_status_service import set_payment_status
from webshop.blueprints.metrics import payment_status_updates_total

logger = logging.getLogger(__name__)

BIGINT_MIN = -2 ** 63
BIGINT_MAX = 2 ** 63 - 1

api_bp = Blueprint('api', __name__, url_prefix='/api')


@api_bp.after_request
def add_cors_headers(response):
    """CORS headers for the payment success page."""
    response.headers['Access-Control-Allow-Origin'] = current_app.config.get('CORS_ALLOW_ORIGIN', '*')
    response.headers['Access-Control-Allow-Methods'] = 'POST, OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
    return response


def _parse_update_request(data):
    """Validate the JSON body. Returns (order_id, status, stripe_session_id)."""
    if not isinstance(data, dict) or not data.get('customerId') or not data.get('status'):
        raise ValidationError('customerId', 'customerId et status requis')

    try:
        order_id = int(data['customerId'])
    except (TypeError, ValueError):
        raise ValidationError('customerId', 'customerId invalide')

    # orders.id is a BIGINT: anything outside cannot match a row
    if not BIGINT_MIN <= order_id <= BIGINT_MAX:
        raise OrderNotFoundError(order_id)

    stripe_session_id = data.get('stripeSessionId') or None
    if stripe_session_id is not None:
        stripe_session_id = str(stripe_session_id)

    return order_id, data['status'], stripe_session_id


@api_bp.route(
    '/update-status',
    methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
)
def update_status():
    """
    Update the payment status of an order.

    Body: {"customerId": 42, "status": "paid", "stripeSessionId": "cs_..."}
    """
    if request.method == 'OPTIONS':
        return '', 200

    if request.method != 'POST':
        return jsonify({'error': 'Méthode non autorisée'}), 405

    data = request.get_json(force=True, silent=True)

    try:
        order_id, status, stripe_session_id = _parse_update_request(data)
        set_payment_status(get_session(), order_id, status, stripe_session_id)
    except ShopError as e:
        logger.warning(f"[STATUS] Update rejected: {e.message}")
        payment_status_updates_total.labels(result=e.kind).inc()
        # Persistence outages keep their 503; every input problem is a 400
        status_code = 503 if e.status_code == 503 else 400
        return jsonify({'success': False, 'error': e.message}), status_code

    payment_status_updates_total.labels(result=status).inc()
    return jsonify({'success': True, 'message': 'Statut mis à jour'}), 200
