"""Customer dashboard: order history with payment and fulfillment status."""
from flask import Blueprint, jsonify, current_app, g

from webshop.database import get_session
from webshop.exceptions import OrderNotFoundError
from webshop.middleware import require_login
from webshop.services.order_service import OrderRepository
from webshop.services.order_status_service import list_orders_for_customer, order_summary

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('/orders')
@require_login
def list_orders():
    """Orders of the logged-in customer, most recent first."""
    config = current_app.config
    orders = list_orders_for_customer(get_session(), g.user['email'])
    return jsonify({
        'orders': [
            order_summary(
                order,
                installments_count=config['INSTALLMENTS_COUNT'],
                symbol=config['CURRENCY_SYMBOL'],
            )
            for order in orders
        ]
    })


@dashboard_bp.route('/orders/<reference>')
@require_login
def order_detail(reference):
    config = current_app.config
    order = OrderRepository(get_session()).get_by_reference(reference)
    # Other customers' orders answer the same 404 as missing ones
    if order is None or order.customer_email != g.user['email']:
        raise OrderNotFoundError(reference, message='Commande introuvable')

    return jsonify(order_summary(
        order,
        with_lines=True,
        installments_count=config['INSTALLMENTS_COUNT'],
        symbol=config['CURRENCY_SYMBOL'],
    ))
