"""Middleware for the demo customer session and per-request shop context."""
from functools import wraps
from flask import session, g, jsonify, current_app

from webshop.database import get_session
from webshop.services.auth_service import current_user
from webshop.services.cart_service import Cart
from webshop.services.catalog_service import get_catalog, get_promotions

CART_SESSION_KEY = 'cart'


def load_current_user():
    """
    Load the demo customer into g.

    Called before each request. Sets g.user (dict or None).
    """
    g.user = None
    try:
        g.user = current_user(session)
    except Exception as e:
        # Avoid crashing the whole app if a tampered session cannot be read
        current_app.logger.error(f"Error in load_current_user: {e}")


def require_login(f):
    """
    Decorator: Require a customer session.

    Returns 401 JSON so the storefront can send the visitor to the login page
    and come back (the requested page is kept client-side).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            return jsonify({
                'status': 'error',
                'kind': 'login_required',
                'message': 'Vous devez être connecté pour procéder au paiement.'
            }), 401
        return f(*args, **kwargs)
    return decorated_function


def load_cart() -> Cart:
    """Rebuild the visitor's cart from the session."""
    config = current_app.config
    db_session = get_session()
    return Cart.from_dict(
        session.get(CART_SESSION_KEY),
        get_catalog(config, db_session),
        get_promotions(config, db_session),
        tax_rate=config['TAX_RATE'],
        currency_symbol=config.get('CURRENCY_SYMBOL', '€'),
    )


def save_cart(cart: Cart) -> None:
    """Save cart to session."""
    session[CART_SESSION_KEY] = cart.to_dict()
    session.modified = True
