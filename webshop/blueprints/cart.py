"""Cart blueprint: session cart, promo codes and catalog listing."""
from flask import Blueprint, request, jsonify, current_app

from webshop.database import get_session
from webshop.exceptions import InvalidQuantityError, ValidationError
from webshop.middleware import load_cart, save_cart
from webshop.services.catalog_service import get_catalog

cart_bp = Blueprint('cart', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_quantity(value, default=None) -> int:
    """Accept ints and digit strings from forms; anything else is an invalid quantity."""
    if value is None and default is not None:
        return default
    if isinstance(value, bool):
        raise InvalidQuantityError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidQuantityError(value)
    raise InvalidQuantityError(value)


@cart_bp.route('/catalog/products')
def list_products():
    """List catalog products."""
    catalog = get_catalog(current_app.config, get_session())
    return jsonify({'products': [product.to_dict() for product in catalog.list_products()]})


@cart_bp.route('/cart')
def view_cart():
    cart = load_cart()
    return jsonify(cart.summary())


@cart_bp.route('/cart/items', methods=['POST'])
def add_item():
    """Add a product to the cart. Body: {"product_id": "site-vitrine", "quantity": 1}"""
    data = _json_body()
    product_id = data.get('product_id')
    if not product_id or not isinstance(product_id, str):
        raise ValidationError('product_id', 'Produit requis.')

    cart = load_cart()
    cart.add_item(product_id, _parse_quantity(data.get('quantity'), default=1))
    save_cart(cart)
    return jsonify(cart.summary()), 201


@cart_bp.route('/cart/items/<product_id>', methods=['PATCH'])
def update_item(product_id):
    """Set a line quantity (0 removes the line)."""
    data = _json_body()
    cart = load_cart()
    cart.set_quantity(product_id, _parse_quantity(data.get('quantity')))
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/cart/items/<product_id>', methods=['DELETE'])
def remove_item(product_id):
    cart = load_cart()
    cart.remove_item(product_id)
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/cart/promo', methods=['POST'])
def apply_promo():
    """
    Apply a promo code. Invalid codes answer 200 with success=false so the
    storefront can show the message next to the input.
    """
    data = _json_body()
    cart = load_cart()
    result = cart.apply_promo_code(data.get('code'))
    if result.success:
        save_cart(cart)

    payload = result.to_dict()
    payload['cart'] = cart.summary()
    return jsonify(payload)


@cart_bp.route('/cart/promo', methods=['DELETE'])
def remove_promo():
    cart = load_cart()
    cart.remove_promo_code()
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/cart', methods=['DELETE'])
def clear_cart():
    cart = load_cart()
    cart.clear_cart()
    save_cart(cart)
    return jsonify(cart.summary())
