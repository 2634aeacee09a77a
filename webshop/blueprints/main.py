"""Main blueprint: health check and CSRF token for the storefront scripts."""
from flask import Blueprint, jsonify, current_app
from flask_wtf.csrf import generate_csrf
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from webshop.database import get_session

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        503: Unhealthy (DB error)
    """
    try:
        row = get_session().execute(text("SELECT 1 AS health_check")).fetchone()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({'status': 'unhealthy', 'database': 'error'}), 503

    if row and row[0] == 1:
        return jsonify({'status': 'healthy', 'database': 'connected'}), 200
    return jsonify({'status': 'unhealthy', 'database': 'error'}), 503


@main_bp.route('/csrf-token')
def csrf_token():
    """Token for the storefront's fetch() calls (sent back in X-CSRFToken)."""
    return jsonify({'csrf_token': generate_csrf()})
