"""Authentication blueprint (demo mode)."""
from flask import Blueprint, request, jsonify, session, g

from webshop.services import auth_service

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _form_data() -> dict:
    """Accept both JSON bodies and classic form posts."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@auth_bp.route('/demo/login', methods=['POST'])
def login():
    data = _form_data()
    user = auth_service.demo_login(session, data.get('email'), data.get('password'))
    return jsonify({'success': True, 'user': user})


@auth_bp.route('/demo/signup', methods=['POST'])
def signup():
    user = auth_service.demo_signup(session, _form_data())
    return jsonify({'success': True, 'user': user}), 201


@auth_bp.route('/logout', methods=['POST'])
def logout():
    auth_service.logout(session)
    return jsonify({'success': True})


@auth_bp.route('/me')
def me():
    """Current customer, or null when nobody is logged in."""
    return jsonify({'user': g.get('user')})
