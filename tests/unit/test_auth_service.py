"""
Unit tests for the demo-mode customer session.
"""

import pytest

from webshop.exceptions import ValidationError
from webshop.services.auth_service import (
    SESSION_USER_KEY, current_user, demo_login, demo_signup, logout
)


class TestDemoAuth:

    def test_login_stores_user(self):
        session = {}
        user = demo_login(session, ' Camille@Example.com ', 'secret1')

        assert user['email'] == 'camille@example.com'
        assert user['name'] == 'camille'
        assert current_user(session) == user

    def test_short_password(self):
        with pytest.raises(ValidationError) as exc_info:
            demo_login({}, 'camille@example.com', '123')
        assert exc_info.value.field == 'password'

    def test_invalid_email(self):
        with pytest.raises(ValidationError) as exc_info:
            demo_login({}, 'camille', 'secret1')
        assert exc_info.value.field == 'email'

    def test_signup_requires_first_name(self):
        with pytest.raises(ValidationError) as exc_info:
            demo_signup({}, {'email': 'camille@example.com', 'password': 'secret1'})
        assert exc_info.value.field == 'firstname'

    def test_signup_profile(self):
        session = {}
        user = demo_signup(session, {
            'email': 'camille@example.com',
            'password': 'secret1',
            'firstname': 'Camille',
            'lastname': 'Martin',
            'company': 'Atelier Martin',
        })

        assert user['name'] == 'Camille Martin'
        assert user['company'] == 'Atelier Martin'
        assert 'phone' not in user
        assert session[SESSION_USER_KEY] is user

    def test_logout(self):
        session = {}
        demo_login(session, 'camille@example.com', 'secret1')
        logout(session)
        assert current_user(session) is None

    @pytest.mark.parametrize('email, password, field', [
        (None, 'secret1', 'email'),
        (['camille@example.com'], 'secret1', 'email'),
        ('camille@example.com', None, 'password'),
        ('camille@example.com', 1234567, 'password'),
    ])
    def test_non_string_credentials(self, email, password, field):
        with pytest.raises(ValidationError) as exc_info:
            demo_login({}, email, password)
        assert exc_info.value.field == field
