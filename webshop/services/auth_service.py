"""
Demo-mode customer session.

The hosted authentication backend is out of scope: the shop runs in the
storefront's demo mode, where the customer profile lives in the session.
"""
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Optional

from webshop.exceptions import ValidationError

logger = logging.getLogger(__name__)

SESSION_USER_KEY = 'demo_user'
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def _new_user(email: str, name: str, **extra) -> dict:
    user = {
        'id': f'demo-{uuid.uuid4().hex[:12]}',
        'email': email,
        'name': name,
        'role': 'client',
        'created_at': datetime.now(timezone.utc).isoformat(),
    }
    user.update({key: value for key, value in extra.items() if value})
    return user


def _text(value) -> str:
    """Form value as stripped text; non-string JSON values count as missing."""
    return value.strip() if isinstance(value, str) else ''


def _check_credentials(email, password) -> str:
    email = _text(email).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError('email', "L'adresse email n'est pas valide.")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError('password', 'Mot de passe incorrect')
    return email


def demo_login(session, email: str, password: str) -> dict:
    """Open a demo session; any well-formed email with a 6+ char password is accepted."""
    email = _check_credentials(email, password)
    user = _new_user(email, email.split('@')[0])
    session[SESSION_USER_KEY] = user
    logger.info(f"[AUTH] Demo login for {email}")
    return user


def demo_signup(session, form: dict) -> dict:
    email = _check_credentials(form.get('email'), form.get('password'))
    first_name = _text(form.get('firstname'))
    last_name = _text(form.get('lastname'))
    if not first_name:
        raise ValidationError('firstname', 'Le prénom est obligatoire.')

    user = _new_user(
        email,
        f'{first_name} {last_name}'.strip(),
        phone=_text(form.get('phone')),
        company=_text(form.get('company')),
    )
    session[SESSION_USER_KEY] = user
    logger.info(f"[AUTH] Demo signup for {email}")
    return user


def current_user(session) -> Optional[dict]:
    return session.get(SESSION_USER_KEY)


def logout(session) -> None:
    session.pop(SESSION_USER_KEY, None)
