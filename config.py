"""Configuration module for Flask application."""
import os
from decimal import Decimal
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'webshop')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'webshop')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'webshop')

        DATABASE_URL = (
            f"postgresql+psycopg://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Shop pricing
    TAX_RATE = Decimal(os.getenv('TAX_RATE', '0.20'))  # TVA 20%
    CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', '€')
    PAYMENT_METHODS = ('card', 'transfer', 'installments')
    INSTALLMENTS_COUNT = int(os.getenv('INSTALLMENTS_COUNT', '3'))
    ORDER_REFERENCE_PREFIX = os.getenv('ORDER_REFERENCE_PREFIX', 'WS')

    # 'static' = built-in catalog and promo codes, 'database' = product/promotion tables
    CATALOG_BACKEND = os.getenv('CATALOG_BACKEND', 'static')

    # Chatbot text generation (edge function). Empty URL = local FAQ only
    TEXTGEN_URL = os.getenv('TEXTGEN_URL', '')
    TEXTGEN_API_KEY = os.getenv('TEXTGEN_API_KEY', '')
    TEXTGEN_TIMEOUT = float(os.getenv('TEXTGEN_TIMEOUT', '8'))

    # Payment status callback (called cross-origin from the payment success page)
    CORS_ALLOW_ORIGIN = os.getenv('CORS_ALLOW_ORIGIN', '*')

    # Error tracking
    SENTRY_DSN = os.getenv('SENTRY_DSN')


class TestConfig(Config):
    """Configuration used by the test suite (in-memory SQLite, no CSRF)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    CATALOG_BACKEND = 'static'
    TEXTGEN_URL = ''
    TEXTGEN_API_KEY = ''
    SENTRY_DSN = None
