"""Flask application factory."""
from flask import Flask, request, jsonify
from flask_wtf.csrf import CSRFProtect, CSRFError
from werkzeug.exceptions import HTTPException
from webshop.database import init_db
import logging
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    if not app.debug and not app.testing:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
        )

    # Initialize CSRF protection
    csrf = CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({
            'status': 'error',
            'kind': 'csrf_error',
            'message': 'La session a expiré. Rechargez la page.'
        }), 400

    # Sentry error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Prometheus metrics instrumentation
    from webshop.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=1,      # Trust X-Forwarded-For with 1 proxy
            x_proto=1,    # Trust X-Forwarded-Proto
            x_host=1,     # Trust X-Forwarded-Host
            x_port=1,     # Trust X-Forwarded-Port
            x_prefix=0    # No prefix (not behind a URL prefix)
        )

    # Initialize database
    init_db(app)

    # Load the demo customer before each request
    from webshop.middleware import load_current_user

    @app.before_request
    def before_request_handler():
        load_current_user()

    # Error Handlers
    from webshop.exceptions import ShopError

    @app.errorhandler(ShopError)
    def handle_shop_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"ShopError [{error.status_code}] {error.kind}: {error.message}")
        else:
            app.logger.info(f"ShopError [{error.status_code}] {error.kind}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'status': 'error',
            'kind': 'http_error',
            'message': error.description or error.name
        }), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        # Full traceback goes to the log only, never to the client
        app.logger.exception(f"Unhandled Exception on {request.method} {request.path}: {error}")
        return jsonify({
            'status': 'error',
            'kind': 'internal_error',
            'message': 'Erreur interne du serveur.'
        }), 500

    # Register blueprints
    from webshop.blueprints.main import main_bp
    from webshop.blueprints.auth import auth_bp
    from webshop.blueprints.cart import cart_bp
    from webshop.blueprints.checkout import checkout_bp
    from webshop.blueprints.dashboard import dashboard_bp
    from webshop.blueprints.chatbot import chatbot_bp
    from webshop.blueprints.metrics import metrics_bp
    from webshop.blueprints.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(checkout_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(chatbot_bp)
    app.register_blueprint(metrics_bp)

    # The payment success page posts cross-origin without a CSRF token
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp)

    # Register CLI commands
    from webshop.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
