"""
Merchant Ops webhook service
Flask application factory
"""
import os
import logging
from flask import Flask

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Setup logging before anything else logs
    setup_logging(app.config.get('LOG_LEVEL'))

    validate_config(config_name)
    if not app.config.get('SHOPIFY_WEBHOOK_SECRET'):
        logger.warning('SHOPIFY_WEBHOOK_SECRET is not set: webhook signatures will NOT be verified')

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    register_blueprints(app)

    from .commands import init_app as init_commands
    init_commands(app)

    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'merchant-ops'}

    return app


def register_blueprints(app: Flask) -> None:
    """Register webhook blueprints."""
    from .webhooks.order_lifecycle import order_lifecycle_bp
    from .webhooks.return_lifecycle import return_lifecycle_bp

    app.register_blueprint(order_lifecycle_bp, url_prefix='/webhook')
    app.register_blueprint(return_lifecycle_bp, url_prefix='/webhook')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers. Bodies match the webhook error format."""
    from .utils.errors import ErrorCode, bad_request, error_response, internal_error, not_found

    @app.errorhandler(400)
    def handle_bad_request(error):
        return bad_request('Bad request')

    @app.errorhandler(404)
    def handle_not_found(error):
        return not_found('Not found')

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return error_response('Method not allowed', ErrorCode.METHOD_NOT_ALLOWED, 405, log_error=False)

    @app.errorhandler(500)
    def handle_internal_error(error):
        return internal_error()
