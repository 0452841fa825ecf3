"""
Configuration management for the Merchant Ops webhook service.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    """Base configuration."""
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Shared secret Shopify signs webhook bodies with (one per deployment).
    # Empty means signature verification is bypassed - development only.
    SHOPIFY_WEBHOOK_SECRET = os.getenv('SHOPIFY_WEBHOOK_SECRET', '')
    SHOPIFY_SHOP_SUFFIX = os.getenv('SHOPIFY_SHOP_SUFFIX', '.myshopify.com')

    # Topics this service subscribes to
    SHOPIFY_WEBHOOK_TOPICS = (
        'orders/cancelled',
        'returns/create',
        'returns/update',
    )


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///merchant_ops_dev.db'  # SQLite fallback for local dev
    )


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    _db_url = os.getenv('DATABASE_URL', '')
    if _db_url.startswith('postgres://'):
        # SQLAlchemy requires postgresql:// not postgres://
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,  # Verify connections before using
    }

    @classmethod
    def validate_webhook_secret(cls) -> str:
        """
        Validate SHOPIFY_WEBHOOK_SECRET in production environment.

        Without it every delivery would skip signature verification.

        Raises:
            RuntimeError: If SHOPIFY_WEBHOOK_SECRET is missing or empty
        """
        secret = (cls.SHOPIFY_WEBHOOK_SECRET or '').strip()
        if not secret:
            raise RuntimeError(
                "CRITICAL: SHOPIFY_WEBHOOK_SECRET environment variable is not set!\n"
                "Copy it from the app's API credentials in the Shopify Partner Dashboard."
            )
        return secret


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SHOPIFY_WEBHOOK_SECRET = 'test-webhook-secret'


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        get_config(config_name).validate_webhook_secret()
