"""
CLI Commands for Merchant Ops.

Usage:
    flask webhooks health --shop acme     # Subscription health per topic
    flask webhooks events --shop acme     # Recent webhook deliveries
"""
from .webhooks import init_app as init_webhook_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_webhook_commands(app)
