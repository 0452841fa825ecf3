"""
Webhook handlers for Merchant Ops.
Reconciles Shopify order cancellation and return webhooks into local records.
"""
from .delivery import (
    verify_shopify_webhook,
    parse_json_body,
    get_shop_domain,
    shop_domain_candidates,
    resolve_tenant,
    webhook_endpoint,
)
from .order_lifecycle import order_lifecycle_bp
from .return_lifecycle import return_lifecycle_bp

__all__ = [
    'order_lifecycle_bp',
    'return_lifecycle_bp',
    'verify_shopify_webhook',
    'parse_json_body',
    'get_shop_domain',
    'shop_domain_candidates',
    'resolve_tenant',
    'webhook_endpoint',
]
