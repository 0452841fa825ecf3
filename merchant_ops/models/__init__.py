"""
Database models for Merchant Ops.
Orders, cancellations and returns reconciled from Shopify webhooks.
"""
from .tenant import Tenant
from .order import Order, ShopifyCancellation
from .returns import ShopifyReturn, ShopifyReturnLineItem
from .webhook import ShopifyWebhook, WebhookEvent

__all__ = [
    'Tenant',
    'Order',
    'ShopifyCancellation',
    'ShopifyReturn',
    'ShopifyReturnLineItem',
    'ShopifyWebhook',
    'WebhookEvent',
]
