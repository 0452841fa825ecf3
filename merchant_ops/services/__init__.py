"""
Business logic services for Merchant Ops.
"""
from .webhook_bookkeeping import WebhookBookkeeping
from .webhook_health import WebhookHealthService
