"""
Order lifecycle webhook handlers.

orders/cancelled: record the cancellation and mark the local order.
"""
from flask import Blueprint

from ..services.reconciliation import CancellationService
from .delivery import webhook_endpoint
from ..schemas import CancellationPayload

order_lifecycle_bp = Blueprint('order_lifecycle', __name__)


@order_lifecycle_bp.route('/orders/cancelled', methods=['POST'])
@webhook_endpoint('orders/cancelled', CancellationPayload)
def handle_order_cancelled(tenant, payload):
    """
    Handle ORDERS_CANCELLED webhook.

    Upserts the cancellation keyed by the order's Shopify ID (bare or
    GID form) and copies cancelled_at/cancel_reason onto the order if it
    is stored locally. Replays overwrite with the latest delivery.
    """
    return CancellationService(tenant.id).apply(payload)
