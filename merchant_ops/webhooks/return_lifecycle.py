"""
Return lifecycle webhook handlers.

returns/create and returns/update both upsert the return by its Shopify ID
and replace its line items with the delivered list. Returns for orders we
don't have are acknowledged and skipped.
"""
from flask import Blueprint

from ..services.reconciliation import ReturnService
from .delivery import webhook_endpoint
from ..schemas import ReturnPayload

return_lifecycle_bp = Blueprint('return_lifecycle', __name__)


@return_lifecycle_bp.route('/returns/create', methods=['POST'])
@webhook_endpoint('returns/create', ReturnPayload)
def handle_return_created(tenant, payload):
    """Handle RETURNS_CREATE webhook."""
    return ReturnService(tenant.id).apply_created(payload)


@return_lifecycle_bp.route('/returns/update', methods=['POST'])
@webhook_endpoint('returns/update', ReturnPayload)
def handle_return_updated(tenant, payload):
    """
    Handle RETURNS_UPDATE webhook.

    Falls back to create semantics when the update beats the create.
    """
    return ReturnService(tenant.id).apply_updated(payload)
