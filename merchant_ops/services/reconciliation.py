"""
Reconciliation of Shopify webhook payloads into local records.

Shopify delivers at least once and in no particular order, so every method
here is safe to apply repeatedly: records are upserted by their Shopify ID
and the last delivered payload wins. Methods flush but never commit; the
webhook endpoint owns the transaction so a handler's writes land together
or not at all.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..extensions import db
from ..models import Order, ShopifyCancellation, ShopifyReturn, ShopifyReturnLineItem
from ..schemas import CancellationPayload, ReturnPayload
from ..utils.upsert import upsert

logger = logging.getLogger(__name__)

# Statuses after which Shopify considers a return finished
TERMINAL_RETURN_STATUSES = frozenset({'closed', 'declined', 'canceled', 'cancelled'})


@dataclass
class ReconcileResult:
    """Outcome of applying one delivery."""
    action: str  # created, updated, skipped
    record_id: Optional[int] = None
    message: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.action == 'skipped'


class _TenantService:
    def __init__(self, tenant_id: int, session=None):
        self.tenant_id = tenant_id
        self.session = session or db.session

    def find_order(self, shopify_order_id: str) -> Optional[Order]:
        return self.session.query(Order).filter_by(
            tenant_id=self.tenant_id,
            shopify_order_id=shopify_order_id,
        ).first()


class CancellationService(_TenantService):
    """Applies orders/cancelled deliveries."""

    def apply(self, payload: CancellationPayload) -> ReconcileResult:
        """
        Upsert the cancellation and annotate the local order if we have it.

        The cancellation is keyed by the order's Shopify ID. A missing
        local order is normal (orders placed before install, other
        channels) and not an error.
        """
        existed = self.session.query(ShopifyCancellation.id).filter_by(
            tenant_id=self.tenant_id,
            shopify_cancellation_id=payload.order_id,
        ).first() is not None

        cancellation = upsert(
            ShopifyCancellation,
            {
                'tenant_id': self.tenant_id,
                'shopify_cancellation_id': payload.order_id,
                'shopify_order_id': payload.order_id,
                'order_name': payload.order_name,
                'cancelled_at': payload.cancelled_at,
                'cancel_reason': payload.cancel_reason,
            },
            index_elements=('tenant_id', 'shopify_cancellation_id'),
            update_fields=('order_name', 'cancelled_at', 'cancel_reason'),
            session=self.session,
        )

        order = self.find_order(payload.order_id)
        if order:
            order.cancelled_at = payload.cancelled_at
            order.cancel_reason = payload.cancel_reason
            self.session.flush()
            message = f'Order {payload.order_id} marked cancelled'
        else:
            message = f'Order {payload.order_id} not stored locally; cancellation recorded only'

        logger.info(f'Processed cancellation for order {payload.order_id}: {message}')
        return ReconcileResult(
            action='updated' if existed else 'created',
            record_id=cancellation.id,
            message=message,
        )


class ReturnService(_TenantService):
    """Applies returns/create and returns/update deliveries."""

    def apply_created(self, payload: ReturnPayload) -> ReconcileResult:
        """
        Handle returns/create.

        Soft-skips when the parent order is unknown: retrying this event
        cannot make the order appear.
        """
        if not self.find_order(payload.order_id):
            return self._skip_missing_order(payload)
        return self._upsert_return(payload)

    def apply_updated(self, payload: ReturnPayload) -> ReconcileResult:
        """
        Handle returns/update.

        An update may arrive before (or without) the matching create; in
        that case the return is created with create semantics, including
        the parent order check.
        """
        existing = self.find_return(payload.return_id)
        if existing is None:
            logger.warning(f'Return {payload.return_id} not found, creating from update event')
            return self.apply_created(payload)
        return self._upsert_return(payload, existing=existing)

    def find_return(self, shopify_return_id: str) -> Optional[ShopifyReturn]:
        return self.session.query(ShopifyReturn).filter_by(
            tenant_id=self.tenant_id,
            shopify_return_id=shopify_return_id,
        ).first()

    def replace_line_items(self, shopify_return: ShopifyReturn, payload: ReturnPayload) -> int:
        """
        Delete every line item on the return and insert the payload's list.

        Shopify always sends the complete current list, so the stored set
        is replaced rather than diffed.
        """
        # delete-orphan cascade removes the previous items on flush
        shopify_return.line_items = [
            ShopifyReturnLineItem(
                shopify_line_item_id=item.line_item_id,
                quantity=item.quantity,
                reason=item.reason,
            )
            for item in payload.line_items
        ]
        self.session.flush()
        return len(payload.line_items)

    def _upsert_return(self, payload: ReturnPayload,
                       existing: Optional[ShopifyReturn] = None) -> ReconcileResult:
        if existing is None:
            existing = self.find_return(payload.return_id)

        if existing is not None:
            self._warn_on_status_regression(existing, payload.status)

        shopify_return = upsert(
            ShopifyReturn,
            {
                'tenant_id': self.tenant_id,
                'shopify_return_id': payload.return_id,
                'shopify_order_id': payload.order_id,
                'status': payload.status,
                'requested_at': payload.requested_at,
                'received_at': payload.received_at,
            },
            index_elements=('tenant_id', 'shopify_return_id'),
            update_fields=('shopify_order_id', 'status', 'requested_at', 'received_at'),
            session=self.session,
        )
        item_count = self.replace_line_items(shopify_return, payload)

        action = 'updated' if existing is not None else 'created'
        logger.info(
            f'Return {payload.return_id} {action}: status={payload.status}, {item_count} line items'
        )
        return ReconcileResult(action=action, record_id=shopify_return.id)

    def _skip_missing_order(self, payload: ReturnPayload) -> ReconcileResult:
        message = f'Order {payload.order_id} not found, skipping return {payload.return_id}'
        logger.warning(message)
        return ReconcileResult(action='skipped', message=message)

    @staticmethod
    def _warn_on_status_regression(existing: ShopifyReturn, new_status: str) -> None:
        old_status = (existing.status or '').lower()
        if old_status in TERMINAL_RETURN_STATUSES and new_status.lower() not in TERMINAL_RETURN_STATUSES:
            logger.warning(
                f'Return {existing.shopify_return_id} status moving backwards '
                f'from {existing.status} to {new_status}; applying last delivered state'
            )
