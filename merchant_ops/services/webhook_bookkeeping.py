"""
Webhook bookkeeping: delivery audit log and subscription health timestamps.

Bookkeeping runs after the reconciliation transaction has committed (or
rolled back) and commits on its own. A bookkeeping failure is logged and
swallowed: it must never turn a reconciled delivery into a Shopify retry.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ShopifyWebhook, WebhookEvent

logger = logging.getLogger(__name__)


class WebhookBookkeeping:
    """Audit log and health updates for one tenant's deliveries."""

    def __init__(self, tenant_id: int, session=None):
        self.tenant_id = tenant_id
        self.session = session or db.session

    def record_delivery(self, topic: str, payload: Dict[str, Any],
                        headers: Optional[Dict[str, Any]] = None) -> bool:
        """
        Log a successfully handled delivery and touch the topic's health row.

        Soft-skipped deliveries count as successful: the delivery was
        verified and acknowledged.

        Returns:
            True if the bookkeeping was committed
        """
        now = datetime.utcnow()
        try:
            self.session.add(WebhookEvent(
                tenant_id=self.tenant_id,
                topic=topic,
                payload=payload,
                headers=headers or {},
                success=True,
                created_at=now,
            ))
            self.touch_health(topic, now)
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f'Failed to record {topic} delivery for tenant {self.tenant_id}: {e}')
            return False

    def record_failure(self, topic: str, payload: Optional[Dict[str, Any]],
                       headers: Optional[Dict[str, Any]], error: Exception) -> bool:
        """
        Best-effort audit entry for a delivery whose reconciliation failed.

        The caller must have rolled back the failed transaction first.

        Returns:
            True if the failure entry was committed
        """
        try:
            self.session.add(WebhookEvent(
                tenant_id=self.tenant_id,
                topic=topic,
                payload=payload or {},
                headers=headers or {},
                success=False,
                error_message=str(error) or error.__class__.__name__,
                created_at=datetime.utcnow(),
            ))
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f'Failed to log {topic} failure event for tenant {self.tenant_id}: {e}')
            return False

    def touch_health(self, topic: str, when: Optional[datetime] = None) -> int:
        """
        Update health timestamps on the tenant's subscription for ``topic``.

        Only registered subscriptions are updated; an unregistered topic is
        a no-op. Does not commit.

        Returns:
            Number of subscription rows updated
        """
        when = when or datetime.utcnow()
        return self.session.query(ShopifyWebhook).filter_by(
            tenant_id=self.tenant_id,
            topic=topic,
        ).update({
            ShopifyWebhook.last_triggered_at: when,
            ShopifyWebhook.last_tested_at: when,
            ShopifyWebhook.test_status: 'success',
        }, synchronize_session=False)
