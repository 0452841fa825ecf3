"""
Webhook health reporting for operators.

Combines the registered subscriptions with the delivery audit log so an
operator can see, per required topic, whether Shopify is actually
delivering.
"""
from typing import Any, Dict, List, Optional, Sequence

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import ShopifyWebhook, WebhookEvent


class WebhookHealthService:
    """Read-only view over a tenant's webhook subscriptions and deliveries."""

    def __init__(self, tenant_id: int, topics: Optional[Sequence[str]] = None, session=None):
        self.tenant_id = tenant_id
        self.topics = tuple(topics or current_app.config['SHOPIFY_WEBHOOK_TOPICS'])
        self.session = session or db.session

    def list_health(self) -> List[Dict[str, Any]]:
        """
        Health for every required topic, registered or not.

        Returns:
            One dict per topic, in configured order
        """
        registered = {
            webhook.topic: webhook
            for webhook in self.session.query(ShopifyWebhook).filter(
                ShopifyWebhook.tenant_id == self.tenant_id,
                ShopifyWebhook.topic.in_(self.topics),
            )
        }

        delivered = dict(
            self.session.query(WebhookEvent.topic, func.count(WebhookEvent.id))
            .filter(
                WebhookEvent.tenant_id == self.tenant_id,
                WebhookEvent.topic.in_(self.topics),
                WebhookEvent.success.is_(True),
            )
            .group_by(WebhookEvent.topic)
            .all()
        )

        health = []
        for topic in self.topics:
            webhook = registered.get(topic)
            if webhook:
                entry = webhook.to_dict()
                entry['is_registered'] = True
            else:
                entry = {
                    'id': None,
                    'topic': topic,
                    'shopify_webhook_id': None,
                    'address': None,
                    'status': 'not_registered',
                    'last_triggered_at': None,
                    'last_tested_at': None,
                    'test_status': 'not_tested',
                    'is_registered': False,
                }
            entry['delivery_count'] = delivered.get(topic, 0)
            entry['has_received_data'] = entry['delivery_count'] > 0
            health.append(entry)

        return health

    def recent_events(self, topic: Optional[str] = None, limit: int = 20,
                      failed_only: bool = False) -> List[WebhookEvent]:
        """Newest-first audit log entries."""
        query = self.session.query(WebhookEvent).filter(WebhookEvent.tenant_id == self.tenant_id)
        if topic:
            query = query.filter(WebhookEvent.topic == topic)
        if failed_only:
            query = query.filter(WebhookEvent.success.is_(False))
        return query.order_by(WebhookEvent.created_at.desc(), WebhookEvent.id.desc()).limit(limit).all()
