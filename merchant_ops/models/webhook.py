"""
Webhook subscription health and delivery audit log.
"""
from datetime import datetime
from ..extensions import db


class ShopifyWebhook(db.Model):
    """
    A topic subscription registered with Shopify for one tenant.

    Rows are created when the webhook is registered; deliveries only
    update the health timestamps.
    """
    __tablename__ = 'shopify_webhooks'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'topic', name='uq_shopify_webhooks_tenant_topic'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)

    topic = db.Column(db.String(100), nullable=False)  # orders/cancelled, returns/create, ...
    shopify_webhook_id = db.Column(db.String(100))
    address = db.Column(db.String(500))
    status = db.Column(db.String(20), default='active')  # active, inactive

    last_triggered_at = db.Column(db.DateTime)
    last_tested_at = db.Column(db.DateTime)
    test_status = db.Column(db.String(20), default='not_tested')  # not_tested, success, failed

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ShopifyWebhook {self.topic}>'

    def to_dict(self):
        return {
            'id': self.id,
            'topic': self.topic,
            'shopify_webhook_id': self.shopify_webhook_id,
            'address': self.address,
            'status': self.status,
            'last_triggered_at': self.last_triggered_at.isoformat() if self.last_triggered_at else None,
            'last_tested_at': self.last_tested_at.isoformat() if self.last_tested_at else None,
            'test_status': self.test_status,
        }


class WebhookEvent(db.Model):
    """
    Append-only log of webhook deliveries that reached a tenant.
    Write-once: never updated or deleted by the webhook handlers.
    """
    __tablename__ = 'webhook_events'
    __table_args__ = (
        db.Index('ix_webhook_events_tenant_topic_created', 'tenant_id', 'topic', 'created_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)

    topic = db.Column(db.String(100), nullable=False)
    payload = db.Column(db.JSON, default=dict)
    headers = db.Column(db.JSON, default=dict)
    success = db.Column(db.Boolean, nullable=False, default=True)
    error_message = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<WebhookEvent {self.topic} {"ok" if self.success else "failed"}>'

    def to_dict(self):
        return {
            'id': self.id,
            'topic': self.topic,
            'success': self.success,
            'error_message': self.error_message,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
