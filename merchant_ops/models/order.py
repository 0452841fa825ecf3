"""
Order and cancellation models.

Orders are created by the order import path; webhooks only annotate them.
Cancellations are created and updated by the orders/cancelled webhook.
"""
from datetime import datetime
from ..extensions import db


class Order(db.Model):
    """Local copy of a Shopify order."""
    __tablename__ = 'orders'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'shopify_order_id', name='uq_orders_tenant_shopify_order'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)

    shopify_order_id = db.Column(db.String(50), nullable=False, index=True)  # Numeric, not GID
    order_number = db.Column(db.String(50))

    cancelled_at = db.Column(db.DateTime)
    cancel_reason = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Order {self.shopify_order_id}>'

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None

    def to_dict(self):
        return {
            'id': self.id,
            'shopify_order_id': self.shopify_order_id,
            'order_number': self.order_number,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None,
            'cancel_reason': self.cancel_reason,
        }


class ShopifyCancellation(db.Model):
    """
    Cancellation reported by Shopify, keyed by its Shopify ID.

    Every delivery overwrites cancelled_at/cancel_reason: the last
    delivered payload wins.
    """
    __tablename__ = 'shopify_cancellations'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'shopify_cancellation_id',
                            name='uq_shopify_cancellations_tenant_cancellation'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)

    shopify_cancellation_id = db.Column(db.String(50), nullable=False)
    shopify_order_id = db.Column(db.String(50), nullable=False, index=True)
    order_name = db.Column(db.String(50))  # Shopify display name, e.g. #1001
    cancelled_at = db.Column(db.DateTime, nullable=False)
    cancel_reason = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ShopifyCancellation {self.shopify_cancellation_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'shopify_cancellation_id': self.shopify_cancellation_id,
            'shopify_order_id': self.shopify_order_id,
            'order_name': self.order_name,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None,
            'cancel_reason': self.cancel_reason,
        }
