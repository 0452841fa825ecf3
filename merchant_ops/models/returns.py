"""
Shopify return models.
"""
from datetime import datetime
from ..extensions import db


class ShopifyReturn(db.Model):
    """
    Return reported by Shopify.

    status is Shopify's free-form value (requested, open, closed, ...).
    line_items always mirror the most recently delivered payload.
    """
    __tablename__ = 'shopify_returns'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'shopify_return_id', name='uq_shopify_returns_tenant_return'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)

    shopify_return_id = db.Column(db.String(50), nullable=False)
    shopify_order_id = db.Column(db.String(50), nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False)
    requested_at = db.Column(db.DateTime, nullable=False)
    received_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    line_items = db.relationship(
        'ShopifyReturnLineItem',
        backref='shopify_return',
        cascade='all, delete-orphan',
        order_by='ShopifyReturnLineItem.id',
    )

    def __repr__(self):
        return f'<ShopifyReturn {self.shopify_return_id} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'shopify_return_id': self.shopify_return_id,
            'shopify_order_id': self.shopify_order_id,
            'status': self.status,
            'requested_at': self.requested_at.isoformat() if self.requested_at else None,
            'received_at': self.received_at.isoformat() if self.received_at else None,
            'line_items': [item.to_dict() for item in self.line_items],
        }


class ShopifyReturnLineItem(db.Model):
    """Line item owned by exactly one return. Replaced wholesale, never diffed."""
    __tablename__ = 'shopify_return_line_items'

    id = db.Column(db.Integer, primary_key=True)
    return_id = db.Column(
        db.Integer,
        db.ForeignKey('shopify_returns.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    shopify_line_item_id = db.Column(db.String(50), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    reason = db.Column(db.String(255))

    def __repr__(self):
        return f'<ShopifyReturnLineItem {self.shopify_line_item_id} x{self.quantity}>'

    def to_dict(self):
        return {
            'shopify_line_item_id': self.shopify_line_item_id,
            'quantity': self.quantity,
            'reason': self.reason,
        }
