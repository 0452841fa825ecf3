"""
Tenant model for multi-tenant webhook ingestion.
"""
from datetime import datetime
from ..extensions import db


class Tenant(db.Model):
    """
    Merchant organization connected to a Shopify store.
    Global table - shared across all tenants.

    shopify_domain is stored as the merchant entered it: a bare slug
    ('acme'), a full domain ('acme.myshopify.com'), in any case.
    Webhook tenant resolution tries every form.
    """
    __tablename__ = 'tenants'

    id = db.Column(db.Integer, primary_key=True)
    shop_name = db.Column(db.String(255), nullable=False)
    shopify_domain = db.Column(db.String(255), unique=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    orders = db.relationship('Order', backref='tenant', lazy='dynamic')
    webhooks = db.relationship('ShopifyWebhook', backref='tenant', lazy='dynamic')

    def __repr__(self):
        return f'<Tenant {self.shopify_domain}>'

    def to_dict(self):
        return {
            'id': self.id,
            'shop_name': self.shop_name,
            'shopify_domain': self.shopify_domain,
        }
