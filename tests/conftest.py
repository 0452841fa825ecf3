"""
Shared pytest fixtures.

Each test gets a fresh in-memory SQLite database inside an app context,
so requests made through the test client share the test's session.
"""
import base64
import hashlib
import hmac
import json

import pytest

from merchant_ops import create_app
from merchant_ops.extensions import db
from merchant_ops.models import Order, ShopifyWebhook, Tenant


def generate_hmac_signature(payload: bytes, secret: str) -> str:
    """Generate Shopify-compatible HMAC signature."""
    return base64.b64encode(
        hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).digest()
    ).decode('utf-8')


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_tenant(app):
    tenant = Tenant(shop_name='Acme Outfitters', shopify_domain='acme')
    db.session.add(tenant)
    db.session.commit()
    return tenant


@pytest.fixture
def sample_order(sample_tenant):
    order = Order(tenant_id=sample_tenant.id, shopify_order_id='555', order_number='#1001')
    db.session.add(order)
    db.session.commit()
    return order


@pytest.fixture
def registered_webhooks(app, sample_tenant):
    webhooks = [
        ShopifyWebhook(
            tenant_id=sample_tenant.id,
            topic=topic,
            shopify_webhook_id=f'gid://shopify/WebhookSubscription/{index}',
            address=f'https://ops.example.com/webhook/{topic}',
            status='active',
        )
        for index, topic in enumerate(app.config['SHOPIFY_WEBHOOK_TOPICS'], start=1)
    ]
    db.session.add_all(webhooks)
    db.session.commit()
    return webhooks


@pytest.fixture
def signed_post(app, client):
    """
    POST a webhook body signed with the configured secret.

    Usage:
        response = signed_post('/webhook/orders/cancelled', payload)
        response = signed_post(url, payload, shop_domain=None)   # no header
        response = signed_post(url, raw_bytes, signature='bogus')
    """
    def _post(url, payload, shop_domain='acme.myshopify.com', signature=None, headers=None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')
        if signature is None:
            signature = generate_hmac_signature(body, app.config['SHOPIFY_WEBHOOK_SECRET'])

        request_headers = {
            'Content-Type': 'application/json',
            'X-Shopify-Hmac-Sha256': signature,
            'X-Shopify-Webhook-Id': 'b54557e4-bdd9-4b37-8a5f-bf7d70bcd043',
        }
        if shop_domain is not None:
            request_headers['X-Shopify-Shop-Domain'] = shop_domain
        request_headers.update(headers or {})

        return client.post(url, data=body, headers=request_headers)

    return _post
