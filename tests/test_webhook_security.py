"""
Tests for webhook delivery authentication, envelope parsing and tenant resolution.

Covers:
- HMAC signature verification (valid, tampered, missing, dev bypass)
- Malformed bodies rejected before any reconciliation
- Shop domain normalisation and tenant lookup
"""
import json
import pytest

from merchant_ops.extensions import db
from merchant_ops.models import (
    Order,
    ShopifyCancellation,
    ShopifyReturn,
    ShopifyWebhook,
    Tenant,
    WebhookEvent,
)
from merchant_ops.utils.exceptions import TenantNotFoundError
from merchant_ops.webhooks import resolve_tenant, shop_domain_candidates, verify_shopify_webhook

from conftest import generate_hmac_signature

CANCEL_URL = '/webhook/orders/cancelled'

SAMPLE_CANCELLATION = {
    'id': 'gid://shopify/Order/555',
    'name': '#1001',
    'cancelled_at': '2024-01-01T00:00:00Z',
    'cancel_reason': 'customer',
}


def row_counts():
    return {
        model.__tablename__: model.query.count()
        for model in (Tenant, Order, ShopifyCancellation, ShopifyReturn, ShopifyWebhook, WebhookEvent)
    }


# ============================================================================
# SIGNATURE VERIFICATION
# ============================================================================

class TestVerifyShopifyWebhook:
    """Tests for the HMAC predicate."""

    def test_valid_signature(self, app):
        body = b'{"id": 555}'
        signature = generate_hmac_signature(body, 'shpss_secret')
        assert verify_shopify_webhook(body, signature, 'shpss_secret') is True

    def test_signature_with_surrounding_whitespace(self, app):
        body = b'{"id": 555}'
        signature = generate_hmac_signature(body, 'shpss_secret')
        assert verify_shopify_webhook(body, f' {signature}\n', 'shpss_secret') is True

    def test_wrong_secret_rejected(self, app):
        body = b'{"id": 555}'
        signature = generate_hmac_signature(body, 'other_secret')
        assert verify_shopify_webhook(body, signature, 'shpss_secret') is False

    def test_tampered_body_rejected(self, app):
        signature = generate_hmac_signature(b'{"id": 555}', 'shpss_secret')
        assert verify_shopify_webhook(b'{"id": 556}', signature, 'shpss_secret') is False

    def test_missing_header_rejected(self, app):
        assert verify_shopify_webhook(b'{}', None, 'shpss_secret') is False
        assert verify_shopify_webhook(b'{}', '', 'shpss_secret') is False

    def test_no_secret_bypasses_verification(self, app):
        assert verify_shopify_webhook(b'{}', None, '') is True
        assert verify_shopify_webhook(b'{}', 'anything', None) is True


class TestSignatureRejection:
    """Deliveries with bad signatures never touch the database."""

    def test_tampered_payload_with_stale_signature_returns_401(
        self, client, sample_order, registered_webhooks, signed_post
    ):
        original = json.dumps(SAMPLE_CANCELLATION).encode('utf-8')
        stale_signature = generate_hmac_signature(original, 'test-webhook-secret')
        tampered = original.replace(b'customer', b'customeR')

        before = row_counts()
        response = signed_post(CANCEL_URL, tampered, signature=stale_signature)

        assert response.status_code == 401
        assert response.get_json() == {'error': 'Invalid webhook signature'}
        assert row_counts() == before

        order = db.session.get(Order, sample_order.id)
        assert order.cancelled_at is None
        webhook = ShopifyWebhook.query.filter_by(topic='orders/cancelled').first()
        assert webhook.last_triggered_at is None

    def test_missing_signature_returns_401(self, client, sample_tenant):
        response = client.post(
            CANCEL_URL,
            data=json.dumps(SAMPLE_CANCELLATION),
            headers={
                'Content-Type': 'application/json',
                'X-Shopify-Shop-Domain': 'acme.myshopify.com',
            },
        )
        assert response.status_code == 401
        assert ShopifyCancellation.query.count() == 0

    def test_signature_checked_before_tenant_lookup(self, signed_post):
        # Unknown shop with a bad signature is an auth failure, not a 404
        response = signed_post(CANCEL_URL, SAMPLE_CANCELLATION,
                               shop_domain='unknown-shop.myshopify.com', signature='bogus')
        assert response.status_code == 401

    def test_unsigned_delivery_accepted_without_secret(self, app, client, sample_tenant):
        app.config['SHOPIFY_WEBHOOK_SECRET'] = ''

        response = client.post(
            CANCEL_URL,
            data=json.dumps(SAMPLE_CANCELLATION),
            headers={
                'Content-Type': 'application/json',
                'X-Shopify-Shop-Domain': 'acme.myshopify.com',
            },
        )

        assert response.status_code == 200
        assert ShopifyCancellation.query.count() == 1


# ============================================================================
# PAYLOAD PARSING
# ============================================================================

class TestMalformedPayloads:
    """Malformed bodies are 400s and reconcile nothing."""

    def test_invalid_json_returns_400(self, sample_tenant, signed_post):
        before = row_counts()
        response = signed_post(CANCEL_URL, b'{"id": 555, "cancelled_at": ')

        assert response.status_code == 400
        assert 'error' in response.get_json()
        assert row_counts() == before

    def test_json_array_body_returns_400(self, sample_tenant, signed_post):
        response = signed_post(CANCEL_URL, b'[1, 2, 3]')
        assert response.status_code == 400

    def test_non_utf8_body_returns_400(self, sample_tenant, signed_post):
        response = signed_post(CANCEL_URL, b'\xff\xfe\x00')
        assert response.status_code == 400

    def test_missing_order_id_returns_400(self, sample_tenant, signed_post):
        payload = {k: v for k, v in SAMPLE_CANCELLATION.items() if k != 'id'}
        response = signed_post(CANCEL_URL, payload)

        assert response.status_code == 400
        assert "'id'" in response.get_json()['error']
        assert ShopifyCancellation.query.count() == 0

    def test_invalid_timestamp_returns_400(self, sample_tenant, signed_post):
        response = signed_post(CANCEL_URL, {**SAMPLE_CANCELLATION, 'cancelled_at': 'yesterday'})
        assert response.status_code == 400
        assert WebhookEvent.query.count() == 0

    def test_malformed_return_line_item_returns_400(self, sample_order, signed_post):
        payload = {
            'id': 9001,
            'order_id': 555,
            'status': 'open',
            'created_at': '2024-01-02T10:00:00Z',
            'return_line_items': [{'line_item_id': 1, 'quantity': 'two'}],
        }
        response = signed_post('/webhook/returns/create', payload)

        assert response.status_code == 400
        assert ShopifyReturn.query.count() == 0


# ============================================================================
# TENANT RESOLUTION
# ============================================================================

class TestShopDomainCandidates:
    """Tests for shop domain normalisation."""

    def test_bare_slug(self):
        assert list(shop_domain_candidates('acme')) == ['acme', 'acme.myshopify.com']

    def test_full_domain(self):
        assert list(shop_domain_candidates('acme.myshopify.com')) == ['acme', 'acme.myshopify.com']

    def test_uppercase_and_whitespace(self):
        assert list(shop_domain_candidates('  ACME.MYSHOPIFY.COM ')) == ['acme', 'acme.myshopify.com']

    def test_url_form(self):
        assert list(shop_domain_candidates('https://acme.myshopify.com/')) == ['acme', 'acme.myshopify.com']

    def test_custom_domain_keeps_full_domain(self):
        assert list(shop_domain_candidates('shop.acme.com')) == [
            'shop.acme.com',
            'shop.acme.com.myshopify.com',
        ]


class TestResolveTenant:
    """Tests for tenant lookup."""

    @pytest.mark.parametrize('shop_domain', ['acme', 'acme.myshopify.com', 'ACME.MYSHOPIFY.COM'])
    def test_domain_forms_resolve_to_same_tenant(self, sample_tenant, shop_domain):
        assert resolve_tenant(shop_domain).id == sample_tenant.id

    @pytest.mark.parametrize('stored', ['acme.myshopify.com', 'Acme.MyShopify.com', 'ACME'])
    def test_stored_domain_forms(self, app, stored):
        tenant = Tenant(shop_name='Acme', shopify_domain=stored)
        db.session.add(tenant)
        db.session.commit()

        assert resolve_tenant('acme').id == tenant.id
        assert resolve_tenant('acme.myshopify.com').id == tenant.id

    def test_bare_slug_wins_over_full_domain(self, app):
        slug_tenant = Tenant(shop_name='Slug', shopify_domain='acme')
        domain_tenant = Tenant(shop_name='Domain', shopify_domain='acme.myshopify.com')
        db.session.add_all([domain_tenant, slug_tenant])
        db.session.commit()

        assert resolve_tenant('acme.myshopify.com').id == slug_tenant.id

    def test_unknown_shop_raises(self, sample_tenant):
        with pytest.raises(TenantNotFoundError):
            resolve_tenant('someone-else.myshopify.com')


class TestTenantResolutionOverHttp:
    """Tenant lookup as seen by Shopify."""

    @pytest.mark.parametrize('shop_domain', ['acme', 'acme.myshopify.com', 'ACME.MYSHOPIFY.COM'])
    def test_all_domain_forms_accepted(self, sample_tenant, signed_post, shop_domain):
        response = signed_post(CANCEL_URL, SAMPLE_CANCELLATION, shop_domain=shop_domain)

        assert response.status_code == 200
        assert ShopifyCancellation.query.filter_by(tenant_id=sample_tenant.id).count() == 1

    def test_unknown_shop_returns_404(self, sample_tenant, signed_post):
        before = row_counts()
        response = signed_post(CANCEL_URL, SAMPLE_CANCELLATION, shop_domain='unknown-shop.myshopify.com')

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Organization not found'}
        assert row_counts() == before

    def test_shop_domain_from_payload_when_header_missing(self, sample_tenant, signed_post):
        payload = {**SAMPLE_CANCELLATION, 'shop_domain': 'acme.myshopify.com'}
        response = signed_post(CANCEL_URL, payload, shop_domain=None)

        assert response.status_code == 200
        assert ShopifyCancellation.query.count() == 1

    def test_missing_shop_domain_returns_400(self, sample_tenant, signed_post):
        response = signed_post(CANCEL_URL, SAMPLE_CANCELLATION, shop_domain=None)

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Missing shop domain'}
