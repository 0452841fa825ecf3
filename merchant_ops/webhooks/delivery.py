"""
Shopify webhook delivery pipeline.

Every topic endpoint runs the same sequence before any reconciliation:

1. Verify the HMAC over the exact raw body (401 on failure)
2. Parse the JSON envelope and the topic payload (400 on failure)
3. Resolve the tenant from the shop domain (400 missing, 404 unknown)

Only then is the handler called, inside a single transaction. Shopify
retries any non-2xx response, so permanent problems (bad signature,
unknown shop) are 4xx and only internal failures are 5xx.
"""
import base64
import hashlib
import hmac
import json
from functools import wraps
from typing import Any, Dict, Iterator, Optional

from flask import current_app, request
from sqlalchemy import func

from ..extensions import db
from ..models import Tenant
from ..services.webhook_bookkeeping import WebhookBookkeeping
from ..utils.errors import exception_response, webhook_received
from ..utils.exceptions import (
    InvalidSignatureError,
    MalformedPayloadError,
    MerchantOpsError,
    MissingShopDomainError,
    PersistenceError,
    TenantNotFoundError,
)

HMAC_HEADER = 'X-Shopify-Hmac-Sha256'
SHOP_DOMAIN_HEADER = 'X-Shopify-Shop-Domain'

# Delivery headers kept on the audit log (never the signature)
AUDITED_HEADERS = (
    SHOP_DOMAIN_HEADER,
    'X-Shopify-Topic',
    'X-Shopify-Webhook-Id',
    'X-Shopify-Event-Id',
    'X-Shopify-Triggered-At',
    'X-Shopify-API-Version',
)


def verify_shopify_webhook(data: bytes, hmac_header: Optional[str], secret: Optional[str]) -> bool:
    """
    Verify Shopify webhook HMAC-SHA256 signature.

    Shopify signs the raw body with the app's shared secret and sends the
    base64 digest. The comparison is timing-safe.

    With no secret configured verification is bypassed (development) and
    the bypass is logged on every delivery.

    Args:
        data: Raw request body bytes
        hmac_header: The X-Shopify-Hmac-Sha256 header value
        secret: The deployment's webhook secret

    Returns:
        True if signature is valid (or verification is bypassed)
    """
    if not secret:
        current_app.logger.warning(
            'SHOPIFY_WEBHOOK_SECRET not configured, skipping webhook signature verification'
        )
        return True

    if not hmac_header:
        current_app.logger.warning(f'No {HMAC_HEADER} header in webhook request')
        return False

    computed_hmac = base64.b64encode(
        hmac.new(secret.encode('utf-8'), data, hashlib.sha256).digest()
    ).decode('utf-8')

    return hmac.compare_digest(computed_hmac.encode('utf-8'), hmac_header.strip().encode('utf-8'))


def parse_json_body(data: bytes) -> Dict[str, Any]:
    """
    Parse an authenticated webhook body.

    Raises:
        MalformedPayloadError: Body is not UTF-8 JSON or not an object
    """
    try:
        body = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        raise MalformedPayloadError('Webhook body is not valid JSON')

    if not isinstance(body, dict):
        raise MalformedPayloadError('Webhook body must be a JSON object')
    return body


def get_shop_domain(body: Optional[Dict[str, Any]] = None) -> str:
    """
    Shop domain from the delivery header, falling back to the payload.

    Raises:
        MissingShopDomainError: Neither source names a shop
    """
    shop_domain = request.headers.get(SHOP_DOMAIN_HEADER, '').strip()
    if not shop_domain and body:
        shop_domain = str(body.get('shop_domain') or '').strip()
    if not shop_domain:
        raise MissingShopDomainError()
    return shop_domain


def shop_domain_candidates(shop_domain: str, suffix: str = '.myshopify.com') -> Iterator[str]:
    """
    Lookup keys for a shop domain, most specific store form first.

    'ACME.myshopify.com', 'acme' and 'https://acme.myshopify.com/' all
    yield: 'acme', 'acme.myshopify.com'.

    Order: bare slug, normalised full domain, slug with the suffix.
    """
    domain = shop_domain.strip().lower()
    for scheme in ('https://', 'http://'):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
    domain = domain.rstrip('/')

    suffix = suffix.lower()
    slug = domain[:-len(suffix)] if suffix and domain.endswith(suffix) else domain

    seen = set()
    for candidate in (slug, domain, f'{slug}{suffix}'):
        if candidate and candidate not in seen:
            seen.add(candidate)
            yield candidate


def resolve_tenant(shop_domain: str) -> Tenant:
    """
    Find the tenant owning a shop domain. First candidate match wins.

    Raises:
        TenantNotFoundError: No tenant matches any candidate
    """
    suffix = current_app.config.get('SHOPIFY_SHOP_SUFFIX', '.myshopify.com')
    for candidate in shop_domain_candidates(shop_domain, suffix):
        tenant = Tenant.query.filter(func.lower(Tenant.shopify_domain) == candidate).first()
        if tenant:
            return tenant
    raise TenantNotFoundError(shop_domain)


def audited_headers() -> Dict[str, str]:
    return {name: request.headers[name] for name in AUDITED_HEADERS if name in request.headers}


def webhook_endpoint(topic: str, payload_type):
    """
    Decorator running the delivery pipeline for one webhook topic.

    The wrapped handler is called as ``handler(tenant, payload)`` only
    after authentication, parsing and tenant resolution succeed. Its
    writes are committed together; any exception rolls them back, is
    logged to the audit trail on a best-effort basis, and returns 500 so
    Shopify retries.

    Usage:
        @bp.route('/orders/cancelled', methods=['POST'])
        @webhook_endpoint('orders/cancelled', CancellationPayload)
        def handle_order_cancelled(tenant, payload):
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            raw_body = request.get_data(cache=True)

            if not verify_shopify_webhook(
                raw_body,
                request.headers.get(HMAC_HEADER),
                current_app.config.get('SHOPIFY_WEBHOOK_SECRET'),
            ):
                current_app.logger.warning(
                    f'Invalid {topic} webhook signature from '
                    f'{request.headers.get(SHOP_DOMAIN_HEADER, "unknown shop")}'
                )
                return exception_response(InvalidSignatureError())

            try:
                body = parse_json_body(raw_body)
                payload = payload_type.from_payload(body)
                shop_domain = get_shop_domain(body)
                tenant = resolve_tenant(shop_domain)
            except MerchantOpsError as e:
                current_app.logger.warning(f'Rejected {topic} webhook: {e.message}')
                return exception_response(e)

            bookkeeping = WebhookBookkeeping(tenant.id)

            try:
                result = f(tenant, payload, *args, **kwargs)
                db.session.commit()
            except Exception as e:
                db.session.rollback()
                current_app.logger.error(f'Error processing {topic} webhook for {shop_domain}: {e}')
                bookkeeping.record_failure(topic, body, audited_headers(), e)
                # Detail stays in the log and the audit row, never in the response
                return exception_response(PersistenceError('Internal server error', e))

            bookkeeping.record_delivery(topic, body, audited_headers())

            if result is not None and getattr(result, 'skipped', False):
                current_app.logger.info(f'Acknowledged {topic} webhook without changes: {result.message}')
            return webhook_received()

        return decorated_function
    return decorator
