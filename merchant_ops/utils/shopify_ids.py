"""
Shopify identifier and timestamp normalisation.

Webhook payloads carry IDs either as bare numbers (5678901234567) or as
GraphQL global IDs (gid://shopify/Order/5678901234567). Local records are
always keyed by the bare numeric string so webhook and pull-sync paths agree.
"""
from datetime import datetime, timezone
from typing import Optional, Union


def extract_shopify_id(gid_or_id: Union[str, int]) -> str:
    """
    Extract the numeric ID from a Shopify GID or plain ID.

    >>> extract_shopify_id('gid://shopify/Order/555')
    '555'
    >>> extract_shopify_id(555)
    '555'
    """
    value = str(gid_or_id).strip()
    if value.startswith('gid://'):
        # Strip query params some GIDs carry (gid://shopify/Order/1?foo=bar)
        value = value.split('?', 1)[0]
        return value.rstrip('/').rsplit('/', 1)[-1]
    return value


def parse_shopify_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from a webhook into naive UTC.

    Shopify sends offsets (2026-01-20T12:00:00-05:00) and Zulu
    (2024-01-01T00:00:00Z); both are stored as naive UTC to match
    datetime.utcnow() defaults on the models.

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp
    """
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValueError(f'Expected ISO-8601 string, got {type(value).__name__}')

    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
