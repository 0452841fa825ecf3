"""
Webhook payload schemas for the topics we reconcile.

Each payload is built from the parsed JSON body with ``from_payload``, which
raises MalformedPayloadError when a required field is missing or invalid.
Reconciliation never sees a partially valid payload.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .utils.exceptions import MalformedPayloadError
from .utils.shopify_ids import extract_shopify_id, parse_shopify_datetime


def _require(data: Dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == '':
        raise MalformedPayloadError(f"Missing required field '{key}'", key)
    return value


def _require_id(data: Dict[str, Any], key: str) -> str:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedPayloadError(f"Field '{key}' must be an ID", key)
    shopify_id = extract_shopify_id(value)
    if not shopify_id:
        raise MalformedPayloadError(f"Field '{key}' must be an ID", key)
    return shopify_id


def _timestamp(data: Dict[str, Any], key: str, required: bool = True) -> Optional[datetime]:
    value = _require(data, key) if required else data.get(key)
    try:
        return parse_shopify_datetime(value)
    except ValueError:
        raise MalformedPayloadError(f"Field '{key}' is not a valid timestamp", key)


def _optional_text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == '':
        return None
    return str(value)


@dataclass
class CancellationPayload:
    """orders/cancelled body. Shopify sends the full order; we keep what we store."""
    order_id: str
    cancelled_at: datetime
    cancel_reason: Optional[str] = None
    order_name: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'CancellationPayload':
        return cls(
            order_id=_require_id(data, 'id'),
            cancelled_at=_timestamp(data, 'cancelled_at'),
            cancel_reason=_optional_text(data, 'cancel_reason'),
            order_name=_optional_text(data, 'name'),
        )


@dataclass
class ReturnLineItemPayload:
    line_item_id: str
    quantity: int
    reason: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> 'ReturnLineItemPayload':
        if not isinstance(data, dict):
            raise MalformedPayloadError('Return line item must be an object', 'return_line_items')

        quantity = data.get('quantity', 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise MalformedPayloadError("Field 'quantity' must be a non-negative integer", 'quantity')

        return cls(
            line_item_id=_require_id(data, 'line_item_id'),
            quantity=quantity,
            reason=_optional_text(data, 'reason'),
        )


@dataclass
class ReturnPayload:
    """returns/create and returns/update body."""
    return_id: str
    order_id: str
    status: str
    requested_at: datetime
    received_at: Optional[datetime] = None
    line_items: List[ReturnLineItemPayload] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'ReturnPayload':
        raw_items = data.get('return_line_items') or []
        if not isinstance(raw_items, list):
            raise MalformedPayloadError("Field 'return_line_items' must be a list", 'return_line_items')

        return cls(
            return_id=_require_id(data, 'id'),
            order_id=_require_id(data, 'order_id'),
            status=str(_require(data, 'status')),
            requested_at=_timestamp(data, 'created_at'),
            received_at=_timestamp(data, 'received_at', required=False),
            line_items=[ReturnLineItemPayload.from_payload(item) for item in raw_items],
        )
