"""
Utility modules for Merchant Ops.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    exception_response,
    webhook_received,
    bad_request,
    not_found,
    internal_error
)
from .exceptions import (
    MerchantOpsError,
    InvalidSignatureError,
    MalformedPayloadError,
    MissingShopDomainError,
    TenantNotFoundError,
    PersistenceError
)
from .shopify_ids import extract_shopify_id, parse_shopify_datetime
