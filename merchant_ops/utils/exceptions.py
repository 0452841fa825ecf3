"""
Custom exceptions for webhook ingestion.

Each exception carries the HTTP status Shopify should see. Shopify retries
any non-2xx delivery, so only transient failures map to 5xx.
"""


class MerchantOpsError(Exception):
    """Base exception for all Merchant Ops errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "MERCHANT_OPS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidSignatureError(MerchantOpsError):
    """Webhook HMAC missing or does not match the body."""

    status_code = 401

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, "INVALID_SIGNATURE")


class MalformedPayloadError(MerchantOpsError):
    """Body is not JSON, or a required field is missing or invalid."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "MALFORMED_PAYLOAD"
        super().__init__(message, code)


class MissingShopDomainError(MerchantOpsError):
    """Neither the header nor the payload names the shop."""

    status_code = 400

    def __init__(self):
        super().__init__("Missing shop domain", "MISSING_SHOP_DOMAIN")


class TenantNotFoundError(MerchantOpsError):
    """No organization is mapped to the delivering shop. Permanent."""

    status_code = 404

    def __init__(self, shop_domain: str = None):
        self.shop_domain = shop_domain
        super().__init__("Organization not found", "SHOP_NOT_FOUND")


class PersistenceError(MerchantOpsError):
    """A storage operation failed while reconciling a delivery."""

    status_code = 500

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "DATABASE_ERROR")
