"""
Webhook response utilities.

Shopify only looks at the status code, but bodies are kept consistent:

    success: {"received": true}                 200
    failure: {"error": "<message>"}             4xx / 5xx

Usage:
    from merchant_ops.utils.errors import error_response, ErrorCode

    return error_response("Organization not found", ErrorCode.SHOP_NOT_FOUND, 404)
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

from .exceptions import MerchantOpsError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes, used in logs."""

    # Authentication (401)
    INVALID_SIGNATURE = "INVALID_SIGNATURE"

    # Validation Errors (400)
    INVALID_REQUEST = "INVALID_REQUEST"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    MISSING_SHOP_DOMAIN = "MISSING_SHOP_DOMAIN"

    # Not Found (404)
    NOT_FOUND = "NOT_FOUND"
    SHOP_NOT_FOUND = "SHOP_NOT_FOUND"

    # Method Not Allowed (405)
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server Errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


def error_response(
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True,
    details: Optional[dict] = None
) -> tuple:
    """
    Create a webhook error response.

    Args:
        message: Error message returned to the caller
        code: Error code from ErrorCode enum (logged, not returned)
        status_code: HTTP status code
        log_error: Whether to log the error
        details: Optional additional details (only logged, not returned)

    Returns:
        Tuple of (response, status_code) for Flask
    """
    code_value = code.value if isinstance(code, ErrorCode) else code
    if log_error and status_code >= 500:
        logger.error(f"Webhook Error [{code_value}]: {message}", extra={"details": details})
    elif log_error and status_code >= 400:
        logger.warning(f"Webhook Error [{code_value}]: {message}", extra={"details": details})

    return jsonify({"error": message}), status_code


def exception_response(error: MerchantOpsError) -> tuple:
    """Map a MerchantOpsError to its error response."""
    return error_response(error.message, error.code, error.status_code)


def webhook_received() -> tuple:
    """200 acknowledgment. Shopify requires this within 5 seconds."""
    return jsonify({"received": True}), 200


def bad_request(message: str, code: ErrorCode = ErrorCode.INVALID_REQUEST) -> tuple:
    """400 Bad Request error."""
    return error_response(message, code, 400, log_error=False)


def not_found(message: str, code: ErrorCode = ErrorCode.NOT_FOUND) -> tuple:
    """404 Not Found error."""
    return error_response(message, code, 404, log_error=False)


def internal_error(message: str = "Internal server error", details: Optional[dict] = None) -> tuple:
    """500 Internal Server Error."""
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, log_error=True, details=details)
