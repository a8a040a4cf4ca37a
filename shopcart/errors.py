"""
Errors - exception types and centralized error messages.

Messages live in constants so the same wording is shared between the
engine, the request models and the tests.
"""

from typing import Any, Optional

# Configuration errors
ERROR_API_URL_REQUIRED = "You must specify an api_url of your commerce API instance"

# Input validation errors
ERROR_INVALID_ITEM = "Invalid item - must have path and quantity"
ERROR_INVALID_ORDER = (
    "Invalid order details - must have an email and either a shipping_address or shipping_address_id"
)
ERROR_INVALID_PAYMENT = (
    "Invalid payment details - must have an order_id, an amount and a stripe_token "
    "or a paypal_payment_id and paypal_user_id"
)

# Remote errors
ERROR_PRODUCT_FETCH_FAILED = "Failed to fetch {path}"
ERROR_PRODUCT_UNREADABLE = "Failed to read sku, title and price from product path"

# Lookup errors
ERROR_ITEM_NOT_FOUND = "Item {sku} not found in cart"
ERROR_NO_PRICE = "No {currency} price available for item {sku}"

# Auth errors
ERROR_AUTH_REQUIRED = "You must be authenticated to fetch order history"


class ShopCartError(Exception):
    """Base class for all shopcart errors."""


class ConfigError(ShopCartError, ValueError):
    """Engine configuration is missing or invalid."""


class InvalidRequestError(ShopCartError, ValueError):
    """Arguments to a cart, order or payment operation were rejected before any network call."""


class RemoteRequestError(ShopCartError):
    """A remote endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data


class InvalidProductError(RemoteRequestError):
    """A product page was fetched but carries no usable product descriptor."""


class ItemNotFoundError(ShopCartError, KeyError):
    """A line item lookup by SKU found nothing."""

    def __init__(self, sku: str):
        super().__init__(ERROR_ITEM_NOT_FOUND.format(sku=sku))
        self.sku = sku

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class UnpriceableItemError(ShopCartError):
    """No price entry applies to a line item for the current currency and user."""

    def __init__(self, sku: str, currency: str):
        super().__init__(ERROR_NO_PRICE.format(sku=sku, currency=currency))
        self.sku = sku
        self.currency = currency


class AuthenticationRequiredError(ShopCartError):
    """The operation needs a signed-in user."""
