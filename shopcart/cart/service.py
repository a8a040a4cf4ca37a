"""Cart engine: line-item store plus the cart, order and payment operations."""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from shopcart.auth import SessionUser, auth_headers
from shopcart.config import CommerceConfig
from shopcart.errors import (
    ERROR_API_URL_REQUIRED,
    ERROR_AUTH_REQUIRED,
    ERROR_INVALID_ITEM,
    ERROR_INVALID_ORDER,
    ERROR_INVALID_PAYMENT,
    AuthenticationRequiredError,
    ConfigError,
    InvalidRequestError,
    ItemNotFoundError,
)
from shopcart.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from shopcart.services.api import CommerceAPI
from shopcart.services.models import AddToCartRequest, OrderDetails, PaymentDetails
from shopcart.services.products import ProductSource
from shopcart.services.settings import SettingsCache, now_ms
from shopcart.services.vat import VatNumberCache, VatValidator
from .aggregator import build_cart
from .models import Cart, LineItem, Settings
from .storage import CartStorage

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class OrderResult:
    """Cart as it was ordered, and the order created by the API."""
    cart: Cart
    order: Any


def _validated(model: Type[ModelT], message: str, data: Mapping[str, Any]) -> ModelT:
    """Validate operation arguments, rejecting them before any network call."""
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidRequestError(message) from e


class CartEngine:
    """
    Shopping cart for one shopper.

    Holds the line items and settings, persists them after every change and
    computes the Cart on demand. Cart-mutating operations return the
    recomputed Cart.

    Usage:
        async with CartEngine({"api_url": "https://shop.example.com/api"}) as engine:
            cart = await engine.add_to_cart("/products/book-1/", 2)
            result = await engine.order({"email": "a@b.c", "shipping_address_id": "addr-1"})
    """

    def __init__(
        self,
        config: Union[CommerceConfig, Mapping[str, Any]],
        storage: Optional[CartStorage] = None,
        vat_cache: Optional[VatNumberCache] = None,
        api: Optional[CommerceAPI] = None,
        site_client: Optional[httpx.AsyncClient] = None,
        clock=now_ms,
    ):
        """
        Args:
            config: CommerceConfig or a mapping of its fields (api_url required)
            storage: Cart persistence; in-memory when omitted
            vat_cache: VAT lookup cache, pass the same instance to share it
            api: Commerce API client; built from config when omitted
            site_client: HTTP client for product pages and settings
            clock: Millisecond clock for settings freshness
        """
        self.config = self._load_config(config)
        if self.config.uses_plain_http:
            logger.warning(
                "DO NOT USE HTTP IN PRODUCTION! The commerce API requires HTTPS to work securely."
            )

        self.api = api if api is not None else CommerceAPI(self.config.api_url, self.config.http_timeout)
        self._owns_site_client = site_client is None
        self.site_client = site_client if site_client is not None else self._make_site_client()

        self.currency = self.config.currency
        self.billing_country = self.config.country
        self.user: Optional[SessionUser] = None
        self.vat_number: Optional[str] = None
        self.vat_number_valid = False

        self.storage = storage if storage is not None else CartStorage()
        self.products = ProductSource(self.site_client, self.config.product_element_id)
        self.vat = VatValidator(self.api, vat_cache)
        self.settings_cache = SettingsCache(
            self.site_client,
            settings_path=self.config.settings_path,
            refresh_period_ms=self.config.settings_refresh_period,
            clock=clock,
        )

        self.line_items: Dict[str, LineItem] = {}
        self.load_cart()

    @staticmethod
    def _load_config(config: Union[CommerceConfig, Mapping[str, Any]]) -> CommerceConfig:
        if not isinstance(config, CommerceConfig):
            if not (config.get("api_url") or config.get("APIUrl")):
                raise ConfigError(ERROR_API_URL_REQUIRED)
            config = CommerceConfig.model_validate(dict(config))
        if not config.api_url:
            raise ConfigError(ERROR_API_URL_REQUIRED)
        return config

    def _make_site_client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.config.http_timeout, connect=5.0)
        if self.config.site_url:
            return httpx.AsyncClient(base_url=self.config.site_url, timeout=timeout)
        return httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "CartEngine":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP clients."""
        await self.api.aclose()
        if self._owns_site_client:
            await self.site_client.aclose()

    @property
    def settings(self) -> Optional[Settings]:
        return self.settings_cache.settings

    # ==================== CART STATE ====================

    def set_user(self, user: Optional[SessionUser]) -> None:
        self.user = user

    def get_cart(self) -> Cart:
        """Compute the cart from the current line items and settings."""
        return build_cart(
            self.line_items,
            self.settings,
            self.currency,
            country=self.billing_country,
            user=self.user,
            vat_number_valid=self.vat_number_valid,
        )

    def set_currency(self, currency: str) -> Cart:
        self.currency = currency.upper()
        return self.get_cart()

    def set_country(self, country: Optional[str]) -> Cart:
        self.billing_country = country
        return self.get_cart()

    async def set_vat_number(self, vat_number: Optional[str]) -> Cart:
        """Record the shopper's VAT number; a valid one exempts the cart from tax."""
        self.vat_number = vat_number
        self.vat_number_valid = False
        self.vat_number_valid = await self.vat.verify(vat_number)
        return self.get_cart()

    async def add_to_cart(self, path: str, quantity: int, meta: Any = None) -> Cart:
        """
        Add a product page's product to the cart.

        Adding a SKU already in the cart increments its quantity.

        Raises:
            InvalidRequestError: Missing path or non-positive quantity
            RemoteRequestError: The product page could not be fetched or read
        """
        request = _validated(
            AddToCartRequest, ERROR_INVALID_ITEM, {"path": path, "quantity": quantity, "meta": meta}
        )
        product = await self.products.fetch(request.path)

        sku = str(product["sku"])
        existing = self.line_items.get(sku)
        if existing is not None:
            existing.quantity += request.quantity
        else:
            self.line_items[sku] = LineItem.from_dict(
                {**product, "path": request.path, "meta": request.meta, "quantity": request.quantity}
            )
        logger.info(f"Added {request.quantity} x {sanitize_string_for_logging(sku)} to cart")

        await self.settings_cache.ensure_fresh()
        self.persist_cart()
        return self.get_cart()

    def update_cart(self, sku: str, quantity: int) -> Cart:
        """
        Set a line item's quantity; zero or less removes it.

        Raises:
            ItemNotFoundError: The SKU is not in the cart
        """
        if sku not in self.line_items:
            raise ItemNotFoundError(sku)

        if quantity > 0:
            self.line_items[sku].quantity = quantity
        else:
            del self.line_items[sku]
            logger.info(f"Removed {sanitize_string_for_logging(sku)} from cart")
        self.persist_cart()
        return self.get_cart()

    def clear_cart(self) -> Cart:
        self.line_items = {}
        self.persist_cart()
        return self.get_cart()

    # ==================== ORDERS & PAYMENTS ====================

    async def order(self, order_details: Mapping[str, Any]) -> OrderResult:
        """
        Submit the cart as an order and clear it.

        Raises:
            InvalidRequestError: No email, or neither shipping_address nor shipping_address_id
            UnpriceableItemError: An item has no price in the cart currency
            RemoteRequestError: The API rejected the order
        """
        details = _validated(OrderDetails, ERROR_INVALID_ORDER, order_details)
        # Priced before submitting so an unpriceable item fails without an order
        cart = self.get_cart()
        body = details.model_dump(exclude_none=True)
        body.update({
            "vatnumber": self.vat_number if self.vat_number_valid else None,
            "currency": self.currency,
            "line_items": [item.to_dict() for item in self.line_items.values()],
        })

        headers = await self.auth_headers()
        order = await self.api.request("/orders", method="POST", headers=headers, json=body)
        logger.info(f"Order placed with {len(body['line_items'])} line items")

        self.clear_cart()
        return OrderResult(cart=cart, order=order)

    async def payment(self, payment_details: Mapping[str, Any]) -> Any:
        """
        Pay for an order with a Stripe token or PayPal payment.

        Raises:
            InvalidRequestError: Missing order_id, amount or payment credentials
            RemoteRequestError: The API rejected the payment
        """
        details = _validated(PaymentDetails, ERROR_INVALID_PAYMENT, payment_details)
        body = details.model_dump()
        body["currency"] = self.currency

        headers = await self.auth_headers()
        logger.info(f"Submitting payment for order {sanitize_id_for_logging(details.order_id)}")
        return await self.api.request(
            f"/orders/{details.order_id}/payments", method="POST", headers=headers, json=body
        )

    async def paypal_payment_info(self, payment_id: str) -> Any:
        return await self.api.request(f"/paypal/{payment_id}")

    async def claim_orders(self) -> Any:
        """Attach anonymous orders to the signed-in user; no-op without a user."""
        if self.user is None:
            return None
        headers = await self.auth_headers()
        return await self.api.request("/claim", method="POST", headers=headers)

    async def order_history(self) -> Any:
        if self.user is None:
            raise AuthenticationRequiredError(ERROR_AUTH_REQUIRED)
        headers = await self.auth_headers()
        return await self.api.request("/orders", headers=headers)

    async def auth_headers(self) -> Dict[str, str]:
        return await auth_headers(self.user)

    # ==================== PERSISTENCE ====================

    def load_cart(self) -> None:
        """Restore line items and settings from storage."""
        self.line_items, self.settings_cache.settings = self.storage.load()
        logger.debug(f"Loaded cart with {len(self.line_items)} line items")

    def persist_cart(self) -> None:
        self.storage.save(self.line_items, self.settings)
