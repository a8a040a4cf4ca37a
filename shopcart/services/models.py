"""Request models - validated arguments of cart, order and payment operations."""
from typing import Any, Optional

from pydantic import BaseModel, model_validator

from shopcart.errors import ERROR_INVALID_ITEM, ERROR_INVALID_ORDER, ERROR_INVALID_PAYMENT


class AddToCartRequest(BaseModel):
    """Product page to add and how many units."""
    path: str = ""
    quantity: int = 0
    meta: Any = None

    @model_validator(mode="after")
    def check_item(self):
        if not self.path or self.quantity < 1:
            raise ValueError(ERROR_INVALID_ITEM)
        return self


class OrderDetails(BaseModel):
    """Customer details for a new order."""
    email: Optional[str] = None
    shipping_address: Optional[dict] = None
    shipping_address_id: Optional[str] = None
    billing_address: Optional[dict] = None
    billing_address_id: Optional[str] = None
    data: Optional[dict] = None

    @model_validator(mode="after")
    def check_order(self):
        if not self.email or not (self.shipping_address or self.shipping_address_id):
            raise ValueError(ERROR_INVALID_ORDER)
        return self


class PaymentDetails(BaseModel):
    """Payment for an existing order, by Stripe token or PayPal ids."""
    order_id: Optional[str] = None
    amount: Optional[Any] = None
    stripe_token: Optional[str] = None
    paypal_payment_id: Optional[str] = None
    paypal_user_id: Optional[str] = None

    @model_validator(mode="after")
    def check_payment(self):
        has_paypal = self.paypal_payment_id and self.paypal_user_id
        if not (self.order_id and self.amount and (self.stripe_token or has_paypal)):
            raise ValueError(ERROR_INVALID_PAYMENT)
        return self
