"""shopcart - client-side shopping cart engine for a remote commerce API."""
from shopcart.cart import Cart, CartEngine, CartStorage, LineItem, OrderResult
from shopcart.config import CommerceConfig, load_config

__all__ = [
    "Cart",
    "CartEngine",
    "CartStorage",
    "LineItem",
    "OrderResult",
    "CommerceConfig",
    "load_config",
]

__version__ = "1.0.0"
