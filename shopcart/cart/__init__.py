"""Cart package: models, pricing, taxes, aggregation, storage and the engine facade."""
from .models import Cart, LineItem, Price, ResolvedItem, Settings, TaxRule
from .pricing import resolve_price
from .taxes import apply_tax, compute_tax
from .aggregator import build_cart
from .storage import CartStorage, MemoryStore, RedisStore
from .service import CartEngine, OrderResult

__all__ = [
    "Cart",
    "LineItem",
    "Price",
    "ResolvedItem",
    "Settings",
    "TaxRule",
    "resolve_price",
    "apply_tax",
    "compute_tax",
    "build_cart",
    "CartStorage",
    "MemoryStore",
    "RedisStore",
    "CartEngine",
    "OrderResult",
]
