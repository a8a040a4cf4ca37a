"""
Cart persistence.

The line items and the settings snapshot are stored together as one JSON
document under a single key of a key-value store.
"""
import json
from typing import Dict, Optional, Protocol, Tuple

from shopcart.db import RedisKeys, get_redis
from shopcart.logging import get_logger
from .models import LineItem, Settings

logger = get_logger(__name__)

CART_KEY = "shopcart.shopping-cart"

# Version of the persisted record layout; records without one are version 1
RECORD_VERSION = 1


class KeyValueStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> object:
        ...


class MemoryStore:
    """Process-local store, the default when no store is configured."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = data if data is not None else {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class RedisStore:
    """Store backed by Upstash Redis (see shopcart.db)."""

    def __init__(self, redis=None, namespace: str = "default"):
        self._redis = redis  # Lazy initialization
        self.prefix = RedisKeys.cart_prefix(namespace)

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    def get(self, key: str) -> Optional[str]:
        return self.redis.get(self.prefix + key)

    def set(self, key: str, value: str) -> None:
        self.redis.set(self.prefix + key, value)


class CartStorage:
    """Save and load the cart record."""

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = CART_KEY):
        self.store = store if store is not None else MemoryStore()
        self.key = key

    def save(self, line_items: Dict[str, LineItem], settings: Optional[Settings]) -> None:
        """Persist line items and settings as one record."""
        record = {
            "version": RECORD_VERSION,
            "line_items": {sku: item.to_dict() for sku, item in line_items.items()},
            "settings": settings.to_dict() if settings else None,
        }
        self.store.set(self.key, json.dumps(record))
        logger.debug(f"Persisted cart with {len(line_items)} line items")

    def load(self) -> Tuple[Dict[str, LineItem], Optional[Settings]]:
        """
        Load line items and settings.

        Returns empty items and no settings when nothing is stored.
        Invalid JSON is not recovered from: json.JSONDecodeError propagates.
        """
        data = self.store.get(self.key)
        if not data:
            return {}, None

        record = json.loads(data)
        version = record.get("version", RECORD_VERSION)
        if version != RECORD_VERSION:
            logger.warning(f"Cart record version {version} differs from {RECORD_VERSION}; reading as-is")

        line_items = {
            sku: LineItem.from_dict(item)
            for sku, item in (record.get("line_items") or {}).items()
        }
        settings_data = record.get("settings")
        settings = Settings.from_dict(settings_data) if settings_data else None
        return line_items, settings
