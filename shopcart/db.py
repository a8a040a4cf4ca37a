"""
Database Module - Redis client for cart persistence

Provides a singleton Upstash Redis client used by RedisStore to keep the
persisted cart record. The client is synchronous: carts are loaded while
the engine is being constructed, outside any event loop.
"""

import os
from typing import Optional

from upstash_redis import Redis


# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")


_redis_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Get Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    # Persisted cart record per shopper/session
    CART = "cart:"  # cart:{namespace}:{storage key}

    @staticmethod
    def cart_prefix(namespace: str) -> str:
        return f"{RedisKeys.CART}{namespace}:"
