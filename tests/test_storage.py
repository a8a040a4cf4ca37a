"""
Tests for cart persistence
"""

import json
from decimal import Decimal

import pytest

from shopcart.cart import CartStorage, MemoryStore, RedisStore, Settings, TaxRule
from shopcart.cart.storage import CART_KEY, RECORD_VERSION
from tests.conftest import make_line_item


class _FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True


class TestCartStorage:
    """Tests for CartStorage."""

    def test_load_without_record(self):
        storage = CartStorage(MemoryStore())

        assert storage.load() == ({}, None)

    def test_round_trip(self):
        storage = CartStorage(MemoryStore())
        line_items = {
            "A": make_line_item("A", "10.00", quantity=2, type="book", meta={"gift": True}),
            "B": make_line_item("B", "5.00", quantity=1, vat="20"),
        }

        storage.save(line_items, None)
        loaded, settings = storage.load()

        assert loaded == line_items
        assert loaded["A"].quantity == 2
        assert loaded["B"].quantity == 1
        assert settings is None

    def test_settings_round_trip(self):
        storage = CartStorage(MemoryStore())
        settings = Settings(
            taxes=[TaxRule(product_types=["book"], countries=["US"], percentage=Decimal("10"))],
            ts=1_700_000_000_000,
            raw={"payment_methods": {"stripe": {"enabled": True}}},
        )

        storage.save({}, settings)
        _, loaded = storage.load()

        assert loaded == settings

    def test_record_layout(self):
        store = MemoryStore()
        CartStorage(store).save({"A": make_line_item("A")}, None)

        record = json.loads(store.data[CART_KEY])

        assert record["version"] == RECORD_VERSION
        assert set(record["line_items"]) == {"A"}
        assert record["settings"] is None

    def test_record_without_version_loads(self):
        store = MemoryStore({
            CART_KEY: json.dumps({
                "line_items": {"A": {"sku": "A", "title": "A", "prices": [{"amount": "1.00"}], "quantity": 3}},
                "settings": None,
            })
        })

        line_items, _ = CartStorage(store).load()

        assert line_items["A"].quantity == 3

    def test_invalid_json_propagates(self):
        store = MemoryStore({CART_KEY: "{not json"})

        with pytest.raises(json.JSONDecodeError):
            CartStorage(store).load()

    def test_save_replaces_previous_record(self):
        storage = CartStorage(MemoryStore())
        storage.save({"A": make_line_item("A")}, None)

        storage.save({}, None)

        assert storage.load() == ({}, None)


class TestRedisStore:
    """Tests for the Redis-backed store."""

    def test_keys_are_namespaced(self):
        redis = _FakeRedis()
        storage = CartStorage(RedisStore(redis, namespace="session-1"))

        storage.save({"A": make_line_item("A", quantity=2)}, None)

        assert list(redis.data) == [f"cart:session-1:{CART_KEY}"]
        assert storage.load()[0]["A"].quantity == 2

    def test_namespaces_are_isolated(self):
        redis = _FakeRedis()
        CartStorage(RedisStore(redis, namespace="one")).save({"A": make_line_item("A")}, None)

        assert CartStorage(RedisStore(redis, namespace="two")).load() == ({}, None)
