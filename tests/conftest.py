"""Pytest configuration and fixtures"""
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
import pytest

from shopcart.cart import CartEngine, CartStorage, LineItem, MemoryStore, Price
from shopcart.services.api import CommerceAPI
from shopcart.services.products import DEFAULT_PRODUCT_ELEMENT_ID

SITE_URL = "https://shop.test"
API_URL = "https://api.test"
SETTINGS_PATH = "/shopcart/settings.json"


def product_page(product: Dict[str, Any], element_id: str = DEFAULT_PRODUCT_ELEMENT_ID) -> str:
    """Minimal product page embedding a descriptor."""
    return (
        "<html><head><title>Product</title></head><body>"
        f'<h1>{product.get("title", "")}</h1>'
        f'<script id="{element_id}" type="application/json">{json.dumps(product)}</script>'
        "</body></html>"
    )


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeUser:
    """Session user with roles and a fixed token."""

    def __init__(self, roles: Sequence[str] = (), token: str = "token-123"):
        self.roles = list(roles)
        self.token = token

    async def jwt(self) -> str:
        return self.token


class FakeSite:
    """Serves product pages and the settings document."""

    def __init__(self):
        self.pages: Dict[str, Tuple[int, str]] = {}
        self.settings: Optional[Dict[str, Any]] = None
        self.settings_status = 200
        self.requests: List[httpx.Request] = []

    def add_product(self, path: str, product: Dict[str, Any], status: int = 200) -> None:
        self.pages[path] = (status, product_page(product))

    def settings_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == SETTINGS_PATH]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == SETTINGS_PATH:
            if self.settings is None:
                return httpx.Response(404, text="not found")
            return httpx.Response(self.settings_status, json=self.settings)
        status, html = self.pages.get(request.url.path, (404, "not found"))
        return httpx.Response(status, text=html, headers={"content-type": "text/html"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=SITE_URL)


class FakeCommerceAPI:
    """Records API requests and answers from a route table."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        self.routes[(method, path)] = (status, json if json is not None else {})

    def bodies(self) -> List[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"msg": "Not found"}))
        return httpx.Response(status, json=body)

    def client(self) -> CommerceAPI:
        api = CommerceAPI(API_URL)
        api._http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return api


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def commerce_api():
    return FakeCommerceAPI()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_engine(site, commerce_api, store, clock):
    """Build engines wired to the fake site, API and store."""

    def _make(**config) -> CartEngine:
        options = {"api_url": API_URL, "site_url": SITE_URL, "settings_path": SETTINGS_PATH}
        options.update(config)
        return CartEngine(
            options,
            storage=CartStorage(store),
            api=commerce_api.client(),
            site_client=site.client(),
            clock=clock,
        )

    return _make


@pytest.fixture
def book_product():
    """Sample product descriptor"""
    return {
        "sku": "book-1",
        "title": "A Book",
        "description": "Paperback",
        "type": "book",
        "prices": [{"amount": "20.00", "currency": "USD"}, {"amount": "18.00", "currency": "EUR"}],
    }


@pytest.fixture
def ebook_product():
    """Sample product with explicit VAT"""
    return {
        "sku": "ebook-1",
        "title": "An E-Book",
        "type": "ebook",
        "vat": "20",
        "prices": [{"amount": "10.00"}],
    }


@pytest.fixture
def tax_settings():
    """Settings document with a tax table"""
    return {
        "taxes": [
            {"product_types": ["book"], "countries": ["US"], "percentage": 10},
            {"product_types": ["book", "ebook"], "countries": ["US", "DE"], "percentage": 19},
        ],
        "payment_methods": {"stripe": {"enabled": True}},
    }


def make_line_item(sku: str, amount: str = "10.00", quantity: int = 1, **fields) -> LineItem:
    """Line item with a single USD price."""
    return LineItem(
        sku=sku,
        title=fields.pop("title", sku.title()),
        prices=fields.pop("prices", [Price(amount=amount, currency="USD")]),
        quantity=quantity,
        **fields,
    )
