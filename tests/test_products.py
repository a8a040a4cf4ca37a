"""
Tests for product page parsing
"""

import json

import httpx
import pytest

from shopcart.errors import InvalidProductError, RemoteRequestError
from shopcart.services.products import ProductSource, extract_product
from tests.conftest import SITE_URL, product_page


class TestExtractProduct:
    """Tests for extract_product."""

    def test_reads_descriptor(self, book_product):
        assert extract_product(product_page(book_product)) == book_product

    def test_missing_element(self):
        assert extract_product("<html><body><p>Nothing here</p></body></html>") is None

    def test_custom_element_id(self, book_product):
        html = product_page(book_product, element_id="my-product")

        assert extract_product(html, "my-product") == book_product
        assert extract_product(html) is None

    def test_descriptor_in_nested_element(self):
        html = '<div id="shopcart-product">{"sku": "a", <br>"title": "A"}</div><p>after</p>'

        assert extract_product(html) == {"sku": "a", "title": "A"}

    def test_malformed_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            extract_product('<script id="shopcart-product">{oops</script>')


def _source(status: int, html: str) -> ProductSource:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=html)

    return ProductSource(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=SITE_URL))


def product_page_json(descriptor) -> str:
    return f'<script id="shopcart-product" type="application/json">{json.dumps(descriptor)}</script>'


@pytest.mark.asyncio
async def test_fetch_product(book_product):
    product = await _source(200, product_page(book_product)).fetch("/products/book-1/")

    assert product["sku"] == "book-1"


@pytest.mark.asyncio
async def test_fetch_failure_raises():
    with pytest.raises(RemoteRequestError) as exc_info:
        await _source(404, "not found").fetch("/products/missing/")

    assert exc_info.value.status_code == 404
    assert "/products/missing/" in str(exc_info.value)


@pytest.mark.asyncio
async def test_descriptor_without_prices_is_rejected():
    html = product_page({"sku": "book-1", "title": "A Book"})

    with pytest.raises(InvalidProductError):
        await _source(200, html).fetch("/products/book-1/")


@pytest.mark.asyncio
async def test_page_without_descriptor_is_rejected():
    with pytest.raises(InvalidProductError):
        await _source(200, "<html></html>").fetch("/products/book-1/")


@pytest.mark.asyncio
@pytest.mark.parametrize("descriptor", [
    {"sku": "book-1", "title": "A Book", "prices": [{"currency": "USD"}]},
    {"sku": "book-1", "title": "A Book", "prices": "10.00"},
    {"sku": "book-1", "title": "A Book", "prices": ["10.00"]},
    [{"sku": "book-1", "title": "A Book", "prices": [{"amount": "10.00"}]}],
])
async def test_unusable_descriptor_is_rejected(descriptor):
    with pytest.raises(InvalidProductError):
        await _source(200, product_page_json(descriptor)).fetch("/products/book-1/")


@pytest.mark.asyncio
async def test_malformed_descriptor_json_is_rejected():
    html = '<script id="shopcart-product">{oops</script>'

    with pytest.raises(InvalidProductError):
        await _source(200, html).fetch("/products/book-1/")


