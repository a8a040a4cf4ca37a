"""
Product source.

Product pages embed their descriptor as JSON inside an element with a
well-known id, e.g.

    <script id="shopcart-product" type="application/json">
      {"sku": "book-1", "title": "A Book", "prices": [{"amount": "10.00"}]}
    </script>
"""

import json
from html.parser import HTMLParser
from typing import Any, Dict, Optional

import httpx

from shopcart.errors import (
    ERROR_PRODUCT_FETCH_FAILED,
    ERROR_PRODUCT_UNREADABLE,
    InvalidProductError,
    RemoteRequestError,
)
from shopcart.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

DEFAULT_PRODUCT_ELEMENT_ID = "shopcart-product"

# Elements without an end tag
_VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})


class _ElementTextParser(HTMLParser):
    """Collects the text content of the first element with a given id."""

    def __init__(self, element_id: str):
        super().__init__(convert_charrefs=True)
        self.element_id = element_id
        self.depth = 0
        self.found = False
        self.parts: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _VOID_TAGS:
            return
        if self.depth:
            self.depth += 1
        elif not self.found and dict(attrs).get("id") == self.element_id:
            self.found = True
            self.depth = 1

    def handle_endtag(self, tag):
        if self.depth:
            self.depth -= 1

    def handle_data(self, data):
        if self.depth:
            self.parts.append(data)


def extract_product(html: str, element_id: str = DEFAULT_PRODUCT_ELEMENT_ID) -> Optional[Dict[str, Any]]:
    """
    Parse the embedded product descriptor out of a product page.

    Returns None when the page has no such element. Malformed JSON inside
    the element raises json.JSONDecodeError.
    """
    parser = _ElementTextParser(element_id)
    parser.feed(html)
    parser.close()
    if not parser.found:
        return None
    return json.loads("".join(parser.parts))


class ProductSource:
    """Fetches product pages and reads their descriptors."""

    def __init__(self, http_client: httpx.AsyncClient, element_id: str = DEFAULT_PRODUCT_ELEMENT_ID):
        self.http_client = http_client
        self.element_id = element_id

    async def fetch(self, path: str) -> Dict[str, Any]:
        """
        Fetch the product at `path`.

        Raises:
            RemoteRequestError: Non-2xx response for the page
            InvalidProductError: Page lacks a descriptor with sku, title and priced entries
        """
        response = await self.http_client.get(path)
        if not response.is_success:
            logger.warning(f"Product page {sanitize_string_for_logging(path)} returned {response.status_code}")
            raise RemoteRequestError(
                ERROR_PRODUCT_FETCH_FAILED.format(path=path), response.status_code
            )

        try:
            product = extract_product(response.text, self.element_id)
        except json.JSONDecodeError as e:
            raise InvalidProductError(ERROR_PRODUCT_UNREADABLE, response.status_code) from e

        if not is_readable_product(product):
            logger.warning(f"Product page {sanitize_string_for_logging(path)} has no usable descriptor")
            raise InvalidProductError(ERROR_PRODUCT_UNREADABLE, response.status_code, product)
        return product


def is_readable_product(product: Any) -> bool:
    """A descriptor needs sku, title and a list of price entries that each carry an amount."""
    if not isinstance(product, dict):
        return False
    if not (product.get("sku") and product.get("title")):
        return False
    prices = product.get("prices")
    if not prices or not isinstance(prices, list):
        return False
    return all(isinstance(price, dict) and "amount" in price for price in prices)
