"""Commerce API client - JSON requests against the remote commerce API."""

from typing import Any, Dict, Optional

import httpx

from shopcart.errors import RemoteRequestError
from shopcart.logging import get_logger

logger = get_logger(__name__)


class CommerceAPI:
    """Thin async JSON client for the commerce API (orders, payments, VAT numbers)."""

    def __init__(self, api_url: str, timeout: float = 10.0):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def request(
        self,
        path: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
    ) -> Any:
        """
        Send one request and decode the response.

        Args:
            path: Endpoint path, appended to the API URL
            method: HTTP method
            headers: Extra headers (e.g. Authorization)
            json: JSON body

        Returns:
            Decoded JSON body, or the text body for non-JSON responses

        Raises:
            RemoteRequestError: Non-2xx response
            httpx.HTTPError: Transport failure
        """
        client = await self._get_http_client()
        response = await client.request(
            method,
            f"{self.api_url}{path}",
            headers=headers,
            json=json,
        )
        data = _decode(response)
        if not response.is_success:
            logger.warning(f"{method} {path} failed with status {response.status_code}")
            message = data.get("msg") if isinstance(data, dict) and data.get("msg") else response.reason_phrase
            raise RemoteRequestError(message or f"HTTP {response.status_code}", response.status_code, data)
        return data

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


def _decode(response: httpx.Response) -> Any:
    """JSON body when the server says so, text otherwise."""
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
