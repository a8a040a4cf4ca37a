"""VAT number validation with a per-session lookup cache."""
from typing import Dict, Optional
from urllib.parse import quote

from shopcart.logging import get_logger, sanitize_id_for_logging
from .api import CommerceAPI

logger = get_logger(__name__)


class VatNumberCache:
    """
    Validation results by VAT number.

    Entries are never evicted or refreshed. Engines share results only when
    they are given the same cache instance.
    """

    def __init__(self):
        self._entries: Dict[str, dict] = {}

    def get(self, vat_number: str) -> Optional[dict]:
        return self._entries.get(vat_number)

    def put(self, vat_number: str, result: dict) -> None:
        self._entries[vat_number] = result

    def __contains__(self, vat_number: str) -> bool:
        return vat_number in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class VatValidator:
    """Checks VAT numbers against the commerce API."""

    def __init__(self, api: CommerceAPI, cache: Optional[VatNumberCache] = None):
        self.api = api
        self.cache = cache if cache is not None else VatNumberCache()

    async def verify(self, vat_number: Optional[str]) -> bool:
        """
        Validate a VAT number.

        Empty numbers are invalid without a lookup; cached numbers answer
        from the cache. Remote errors propagate.
        """
        if not vat_number:
            return False

        cached = self.cache.get(vat_number)
        if cached is not None:
            return bool(cached.get("valid"))

        logger.info(f"Looking up VAT number {sanitize_id_for_logging(vat_number)}")
        response = await self.api.request(f"/vatnumbers/{quote(vat_number, safe='')}")
        result = response if isinstance(response, dict) else {"valid": False}
        self.cache.put(vat_number, result)
        return bool(result.get("valid"))
