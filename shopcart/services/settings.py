"""
Settings Cache

Keeps the shop settings (tax table) fresh on a best-effort basis: a stale
or failed refresh never blocks cart operations, the previous settings stay
in use.
"""
import time
from typing import Callable, Optional

import httpx

from shopcart.cart.models import Settings
from shopcart.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_PATH = "/shopcart/settings.json"
DEFAULT_REFRESH_PERIOD_MS = 10 * 60 * 1000


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class SettingsCache:
    """Settings document with TTL-based refresh."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings_path: Optional[str] = DEFAULT_SETTINGS_PATH,
        refresh_period_ms: int = DEFAULT_REFRESH_PERIOD_MS,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            http_client: Client used to fetch the settings document
            settings_path: Where the settings live; None disables fetching
            refresh_period_ms: Age after which settings are stale; 0 never expires
            settings: Previously persisted settings, if any
            clock: Millisecond clock
        """
        self.http_client = http_client
        self.settings_path = settings_path
        self.refresh_period_ms = refresh_period_ms
        self.settings = settings
        self.clock = clock

    def is_fresh(self) -> bool:
        """True when no refresh is needed."""
        if self.settings_path is None:
            return True

        if self.settings is None:
            return False

        if not self.refresh_period_ms:
            return True

        if self.settings.ts is None:
            return False

        return self.clock() - self.settings.ts < self.refresh_period_ms

    async def ensure_fresh(self) -> Optional[Settings]:
        """
        Refresh the settings when stale.

        A single fetch, no retry. Non-success responses, transport or
        decode errors and malformed documents are logged and the previous
        settings are kept.

        Returns:
            The settings now in use (possibly stale, possibly None)
        """
        if self.is_fresh():
            return self.settings

        try:
            response = await self.http_client.get(self.settings_path)
            if not response.is_success:
                logger.warning(f"Settings fetch returned {response.status_code}; keeping previous settings")
                return self.settings
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Settings fetch failed: {e}; keeping previous settings")
            return self.settings

        if not isinstance(data, dict):
            logger.warning("Settings document is not a JSON object; keeping previous settings")
            return self.settings

        try:
            settings = Settings.from_dict(data)
        except (AttributeError, TypeError, KeyError, ValueError) as e:
            logger.warning(f"Settings document is malformed: {e!r}; keeping previous settings")
            return self.settings

        settings.ts = self.clock()
        self.settings = settings
        logger.info(f"Settings refreshed ({len(settings.taxes)} tax rules)")
        return self.settings
