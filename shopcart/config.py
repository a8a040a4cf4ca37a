"""
Engine configuration.

    config = CommerceConfig(api_url="https://shop.example.com/api", country="DE")
    config = load_config(".env")  # SHOPCART_* environment variables
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from shopcart.services.products import DEFAULT_PRODUCT_ELEMENT_ID
from shopcart.services.settings import DEFAULT_REFRESH_PERIOD_MS, DEFAULT_SETTINGS_PATH


class CommerceConfig(BaseModel):
    """Settings recognized when constructing a CartEngine."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_url: str = Field(alias="APIUrl")
    currency: str = "USD"
    country: Optional[str] = None
    settings_refresh_period: int = Field(default=DEFAULT_REFRESH_PERIOD_MS, alias="settingsRefreshPeriod")  # ms
    settings_path: Optional[str] = DEFAULT_SETTINGS_PATH
    site_url: Optional[str] = None  # Base for product page and settings paths
    product_element_id: str = DEFAULT_PRODUCT_ELEMENT_ID
    http_timeout: float = 10.0

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        return (v or "USD").upper()

    @property
    def uses_plain_http(self) -> bool:
        return self.api_url.startswith("http://")


def load_config(env_file: Optional[str] = None) -> CommerceConfig:
    """
    Build config from SHOPCART_* environment variables.

    Args:
        env_file: Optional .env file loaded first (existing variables win)
    """
    if env_file:
        load_dotenv(env_file)

    values = {
        "api_url": os.environ.get("SHOPCART_API_URL", ""),
        "currency": os.environ.get("SHOPCART_CURRENCY", "USD"),
        "country": os.environ.get("SHOPCART_COUNTRY") or None,
        "site_url": os.environ.get("SHOPCART_SITE_URL") or None,
    }
    refresh_period = os.environ.get("SHOPCART_SETTINGS_REFRESH_PERIOD")
    if refresh_period:
        values["settings_refresh_period"] = int(refresh_period)
    if "SHOPCART_SETTINGS_PATH" in os.environ:
        values["settings_path"] = os.environ["SHOPCART_SETTINGS_PATH"] or None
    return CommerceConfig(**values)
