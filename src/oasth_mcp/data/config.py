from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OASTHConfig(BaseSettings):
    """Configuration for OASTH API access and card decoding.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    base_url: str = Field(default="https://old.oasth.gr/el/api", alias="OASTH_BASE_URL")
    request_timeout_seconds: float = Field(default=30.0, alias="OASTH_TIMEOUT")

    # lines, routes, stops and route shapes rarely change
    static_cache_ttl_seconds: int = Field(default=3600, alias="OASTH_STATIC_CACHE_TTL")
    # arrivals and bus locations
    live_cache_ttl_seconds: int = Field(default=10, alias="OASTH_LIVE_CACHE_TTL")

    nearest_stops_limit: int = Field(default=30, ge=1, le=30, alias="OASTH_NEAREST_LIMIT")

    # card dates are shown in local time
    card_timezone: str = Field(default="Europe/Athens", alias="OASTH_CARD_TZ")

    @property
    def card_tzinfo(self) -> ZoneInfo:
        """Timezone object for card date rendering."""
        return ZoneInfo(self.card_timezone)


@lru_cache
def get_oasth_config() -> OASTHConfig:
    """Get OASTH configuration (cached singleton).

    Returns:
        OASTHConfig with values from .env file or environment variables.
    """
    return OASTHConfig()
