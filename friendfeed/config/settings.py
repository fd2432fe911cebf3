"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

from ..errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FF_",  # FF_SOURCE_LIST_URL, FF_MAX_ENTRIES, etc.
    )

    # Source list
    source_list_url: Optional[str] = None

    # Response
    cache_ttl_seconds: int = Field(default=600, ge=0)
    max_entries: int = Field(default=50, ge=0)

    # Parsing
    days_limit: int = Field(default=30, ge=0)
    summary_char_limit: int = 100  # <= 0 disables summaries

    # Fetching
    fetch_timeout_millis: int = Field(default=10000, gt=0)
    fetch_max_retries: int = Field(default=2, ge=0)  # additional attempts
    fetch_retry_delay_seconds: float = Field(default=1.0, ge=0)
    max_concurrent_fetches: int = Field(default=10, gt=0)
    user_agent: str = "FriendFeedBot/1.0"

    @property
    def fetch_timeout_seconds(self) -> float:
        return self.fetch_timeout_millis / 1000

    def require_source_list_url(self) -> str:
        """Return the source list URL or raise if it is not configured."""
        if not self.source_list_url:
            raise ConfigurationError(
                "Source list URL not configured. Set FF_SOURCE_LIST_URL environment variable."
            )
        return self.source_list_url


settings = Settings()
