"""Process-level settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.  Settings
supply the *defaults* for a run; each run still receives its own immutable
:class:`~anime_scraper.core.models.ScrapeConfig`.

Usage::

    from anime_scraper.config.settings import get_settings

    settings = get_settings()
    config = settings.scrape_config()
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from anime_scraper.core.models import ScrapeConfig


class Settings(BaseSettings):
    """Engine configuration backed by environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Source site
    # ------------------------------------------------------------------

    source_base_url: str = "http://animeindo.web.id"
    """Origin of the listing pages.  Page *n* lives at ``{base}/page/{n}/``."""

    source_name: str = "animeindo"
    """Identifier stamped into every record's ``source_metadata``."""

    # ------------------------------------------------------------------
    # Run defaults
    # ------------------------------------------------------------------

    use_rendered_fetch: bool = False
    """Render listing pages in headless Chromium instead of static HTTP."""

    timeout_millis: int = 30_000
    """Request / navigation timeout in milliseconds."""

    max_retries: int = 3
    """Retries per page after the first attempt."""

    inter_page_delay_millis: int = 1_000
    """Pause between consecutive listing pages."""

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    """User-Agent sent with HTTP requests and set on rendered pages."""

    proxy_address: Optional[str] = None
    """Single outbound proxy, ``host:port`` or a full proxy URL."""

    proxy_pool: Annotated[list[str], NoDecode] = []
    """Comma-separated list of extra proxies rotated after failed attempts."""

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    @field_validator("proxy_pool", mode="before")
    @classmethod
    def split_proxy_pool(cls, v: object) -> object:
        """Accept ``PROXY_POOL=a:1,b:2`` as well as a JSON list."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    def scrape_config(self) -> ScrapeConfig:
        """Build a validated :class:`ScrapeConfig` from these defaults.

        Raises:
            ScraperConfigurationError: If the environment holds invalid values.
        """
        return ScrapeConfig.build(
            use_rendered_fetch=self.use_rendered_fetch,
            timeout_millis=self.timeout_millis,
            max_retries=self.max_retries,
            inter_page_delay_millis=self.inter_page_delay_millis,
            user_agent=self.user_agent,
            proxy_address=self.proxy_address,
            proxy_pool=tuple(self.proxy_pool),
        )

    def page_url(self, page_number: int) -> str:
        """Return the listing URL for *page_number*."""
        return f"{self.source_base_url.rstrip('/')}/page/{page_number}/"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton.

    In tests, call ``get_settings.cache_clear()`` after patching environment
    variables.
    """
    return Settings()
