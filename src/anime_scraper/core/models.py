"""Pydantic data model for the scraping engine's inputs and outputs.

All models are frozen.  Field names are snake_case in Python; the camelCase
aliases (``imageUrl``, ``sourceMetadata``, ...) are the serialised form
consumed by the persistence/API layer via :meth:`RunResult.to_dict`.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from anime_scraper.core.exceptions import ScraperConfigurationError


class AnimeStatus(str, enum.Enum):
    """Airing status of a scraped anime.

    Inherits from ``str`` so that values compare equal to and serialise as
    plain strings.
    """

    ONGOING = "ongoing"
    COMPLETED = "completed"
    UPCOMING = "upcoming"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Scraped records
# ---------------------------------------------------------------------------


class DownloadLink(_FrozenModel):
    """A single download mirror for an episode.

    Attributes:
        quality: Quality label (e.g. ``"720p"``).
        url: Download URL.
        size: Human-readable size label, if published.
        format: Container format (e.g. ``"mp4"``), if published.
    """

    quality: str
    url: str
    size: Optional[str] = None
    format: Optional[str] = None


class EpisodeRecord(_FrozenModel):
    """One episode of a scraped anime."""

    title: str
    episode_number: PositiveInt
    image_url: Optional[str] = None
    description: Optional[str] = None
    air_date: Optional[datetime] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    download_links: tuple[DownloadLink, ...] = ()


class SourceMetadata(_FrozenModel):
    """Provenance of a scraped record.

    Attributes:
        original_url: Listing page URL the record was extracted from.
        scraped_at_timestamp: UTC time of extraction.
        source_name: Short identifier of the source site.
        published_label: Raw timing text shown next to the item on the
            listing page (e.g. ``"2 jam yang lalu"``), if any.
    """

    original_url: str
    scraped_at_timestamp: datetime
    source_name: str
    published_label: Optional[str] = None


class ScrapedRecord(_FrozenModel):
    """A normalized anime record extracted from one item container.

    ``title`` and ``image_url`` are never empty: candidates missing either
    are dropped during extraction.
    """

    title: str = Field(min_length=1)
    slug: str
    image_url: str = Field(min_length=1)
    status: AnimeStatus = AnimeStatus.ONGOING
    description: Optional[str] = None
    genres: tuple[str, ...] = ()
    episodes: tuple[EpisodeRecord, ...] = ()
    source_metadata: SourceMetadata


# ---------------------------------------------------------------------------
# Run output
# ---------------------------------------------------------------------------


class PageError(_FrozenModel):
    """A listing page whose fetch failed after all retries."""

    page_number: int
    message: str


class RunResult(_FrozenModel):
    """Immutable snapshot of one run.

    ``successes`` is ordered by page then by in-page position; ``errors`` is
    ordered by the sequence in which pages were attempted.
    """

    successes: tuple[ScrapedRecord, ...] = ()
    errors: tuple[PageError, ...] = ()
    pages_attempted: int = 0
    pages_succeeded: int = 0

    @property
    def pages_failed(self) -> int:
        return self.pages_attempted - self.pages_succeeded

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------


class ScrapeConfig(_FrozenModel):
    """Immutable per-run configuration.

    Attributes:
        use_rendered_fetch: Render pages in headless Chromium instead of
            parsing the raw HTTP response.
        timeout_millis: Request / navigation timeout in milliseconds.
        max_retries: Retries per page after the first attempt.
        inter_page_delay_millis: Pause between consecutive pages.
        user_agent: User-Agent header / browser UA string.
        proxy_address: Outbound proxy (``host:port`` or full URL).
        proxy_pool: Additional proxies rotated round-robin after failures.
    """

    use_rendered_fetch: bool = False
    timeout_millis: int = Field(default=30_000, gt=0)
    max_retries: int = Field(default=3, ge=0)
    inter_page_delay_millis: int = Field(default=1_000, ge=0)
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        min_length=1,
    )
    proxy_address: Optional[str] = None
    proxy_pool: tuple[str, ...] = ()

    @field_validator("proxy_address", mode="before")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Coerce empty or whitespace-only strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_millis / 1000

    @property
    def inter_page_delay_seconds(self) -> float:
        return self.inter_page_delay_millis / 1000

    @classmethod
    def build(cls, **values: Any) -> ScrapeConfig:
        """Validate *values* into a config, raising a configuration error.

        Raises:
            ScraperConfigurationError: If any field fails validation.
        """
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ScraperConfigurationError(f"invalid scrape config: {exc}") from exc

    def with_overrides(self, **changes: Any) -> ScrapeConfig:
        """Return a new validated config with *changes* applied.

        The current instance is left untouched.
        """
        return self.build(**{**self.model_dump(), **changes})
