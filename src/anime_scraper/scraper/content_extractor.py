"""Item extraction from listing-page markup.

Turns one item container into a :class:`~anime_scraper.core.models.ScrapedRecord`.
Item containers arrive in one of two shapes:

- a BeautifulSoup ``Tag`` selected from a statically fetched document, or
- a mapping produced by the in-browser evaluation of a rendered page
  (keys ``title``, ``imageUrl``, ``status``, ``time``).

Extraction never raises: a missing title or image, or any structural
surprise inside one item, drops that item and the rest of the page proceeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from bs4 import BeautifulSoup, Tag

from anime_scraper.core.exceptions import ItemExtractionError
from anime_scraper.core.models import ScrapedRecord, SourceMetadata
from anime_scraper.scraper.base import FetchedPage
from anime_scraper.scraper.config import (
    IMAGE_SELECTOR,
    ITEM_SELECTOR,
    STATUS_SELECTOR,
    TIME_SELECTOR,
    TITLE_SELECTOR,
)
from anime_scraper.scraper.normalizers import generate_slug, normalize_status

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Raw field container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawItem:
    """Text fields read from one item container, before normalization."""

    title: str
    image_url: str
    status: str = ""
    time: str = ""


def _text(node: Tag | None) -> str:
    return node.get_text().strip() if node is not None else ""


def _read_tag(item: Tag) -> RawItem:
    image = item.select_one(IMAGE_SELECTOR)
    src = image.get("src") if image is not None else None
    if isinstance(src, list):
        raise ItemExtractionError(f"multi-valued src attribute: {src!r}")
    return RawItem(
        title=_text(item.select_one(TITLE_SELECTOR)),
        image_url=(src or "").strip(),
        status=_text(item.select_one(STATUS_SELECTOR)),
        time=_text(item.select_one(TIME_SELECTOR)),
    )


def _read_mapping(item: Mapping[str, Any]) -> RawItem:
    def field(key: str) -> str:
        value = item.get(key)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ItemExtractionError(f"field {key!r} is {type(value).__name__}, not str")
        return value.strip()

    return RawItem(
        title=field("title"),
        image_url=field("imageUrl"),
        status=field("status"),
        time=field("time"),
    )


def read_fields(item: Tag | Mapping[str, Any]) -> RawItem:
    """Read the raw text fields of an item container.

    Raises:
        ItemExtractionError: If the item has an unexpected shape.
    """
    if isinstance(item, Tag):
        return _read_tag(item)
    if isinstance(item, Mapping):
        return _read_mapping(item)
    raise ItemExtractionError(f"unsupported item type: {type(item).__name__}")


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class Extractor:
    """Builds normalized records from item containers.

    Args:
        source_name: Identifier stamped into ``source_metadata``.
        clock: Returns the extraction timestamp (UTC).  Injectable for tests.
    """

    def __init__(
        self,
        source_name: str,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.source_name = source_name
        self._clock = clock

    def find_items(self, document: BeautifulSoup) -> list[Tag]:
        """Return every item container in a parsed listing page."""
        return document.select(ITEM_SELECTOR)

    def items_for(self, page: FetchedPage) -> list[Tag | Mapping[str, Any]]:
        """Return the item containers carried by a fetched page."""
        if page.document is not None:
            return list(self.find_items(page.document))
        return list(page.items)

    def extract(
        self,
        item: Tag | Mapping[str, Any],
        page_url: str,
    ) -> ScrapedRecord | None:
        """Return a record for *item*, or ``None`` if it must be dropped.

        Items with an empty title or image URL are dropped silently.  Any
        other failure while reading the item is logged and also drops it.
        """
        try:
            raw = read_fields(item)
            if not raw.title or not raw.image_url:
                return None
            return ScrapedRecord(
                title=raw.title,
                slug=generate_slug(raw.title),
                image_url=raw.image_url,
                status=normalize_status(raw.status),
                source_metadata=SourceMetadata(
                    original_url=page_url,
                    scraped_at_timestamp=self._clock(),
                    source_name=self.source_name,
                    published_label=raw.time or None,
                ),
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("scraper: dropping malformed item on %s: %s", page_url, exc)
            return None

    def extract_all(
        self,
        items: Iterable[Tag | Mapping[str, Any]],
        page_url: str,
    ) -> list[ScrapedRecord]:
        """Extract every item, preserving order and skipping dropped ones."""
        records: list[ScrapedRecord] = []
        for item in items:
            record = self.extract(item, page_url)
            if record is not None:
                records.append(record)
        return records
