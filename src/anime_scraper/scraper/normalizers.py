"""Pure text transforms applied to scraped fields: status and slug."""

from __future__ import annotations

import re

from anime_scraper.core.models import AnimeStatus
from anime_scraper.scraper.config import STATUS_MARKERS

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-{2,}")


def normalize_status(raw_text: str | None) -> AnimeStatus:
    """Map free-form status text to an :class:`AnimeStatus`.

    Matching is a case-insensitive substring test against English and
    Indonesian markers.  Unrecognised or empty text falls back to
    ``ONGOING``; downstream consumers rely on that default, so it is kept
    even though it loses information.
    """
    text = (raw_text or "").lower()
    for status, markers in STATUS_MARKERS:
        if any(marker in text for marker in markers):
            return AnimeStatus(status)
    return AnimeStatus.ONGOING


def generate_slug(title: str) -> str:
    """Return a URL-safe slug for *title*.

    The result only contains ``[a-z0-9-]``, never starts or ends with a
    hyphen and never contains consecutive hyphens.  Titles made entirely of
    non-ASCII characters yield an empty slug; uniqueness is left to callers.
    """
    slug = _NON_SLUG_CHARS.sub("", title.lower())
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")
