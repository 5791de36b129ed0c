"""Abstract fetch strategy shared by the static and rendered variants.

The orchestrator depends only on :class:`FetchStrategy`; concrete strategies
are chosen once per run by :func:`~anime_scraper.scraper.orchestrator.build_fetch_strategy`.

Example usage::

    from anime_scraper.scraper.base import FetchedPage, FetchStrategy

    class FakeStrategy(FetchStrategy):
        name = "fake"

        async def fetch(self, url):
            return FetchedPage(url=url, items=[{"title": "A", "imageUrl": "a.jpg"}])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from bs4 import BeautifulSoup


@dataclass
class FetchedPage:
    """Output of a single successful fetch.

    Exactly one of ``document`` and ``items`` is populated.

    Attributes:
        url: Final URL of the listing page.
        document: Parsed DOM tree (static fetch).  The extractor selects the
            item containers from it.
        items: Already-shaped raw items evaluated inside the browser
            (rendered fetch), one mapping per item container.
        status_code: HTTP status code, if known.
        needs_rendering: ``True`` if the static body looked like a JS-only
            shell.
    """

    url: str
    document: BeautifulSoup | None = None
    items: list[Mapping[str, Any]] = field(default_factory=list)
    status_code: int | None = None
    needs_rendering: bool = False


class FetchStrategy(ABC):
    """Fetches one listing page.

    Implementations raise :class:`~anime_scraper.core.exceptions.ScraperError`
    subclasses on failure; retrying is left to
    :class:`~anime_scraper.scraper.retry.RetryPolicy`.
    """

    name: str = ""

    @abstractmethod
    async def fetch(self, url: str) -> FetchedPage:
        """Fetch *url* and return its content."""

    def on_attempt_failed(self, exc: BaseException) -> None:  # noqa: B027
        """Hook invoked after a failed attempt, before the next retry."""

    async def aclose(self) -> None:  # noqa: B027
        """Release per-run resources held by the strategy."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
