"""Static listing-page fetcher built on httpx and BeautifulSoup.

Issues a plain ``GET`` through a pooled :class:`httpx.AsyncClient` and parses
the body into a DOM tree.  No extraction happens here: the parsed document is
handed to :class:`~anime_scraper.scraper.content_extractor.Extractor`.

One client is kept per outbound proxy address so that connection pooling
survives across pages while :class:`~anime_scraper.scraper.proxy.ProxyRotator`
is free to switch proxies between attempts.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from anime_scraper.core.exceptions import RateLimitedError, TransportError
from anime_scraper.core.models import ScrapeConfig
from anime_scraper.scraper.base import FetchedPage, FetchStrategy
from anime_scraper.scraper.config import (
    DEFAULT_HEADERS,
    JS_SHELL_BODY_THRESHOLD,
    RATE_LIMIT_COOLDOWN,
)
from anime_scraper.scraper.proxy import ProxyRotator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_js_shell(html: str) -> bool:
    """Return ``True`` if the page body is too short to contain real content.

    A very short body after stripping whitespace is a strong signal that the
    page requires JavaScript execution to populate its content.
    """
    return len(html.strip()) < JS_SHELL_BODY_THRESHOLD


def _parse_retry_after(value: str | None) -> float:
    """Return the ``Retry-After`` delay in seconds, or the fixed cooldown.

    Only the delta-seconds form is honoured; HTTP-date values and garbage
    fall back to :data:`RATE_LIMIT_COOLDOWN`.
    """
    if not value:
        return RATE_LIMIT_COOLDOWN
    try:
        seconds = float(value.strip())
    except ValueError:
        return RATE_LIMIT_COOLDOWN
    return max(seconds, RATE_LIMIT_COOLDOWN)


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------


class StaticFetcher(FetchStrategy):
    """Fetch listing pages over plain HTTP.

    Args:
        config: Run configuration (timeout, user-agent).
        proxies: Supplies the outbound proxy for each request.
        transport: Optional httpx transport, used by tests.
    """

    name = "static"

    def __init__(
        self,
        config: ScrapeConfig,
        proxies: ProxyRotator | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._proxies = proxies or ProxyRotator.from_config(config)
        self._transport = transport
        self._clients: dict[Optional[str], httpx.AsyncClient] = {}

    def _client_for(self, proxy: Optional[str]) -> httpx.AsyncClient:
        client = self._clients.get(proxy)
        if client is None:
            client = httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                headers={**DEFAULT_HEADERS, "User-Agent": self._config.user_agent},
                proxy=proxy,
                transport=self._transport,
                follow_redirects=True,
            )
            self._clients[proxy] = client
        return client

    async def fetch(self, url: str) -> FetchedPage:
        """GET *url* and parse it.

        Raises:
            RateLimitedError: On HTTP 429.
            TransportError: On any other non-2xx status or a network error.
        """
        client = self._client_for(self._proxies.current())

        try:
            response = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("scraper: timeout fetching %s", url)
            raise TransportError(f"timeout: {exc}", url=url) from exc
        except httpx.TooManyRedirects as exc:
            logger.warning("scraper: too many redirects for %s", url)
            raise TransportError("too many redirects", url=url) from exc
        except httpx.RequestError as exc:
            logger.warning("scraper: request error for %s: %s", url, exc)
            raise TransportError(f"request error: {exc}", url=url) from exc

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            logger.warning("scraper: rate limited on %s (retry after %.0fs)", url, retry_after)
            raise RateLimitedError(
                f"HTTP 429 for {url}", url=url, retry_after=retry_after
            )

        if not response.is_success:
            logger.info("scraper: HTTP %d for %s", response.status_code, url)
            raise TransportError(
                f"HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        html = response.text
        needs_rendering = _is_js_shell(html)
        if needs_rendering:
            logger.info(
                "scraper: JS-only shell detected for %s (body_len=%d)",
                url,
                len(html.strip()),
            )

        return FetchedPage(
            url=str(response.url),
            document=BeautifulSoup(html, "html.parser"),
            status_code=response.status_code,
            needs_rendering=needs_rendering,
        )

    def on_attempt_failed(self, exc: BaseException) -> None:
        if isinstance(exc, TransportError) and self._proxies.can_rotate:
            self._proxies.rotate()

    async def aclose(self) -> None:
        """Close every pooled client."""
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            await client.aclose()
