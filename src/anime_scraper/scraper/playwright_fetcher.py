"""Playwright-based fetcher for listing pages that need script execution.

Navigates a fresh page of the shared :class:`~anime_scraper.scraper.browser.BrowserLifecycle`
to the listing URL, waits for the network to go idle and for the item
selector to appear, then evaluates the item fields inside the browser.  The
result is a list of plain mappings rather than a DOM tree.

The page is closed after every attempt, successful or not.
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from anime_scraper.core.exceptions import ContentNotFoundError, TransportError
from anime_scraper.core.models import ScrapeConfig
from anime_scraper.scraper.base import FetchedPage, FetchStrategy
from anime_scraper.scraper.browser import BrowserLifecycle
from anime_scraper.scraper.config import (
    CONTENT_WAIT_TIMEOUT_MS,
    IMAGE_SELECTOR,
    ITEM_SELECTOR,
    STATUS_SELECTOR,
    TIME_SELECTOR,
    TITLE_SELECTOR,
)

logger = logging.getLogger(__name__)

# Runs inside the page.  Items missing a title or image element are skipped
# here; empty values are left for the extractor to drop.
_EXTRACT_ITEMS_JS = """
(nodes, sel) => {
  const results = [];
  for (const node of nodes) {
    try {
      const image = node.querySelector(sel.image);
      const title = node.querySelector(sel.title);
      if (!title || !image) continue;
      const status = node.querySelector(sel.status);
      const time = node.querySelector(sel.time);
      results.push({
        title: (title.textContent || '').trim(),
        imageUrl: image.getAttribute('src') || '',
        status: status ? (status.textContent || '').trim() : '',
        time: time ? (time.textContent || '').trim() : '',
      });
    } catch (e) {
      // malformed node; skip it
    }
  }
  return results;
}
"""

_SELECTORS = {
    "image": IMAGE_SELECTOR,
    "title": TITLE_SELECTOR,
    "status": STATUS_SELECTOR,
    "time": TIME_SELECTOR,
}


class RenderedFetcher(FetchStrategy):
    """Fetch listing pages through headless Chromium.

    Args:
        config: Run configuration (timeout, user-agent).
        browser: Shared browser owned by the orchestrator.
    """

    name = "rendered"

    def __init__(self, config: ScrapeConfig, browser: BrowserLifecycle) -> None:
        self._config = config
        self._browser = browser

    async def fetch(self, url: str) -> FetchedPage:
        """Render *url* and return the items evaluated in the page.

        Raises:
            ContentNotFoundError: If ``ITEM_SELECTOR`` never appears.
            TransportError: If navigation fails or times out.
            BrowserUnavailableError: If Chromium cannot be launched.
        """
        timeout_ms = self._config.timeout_millis
        async with self._browser.new_page(self._config.user_agent) as page:
            try:
                response = await page.goto(
                    url,
                    timeout=timeout_ms,
                    wait_until="networkidle",
                )
            except PlaywrightTimeoutError as exc:
                logger.warning("scraper: navigation timeout for %s", url)
                raise TransportError(f"navigation timeout: {exc}", url=url) from exc
            except PlaywrightError as exc:
                logger.warning("scraper: navigation failed for %s: %s", url, exc)
                raise TransportError(f"navigation error: {exc}", url=url) from exc

            status_code = response.status if response else None

            try:
                await page.wait_for_selector(
                    ITEM_SELECTOR,
                    timeout=min(CONTENT_WAIT_TIMEOUT_MS, timeout_ms),
                )
            except PlaywrightTimeoutError as exc:
                logger.warning("scraper: %s never appeared on %s", ITEM_SELECTOR, url)
                raise ContentNotFoundError(ITEM_SELECTOR, url=url) from exc

            items = await page.eval_on_selector_all(
                ITEM_SELECTOR, _EXTRACT_ITEMS_JS, _SELECTORS
            )
            return FetchedPage(url=page.url, items=list(items), status_code=status_code)
