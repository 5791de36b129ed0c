"""Lifecycle of the single headless Chromium process used by rendered fetch.

The browser is launched lazily on first use and lives until :meth:`BrowserLifecycle.close`
is called.  The orchestrator owns the only instance and closes it on
shutdown; :meth:`BrowserLifecycle.new_page` is the only way other components
reach the browser.

Install the Chromium binary once per machine::

    playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from anime_scraper.core.exceptions import BrowserUnavailableError
from anime_scraper.scraper.config import CHROMIUM_ARGS, VIEWPORT

logger = logging.getLogger(__name__)


class BrowserLifecycle:
    """Owns one lazily launched Chromium instance.

    Args:
        headless: Launch without a visible window.
        launch_args: Extra Chromium command-line flags.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        launch_args: tuple[str, ...] = CHROMIUM_ARGS,
    ) -> None:
        self._headless = headless
        self._launch_args = launch_args
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_active(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is not None:
                if self._browser.is_connected():
                    return self._browser
                logger.warning("scraper: Chromium disconnected, relaunching")
                await self._discard_stale()
            logger.info("scraper: launching headless Chromium")
            try:
                playwright = await async_playwright().start()
            except Exception as exc:  # noqa: BLE001
                raise BrowserUnavailableError(f"Playwright driver failed to start: {exc}") from exc
            try:
                self._browser = await playwright.chromium.launch(
                    headless=self._headless,
                    args=list(self._launch_args),
                )
            except PlaywrightError as exc:
                await playwright.stop()
                raise BrowserUnavailableError(
                    "Chromium could not be launched. "
                    f"Install it with: playwright install chromium ({exc})"
                ) from exc
            self._playwright = playwright
            return self._browser

    async def _discard_stale(self) -> None:
        """Forget a disconnected browser and stop its driver.  Caller holds the lock."""
        self._browser = None
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError as exc:
                logger.warning("scraper: stopping stale Playwright driver failed: %s", exc)

    @asynccontextmanager
    async def new_page(self, user_agent: str) -> AsyncIterator[Page]:
        """Open a fresh page with the standard viewport; always closed on exit."""
        browser = await self._ensure_browser()
        page = await browser.new_page(viewport=VIEWPORT, user_agent=user_agent)
        try:
            yield page
        finally:
            await page.close()

    async def close(self) -> None:
        """Close the browser and stop Playwright.  Safe to call repeatedly."""
        async with self._lock:
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
            if browser is not None:
                logger.info("scraper: closing headless Chromium")
                try:
                    await browser.close()
                finally:
                    if playwright is not None:
                        await playwright.stop()
