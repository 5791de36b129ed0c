"""Run orchestration: fetch listing pages in order and aggregate the records.

Typical usage::

    async with ScrapingOrchestrator() as engine:
        result = await engine.run([1, 2, 3], ScrapeConfig(max_retries=2))

Pages are processed strictly one at a time.  Each page's fetch is wrapped in
a :class:`~anime_scraper.scraper.retry.RetryPolicy`; a page that still fails
after its last attempt becomes a :class:`~anime_scraper.core.models.PageError`
and the run moves on.  Only configuration errors escape :meth:`ScrapingOrchestrator.run`.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Awaitable, Callable, Sequence

import structlog

from anime_scraper.config.settings import Settings, get_settings
from anime_scraper.core.exceptions import (
    PageExhaustedError,
    ScraperConfigurationError,
)
from anime_scraper.core.logging_config import run_id_var
from anime_scraper.core.models import PageError, RunResult, ScrapeConfig, ScrapedRecord
from anime_scraper.scraper.base import FetchStrategy
from anime_scraper.scraper.browser import BrowserLifecycle
from anime_scraper.scraper.content_extractor import Extractor
from anime_scraper.scraper.http_fetcher import StaticFetcher
from anime_scraper.scraper.playwright_fetcher import RenderedFetcher
from anime_scraper.scraper.retry import RetryPolicy

logger = structlog.get_logger(__name__)

StrategyFactory = Callable[[ScrapeConfig, BrowserLifecycle], FetchStrategy]


def build_fetch_strategy(config: ScrapeConfig, browser: BrowserLifecycle) -> FetchStrategy:
    """Select the fetch strategy for a run."""
    if config.use_rendered_fetch:
        return RenderedFetcher(config, browser)
    return StaticFetcher(config)


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def _validate_pages(page_numbers: Sequence[int]) -> list[int]:
    pages = list(page_numbers)
    for page in pages:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ScraperConfigurationError(
                f"page numbers must be positive integers, got {page!r}"
            )
    return pages


class ScrapingOrchestrator:
    """Drives runs over listing pages and owns the shared headless browser.

    Args:
        settings: Source site and default run configuration.  Defaults to
            :func:`~anime_scraper.config.settings.get_settings`.
        extractor: Item extractor.  Defaults to one stamped with
            ``settings.source_name``.
        strategy_factory: Builds the fetch strategy for each run.
        browser: Shared browser lifecycle.  A fresh one (launched on
            first rendered fetch) by default; closed in :meth:`aclose`.
        sleep: Awaitable sleep used for inter-page and retry delays.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        extractor: Extractor | None = None,
        strategy_factory: StrategyFactory = build_fetch_strategy,
        browser: BrowserLifecycle | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._extractor = extractor or Extractor(self._settings.source_name)
        self._strategy_factory = strategy_factory
        self._browser = browser or BrowserLifecycle()
        self._sleep = sleep
        self._last_config: ScrapeConfig | None = None
        self._runs_completed = 0
        self._closed = False

    async def __aenter__(self) -> ScrapingOrchestrator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        page_numbers: Sequence[int],
        config: ScrapeConfig | None = None,
    ) -> RunResult:
        """Scrape *page_numbers* in order and return the aggregated result.

        Args:
            page_numbers: Listing pages to fetch, in processing order.
            config: Run configuration.  Defaults to ``settings.scrape_config()``.

        Returns:
            A :class:`RunResult`.  Page failures appear in ``errors``; they
            never raise.

        Raises:
            ScraperConfigurationError: For invalid page numbers, a closed
                engine, or a browser that cannot be launched.
        """
        if self._closed:
            raise ScraperConfigurationError("orchestrator has been closed")
        config = config or self._settings.scrape_config()
        pages = _validate_pages(page_numbers)
        self._last_config = config

        token = run_id_var.set(uuid.uuid4().hex[:12])
        strategy = self._strategy_factory(config, self._browser)
        policy = RetryPolicy(config.max_retries, sleep=self._sleep)

        successes: list[ScrapedRecord] = []
        errors: list[PageError] = []
        pages_succeeded = 0

        logger.info(
            "run_started",
            pages=len(pages),
            strategy=strategy.name,
            max_retries=config.max_retries,
        )
        try:
            for index, page_number in enumerate(pages):
                try:
                    records = await self._scrape_page(page_number, strategy, policy)
                except PageExhaustedError as exc:
                    message = _describe(exc.last_error)
                    errors.append(PageError(page_number=page_number, message=message))
                    logger.warning(
                        "page_failed",
                        page=page_number,
                        attempts=exc.attempts,
                        error=message,
                    )
                else:
                    successes.extend(records)
                    pages_succeeded += 1

                if index < len(pages) - 1 and config.inter_page_delay_millis > 0:
                    await self._sleep(config.inter_page_delay_seconds)

            result = RunResult(
                successes=tuple(successes),
                errors=tuple(errors),
                pages_attempted=len(pages),
                pages_succeeded=pages_succeeded,
            )
            logger.info(
                "run_finished",
                records=len(result.successes),
                pages_succeeded=result.pages_succeeded,
                pages_failed=result.pages_failed,
            )
        finally:
            await strategy.aclose()
            run_id_var.reset(token)

        self._runs_completed += 1
        return result

    def stats(self) -> dict[str, Any]:
        """Return the last run's config and whether the browser is live."""
        return {
            "config": self._last_config.model_dump() if self._last_config else None,
            "browser_active": self._browser.is_active,
            "runs_completed": self._runs_completed,
        }

    async def aclose(self) -> None:
        """Release the shared browser.  Safe to call more than once."""
        self._closed = True
        await self._browser.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _scrape_page(
        self,
        page_number: int,
        strategy: FetchStrategy,
        policy: RetryPolicy,
    ) -> list[ScrapedRecord]:
        url = self._settings.page_url(page_number)
        log = logger.bind(page=page_number, url=url)
        log.info("page_started")

        def _on_failure(exc: BaseException, attempt: int) -> None:
            log.info("page_attempt_failed", attempt=attempt, error=_describe(exc))
            strategy.on_attempt_failed(exc)

        try:
            page = await policy.execute(lambda: strategy.fetch(url), on_failure=_on_failure)
        except ScraperConfigurationError:
            raise
        except Exception as exc:
            raise PageExhaustedError(page_number, policy.max_attempts, exc) from exc

        try:
            items = self._extractor.items_for(page)
        except Exception as exc:  # noqa: BLE001
            raise PageExhaustedError(page_number, 1, exc) from exc
        records = self._extractor.extract_all(items, page.url)

        if page.needs_rendering and not records:
            log.warning("page_looks_script_rendered", hint="retry with use_rendered_fetch=True")
        log.info("page_scraped", items=len(items), records=len(records))
        return records
