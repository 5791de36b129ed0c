"""Exception hierarchy for the anime scraper engine.

All custom exceptions subclass ``ScraperError`` so that callers can catch the
entire hierarchy with a single ``except`` clause when needed.

Hierarchy::

    ScraperError
    ├── ScraperConfigurationError
    │   └── BrowserUnavailableError
    ├── TransportError            (status_code, url)
    │   └── RateLimitedError      (retry_after: float)
    ├── ContentNotFoundError      (selector, url)
    ├── ItemExtractionError
    └── PageExhaustedError        (page_number, attempts, last_error)

Only ``ScraperConfigurationError`` is allowed to escape a run.  Item-level
errors are absorbed by the extractor and page-level errors are converted into
``PageError`` entries on the run result.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for all anime scraper exceptions."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ScraperConfigurationError(ScraperError):
    """Raised when the engine is misconfigured and a run cannot proceed.

    This is the only error class that fails a run synchronously.  The retry
    policy never retries it.
    """


class BrowserUnavailableError(ScraperConfigurationError):
    """Raised when rendered fetch is requested but Chromium cannot be launched."""


# ---------------------------------------------------------------------------
# Fetch errors
# ---------------------------------------------------------------------------


class TransportError(ScraperError):
    """Raised on network failure, timeout, or a non-2xx HTTP response.

    Args:
        message: Human-readable description of the failure.
        url: URL that was being fetched.
        status_code: HTTP status code, or ``None`` on network error.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RateLimitedError(TransportError):
    """Raised on HTTP 429.  The retry policy adds a cooldown before retrying.

    Args:
        message: Human-readable description of the rate limit.
        url: URL that was rate-limited.
        retry_after: Seconds to wait before the next attempt.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        retry_after: float = 5.0,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class ContentNotFoundError(ScraperError):
    """Raised when the item selector never appears in a rendered page.

    Args:
        selector: CSS selector that was awaited.
        url: Page URL.
    """

    def __init__(self, selector: str, url: str | None = None) -> None:
        super().__init__(f"selector {selector!r} not found on {url}")
        self.selector = selector
        self.url = url


# ---------------------------------------------------------------------------
# Internal errors (never surfaced to callers)
# ---------------------------------------------------------------------------


class ItemExtractionError(ScraperError):
    """Raised inside the extractor when one item container is malformed.

    Always converted into "drop this item" before leaving the extractor.
    """


class PageExhaustedError(ScraperError):
    """Summary of a page whose fetch failed on every retry attempt.

    Converted into a ``PageError`` entry by the orchestrator; never raised
    past :meth:`~anime_scraper.scraper.orchestrator.ScrapingOrchestrator.run`.

    Args:
        page_number: The listing page that failed.
        attempts: Number of attempts made.
        last_error: The final underlying exception.
    """

    def __init__(
        self,
        page_number: int,
        attempts: int,
        last_error: BaseException,
    ) -> None:
        super().__init__(
            f"page {page_number} failed after {attempts} attempt(s): "
            f"{type(last_error).__name__}: {last_error}"
        )
        self.page_number = page_number
        self.attempts = attempts
        self.last_error = last_error
