"""Bounded retry with exponential backoff for async operations.

A :class:`RetryPolicy` invokes an operation at most ``1 + max_retries``
times.  Between attempts it sleeps ``base_delay * 2**n`` seconds (capped at
``max_delay``), plus a fixed cooldown when the failure was an HTTP 429.
A delay never drops below the one before it, so a cooldown carries over
into later waits.
When every attempt fails the last underlying exception is re-raised.

Configuration errors are never retried: they propagate on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from anime_scraper.core.exceptions import RateLimitedError, ScraperConfigurationError
from anime_scraper.scraper.config import (
    RATE_LIMIT_COOLDOWN,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retries a failing async operation with a non-decreasing delay.

    Args:
        max_retries: Retries after the first attempt.  ``0`` disables retrying.
        base_delay: Delay (seconds) before the first retry.
        max_delay: Upper bound on the backoff delay (seconds).
        rate_limit_cooldown: Minimum extra delay (seconds) after a
            :class:`RateLimitedError`; a larger ``retry_after`` on the error
            takes precedence.
        sleep: Awaitable sleep function.  Injectable for tests.
    """

    def __init__(
        self,
        max_retries: int,
        *,
        base_delay: float = RETRY_BASE_DELAY,
        max_delay: float = RETRY_MAX_DELAY,
        rate_limit_cooldown: float = RATE_LIMIT_COOLDOWN,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.rate_limit_cooldown = rate_limit_cooldown
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries

    def backoff_delay(self, retry_number: int) -> float:
        """Return the backoff before retry *retry_number* (0-based)."""
        return min(self.base_delay * (2**retry_number), self.max_delay)

    def cooldown_for(self, exc: BaseException) -> float:
        """Return the extra delay demanded by *exc* (0 unless rate-limited)."""
        if isinstance(exc, RateLimitedError):
            return max(self.rate_limit_cooldown, exc.retry_after)
        return 0.0

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_failure: Callable[[BaseException, int], None] | None = None,
    ) -> T:
        """Run *operation* until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument coroutine factory; called once per attempt.
            on_failure: Called with ``(exc, attempt)`` after every failed
                attempt, including the last one.

        Returns:
            The first successful result.

        Raises:
            ScraperConfigurationError: Immediately, without retrying.
            Exception: The last underlying error once attempts are exhausted.
        """
        attempt = 0
        previous_delay = 0.0
        while True:
            attempt += 1
            try:
                return await operation()
            except ScraperConfigurationError:
                raise
            except Exception as exc:
                if on_failure is not None:
                    on_failure(exc, attempt)
                if attempt >= self.max_attempts:
                    logger.warning(
                        "scraper: giving up after %d attempt(s): %s", attempt, exc
                    )
                    raise
                delay = max(
                    previous_delay,
                    self.backoff_delay(attempt - 1) + self.cooldown_for(exc),
                )
                previous_delay = delay
                logger.info(
                    "scraper: attempt %d/%d failed (%s: %s); retrying in %.1fs",
                    attempt,
                    self.max_attempts,
                    type(exc).__name__,
                    exc,
                    delay,
                )
                await self._sleep(delay)
