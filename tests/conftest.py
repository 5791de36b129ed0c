"""Shared pytest fixtures for anime scraper tests.

Fixture summary
---------------
settings     : Settings pointed at a fake source origin (no .env file read).
fixed_clock  : Deterministic UTC clock for extraction timestamps.
extractor    : Extractor using ``fixed_clock``.
sleep_calls  : Recording no-op replacement for ``asyncio.sleep``.

No test touches the network or launches a browser: httpx is mocked with
respx and Playwright objects are replaced with ``AsyncMock`` fakes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from anime_scraper.config.settings import Settings
from anime_scraper.scraper.content_extractor import Extractor

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

SOURCE_BASE_URL = "https://anime.test"


class SleepRecorder:
    """Awaitable stand-in for ``asyncio.sleep`` that records delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        source_base_url=SOURCE_BASE_URL,
        source_name="animeindo",
    )


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def extractor(fixed_clock: Callable[[], datetime]) -> Extractor:
    return Extractor("animeindo", clock=fixed_clock)


@pytest.fixture
def sleep_calls() -> SleepRecorder:
    return SleepRecorder()
