"""Listing-page scraping engine.

Sub-modules:
- ``config``            : selectors, status markers, timing and browser constants
- ``normalizers``       : status normalization and slug generation
- ``content_extractor`` : item container to ``ScrapedRecord``
- ``base``              : ``FetchStrategy`` interface and ``FetchedPage``
- ``http_fetcher``      : httpx + BeautifulSoup static fetch
- ``browser``           : lazily launched shared Chromium instance
- ``playwright_fetcher``: headless Chromium rendered fetch
- ``proxy``             : outbound proxy rotation
- ``retry``             : bounded exponential-backoff retry policy
- ``orchestrator``      : sequential page loop producing a ``RunResult``
"""
