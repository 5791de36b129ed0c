"""Anime listing-page scraping engine.

Fetches numbered listing pages from a single source site, extracts normalized
anime records, and aggregates them into a :class:`~anime_scraper.core.models.RunResult`
while isolating per-page and per-item failures.

Sub-packages:
- ``config`` : environment-backed settings
- ``core``   : exceptions, logging configuration, data model
- ``scraper``: fetch strategies, retry policy, extraction, orchestration
"""

__version__ = "0.1.0"
