"""Command-line entry point: run the engine once and print the result as JSON.

Usage::

    anime-scraper --pages 1-3 [--rendered] [--proxy HOST:PORT]
                  [--max-retries N] [--delay-ms N] [--timeout-ms N]

Options not given on the command line fall back to the environment-backed
:class:`~anime_scraper.config.settings.Settings`.

Exit codes:
    0: At least one page succeeded, or no pages were requested.
    1: Every requested page failed.
    2: Invalid arguments or configuration (including a missing browser).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence

from pydantic import ValidationError

from anime_scraper.config.settings import Settings, get_settings
from anime_scraper.core.exceptions import ScraperConfigurationError
from anime_scraper.core.logging_config import configure_logging
from anime_scraper.core.models import RunResult
from anime_scraper.scraper.orchestrator import ScrapingOrchestrator

logger = logging.getLogger(__name__)


def parse_pages(spec: str) -> list[int]:
    """Parse ``"1-3,7"`` into ``[1, 2, 3, 7]``, preserving the given order.

    Raises:
        argparse.ArgumentTypeError: On malformed or non-positive values.
    """
    pages: list[int] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_text, end_text = part.split("-", 1)
                start, end = int(start_text), int(end_text)
                if end < start:
                    raise ValueError
                pages.extend(range(start, end + 1))
            else:
                pages.append(int(part))
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid page range: {part!r}") from None
    if any(page < 1 for page in pages):
        raise argparse.ArgumentTypeError("page numbers must be positive")
    return pages


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anime-scraper",
        description="Scrape anime listing pages and print the run result as JSON.",
    )
    parser.add_argument(
        "--pages",
        type=parse_pages,
        default=[1],
        help="Pages to scrape, e.g. '1-3' or '1,4,5' (default: 1).",
    )
    parser.add_argument(
        "--rendered",
        action="store_true",
        default=None,
        help="Render pages in headless Chromium instead of static HTTP.",
    )
    parser.add_argument("--proxy", default=None, help="Outbound proxy (host:port or URL).")
    parser.add_argument("--max-retries", type=int, default=None)
    parser.add_argument("--delay-ms", type=int, default=None, help="Inter-page delay.")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Fetch timeout.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    candidates = {
        "use_rendered_fetch": args.rendered,
        "proxy_address": args.proxy,
        "max_retries": args.max_retries,
        "inter_page_delay_millis": args.delay_ms,
        "timeout_millis": args.timeout_ms,
    }
    return {key: value for key, value in candidates.items() if value is not None}


async def _run(settings: Settings, pages: list[int], args: argparse.Namespace) -> RunResult:
    config = settings.scrape_config().with_overrides(**_overrides(args))
    async with ScrapingOrchestrator(settings) as engine:
        return await engine.run(pages, config)


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        parser.exit(2, f"anime-scraper: invalid settings: {exc}\n")

    configure_logging(args.log_level or settings.log_level)

    try:
        result = asyncio.run(_run(settings, args.pages, args))
    except ScraperConfigurationError as exc:
        logger.error("scraper: %s", exc)
        sys.exit(2)

    json.dump(result.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")

    if result.pages_attempted and not result.pages_succeeded:
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
