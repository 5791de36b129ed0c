"""Constants and tuning parameters for the scraping engine."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Listing-page markup
# ---------------------------------------------------------------------------
# The source site renders each listing entry as a ``.episode`` container under
# ``#episodes``.  Any markup change on the site must be mirrored here.

#: Selector matching every item container on a listing page.
ITEM_SELECTOR: str = "#episodes .episode"

#: Item-relative selector for the cover image (``src`` attribute).
IMAGE_SELECTOR: str = ".episode-image img"

#: Item-relative selector for the title link.
TITLE_SELECTOR: str = ".episode-details h3 a"

#: Item-relative selector for the subtitle / airing status label.
STATUS_SELECTOR: str = ".mirror-sub"

#: Item-relative selector for the relative publish time label.
TIME_SELECTOR: str = ".episode-meta"

# ---------------------------------------------------------------------------
# Status markers (English and Indonesian)
# ---------------------------------------------------------------------------

#: Ordered ``(status, markers)`` pairs.  The first status with a marker
#: contained in the lower-cased text wins.
STATUS_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ongoing", ("ongoing", "berlangsung")),
    ("completed", ("completed", "selesai")),
    ("upcoming", ("upcoming", "akan datang")),
)

# ---------------------------------------------------------------------------
# Retry timing
# ---------------------------------------------------------------------------

#: First retry delay (seconds); doubles per attempt up to ``RETRY_MAX_DELAY``.
RETRY_BASE_DELAY: float = 1.0

#: Upper bound on the exponential retry delay (seconds).
RETRY_MAX_DELAY: float = 30.0

#: Extra cooldown (seconds) added before retrying after an HTTP 429.
RATE_LIMIT_COOLDOWN: float = 5.0

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

#: Browser-like headers sent with every static fetch (User-Agent is per run).
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Upgrade-Insecure-Requests": "1",
}

#: Body length threshold (stripped characters) below which a page is
#: considered a JS-only shell that probably needs rendered fetch.
JS_SHELL_BODY_THRESHOLD: int = 500

# ---------------------------------------------------------------------------
# Headless browser
# ---------------------------------------------------------------------------

#: Viewport applied to every rendered page.
VIEWPORT: dict[str, int] = {"width": 1920, "height": 1080}

#: Upper bound (milliseconds) on waiting for ``ITEM_SELECTOR`` after navigation.
CONTENT_WAIT_TIMEOUT_MS: int = 10_000

#: Chromium flags for container-friendly headless launches.
CHROMIUM_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)
