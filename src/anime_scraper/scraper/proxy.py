"""Outbound proxy selection for static fetches.

Fetchers always ask :meth:`ProxyRotator.current` for the proxy to use and
never manage rotation themselves.  With a single configured proxy (or none)
``current()`` is constant; with a pool, :meth:`ProxyRotator.rotate` advances
round-robin.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from anime_scraper.core.models import ScrapeConfig

logger = logging.getLogger(__name__)


def normalize_proxy_address(address: str) -> str:
    """Return *address* as a proxy URL.

    Bare ``host:port`` values are given an ``http://`` scheme; values that
    already carry a scheme are returned unchanged.
    """
    address = address.strip()
    if "://" in address:
        return address
    return f"http://{address}"


class ProxyRotator:
    """Round-robin pool of outbound proxy addresses.

    Args:
        proxies: Proxy addresses in rotation order.  Empty means direct
            connections.
    """

    def __init__(self, proxies: Iterable[str] = ()) -> None:
        seen: dict[str, None] = {}
        for proxy in proxies:
            if proxy and proxy.strip():
                seen.setdefault(normalize_proxy_address(proxy), None)
        self._proxies: list[str] = list(seen)
        self._index = 0

    @classmethod
    def from_config(cls, config: ScrapeConfig) -> ProxyRotator:
        """Build a rotator from ``proxy_address`` followed by ``proxy_pool``."""
        proxies = [config.proxy_address] if config.proxy_address else []
        proxies.extend(config.proxy_pool)
        return cls(proxies)

    def __len__(self) -> int:
        return len(self._proxies)

    @property
    def can_rotate(self) -> bool:
        return len(self._proxies) > 1

    def current(self) -> Optional[str]:
        """Return the proxy to use for the next request, or ``None``."""
        if not self._proxies:
            return None
        return self._proxies[self._index]

    def rotate(self) -> Optional[str]:
        """Advance to the next proxy in the pool and return it."""
        if not self._proxies:
            return None
        self._index = (self._index + 1) % len(self._proxies)
        proxy = self._proxies[self._index]
        if len(self._proxies) > 1:
            logger.info("scraper: rotated proxy to slot %d/%d", self._index + 1, len(self._proxies))
        return proxy
