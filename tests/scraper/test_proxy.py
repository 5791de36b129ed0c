"""Unit tests for proxy rotation."""

from __future__ import annotations

from anime_scraper.core.models import ScrapeConfig
from anime_scraper.scraper.proxy import ProxyRotator, normalize_proxy_address


class TestNormalizeProxyAddress:
    def test_bare_host_port_gets_scheme(self) -> None:
        assert normalize_proxy_address("10.0.0.1:8080") == "http://10.0.0.1:8080"

    def test_full_url_is_unchanged(self) -> None:
        assert normalize_proxy_address("socks5://user:pw@proxy:1080") == "socks5://user:pw@proxy:1080"


class TestProxyRotator:
    def test_empty_pool_returns_none(self) -> None:
        rotator = ProxyRotator()
        assert rotator.current() is None
        assert rotator.rotate() is None
        assert len(rotator) == 0

    def test_single_proxy_is_constant(self) -> None:
        rotator = ProxyRotator(["10.0.0.1:8080"])
        assert rotator.current() == "http://10.0.0.1:8080"
        assert rotator.rotate() == "http://10.0.0.1:8080"
        assert rotator.can_rotate is False

    def test_round_robin(self) -> None:
        rotator = ProxyRotator(["a:1", "b:2", "c:3"])
        seen = [rotator.current()] + [rotator.rotate() for _ in range(3)]
        assert seen == ["http://a:1", "http://b:2", "http://c:3", "http://a:1"]

    def test_duplicates_and_blanks_are_dropped(self) -> None:
        rotator = ProxyRotator(["a:1", "", "  ", "http://a:1", "b:2"])
        assert len(rotator) == 2

    def test_from_config_puts_proxy_address_first(self) -> None:
        config = ScrapeConfig(proxy_address="main:8080", proxy_pool=("alt:8080",))
        rotator = ProxyRotator.from_config(config)
        assert rotator.current() == "http://main:8080"
        assert rotator.rotate() == "http://alt:8080"

    def test_from_config_without_proxy(self) -> None:
        assert ProxyRotator.from_config(ScrapeConfig()).current() is None
