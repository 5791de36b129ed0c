"""Unit tests for the command-line entry point.

The orchestrator is replaced with a stub so no page is ever fetched; the
tests cover argument parsing, override plumbing and exit codes.
"""

from __future__ import annotations

import argparse
import json
from typing import Any
from unittest.mock import patch

import pytest

from anime_scraper import cli
from anime_scraper.config.settings import Settings
from anime_scraper.core.exceptions import BrowserUnavailableError
from anime_scraper.core.models import PageError, RunResult, ScrapeConfig


class StubOrchestrator:
    """Stands in for ``ScrapingOrchestrator`` and records what it was asked."""

    result: RunResult = RunResult()
    error: BaseException | None = None
    calls: list[tuple[list[int], ScrapeConfig]] = []

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def __aenter__(self) -> "StubOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def run(self, pages: list[int], config: ScrapeConfig) -> RunResult:
        type(self).calls.append((pages, config))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def stub_engine(settings: Settings):
    StubOrchestrator.result = RunResult()
    StubOrchestrator.error = None
    StubOrchestrator.calls = []
    with (
        patch.object(cli, "ScrapingOrchestrator", StubOrchestrator),
        patch.object(cli, "get_settings", return_value=settings),
        patch.object(cli, "configure_logging"),
    ):
        yield StubOrchestrator


def _exit_code(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


class TestParsePages:
    @pytest.mark.parametrize(
        ("spec", "expected"),
        [
            ("1", [1]),
            ("1-3", [1, 2, 3]),
            ("1-3,7", [1, 2, 3, 7]),
            ("5,2", [5, 2]),
            ("2, 4 ,", [2, 4]),
        ],
    )
    def test_valid_specs(self, spec: str, expected: list[int]) -> None:
        assert cli.parse_pages(spec) == expected

    @pytest.mark.parametrize("spec", ["a", "3-1", "1-x", "0", "0-2"])
    def test_invalid_specs(self, spec: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_pages(spec)


class TestMain:
    def test_prints_camel_case_json_and_exits_zero(self, stub_engine, capsys) -> None:
        stub_engine.result = RunResult(
            errors=(PageError(page_number=2, message="TransportError: HTTP 500"),),
            pages_attempted=2,
            pages_succeeded=1,
        )

        assert _exit_code(["--pages", "1-2"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["pagesAttempted"] == 2
        assert payload["errors"][0]["pageNumber"] == 2
        pages, _ = stub_engine.calls[0]
        assert pages == [1, 2]

    def test_every_page_failed_exits_one(self, stub_engine, capsys) -> None:
        stub_engine.result = RunResult(
            errors=(PageError(page_number=1, message="TransportError: HTTP 503"),),
            pages_attempted=1,
            pages_succeeded=0,
        )
        assert _exit_code(["--pages", "1"]) == 1

    def test_configuration_error_exits_two(self, stub_engine, capsys) -> None:
        stub_engine.error = BrowserUnavailableError("Chromium is not installed")
        assert _exit_code(["--rendered"]) == 2
        assert capsys.readouterr().out == ""

    def test_invalid_override_exits_two(self, stub_engine) -> None:
        assert _exit_code(["--timeout-ms", "0"]) == 2
        assert stub_engine.calls == []

    def test_invalid_environment_exits_two(
        self, stub_engine, monkeypatch: pytest.MonkeyPatch, capsys
    ) -> None:
        monkeypatch.setenv("MAX_RETRIES", "abc")

        with patch.object(cli, "get_settings", side_effect=lambda: Settings(_env_file=None)):
            assert _exit_code(["--pages", "1"]) == 2

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "max_retries" in captured.err
        assert stub_engine.calls == []

    def test_malformed_pages_is_argparse_error(self, stub_engine) -> None:
        assert _exit_code(["--pages", "x"]) == 2

    def test_flags_override_settings(self, stub_engine) -> None:
        _exit_code(
            [
                "--rendered",
                "--proxy",
                "10.0.0.1:3128",
                "--max-retries",
                "0",
                "--delay-ms",
                "250",
                "--timeout-ms",
                "5000",
            ]
        )

        _, config = stub_engine.calls[0]
        assert config.use_rendered_fetch is True
        assert config.proxy_address == "10.0.0.1:3128"
        assert config.max_retries == 0
        assert config.inter_page_delay_millis == 250
        assert config.timeout_millis == 5000

    def test_unset_flags_keep_settings_values(self, stub_engine, settings: Settings) -> None:
        _exit_code([])

        pages, config = stub_engine.calls[0]
        assert pages == [1]
        assert config == settings.scrape_config()
