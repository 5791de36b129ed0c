"""Unit tests for the structured logging configuration.

Verifies that ``configure_logging()`` produces well-formed JSON output, that
the ``run_id_var`` context variable is propagated, and that secret-bearing
keys are redacted.
"""

from __future__ import annotations

import json
import logging
from io import StringIO

import structlog

from anime_scraper.core.logging_config import configure_logging, run_id_var


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _capture(log_level: str, emit) -> list[dict]:
    """Configure logging, run *emit*, and return the parsed JSON records."""
    configure_logging(log_level)

    buffer = StringIO()
    root = logging.getLogger()
    original_streams = []
    for handler in root.handlers:
        if hasattr(handler, "stream"):
            original_streams.append((handler, handler.stream))
            handler.stream = buffer

    try:
        emit()
    finally:
        for handler, stream in original_streams:
            handler.flush()
            handler.stream = stream

    lines = [line for line in buffer.getvalue().splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


def _find(records: list[dict], event: str) -> dict | None:
    return next((r for r in records if r.get("event") == event), None)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestConfigureLoggingJson:
    def test_stdlib_record_is_json_with_required_fields(self) -> None:
        records = _capture(
            "INFO", lambda: logging.getLogger("test.scraper").info("scraper_json_test")
        )

        target = _find(records, "scraper_json_test")
        assert target is not None
        assert target["level"] == "info"
        assert target["logger"] == "test.scraper"
        assert "timestamp" in target

    def test_structlog_key_values_are_rendered(self) -> None:
        def emit() -> None:
            structlog.get_logger("test.orchestrator").info("page_scraped", page=3, records=12)

        records = _capture("INFO", emit)

        target = _find(records, "page_scraped")
        assert target is not None
        assert target["page"] == 3
        assert target["records"] == 12

    def test_debug_level_is_filtered_at_info(self) -> None:
        records = _capture(
            "INFO", lambda: logging.getLogger("test.scraper").debug("hidden_debug")
        )
        assert _find(records, "hidden_debug") is None


class TestRunIdContextVar:
    def test_run_id_appears_in_output(self) -> None:
        token = run_id_var.set("run-abc123")
        try:
            records = _capture(
                "INFO", lambda: logging.getLogger("test.scraper").info("run_id_test")
            )
        finally:
            run_id_var.reset(token)

        target = _find(records, "run_id_test")
        assert target is not None
        assert target["run_id"] == "run-abc123"

    def test_no_run_id_when_unset(self) -> None:
        records = _capture(
            "INFO", lambda: logging.getLogger("test.scraper").info("no_run_id_test")
        )
        target = _find(records, "no_run_id_test")
        assert target is not None
        assert target.get("run_id") is None


class TestRedaction:
    def test_secret_keys_are_redacted(self) -> None:
        def emit() -> None:
            structlog.get_logger("test.redact").info(
                "proxy_login",
                proxy_password="hunter2",
                headers={"Authorization": "Basic abc"},
                page=1,
            )

        records = _capture("INFO", emit)

        target = _find(records, "proxy_login")
        assert target is not None
        assert target["proxy_password"] == "[REDACTED]"
        assert target["headers"]["Authorization"] == "[REDACTED]"
        assert target["page"] == 1


class TestConfigureLoggingIdempotent:
    def test_calling_twice_does_not_duplicate_handlers(self) -> None:
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(logging.getLogger().handlers) == 1
