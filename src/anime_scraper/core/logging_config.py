"""structlog setup for the scraper.

``configure_logging()`` routes both stdlib ``logging`` records and structlog
events through one stderr handler.  Component modules log with
``logging.getLogger(__name__)``; the orchestrator uses
``structlog.get_logger(__name__)`` to attach page/attempt context::

    logger.info("page_scraped", page=3, records=12)

While a run is in progress its ID lives in :data:`run_id_var` and is added to
every record as ``run_id``.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
"""ID of the run currently executing in this context, if any."""

REDACTED = "[REDACTED]"

_SENSITIVE_KEY_PARTS = ("password", "secret", "token", "credential", "authorization", "proxy_auth")

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def redact_sensitive(
    _logger: WrappedLogger,
    _method: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask values of credential-like keys, including keys of nested dicts.

    Proxy URLs may embed ``user:password@`` and request headers may carry an
    ``Authorization`` value; neither should reach a log sink.
    """
    for key, value in list(event_dict.items()):
        if _is_sensitive(key):
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if _is_sensitive(k) else v for k, v in value.items()
            }
    return event_dict


def add_run_id(
    _logger: WrappedLogger,
    _method: str,
    event_dict: EventDict,
) -> EventDict:
    run_id = run_id_var.get()
    if run_id is not None:
        event_dict.setdefault("run_id", run_id)
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_run_id,
        redact_sensitive,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(log_level: str = "INFO") -> None:
    """Install the stderr handler and configure structlog.

    ``DEBUG`` switches to colourised console output and leaves the HTTP
    client loggers at their own level; any other level emits one JSON object
    per line.  Repeated calls replace the previous handler.

    Args:
        log_level: Level name, case-insensitive.  Unknown names mean INFO.
    """
    level_name = log_level.upper()
    debug = level_name == "DEBUG"
    pre_chain = _pre_chain()

    renderer: Processor = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if not debug:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
