"""Structured logging for report runs.

structlog renders every entry (JSON for machines, console for people) and
stamps it with the id of the report run that emitted it.  Engine modules
keep using ``logging.getLogger(__name__)``; their records go through the
same stdlib handler.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from trade_insights.core.errors import ConfigError

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

_RENDERERS = {
    "json": structlog.processors.JSONRenderer,
    "console": structlog.dev.ConsoleRenderer,
}


def current_run_id() -> str | None:
    return _run_id.get()


def new_run_id(run_id: str | None = None) -> str:
    """Start a report run; a fresh uuid4 hex unless *run_id* is given."""
    rid = run_id or uuid.uuid4().hex
    _run_id.set(rid)
    return rid


def stamp_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add the active run id, if any."""
    rid = _run_id.get()
    if rid is not None:
        event_dict.setdefault("run_id", rid)
    return event_dict


def setup_logging(level: str = "INFO", format: str = "json") -> None:
    """Configure structlog and the stdlib root handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        format: "json" or "console".

    Raises:
        ConfigError: for an unknown *format*.
    """
    renderer = _RENDERERS.get(format)
    if renderer is None:
        raise ConfigError(f"Unknown log format {format!r}; expected one of {sorted(_RENDERERS)}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            stamp_run_id,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_report_context(**fields: Any) -> Any:
    """Context manager binding *fields* (e.g. ``trade_count``) to every
    structlog entry emitted inside the block."""
    return structlog.contextvars.bound_contextvars(**fields)
