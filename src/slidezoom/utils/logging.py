"""Structured logging for slidezoom, built on structlog.

Every event carries the slide being tiled and the Deep Zoom level being
processed when they are known, so a JSON log from a long enumeration can
be filtered per slide and per level. Console output is colored and goes
to stderr; JSON output goes to stdout for log shippers.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from slidezoom.config import settings

_slide: ContextVar[str | None] = ContextVar("slide", default=None)
_dz_level: ContextVar[int | None] = ContextVar("dz_level", default=None)


def set_correlation_context(
    slide: str | None = None,
    dz_level: int | None = None,
) -> None:
    """Attach slide and/or Deep Zoom level to subsequent log events.

    Arguments left as None keep their current value. Values are scoped to
    the current context, so an asyncio task sets them for itself only.
    """
    if slide is not None:
        _slide.set(slide)
    if dz_level is not None:
        _dz_level.set(dz_level)


def clear_correlation_context() -> None:
    """Forget the slide and Deep Zoom level."""
    _slide.set(None)
    _dz_level.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    _ = logger, method_name  # Required by structlog processor signature
    for key, var in (("slide", _slide), ("dz_level", _dz_level)):
        value = var.get()
        if value is not None:
            event_dict[key] = value
    return event_dict


def _processors(log_format: str) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]
    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL.
        log_format: "console" or "json"; defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    structlog.configure(
        processors=_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    # Console lines go to stderr so command output on stdout stays parseable
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout if log_format == "json" else sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
