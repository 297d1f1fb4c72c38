"""Structured logging for calcexpr.

Library modules obtain loggers through :func:`get_logger` and emit structured
events (``expression_cached``, ``broadcast_started`` ...). They never configure
output themselves; hosts and the CLI call :func:`configure_logging` once.

Output format and level come from the environment unless overridden:
- CALCEXPR_LOG_FORMAT=json switches to one JSON object per line
- CALCEXPR_LOG_LEVEL selects the threshold (default WARNING)

Usage:
    from calcexpr.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__).bind(formula="price * qty")
    log.debug("evaluation_started")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "CALCEXPR_LOG_FORMAT"

LOG_LEVEL_ENV_VAR = "CALCEXPR_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"


def _level_from_env() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def _json_requested() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _shared_processors() -> list[Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _final_renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Safe to call repeatedly; each call replaces the root handlers installed
    by the previous one.

    Args:
        force_json: Emit JSON regardless of CALCEXPR_LOG_FORMAT.
        level: Explicit threshold. If None, reads CALCEXPR_LOG_LEVEL.
    """
    use_json = force_json or _json_requested()
    log_level = level if level is not None else _level_from_env()

    exception_processor: Processor = (
        structlog.processors.dict_tracebacks
        if use_json
        else structlog.processors.format_exc_info
    )

    structlog.configure(
        processors=[
            *_shared_processors(),
            exception_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _final_renderer(use_json),
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually named after the calling module.

    Example:
        log = get_logger(__name__)
        log.debug("expression_cached", expression="1 + 2")
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def _install_library_defaults() -> None:
    """Route events through stdlib logging until a host configures output.

    Events below the stdlib threshold of the host are dropped rather than
    printed to stdout.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def bind_context(**context: Any) -> None:
    """Attach key-value pairs to every subsequent event in this context.

    Backed by contextvars, so bindings follow asyncio tasks.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Drop every binding made with :func:`bind_context`."""
    structlog.contextvars.clear_contextvars()


_install_library_defaults()
