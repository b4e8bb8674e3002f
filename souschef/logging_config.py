"""
Structured logging for SousChef, built on structlog over stdlib logging.

Library modules log with ``logging.getLogger(__name__)`` and pass context
through ``extra={...}``; the formatter installed here lifts those fields into
the structured event. Output is JSON for log shipping or a console renderer
for local runs.

Environment:
    SOUSCHEF_LOG_LEVEL   DEBUG / INFO / WARNING ... (default INFO)
    SOUSCHEF_LOG_FORMAT  "json" for JSON lines, anything else for console

Usage:
    from souschef.logging_config import setup_logging, bind_context
    setup_logging()
    bind_context(recipe_id="r-42")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route stdlib and structlog records through one structlog formatter."""
    level = level or os.environ.get("SOUSCHEF_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("SOUSCHEF_LOG_FORMAT", "").lower() == "json"
    stream = stream or sys.stderr

    shared = _shared_processors()

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def bind_context(**values: Any) -> None:
    """Attach fields (recipe id, tier...) to every later log line in this context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["bind_context", "clear_context", "get_logger", "setup_logging"]
