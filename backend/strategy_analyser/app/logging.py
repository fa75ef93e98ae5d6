"""Logging configuration helpers for the strategy analyser."""
from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def _resolve_log_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(*, level: str | int | None = None) -> None:
    """Route stdlib logging to stdout and render structlog events as JSON.

    Existing root handlers are kept and only have their level adjusted, so
    test runners and embedding servers keep their own capture handlers.
    """

    resolved = _resolve_log_level(level or os.getenv("LOG_LEVEL"))
    root = logging.getLogger()
    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(resolved)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(resolved)

    for noisy in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(max(resolved, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]
    structlog.configure(
        processors=processors,
        context_class=dict,
        cache_logger_on_first_use=False,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_contextvars() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = ["bind_contextvars", "clear_contextvars", "get_logger", "setup_logging"]
