"""
Logging setup for the ``eligibility`` logger tree.

Usage:
    from app.utils.logging import get_logger
    logger = get_logger("eligibility.pipeline.orchestrator")
    logger.info("[SEARCH] Started | query=%s", query)

The level comes from ``settings.effective_log_level`` (``LOG_LEVEL`` or
the environment default) and is applied to the uvicorn loggers as well,
so request logs and pipeline logs are filtered the same way.
"""

from __future__ import annotations

import logging
import sys

from app.core.config import settings

APP_LOGGER = "eligibility"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_handler: logging.Handler | None = None


def resolve_level(level: int | str) -> int:
    """``"debug"`` / ``"DEBUG"`` / ``10`` -> ``10``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str | None = None) -> int:
    """
    Attach the stderr handler once and (re)apply the level.

    Safe to call repeatedly: later calls only change the level, so the
    startup hook can override whatever the first ``get_logger`` set.
    Returns the numeric level applied.
    """
    global _handler
    resolved = resolve_level(level if level is not None else settings.effective_log_level)

    app_logger = logging.getLogger(APP_LOGGER)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        app_logger.addHandler(_handler)
        app_logger.propagate = False

    _handler.setLevel(resolved)
    app_logger.setLevel(resolved)
    for name in UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(resolved)
    return resolved


def get_logger(name: str) -> logging.Logger:
    if _handler is None:
        setup_logging()
    return logging.getLogger(name)
