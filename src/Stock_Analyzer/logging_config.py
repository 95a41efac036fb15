"""Centralized logging configuration for the CLI and the web app."""

from __future__ import annotations

import logging
import os

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# LOG_LEVEL_<KEY> env var -> package logger it tunes
_MODULE_LOGGERS: dict[str, str] = {
    "AGENTS": "Stock_Analyzer.agents",
    "SERVICES": "Stock_Analyzer.services",
    "WEB": "Stock_Analyzer.web",
}

# Third-party loggers held at WARNING: uvicorn.access is replaced by the
# request middleware, and httpx logs full URLs including the Polygon apiKey.
_QUIET_LIBRARIES: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")


def _level_from_name(name: str | None, default: int | None) -> int | None:
    if not name:
        return default
    resolved = logging.getLevelName(name.strip().upper())
    return resolved if isinstance(resolved, int) else default


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Set up the root logger once per entry point.

    Precedence is ``verbose``, then ``quiet``, then *level*, then the
    ``LOG_LEVEL`` environment variable, then INFO.  ``force=True`` replaces
    whatever handlers a server or test runner installed first.  Package
    loggers can be tuned individually with ``LOG_LEVEL_AGENTS``,
    ``LOG_LEVEL_SERVICES`` and ``LOG_LEVEL_WEB``.
    """
    if verbose:
        effective = logging.DEBUG
    elif quiet:
        effective = logging.WARNING
    else:
        effective = _level_from_name(level or os.environ.get("LOG_LEVEL"), logging.INFO)

    logging.basicConfig(level=effective, format=LOG_FORMAT, force=True)

    for library in _QUIET_LIBRARIES:
        logging.getLogger(library).setLevel(logging.WARNING)

    for key, logger_name in _MODULE_LOGGERS.items():
        override = _level_from_name(os.environ.get(f"LOG_LEVEL_{key}"), None)
        if override is not None:
            logging.getLogger(logger_name).setLevel(override)
