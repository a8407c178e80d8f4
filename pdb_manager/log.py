"""Logging setup — structlog with a level-filtering console logger."""

import logging

import structlog

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def level_number(level_name: str) -> int:
    """Map a level name to a logging level; unknown names mean info."""
    return LOG_LEVELS.get(level_name.strip().lower(), logging.INFO)


def configure_logging(level_name: str = "info") -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_number(level_name)),
    )
