from __future__ import annotations

import logging
import sys

"""Labeled console logging for the dashboard.

Every line starts with DEBUG | INFO | WARN | ERROR | SUMMARY so that CLI
output stays grep-friendly. Modules log through ``logging.getLogger(__name__)``
and their records propagate to the one ``perfdash`` logger set up here.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "perfdash"

# Between INFO=20 and WARNING=30
SUMMARY_LEVEL = 25

LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
    SUMMARY_LEVEL: "SUMMARY",
}

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Renders ``<LABEL> <message>``."""

    def format(self, record: logging.LogRecord) -> str:
        return f"{LABELS.get(record.levelno, record.levelname)} {record.getMessage()}"


def _apply_level(logger: logging.Logger, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the ``perfdash`` logger writing labeled lines to stdout.

    Handlers are installed once; later calls only adjust the level, so
    ``setup_logging(debug=True)`` also works on an already configured logger.
    """
    global _logger

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        logger = logging.getLogger(LOGGER_NAME)
        for h in logger.handlers[:]:
            logger.removeHandler(h)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        # root logger would print every line twice
        logger.propagate = False
        _logger = logger

    _apply_level(_logger, debug)
    return _logger


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger (used between tests)."""
    global _logger
    _logger = None
