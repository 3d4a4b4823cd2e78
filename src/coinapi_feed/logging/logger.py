"""Package logger configuration and per-module logger lookup."""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "coinapi_feed"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return the ``coinapi_feed.<name>`` child logger.

    Children carry no handlers of their own; records propagate to the
    package logger configured by :func:`setup_logger`.
    """
    name = name.strip(".")
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logger(log_level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure and return the package logger.

    Safe to call repeatedly: the level is re-applied every time, the console
    handler is attached once, and each distinct ``log_file`` gets one file
    handler. Unknown level names fall back to INFO.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.propagate = False

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(_is_console_handler(handler) for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file and not _has_file_handler(logger, log_file):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def _is_console_handler(handler: logging.Handler) -> bool:
    return type(handler) is logging.StreamHandler


def _has_file_handler(logger: logging.Logger, log_file: str) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == target
        for handler in logger.handlers
    )
