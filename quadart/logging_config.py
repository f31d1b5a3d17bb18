"""Logging setup for the ``quadart`` logger namespace."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Configure the ``quadart`` logger.

    Existing handlers are dropped first so repeated calls (tests, reloads)
    do not duplicate output.

    Args:
        level: Logging level, e.g. logging.DEBUG
        log_file: Optional path that receives a copy of every record

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("quadart")
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
