"""Logging setup utilities."""

import logging
from pathlib import Path
from typing import Optional

from fileknock.utils.paths import ensure_parent_exists

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    name: str = "fileknock",
) -> logging.Logger:
    """
    Set up logging with a console handler and an optional file handler.

    Component loggers (``fileknock.compiler``, ``fileknock.executor``, ...)
    propagate to the logger configured here.

    Args:
        log_file: Path to log file. If None, only console logging is enabled.
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers so a second call does not duplicate output
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = ensure_parent_exists(log_file)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "fileknock") -> logging.Logger:
    """Get a component logger under the ``fileknock`` hierarchy."""
    if name != "fileknock" and not name.startswith("fileknock."):
        name = f"fileknock.{name}"
    return logging.getLogger(name)
