"""Utility functions and classes."""

from fileknock.utils.logging import get_logger, setup_logging
from fileknock.utils.paths import expand_path

__all__ = ["expand_path", "get_logger", "setup_logging"]
