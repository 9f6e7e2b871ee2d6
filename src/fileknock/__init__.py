"""
fileknock - run actions when watched files are closed

A small daemon that reads drop-in configuration files, watches the
directories and files they name for close events, and starts the
configured executables with FK_PATH and FK_FILE in their environment.
"""

__version__ = "1.0.0"

from fileknock.core.config import Settings
from fileknock.core.daemon import Daemon

__all__ = ["Daemon", "Settings", "__version__"]
