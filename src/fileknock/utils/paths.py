"""Path expansion and well-known locations."""

from pathlib import Path
from typing import Union

# Drop-in directories searched for watch configuration, in order.
DEFAULT_CONFIG_DIRS = [
    "/etc/fileknock.d",
    "/opt/fileknock/etc/fileknock.d",
    "/usr/local/etc/fileknock.d",
    "./fileknock.d",
]


def expand_path(path: Union[str, Path]) -> Path:
    """Expand ~ and environment variables in a path."""
    return Path(path).expanduser().resolve()


def ensure_parent_exists(path: Union[str, Path]) -> Path:
    """Ensure the parent directory of a path exists, creating it if necessary."""
    path = expand_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_settings_file() -> Path:
    """Get the path to the daemon settings file."""
    return Path("/etc/fileknock/fileknockd.json")
