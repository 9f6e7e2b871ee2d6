"""Daemon settings with fluent builder interface, and drop-in discovery."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Union

from fileknock.core.errors import ConfigError
from fileknock.core.pending import DEFAULT_CAPACITY
from fileknock.utils.fluent import FluentBuilder
from fileknock.utils.logging import get_logger
from fileknock.utils.paths import DEFAULT_CONFIG_DIRS, expand_path, get_settings_file


@dataclass
class LoggingConfig:
    """Logging configuration."""

    file: Optional[Path] = None
    level: str = "INFO"


@dataclass
class SettingsData:
    """Complete daemon settings."""

    config_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_CONFIG_DIRS))
    health_check_interval: int = 30
    queue_capacity: int = DEFAULT_CAPACITY
    inherit_environment: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class Settings(FluentBuilder["Settings"]):
    """
    Fluent settings builder for fileknockd.

    Settings live in a JSON file; every key is optional.

    Example:
        settings = (
            Settings()
            .config_dirs("/etc/fileknock.d", "./fileknock.d")
            .health_check(interval=30)
            .log_level("DEBUG")
            .save()
        )
    """

    def __init__(self, settings_path: Optional[Path] = None, load: bool = True) -> None:
        super().__init__()
        self._settings_path = settings_path or get_settings_file()
        self._data = SettingsData()
        if load:
            self._load_existing()

    def _load_existing(self) -> None:
        """Load existing settings if present."""
        if not self._settings_path.exists():
            return
        try:
            with open(self._settings_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read settings {self._settings_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Settings root must be an object: {self._settings_path}")
        self._from_dict(data)

    def _from_dict(self, data: dict[str, Any]) -> None:
        """Populate settings from dictionary (for loading from JSON)."""
        if "config_dirs" in data:
            dirs = data["config_dirs"]
            if isinstance(dirs, str):
                dirs = [dirs]
            if not isinstance(dirs, list) or not all(isinstance(d, str) for d in dirs):
                raise ConfigError("config_dirs must be a list of paths")
            self._data.config_dirs = dirs

        self._data.health_check_interval = _positive_int(
            data.get("health_check_interval", self._data.health_check_interval),
            "health_check_interval",
        )
        self._data.queue_capacity = _positive_int(
            data.get("queue_capacity", self._data.queue_capacity),
            "queue_capacity",
        )
        self._data.inherit_environment = bool(data.get("inherit_environment", False))

        if "logging" in data:
            log = data["logging"]
            log_file = log.get("file")
            self._data.logging.file = expand_path(log_file) if log_file else None
            self._data.logging.level = str(log.get("level", "INFO")).upper()

    def _to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for JSON serialization."""
        return {
            "config_dirs": list(self._data.config_dirs),
            "health_check_interval": self._data.health_check_interval,
            "queue_capacity": self._data.queue_capacity,
            "inherit_environment": self._data.inherit_environment,
            "logging": {
                "file": str(self._data.logging.file) if self._data.logging.file else None,
                "level": self._data.logging.level,
            },
        }

    # Fluent builder methods

    def config_dirs(self, *paths: str) -> Settings:
        """Replace the list of drop-in configuration directories."""
        self._check_not_built()
        self._data.config_dirs = list(paths)
        return self

    def add_config_dir(self, path: str) -> Settings:
        """Append a drop-in configuration directory."""
        self._check_not_built()
        if path not in self._data.config_dirs:
            self._data.config_dirs.append(path)
        return self

    def health_check(self, interval: int) -> Settings:
        """Set the health check interval in seconds."""
        self._check_not_built()
        self._data.health_check_interval = _positive_int(interval, "health_check_interval")
        return self

    def queue_capacity(self, capacity: int) -> Settings:
        """Set how many events may wait for dispatch before new ones are dropped."""
        self._check_not_built()
        self._data.queue_capacity = _positive_int(capacity, "queue_capacity")
        return self

    def inherit_environment(self, value: bool) -> Settings:
        """Pass the daemon's own environment to actions as well as FK_PATH/FK_FILE."""
        self._check_not_built()
        self._data.inherit_environment = value
        return self

    def log_file(self, path: Optional[str]) -> Settings:
        """Set the log file path (None for console only)."""
        self._check_not_built()
        self._data.logging.file = expand_path(path) if path else None
        return self

    def log_level(self, level: str) -> Settings:
        """Set the log level."""
        self._check_not_built()
        self._data.logging.level = level.upper()
        return self

    def save(self) -> Settings:
        """Save settings to file."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._settings_path, "w") as f:
            json.dump(self._to_dict(), f, indent=2)
        return self

    def build(self) -> SettingsData:
        """Build and return the settings data."""
        self._mark_built()
        return self._data

    @property
    def data(self) -> SettingsData:
        """Get the settings data without marking as built."""
        return self._data

    @property
    def path(self) -> Path:
        return self._settings_path

    def __repr__(self) -> str:
        return f"Settings(path={self._settings_path}, config_dirs={len(self._data.config_dirs)})"


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer") from e
    if number <= 0:
        raise ConfigError(f"{name} must be positive")
    return number


def iter_config_files(config_dirs: Iterable[Union[str, Path]]) -> Iterator[Path]:
    """
    Yield the drop-in configuration files of each directory.

    Directories are visited in the given order and every one contributes.
    Dotfiles are skipped, so a file can be disabled by renaming it to start
    with ``.``. Missing directories are skipped.

    Args:
        config_dirs: Directories to search.

    Yields:
        Paths of regular files, sorted by name within each directory.
    """
    logger = get_logger("fileknock.config")
    for config_dir in config_dirs:
        directory = Path(config_dir)
        try:
            names = sorted(p.name for p in directory.iterdir())
        except FileNotFoundError:
            logger.debug(f"Config directory not found: {directory}")
            continue
        except OSError as e:
            logger.warning(f"Cannot read config directory {directory}: {e.strerror or e}")
            continue

        for name in names:
            if name.startswith("."):
                continue
            path = directory / name
            if path.is_file():
                yield path
