"""Abstract base class for system service managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ServiceStatus(Enum):
    """Status of a system service."""

    RUNNING = "running"
    STOPPED = "stopped"
    NOT_INSTALLED = "not_installed"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class ServiceInfo:
    """Information about a system service."""

    name: str
    status: ServiceStatus
    pid: Optional[int] = None
    description: Optional[str] = None


class ServiceManager(ABC):
    """Registers fileknockd with the init system and drives it."""

    SERVICE_NAME = "fileknockd"
    SERVICE_DESCRIPTION = "fileknock - run actions when watched files are closed"

    @abstractmethod
    def install(self, python_path: Optional[str] = None) -> bool:
        """
        Install fileknockd as a system service.

        Args:
            python_path: Path to Python interpreter (uses sys.executable if None).

        Returns:
            True if installation succeeded.
        """

    @abstractmethod
    def uninstall(self) -> bool:
        """Remove the service. Returns True on success."""

    @abstractmethod
    def start(self) -> bool:
        """Start the service. Returns True on success."""

    @abstractmethod
    def stop(self) -> bool:
        """Stop the service. Returns True on success."""

    @abstractmethod
    def reload(self) -> bool:
        """Ask the running daemon to re-read its watch configuration."""

    @abstractmethod
    def status(self) -> ServiceInfo:
        """Get the current service status."""

    @abstractmethod
    def is_installed(self) -> bool:
        """Check if the service is installed."""

    @abstractmethod
    def logs(self, lines: int = 50) -> str:
        """Return the last ``lines`` lines the service logged."""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return the platform name (e.g., 'systemd')."""
