"""Factory for creating the platform's service manager."""

from __future__ import annotations

import sys

from fileknock.service.base import ServiceManager


def get_service_manager() -> ServiceManager:
    """
    Get the service manager for the current platform.

    Raises:
        NotImplementedError: If the platform is not supported.
    """
    if sys.platform.startswith("linux"):
        from fileknock.service.linux import SystemdServiceManager
        return SystemdServiceManager()

    raise NotImplementedError(
        f"Service management not supported on platform: {sys.platform}"
    )


def is_service_supported() -> bool:
    """Check if service management is supported on this platform."""
    return sys.platform.startswith("linux")


def get_platform_name() -> str:
    """Get a human-readable platform name."""
    if sys.platform.startswith("linux"):
        return "Linux (systemd)"
    return f"Unsupported ({sys.platform})"
