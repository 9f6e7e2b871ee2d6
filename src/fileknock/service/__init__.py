"""systemd service management for fileknockd."""

from fileknock.service.factory import get_service_manager

__all__ = ["get_service_manager"]
