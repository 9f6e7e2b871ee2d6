"""Exception types raised by the fileknock core."""

from __future__ import annotations


class FileKnockError(Exception):
    """Base class for fileknock errors."""


class ConfigError(FileKnockError):
    """A configuration file is unreadable or contradictory."""


class NotifierError(FileKnockError):
    """The change-notification subsystem could not start or has died."""
