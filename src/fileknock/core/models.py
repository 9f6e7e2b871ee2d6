"""Watch entries, change events and event masks."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

UNSUBSCRIBED = -1


class EventMask(enum.IntFlag):
    """Close-type activity a watch can subscribe to."""

    NONE = 0
    CLOSE_WRITE = 0x08
    CLOSE_NOWRITE = 0x10
    CLOSE = CLOSE_WRITE | CLOSE_NOWRITE


@dataclass(eq=False)
class WatchEntry:
    """
    One monitored directory or file plus its configured actions.

    Exactly one of ``directory`` and ``file`` is set.
    """

    directory: Optional[str] = None
    file: Optional[str] = None
    on_close_action: Optional[str] = None
    on_close_write_action: Optional[str] = None
    source: Optional[Path] = None
    watch_id: int = UNSUBSCRIBED

    def __post_init__(self) -> None:
        if (self.directory is None) == (self.file is None):
            raise ValueError("A watch entry needs exactly one of directory or file")

    @property
    def target(self) -> str:
        """The monitored path, whichever kind it is."""
        return self.directory if self.directory is not None else self.file

    @property
    def is_directory(self) -> bool:
        return self.directory is not None

    @property
    def mask(self) -> EventMask:
        """Events this entry's actions need."""
        mask = EventMask.NONE
        if self.on_close_action:
            mask |= EventMask.CLOSE
        if self.on_close_write_action:
            mask |= EventMask.CLOSE_WRITE
        return mask

    @property
    def is_subscribed(self) -> bool:
        return self.watch_id != UNSUBSCRIBED


@dataclass(frozen=True)
class ChangeEvent:
    """A single close notification delivered for a watch id."""

    watch_id: int
    mask: EventMask
    name: Optional[str] = None

    @property
    def is_close_write(self) -> bool:
        return bool(self.mask & EventMask.CLOSE_WRITE)

    @property
    def is_close(self) -> bool:
        return bool(self.mask & EventMask.CLOSE)


@dataclass
class CompileReport:
    """Outcome of compiling a set of configuration directories."""

    registered: list[WatchEntry] = field(default_factory=list)
    inert: list[WatchEntry] = field(default_factory=list)
    rejected: list[Path] = field(default_factory=list)
    failed: list[WatchEntry] = field(default_factory=list)
    files: int = 0
