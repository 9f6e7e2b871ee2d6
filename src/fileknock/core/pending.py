"""Queue between the notification threads and the daemon's main loop."""

from __future__ import annotations

import enum
import queue
import threading
from typing import Optional, Union

from fileknock.core.models import ChangeEvent

# Default matches the kernel's stock inotify queue depth.
DEFAULT_CAPACITY = 16384


class Control(enum.Enum):
    """Records that steer the main loop instead of carrying an event."""

    STOP = "stop"
    RELOAD = "reload"
    FAILED = "failed"
    # Everything the oldest replaced watch set queued is ahead of this record.
    RELEASE = "release"


Record = Union[ChangeEvent, Control]


class PendingQueue:
    """
    Bounded queue of change events plus unbounded control records.

    Events past ``capacity`` are dropped and counted; control records are
    always accepted. ``put_control`` only touches a ``queue.SimpleQueue``,
    so it is safe to call from a signal handler.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self._queue: queue.SimpleQueue[Record] = queue.SimpleQueue()
        self._dropped = 0
        self._dropped_lock = threading.Lock()
        self.failure: Optional[str] = None

    def put_event(self, event: ChangeEvent) -> bool:
        """Queue an event; returns False if it was dropped for lack of room."""
        if self.capacity > 0 and self._queue.qsize() >= self.capacity:
            with self._dropped_lock:
                self._dropped += 1
            return False
        self._queue.put(event)
        return True

    def put_control(self, control: Control) -> None:
        self._queue.put(control)

    def fail(self, reason: str) -> None:
        """Record a fatal notifier failure and wake the main loop."""
        self.failure = reason
        self._queue.put(Control.FAILED)

    def get(self, block: bool = True, timeout: Optional[float] = None) -> Record:
        """
        Take the next record.

        Raises:
            queue.Empty: If nothing is pending and ``block`` is False (or the
                timeout expired).
        """
        return self._queue.get(block=block, timeout=timeout)

    def take_dropped(self) -> int:
        """Return and reset the number of events dropped since the last call."""
        with self._dropped_lock:
            dropped, self._dropped = self._dropped, 0
        return dropped

    def __len__(self) -> int:
        return self._queue.qsize()
