"""Drains pending change events and fires the matching actions."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Optional

from fileknock.core.executor import ActionExecutor
from fileknock.core.models import ChangeEvent, WatchEntry
from fileknock.core.pending import Control, PendingQueue
from fileknock.core.registry import EntryLookup
from fileknock.utils.logging import get_logger


@dataclass
class DrainResult:
    """What one wake-up of the main loop processed."""

    events: int = 0
    fired: int = 0
    controls: list[Control] = field(default_factory=list)


class EventDispatcher:
    """
    Resolves change events against the registry and fires actions.

    Both checks run for every matching entry: a generic close fires the
    entry's close action, and a write-close additionally fires its
    write-close action.
    """

    def __init__(self, executor: ActionExecutor) -> None:
        self.executor = executor
        self.logger = get_logger("fileknock.dispatcher")

    def actions_for(self, entry: WatchEntry, event: ChangeEvent) -> list[str]:
        """Return the actions ``event`` triggers for ``entry``, in firing order."""
        actions = []
        if event.is_close and entry.on_close_action:
            actions.append(entry.on_close_action)
        if event.is_close_write and entry.on_close_write_action:
            actions.append(entry.on_close_write_action)
        return actions

    def dispatch(self, event: ChangeEvent, registry: EntryLookup) -> int:
        """
        Fire every action ``event`` triggers.

        Returns:
            Number of actions fired (spawn failures not counted).
        """
        entries = registry.lookup(event.watch_id)
        if not entries:
            self.logger.debug(f"No entries for watch {event.watch_id}; ignoring")
            return 0

        fired = 0
        for entry in entries:
            for action in self.actions_for(entry, event):
                if self.executor.fire(action, entry, event) is not None:
                    fired += 1
        return fired

    def wait(self, pending: PendingQueue) -> object:
        """Block until a record is pending and return it."""
        return pending.get(block=True)

    def drain(self, pending: PendingQueue, registry: EntryLookup, first: Optional[object] = None) -> DrainResult:
        """
        Process ``first`` and everything else already pending, without blocking.

        Control records are collected, not acted on; the caller decides what
        STOP, RELOAD, FAILED and RELEASE mean.
        """
        result = DrainResult()
        record = first
        while True:
            if record is None:
                try:
                    record = pending.get(block=False)
                except queue.Empty:
                    break

            if isinstance(record, Control):
                result.controls.append(record)
            else:
                result.events += 1
                result.fired += self.dispatch(record, registry)
            record = None

        dropped = pending.take_dropped()
        if dropped:
            self.logger.warning(f"Event queue overflow: {dropped} event(s) dropped")

        self.executor.reap()
        return result
