"""Change-notification subsystem built on watchdog."""

from __future__ import annotations

import contextlib
import errno
import itertools
import os
import stat
import threading
from typing import Optional

from watchdog.events import (
    FileClosedEvent,
    FileClosedNoWriteEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from fileknock.core.errors import NotifierError
from fileknock.core.models import ChangeEvent, EventMask
from fileknock.core.pending import PendingQueue
from fileknock.utils.logging import get_logger

CLOSE_EVENTS = [FileClosedEvent, FileClosedNoWriteEvent]

# Shared by every notifier so ids stay unique across reloads.
_watch_ids = itertools.count(1)


class _Subscription:
    """Bookkeeping for one watched path."""

    def __init__(self, watch_id: int, path: str, is_directory: bool, mask: EventMask) -> None:
        self.watch_id = watch_id
        self.path = path
        self.is_directory = is_directory
        self.mask = mask


class BaseNotifier:
    """
    Hands out watch ids and turns close notifications into ChangeEvents.

    Adding the same path twice returns the same watch id and widens the
    subscription mask, so overlapping configuration files share one
    subscription. Subclasses decide how a path is actually subscribed.
    """

    def __init__(self, pending: PendingQueue) -> None:
        self.pending = pending
        self.logger = get_logger("fileknock.notifier")
        self._lock = threading.RLock()
        self._by_path: dict[str, _Subscription] = {}
        self._by_id: dict[int, _Subscription] = {}

    def start(self) -> None:
        """Start the subsystem. Must be called before :meth:`add_watch`."""

    def close(self) -> None:
        """Stop delivering events and release every subscription."""

    def check(self) -> list[str]:
        """
        Verify the subsystem is still delivering events.

        Returns:
            Paths whose watches were retired because the target disappeared
            or could not be watched again.

        Raises:
            NotifierError: If event delivery has failed.
        """
        return []

    def _subscribe(self, subscription: _Subscription) -> None:
        """Subscribe a new path; raise OSError on failure."""

    def add_watch(self, path: str, mask: EventMask) -> int:
        """
        Subscribe ``path`` for the events in ``mask``.

        Args:
            path: Directory or file to watch.
            mask: Close events of interest; must not be empty.

        Returns:
            The watch id for the path.

        Raises:
            OSError: If the path cannot be watched (missing, no permission,
                watch limit reached).
        """
        if not mask:
            raise ValueError("Cannot subscribe with an empty event mask")

        key = os.path.abspath(path)
        with self._lock:
            existing = self._by_path.get(key)
            if existing is not None:
                if mask & ~existing.mask:
                    existing.mask |= mask
                    self.logger.debug(f"Widened watch {existing.watch_id} on {key} to {existing.mask!r}")
                return existing.watch_id

            st = os.stat(key)
            subscription = _Subscription(next(_watch_ids), key, stat.S_ISDIR(st.st_mode), mask)
            # Registered before subscribing so the first event is not lost.
            self._by_id[subscription.watch_id] = subscription
            try:
                self._subscribe(subscription)
            except BaseException:
                del self._by_id[subscription.watch_id]
                raise
            self._by_path[key] = subscription

        self.logger.debug(f"Watch {subscription.watch_id}: {key} ({mask!r})")
        return subscription.watch_id

    def deliver(self, watch_id: int, kind: EventMask, src_path: str) -> Optional[ChangeEvent]:
        """
        Translate a raw notification and queue it for the main loop.

        Notifications outside the subscription mask, or for ids that are not
        subscribed, are ignored.

        Returns:
            The queued event, or None if it was ignored or dropped.
        """
        subscription = self._by_id.get(watch_id)
        if subscription is None or not kind & subscription.mask:
            return None

        name = None
        if subscription.is_directory and os.path.abspath(src_path) != subscription.path:
            name = os.path.basename(src_path)

        event = ChangeEvent(watch_id=watch_id, mask=kind, name=name)
        if not self.pending.put_event(event):
            return None
        return event

    def mask_for(self, watch_id: int) -> EventMask:
        subscription = self._by_id.get(watch_id)
        return subscription.mask if subscription else EventMask.NONE

    @property
    def watch_count(self) -> int:
        return len(self._by_path)


class DryRunNotifier(BaseNotifier):
    """Checks and numbers paths like the real notifier but never subscribes."""

    def _subscribe(self, subscription: _Subscription) -> None:
        # Surface the permission errors a real subscription would hit.
        if subscription.is_directory:
            os.listdir(subscription.path)
        elif not os.access(subscription.path, os.R_OK):
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), subscription.path)


class _CloseHandler(FileSystemEventHandler):
    """Forwards watchdog close events for one watch id to the notifier."""

    def __init__(self, notifier: BaseNotifier, watch_id: int) -> None:
        super().__init__()
        self._notifier = notifier
        self._watch_id = watch_id

    def on_closed(self, event: FileClosedEvent) -> None:
        self._forward(EventMask.CLOSE_WRITE, event)

    def on_closed_no_write(self, event: FileClosedNoWriteEvent) -> None:
        self._forward(EventMask.CLOSE_NOWRITE, event)

    def _forward(self, kind: EventMask, event: FileSystemEvent) -> None:
        src_path = os.fsdecode(event.src_path)
        if self._notifier.deliver(self._watch_id, kind, src_path) is None:
            self._notifier.logger.debug(f"Ignored {kind!r} on {src_path} (watch {self._watch_id})")


class Notifier(BaseNotifier):
    """
    watchdog-backed notifier (inotify on Linux).

    Example:
        notifier = Notifier(pending)
        notifier.start()
        watch_id = notifier.add_watch("/srv/incoming", EventMask.CLOSE_WRITE)
        ...
        notifier.close()
    """

    def __init__(self, pending: PendingQueue, observer: Optional[Observer] = None) -> None:
        super().__init__(pending)
        self._observer = observer or Observer()
        self._started = False

    def start(self) -> None:
        """
        Start the observer thread.

        Raises:
            NotifierError: If the observer cannot be started.
        """
        if self._started:
            return
        try:
            self._observer.start()
        except (OSError, RuntimeError) as e:
            raise NotifierError(f"Cannot start change notification: {e}") from e
        self._started = True
        self.logger.debug("Change notification started")

    def _subscribe(self, subscription: _Subscription) -> None:
        if not self._started:
            raise NotifierError("Notifier must be started before adding watches")

        handler = _CloseHandler(self, subscription.watch_id)
        try:
            self._observer.schedule(
                handler,
                subscription.path,
                recursive=False,
                event_filter=CLOSE_EVENTS,
            )
        except OSError:
            # schedule() registers the handler before the emitter fails to start
            watch = ObservedWatch(subscription.path, recursive=False, event_filter=CLOSE_EVENTS)
            with contextlib.suppress(KeyError):
                self._observer.remove_handler_for_watch(handler, watch)
            raise

    def check(self) -> list[str]:
        """
        Verify the observer is alive and repair watches whose emitter stopped.

        watchdog stops a path's emitter when the watched inode is deleted,
        which also happens when a file is replaced by rename. A target that
        exists again is subscribed afresh under the same watch id; one that
        is gone (or cannot be watched any more) is retired.

        Returns:
            Paths whose watches were retired.

        Raises:
            NotifierError: If the observer thread itself has stopped.
        """
        if not self._started:
            return []
        if not self._observer.is_alive():
            raise NotifierError("Change notification thread has stopped")

        retired = []
        renewed = []
        with self._lock:
            for emitter in list(self._observer.emitters):
                if emitter.is_alive():
                    continue
                path = os.fsdecode(emitter.watch.path)
                self._observer.unschedule(emitter.watch)
                subscription = self._by_path.get(path)
                if subscription is None:
                    continue
                try:
                    subscription.is_directory = stat.S_ISDIR(os.stat(path).st_mode)
                    self._subscribe(subscription)
                except OSError as e:
                    del self._by_path[path]
                    self._by_id.pop(subscription.watch_id, None)
                    retired.append((path, e.strerror or str(e)))
                else:
                    renewed.append((path, subscription.watch_id))

        for path, watch_id in renewed:
            self.logger.info(f"Watch target replaced, watching it again: {path} (watch {watch_id})")
        for path, reason in retired:
            self.logger.warning(f"Watch target gone, no longer watching: {path} ({reason})")
        return [path for path, _ in retired]

    def close(self) -> None:
        if not self._started:
            return
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join(timeout=5)
        self._started = False
        self.logger.debug("Change notification stopped")
