"""Tests for event resolution and action selection."""

from __future__ import annotations

import logging

import pytest

from fileknock.core.dispatcher import EventDispatcher
from fileknock.core.models import ChangeEvent, EventMask, WatchEntry
from fileknock.core.pending import Control, PendingQueue

WATCH_ID = 11


@pytest.fixture
def dispatcher(executor):
    return EventDispatcher(executor)


def _register(registry, **actions):
    entry = WatchEntry(directory="/tmp/watched", watch_id=WATCH_ID, **actions)
    registry.register(WATCH_ID, entry)
    return entry


def test_write_close_fires_close_action_once(dispatcher, registry, executor):
    _register(registry, on_close_action="/bin/on-close")

    dispatcher.dispatch(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE, "out.log"), registry)

    assert executor.actions == ["/bin/on-close"]


def test_write_close_fires_both_actions(dispatcher, registry, executor):
    _register(registry, on_close_action="/bin/on-close", on_close_write_action="/bin/on-write")

    fired = dispatcher.dispatch(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE, "out.log"), registry)

    assert fired == 2
    assert executor.actions == ["/bin/on-close", "/bin/on-write"]


def test_read_only_close_never_fires_write_action(dispatcher, registry, executor):
    _register(registry, on_close_action="/bin/on-close", on_close_write_action="/bin/on-write")

    dispatcher.dispatch(ChangeEvent(WATCH_ID, EventMask.CLOSE_NOWRITE, "out.log"), registry)

    assert executor.actions == ["/bin/on-close"]


def test_read_only_close_with_only_write_action_fires_nothing(dispatcher, registry, executor):
    _register(registry, on_close_write_action="/bin/on-write")

    assert dispatcher.dispatch(ChangeEvent(WATCH_ID, EventMask.CLOSE_NOWRITE), registry) == 0
    assert executor.fired == []


def test_one_event_fires_every_entry_sharing_the_id(dispatcher, registry, executor):
    first = _register(registry, on_close_action="/bin/first")
    second = _register(registry, on_close_write_action="/bin/second")

    dispatcher.dispatch(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE, "out.log"), registry)

    assert [(action, entry) for action, entry, _ in executor.fired] == [
        ("/bin/first", first),
        ("/bin/second", second),
    ]


def test_unknown_watch_id_fires_nothing(dispatcher, registry, executor):
    _register(registry, on_close_action="/bin/on-close")

    assert dispatcher.dispatch(ChangeEvent(WATCH_ID + 1, EventMask.CLOSE_WRITE), registry) == 0
    assert executor.fired == []


def test_drain_takes_everything_pending(dispatcher, registry, executor, pending):
    _register(registry, on_close_action="/bin/on-close")
    for name in ("a", "b", "c"):
        pending.put_event(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE, name))
    pending.put_control(Control.RELOAD)

    first = dispatcher.wait(pending)
    result = dispatcher.drain(pending, registry, first=first)

    assert result.events == 3
    assert result.fired == 3
    assert result.controls == [Control.RELOAD]
    assert [event.name for _, _, event in executor.fired] == ["a", "b", "c"]
    assert len(pending) == 0
    assert executor.reaps == 1


def test_drain_reports_dropped_events(dispatcher, registry, caplog):
    caplog.set_level(logging.WARNING, logger="fileknock")
    pending = PendingQueue(capacity=1)
    pending.put_event(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE))
    pending.put_event(ChangeEvent(WATCH_ID, EventMask.CLOSE_WRITE))

    result = dispatcher.drain(pending, registry)

    assert result.events == 1
    assert "Event queue overflow: 1 event(s) dropped" in caplog.text
