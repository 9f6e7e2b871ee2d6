"""Tests for watch entries, events and masks."""

from __future__ import annotations

import pytest

from fileknock.core.models import UNSUBSCRIBED, ChangeEvent, EventMask, WatchEntry


def test_entry_needs_exactly_one_target():
    with pytest.raises(ValueError):
        WatchEntry()
    with pytest.raises(ValueError):
        WatchEntry(directory="/srv", file="/srv/a")


def test_entry_target_and_kind():
    directory = WatchEntry(directory="/srv/in")
    file = WatchEntry(file="/etc/passwd")

    assert directory.target == "/srv/in" and directory.is_directory
    assert file.target == "/etc/passwd" and not file.is_directory


@pytest.mark.parametrize(
    "close, close_write, expected",
    [
        (None, None, EventMask.NONE),
        ("/bin/a", None, EventMask.CLOSE),
        (None, "/bin/b", EventMask.CLOSE_WRITE),
        ("/bin/a", "/bin/b", EventMask.CLOSE),
    ],
)
def test_entry_mask(close, close_write, expected):
    entry = WatchEntry(file="/x", on_close_action=close, on_close_write_action=close_write)
    assert entry.mask == expected


def test_new_entry_is_unsubscribed():
    entry = WatchEntry(file="/x", on_close_action="/bin/a")
    assert entry.watch_id == UNSUBSCRIBED
    assert not entry.is_subscribed


def test_entries_compare_by_identity():
    a = WatchEntry(file="/x", on_close_action="/bin/a")
    b = WatchEntry(file="/x", on_close_action="/bin/a")
    assert a != b


def test_change_event_flags():
    write = ChangeEvent(watch_id=1, mask=EventMask.CLOSE_WRITE)
    nowrite = ChangeEvent(watch_id=1, mask=EventMask.CLOSE_NOWRITE)

    assert write.is_close and write.is_close_write
    assert nowrite.is_close and not nowrite.is_close_write
