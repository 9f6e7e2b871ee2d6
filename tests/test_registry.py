"""Tests for WatchRegistry."""

from __future__ import annotations

from fileknock.core.models import WatchEntry


def _entry(action="/bin/true"):
    return WatchEntry(directory="/srv/in", on_close_action=action)


def test_lookup_unknown_id_is_empty(registry):
    assert registry.lookup(42) == []
    assert 42 not in registry


def test_lookup_returns_every_entry_for_an_id(registry):
    first, second = _entry("/bin/a"), _entry("/bin/b")
    registry.register(7, first)
    registry.register(7, second)

    assert registry.lookup(7) == [first, second]
    assert len(registry) == 2
    assert registry.watch_ids() == [7]


def test_register_same_entry_twice_is_a_no_op(registry):
    entry = _entry()
    registry.register(3, entry)
    registry.register(3, entry)

    assert registry.lookup(3) == [entry]
    assert len(registry) == 1


def test_lookup_returns_a_copy(registry):
    entry = _entry()
    registry.register(1, entry)

    registry.lookup(1).clear()

    assert registry.lookup(1) == [entry]


def test_entries_iterates_all_ids(registry):
    a, b = _entry("/bin/a"), _entry("/bin/b")
    registry.register(1, a)
    registry.register(2, b)

    assert list(registry.entries()) == [a, b]
    assert 1 in registry and 2 in registry
