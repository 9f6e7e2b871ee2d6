"""Mapping from watch ids back to the entries that requested them."""

from __future__ import annotations

from typing import Iterator, Protocol

from fileknock.core.models import WatchEntry


class EntryLookup(Protocol):
    """Anything that resolves a watch id to its entries."""

    def lookup(self, watch_id: int) -> list[WatchEntry]: ...


class WatchRegistry:
    """
    Resolves a watch id to every watch entry registered under it.

    Several configuration files may watch the same path; the notifier hands
    them the same id, so one id can map to many entries.

    Example:
        registry = WatchRegistry()
        registry.register(entry.watch_id, entry)
        for entry in registry.lookup(event.watch_id):
            ...
    """

    def __init__(self) -> None:
        self._entries: dict[int, list[WatchEntry]] = {}

    def register(self, watch_id: int, entry: WatchEntry) -> None:
        """
        Associate an entry with a watch id.

        Registering the same entry under the same id again is a no-op.
        """
        entries = self._entries.setdefault(watch_id, [])
        if not any(existing is entry for existing in entries):
            entries.append(entry)

    def lookup(self, watch_id: int) -> list[WatchEntry]:
        """Return all entries for ``watch_id``; empty if the id is unknown."""
        return list(self._entries.get(watch_id, ()))

    def watch_ids(self) -> list[int]:
        return list(self._entries)

    def entries(self) -> Iterator[WatchEntry]:
        for entries in self._entries.values():
            yield from entries

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __contains__(self, watch_id: object) -> bool:
        return watch_id in self._entries

    def __repr__(self) -> str:
        return f"WatchRegistry(ids={len(self._entries)}, entries={len(self)})"
