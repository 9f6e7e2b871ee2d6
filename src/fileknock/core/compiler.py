"""Turns drop-in configuration files into subscribed watch entries."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from fileknock.core.config import iter_config_files
from fileknock.core.errors import ConfigError
from fileknock.core.keyvalue import KeyValueStore
from fileknock.core.models import CompileReport, WatchEntry
from fileknock.core.notifier import BaseNotifier
from fileknock.core.registry import WatchRegistry
from fileknock.utils.logging import get_logger

KEY_MONITOR_PATH = "MonitorPath"
KEY_MONITOR_FILE = "MonitorFile"
KEY_CLOSED_EXEC = "FileClosedExec"
KEY_CLOSED_WRITE_EXEC = "FileClosedWriteExec"


class ConfigCompiler:
    """
    Builds watch entries from configuration and subscribes them.

    A problem with one configuration file (contradictory keys, a target that
    cannot be watched) is logged and skipped; it never stops the remaining
    files from loading.

    Example:
        compiler = ConfigCompiler(notifier, registry)
        report = compiler.compile_dirs(["/etc/fileknock.d", "./fileknock.d"])
    """

    def __init__(self, notifier: BaseNotifier, registry: WatchRegistry) -> None:
        self.notifier = notifier
        self.registry = registry
        self.logger = get_logger("fileknock.compiler")

    def compile(self, store: KeyValueStore) -> Optional[WatchEntry]:
        """
        Build, subscribe and register the watch declared by one config file.

        Args:
            store: Parsed configuration file.

        Returns:
            The entry, or None if the file declares no watch or its target
            could not be subscribed. An entry without actions is returned
            but never subscribed (check ``entry.is_subscribed``).

        Raises:
            ConfigError: If the file declares both a path and a file, an empty
                target, or a value containing a NUL byte.
        """
        directory, file = _targets(store)
        if directory is None and file is None:
            return None
        if directory is not None and file is not None:
            raise ConfigError(
                f"{self._describe(store)} sets both {KEY_MONITOR_PATH} and {KEY_MONITOR_FILE}"
            )
        _check_values(store)

        entry = _entry_from(store)
        mask = entry.mask
        if not mask:
            self.logger.warning(
                f"{self._describe(store)} watches {entry.target} but configures no "
                f"{KEY_CLOSED_EXEC} or {KEY_CLOSED_WRITE_EXEC}; ignoring"
            )
            return entry

        try:
            entry.watch_id = self.notifier.add_watch(entry.target, mask)
        except OSError as e:
            self.logger.error(f"Cannot watch '{entry.target}': {e.strerror or e}")
            return None

        self.registry.register(entry.watch_id, entry)
        self.logger.info(
            f"{'Path' if entry.is_directory else 'File'} monitor: {entry.target} "
            f"(watch {entry.watch_id}, {self._describe(store)})"
        )
        return entry

    def compile_dirs(self, config_dirs: Iterable[Union[str, Path]]) -> CompileReport:
        """
        Compile every drop-in file of every configuration directory.

        Args:
            config_dirs: Directories to search, in order; all contribute.

        Returns:
            What was registered, left inert, rejected or failed.
        """
        report = CompileReport()
        for path in iter_config_files(config_dirs):
            report.files += 1
            try:
                store = KeyValueStore.load(path)
                entry = self.compile(store)
            except ConfigError as e:
                self.logger.error(f"Skipping config file: {e}")
                report.rejected.append(path)
                continue

            if entry is None:
                if _targets(store) != (None, None):
                    report.failed.append(_entry_from(store))
            elif entry.is_subscribed:
                report.registered.append(entry)
            else:
                report.inert.append(entry)

        self.logger.info(
            f"Loaded {report.files} config file(s): {len(report.registered)} watch(es), "
            f"{len(report.inert)} inert, {len(report.rejected)} rejected, {len(report.failed)} failed"
        )
        return report

    @staticmethod
    def _describe(store: KeyValueStore) -> str:
        return str(store.path) if store.path else "config"


def _targets(store: KeyValueStore) -> tuple[Optional[str], Optional[str]]:
    """Return the (directory, file) targets as configured, or None."""
    return store.get(KEY_MONITOR_PATH), store.get(KEY_MONITOR_FILE)


def _check_values(store: KeyValueStore) -> None:
    """Reject targets and actions that can never name a real path."""
    for key in (KEY_MONITOR_PATH, KEY_MONITOR_FILE, KEY_CLOSED_EXEC, KEY_CLOSED_WRITE_EXEC):
        value = store.get(key)
        if value is None:
            continue
        if key in (KEY_MONITOR_PATH, KEY_MONITOR_FILE) and not value:
            raise ConfigError(f"{ConfigCompiler._describe(store)}: {key} is empty")
        if "\0" in value:
            raise ConfigError(f"{ConfigCompiler._describe(store)}: {key} contains a NUL byte")


def _entry_from(store: KeyValueStore) -> WatchEntry:
    directory, file = _targets(store)
    return WatchEntry(
        directory=directory,
        file=file,
        on_close_action=store.get(KEY_CLOSED_EXEC) or None,
        on_close_write_action=store.get(KEY_CLOSED_WRITE_EXEC) or None,
        source=store.path,
    )
