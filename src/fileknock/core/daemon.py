"""Main daemon loop and orchestration."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from fileknock.core.compiler import ConfigCompiler
from fileknock.core.config import Settings, SettingsData
from fileknock.core.dispatcher import EventDispatcher
from fileknock.core.errors import NotifierError
from fileknock.core.executor import ActionExecutor
from fileknock.core.models import CompileReport, WatchEntry
from fileknock.core.notifier import BaseNotifier, Notifier
from fileknock.core.pending import Control, PendingQueue
from fileknock.core.registry import WatchRegistry
from fileknock.core.shutdown import ShutdownHandler
from fileknock.utils.logging import get_logger, setup_logging

NotifierFactory = Callable[[PendingQueue], BaseNotifier]


@dataclass
class WatchSet:
    """A notifier and the registry compiled against it, swapped as a unit."""

    notifier: BaseNotifier
    registry: WatchRegistry
    report: CompileReport


@dataclass
class DaemonState:
    """Everything the main loop owns."""

    pending: PendingQueue
    executor: ActionExecutor
    watches: WatchSet
    running: bool = False
    generation: int = 1
    # Registries of replaced watch sets whose events may still be queued.
    retiring: list[WatchRegistry] = field(default_factory=list)

    def lookup(self, watch_id: int) -> list[WatchEntry]:
        """Resolve a watch id against the current watch set, then any replaced one."""
        entries = self.watches.registry.lookup(watch_id)
        if entries:
            return entries
        for registry in self.retiring:
            entries = registry.lookup(watch_id)
            if entries:
                return entries
        return []


class Daemon:
    """
    fileknockd: watches configured paths and runs actions on close events.

    Example:
        daemon = Daemon()
        exit_code = daemon.run()  # Blocks until SIGINT/SIGTERM
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config_dirs: Optional[Iterable[Union[str, Path]]] = None,
        notifier_factory: NotifierFactory = Notifier,
        install_signals: bool = True,
        configure_logging: bool = True,
    ) -> None:
        """
        Initialize the daemon.

        Args:
            settings: Daemon settings. If None, loads from the default location.
            config_dirs: Drop-in directories, overriding the settings.
            notifier_factory: Builds the change-notification subsystem.
            install_signals: Install SIGINT/SIGTERM/SIGHUP handlers (main
                thread only).
            configure_logging: Set up console/file logging from the settings.
        """
        self._settings: SettingsData = (settings or Settings()).data
        self._config_dirs = [str(d) for d in config_dirs] if config_dirs else list(self._settings.config_dirs)
        if configure_logging:
            setup_logging(
                log_file=self._settings.logging.file,
                level=self._settings.logging.level,
            )
        self._logger = get_logger("fileknock.daemon")
        self._notifier_factory = notifier_factory
        self._install_signals = install_signals
        self._shutdown = ShutdownHandler()
        self._watches_lock = threading.Lock()
        self._health_stop = threading.Event()
        self._health_thread: Optional[threading.Thread] = None
        self._dispatcher: Optional[EventDispatcher] = None
        self.state: Optional[DaemonState] = None

    def _build_watches(self, pending: PendingQueue) -> WatchSet:
        """Start a fresh notifier and compile every config directory into it."""
        notifier = self._notifier_factory(pending)
        notifier.start()
        registry = WatchRegistry()
        try:
            report = ConfigCompiler(notifier, registry).compile_dirs(self._config_dirs)
        except BaseException:
            notifier.close()
            raise
        return WatchSet(notifier=notifier, registry=registry, report=report)

    def setup(self) -> DaemonState:
        """
        Build the initial state: notifier, registry and executor.

        Raises:
            NotifierError: If change notification cannot be initialized.
        """
        pending = PendingQueue(capacity=self._settings.queue_capacity)
        executor = ActionExecutor(inherit_environment=self._settings.inherit_environment)
        self._dispatcher = EventDispatcher(executor)
        watches = self._build_watches(pending)
        if not watches.report.registered:
            self._logger.warning("No watches configured; waiting for SIGHUP to reload")
        self.state = DaemonState(pending=pending, executor=executor, watches=watches)
        return self.state

    def reload(self) -> bool:
        """
        Rebuild all watches from configuration and swap them in.

        The new watch set is complete before it replaces the old one, and
        the old notifier is closed only after the swap. Events the old
        notifier queued before closing still resolve against its registry
        until a RELEASE record behind them reaches the loop. If the new set
        cannot be built the current watches stay active.

        Returns:
            True if the new configuration is active.
        """
        state = self.state
        if state is None:
            return False

        try:
            watches = self._build_watches(state.pending)
        except NotifierError as e:
            self._logger.error(f"Reload failed, keeping current watches: {e}")
            return False

        with self._watches_lock:
            previous, state.watches = state.watches, watches
            state.retiring.append(previous.registry)
            state.generation += 1
            previous.notifier.close()
        state.pending.put_control(Control.RELEASE)

        self._logger.info(
            f"Configuration reloaded (generation {state.generation}): "
            f"{len(watches.report.registered)} watch(es)"
        )
        return True

    def _health_check_loop(self) -> None:
        """Periodically reap finished actions and verify change notification."""
        state = self.state
        interval = self._settings.health_check_interval
        while not self._health_stop.wait(interval):
            state.executor.reap()
            with self._watches_lock:
                try:
                    state.watches.notifier.check()
                except NotifierError as e:
                    state.pending.fail(str(e))
                    return

    def _start_health_thread(self) -> None:
        self._health_stop.clear()
        self._health_thread = threading.Thread(
            target=self._health_check_loop,
            daemon=True,
            name="health-check",
        )
        self._health_thread.start()

    def _request_reload(self) -> None:
        if self.state is not None:
            self.state.pending.put_control(Control.RELOAD)

    def _stop_internal(self) -> None:
        """Internal stop method called by the shutdown handler."""
        state = self.state
        if state is None:
            return
        state.running = False
        state.pending.put_control(Control.STOP)

    def _cleanup(self) -> None:
        state = self.state
        self._health_stop.set()
        if self._health_thread and self._health_thread.is_alive():
            self._health_thread.join(timeout=2)
        if state is None:
            return
        with self._watches_lock:
            state.watches.notifier.close()
        state.executor.reap()
        if state.executor.running:
            self._logger.info(f"{state.executor.running} action(s) still running; leaving them to finish")

    def loop(self, state: DaemonState) -> int:
        """
        Wait for events and dispatch them until stopped.

        Returns:
            0 after a requested shutdown, 1 if change notification failed.
        """
        dispatcher = self._dispatcher
        while state.running:
            record = dispatcher.wait(state.pending)
            result = dispatcher.drain(state.pending, state, first=record)
            for control in result.controls:
                if control is Control.RELEASE:
                    if state.retiring:
                        state.retiring.pop(0)
                elif control is Control.STOP:
                    state.running = False
                elif control is Control.FAILED:
                    self._logger.error(f"Change notification failed: {state.pending.failure}")
                    state.running = False
                    return 1
                elif control is Control.RELOAD and state.running:
                    self.reload()
        return 0

    def run(self) -> int:
        """
        Start the daemon (blocking).

        Returns:
            Process exit code.
        """
        self._logger.info("=" * 60)
        self._logger.info("fileknockd starting up")
        self._logger.info(f"Config directories: {self._config_dirs}")
        self._logger.info("=" * 60)

        try:
            state = self.setup()
        except NotifierError as e:
            self._logger.error(str(e))
            return 1

        self._shutdown.on_shutdown(self._stop_internal).on_reload(self._request_reload)
        self._shutdown.register_cleanup(self._cleanup)
        # A stop() that raced setup() has already set the shutdown flag.
        state.running = not self._shutdown.is_shutting_down
        if self._install_signals:
            self._shutdown.install()
        self._start_health_thread()

        self._logger.info("fileknockd running. Press Ctrl+C to stop.")
        try:
            exit_code = self.loop(state)
        finally:
            state.running = False
            self._shutdown.run_cleanup()
            self._shutdown.uninstall()

        self._logger.info("Exiting.")
        return exit_code

    def stop(self) -> None:
        """Stop the daemon programmatically."""
        self._shutdown.trigger_shutdown()

    def request_reload(self) -> None:
        """Ask the main loop to reload configuration."""
        self._request_reload()

    @property
    def is_running(self) -> bool:
        """Check if the daemon is currently running."""
        return self.state is not None and self.state.running
