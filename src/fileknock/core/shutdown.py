"""Signal handlers and graceful shutdown management."""

from __future__ import annotations

import signal
import threading
from typing import Callable, Optional

from fileknock.utils.logging import get_logger

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)
RELOAD_SIGNAL = signal.SIGHUP


class ShutdownHandler:
    """
    Manages graceful shutdown and reload requests driven by signals.

    SIGINT and SIGTERM trigger shutdown; SIGHUP triggers a reload. Callbacks
    run inside the signal handler, so they must only post work for the main
    loop, never do it.

    Example:
        handler = ShutdownHandler()
        handler.on_shutdown(stop_loop).on_reload(request_reload)
        handler.register_cleanup(lambda: notifier.close())
        handler.install()
    """

    def __init__(self) -> None:
        self._cleanup_callbacks: list[Callable[[], None]] = []
        self._shutdown_callback: Optional[Callable[[], None]] = None
        self._reload_callback: Optional[Callable[[], None]] = None
        self._shutdown_event = threading.Event()
        self._previous_handlers: dict[int, object] = {}
        self._installed = False
        self.logger = get_logger("fileknock.shutdown")

    def register_cleanup(self, callback: Callable[[], None]) -> ShutdownHandler:
        """
        Register a cleanup callback for :meth:`run_cleanup`.

        Args:
            callback: Function to call during cleanup.

        Returns:
            self for method chaining.
        """
        self._cleanup_callbacks.append(callback)
        return self

    def on_shutdown(self, callback: Callable[[], None]) -> ShutdownHandler:
        """
        Register the main shutdown callback.

        Args:
            callback: Function to call when shutdown is triggered.

        Returns:
            self for method chaining.
        """
        self._shutdown_callback = callback
        return self

    def on_reload(self, callback: Callable[[], None]) -> ShutdownHandler:
        """
        Register the callback for a reload request.

        Args:
            callback: Function to call when SIGHUP arrives.

        Returns:
            self for method chaining.
        """
        self._reload_callback = callback
        return self

    def install(self) -> ShutdownHandler:
        """
        Install signal handlers. Only possible from the main thread.

        Returns:
            self for method chaining.
        """
        if self._installed:
            return self

        for signum in SHUTDOWN_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)
        self._previous_handlers[RELOAD_SIGNAL] = signal.signal(RELOAD_SIGNAL, self._reload_handler)

        self._installed = True
        self.logger.debug("Signal handlers installed")
        return self

    def uninstall(self) -> None:
        """Restore the signal handlers that were active before :meth:`install`."""
        if not self._installed:
            return
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous)
        self._previous_handlers.clear()
        self._installed = False

    def _signal_handler(self, signum: int, frame) -> None:
        """Handle shutdown signals."""
        sig_name = signal.Signals(signum).name
        self.logger.info(f"Received {sig_name}, initiating shutdown...")
        self.trigger_shutdown()

    def _reload_handler(self, signum: int, frame) -> None:
        """Handle the reload signal."""
        self.logger.info("Received SIGHUP, reloading configuration...")
        if self._reload_callback:
            self._reload_callback()

    def trigger_shutdown(self) -> None:
        """Trigger shutdown programmatically."""
        if self._shutdown_event.is_set():
            return  # Already shutting down

        self._shutdown_event.set()

        if self._shutdown_callback:
            try:
                self._shutdown_callback()
            except Exception as e:
                self.logger.error(f"Shutdown callback error: {e}")

    def run_cleanup(self) -> None:
        """Run all registered cleanup callbacks once."""
        callbacks, self._cleanup_callbacks = self._cleanup_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                self.logger.error(f"Cleanup error: {e}")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for shutdown to be triggered.

        Args:
            timeout: Maximum seconds to wait (None = forever).

        Returns:
            True if shutdown was triggered, False if timeout.
        """
        return self._shutdown_event.wait(timeout)

    @property
    def is_shutting_down(self) -> bool:
        """Check if shutdown has been triggered."""
        return self._shutdown_event.is_set()
