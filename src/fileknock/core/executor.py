"""Launching configured actions as independent processes."""

from __future__ import annotations

import os
import subprocess
import threading
from typing import Optional

from fileknock.core.models import ChangeEvent, WatchEntry
from fileknock.utils.logging import get_logger

ENV_PATH = "FK_PATH"
ENV_FILE = "FK_FILE"


def build_environment(entry: WatchEntry, event: ChangeEvent) -> dict[str, str]:
    """
    Build the environment an action sees.

    ``FK_PATH`` is the watched directory or file as configured; ``FK_FILE``
    is the name of the file inside a watched directory and is left out when
    the event carries no name.
    """
    env = {ENV_PATH: entry.target}
    if event.name:
        env[ENV_FILE] = event.name
    return env


class ActionExecutor:
    """
    Fire-and-forget launcher for action executables.

    Every spawned process is tracked until :meth:`reap` sees it exit, so
    finished actions never linger as zombies.

    Example:
        executor = ActionExecutor()
        executor.fire("/usr/local/bin/on-upload", entry, event)
        ...
        executor.reap()
    """

    def __init__(self, inherit_environment: bool = False) -> None:
        self.inherit_environment = inherit_environment
        self.logger = get_logger("fileknock.executor")
        self._children: dict[int, tuple[subprocess.Popen, str]] = {}
        self._lock = threading.Lock()

    def fire(self, action: str, entry: WatchEntry, event: ChangeEvent) -> Optional[subprocess.Popen]:
        """
        Start ``action`` without waiting for it.

        Args:
            action: Path of the executable to run; it gets no arguments.
            entry: Watch entry whose event triggered the action.
            event: The triggering event.

        Returns:
            The running process, or None if it could not be started.
        """
        env = build_environment(entry, event)
        if self.inherit_environment:
            env = {**os.environ, **env}

        try:
            process = subprocess.Popen(
                [action],
                env=env,
                stdin=subprocess.DEVNULL,
                close_fds=True,
                start_new_session=True,
            )
        except OSError as e:
            self.logger.error(f"Cannot run action '{action}': {e.strerror or e}")
            return None
        except ValueError as e:
            # Popen refuses arguments and environment values with NUL bytes.
            self.logger.error(f"Cannot run action {action!r}: {e}")
            return None

        with self._lock:
            self._children[process.pid] = (process, action)

        file_part = f"/{event.name}" if event.name else ""
        self.logger.info(f"Action event triggered. PID={process.pid}, Action='{action}', Target={entry.target}{file_part}")
        return process

    def reap(self) -> int:
        """
        Collect every tracked action that has exited, without blocking.

        Returns:
            Number of processes reaped.
        """
        with self._lock:
            children = list(self._children.items())

        reaped = 0
        for pid, (process, action) in children:
            returncode = process.poll()
            if returncode is None:
                continue
            with self._lock:
                self._children.pop(pid, None)
            reaped += 1
            if returncode == 0:
                self.logger.debug(f"Action '{action}' (PID={pid}) finished")
            else:
                self.logger.warning(f"Action '{action}' (PID={pid}) exited with status {returncode}")
        return reaped

    @property
    def running(self) -> int:
        """Number of spawned actions not yet reaped."""
        with self._lock:
            return len(self._children)
