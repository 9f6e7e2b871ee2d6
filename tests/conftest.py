"""Shared pytest configuration and fixtures for all tests."""

from __future__ import annotations

import io
import logging
import time
from contextlib import redirect_stderr, redirect_stdout
from itertools import count
from pathlib import Path

import pytest

from fileknock.core.notifier import DryRunNotifier
from fileknock.core.pending import PendingQueue
from fileknock.core.registry import WatchRegistry


def pytest_collection_modifyitems(config, items):
    """Automatically apply markers based on test file location."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Helpers
# =============================================================================


def write_conf(config_dir: Path, name: str, **keys: str) -> Path:
    """Write a drop-in file holding ``keys`` as ``key=value`` lines."""
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / name
    path.write_text("".join(f"{key}={value}\n" for key, value in keys.items()))
    return path


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it is truthy or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


def run_cli(args):
    """Execute a CLI command and capture stdout/stderr."""
    from fileknock.cli.main import main

    out_buf = io.StringIO()
    err_buf = io.StringIO()
    with redirect_stdout(out_buf), redirect_stderr(err_buf):
        try:
            rc = main(args)
        except SystemExit as exc:  # --version and usage errors exit
            rc = exc.code if isinstance(exc.code, int) else 0
    return rc, out_buf.getvalue(), err_buf.getvalue()


class RecordingExecutor:
    """Stands in for ActionExecutor; remembers what would have run."""

    def __init__(self, inherit_environment: bool = False):
        self.inherit_environment = inherit_environment
        self.fired: list[tuple[str, object, object]] = []
        self.reaps = 0
        self._pids = count(1000)

    def fire(self, action, entry, event):
        self.fired.append((action, entry, event))
        return next(self._pids)

    def reap(self):
        self.reaps += 1
        return 0

    @property
    def running(self):
        return 0

    @property
    def actions(self) -> list[str]:
        return [action for action, _, _ in self.fired]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_fileknock_logger():
    """Undo handler/level changes made by setup_logging between tests."""
    logger = logging.getLogger("fileknock")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def pending():
    return PendingQueue()


@pytest.fixture
def notifier(pending):
    return DryRunNotifier(pending)


@pytest.fixture
def registry():
    return WatchRegistry()


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def config_dir(tmp_path):
    """An empty drop-in configuration directory."""
    path = tmp_path / "fileknock.d"
    path.mkdir()
    return path


@pytest.fixture
def watched(tmp_path):
    """A directory holding one file, both suitable as watch targets."""
    directory = tmp_path / "watched"
    directory.mkdir()
    (directory / "out.log").write_text("hello\n")
    return directory
