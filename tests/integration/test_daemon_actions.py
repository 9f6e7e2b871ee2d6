"""End to end: a real daemon runs a real action on a real close event."""

from __future__ import annotations

import os
import sys
import threading

import pytest
from conftest import wait_for, write_conf

from fileknock.core.config import Settings
from fileknock.core.daemon import Daemon

pytestmark = pytest.mark.skipif(not sys.platform.startswith("linux"), reason="inotify only")


def test_action_receives_path_and_file(tmp_path, config_dir, watched):
    marker = tmp_path / "marker"
    action = tmp_path / "on-write.sh"
    # Builtins only: the action gets no PATH.
    action.write_text(f'#!/bin/sh\nprintf "%s|%s\\n" "$FK_PATH" "$FK_FILE" >> {marker}\n')
    action.chmod(0o755)
    write_conf(config_dir, "watched", MonitorPath=str(watched), FileClosedWriteExec=str(action))

    settings = Settings(tmp_path / "fileknockd.json", load=False).config_dirs(str(config_dir))
    daemon = Daemon(settings, install_signals=False, configure_logging=False)
    thread = threading.Thread(target=daemon.run, daemon=True)
    thread.start()
    try:
        assert wait_for(lambda: daemon.is_running)
        (watched / "upload.bin").write_bytes(b"\x00" * 16)
        assert wait_for(lambda: marker.exists() and marker.read_text().strip(), timeout=10)
    finally:
        daemon.stop()
        thread.join(timeout=5)

    assert marker.read_text().splitlines() == [f"{watched}|upload.bin"]


def test_daemon_survives_a_watched_file_being_replaced(tmp_path, config_dir, watched):
    target = watched / "out.log"
    marker = tmp_path / "marker"
    action = tmp_path / "on-write.sh"
    action.write_text(f'#!/bin/sh\nprintf "%s\\n" "$FK_PATH" >> {marker}\n')
    action.chmod(0o755)
    write_conf(config_dir, "file", MonitorFile=str(target), FileClosedWriteExec=str(action))

    settings = Settings(tmp_path / "fileknockd.json", load=False).config_dirs(str(config_dir)).health_check(1)
    daemon = Daemon(settings, install_signals=False, configure_logging=False)
    result = {}
    thread = threading.Thread(target=lambda: result.setdefault("code", daemon.run()), daemon=True)
    thread.start()
    try:
        assert wait_for(lambda: daemon.is_running)
        staged = watched / "out.log.tmp"
        staged.write_text("rotated\n")
        os.replace(staged, target)

        def written_after_replace():
            target.write_text("after\n")
            return marker.exists()

        # The health check re-subscribes the new file within a couple of intervals.
        assert wait_for(written_after_replace, timeout=10, interval=0.3)
        assert daemon.is_running
    finally:
        daemon.stop()
        thread.join(timeout=5)

    assert result["code"] == 0
    assert marker.read_text().splitlines()[0] == str(target)
